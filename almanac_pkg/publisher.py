"""
Renders content items through their layout chains and hands the result to
the writer. Failures are recorded per item and never stop the batch.
"""

import logging
import os

from .errors import HookError, RenderError, WriteError
from .hooks import AFTER_WRITE, BEFORE_WRITE, HookRegistry


class Publisher:
    """
    Render & write orchestration for a single build.

    `errors` is the build's error list; the publisher appends to it and never
    replaces it. `globals` is merged into every render context (usually
    {'site': <Almanac>}).
    """

    def __init__(self, templates, renderer, writer, errors, hooks=None, globals=None):
        self.templates = templates
        self.renderer = renderer
        self.writer = writer
        self.errors = errors
        self.hooks = hooks or HookRegistry()
        self.globals = globals or {}
        self.logger = logging.getLogger('Almanac.publisher')
        self.items_written = 0

    def record(self, error):
        self.errors.append(error)
        self.logger.error(str(error))

    def layout_chain(self, layout):
        """Resolve a layout and every layout it is nested in, innermost first."""
        chain = []
        while layout:
            if layout in (template.slug for template in chain):
                names = ' -> '.join([template.slug for template in chain] + [layout])
                raise RenderError(f"Circular layout chain: {names}")
            template = self.templates.get(layout)
            if template is None:
                raise RenderError(f"Layout '{layout}' not found")
            chain.append(template)
            layout = template.layout
        return chain

    def render(self, item, context=None):
        """Render an item's body as a template, then wrap it in each layout of its chain."""
        chain = self.layout_chain(item.layout)

        render_context = dict(self.globals)
        render_context.update(context or {})
        render_context['page'] = item
        if item.type == 'post':
            render_context['post'] = item

        content = self.renderer.render(item.contents, render_context)
        if item.is_markdown:
            content = self.renderer.render_markdown(content)

        for template in chain:
            render_context['content'] = content
            render_context['template'] = template
            content = self.renderer.render(template.body, render_context)

        return content

    def render_and_write(self, item, output_base, context=None):
        """
        Render `item` and write it under `output_base`.

        Returns True when the file was written, even if an after_write hook
        failed afterwards.
        """
        label = f"{item.type} {item.identifier}"

        try:
            self.hooks.call(BEFORE_WRITE, item)
        except Exception as e:
            self.record(HookError(f"before_write hook failed for {label} ({e})"))
            return False

        try:
            output = self.render(item, context)
        except Exception as e:
            self.record(RenderError(f"Failed to render {label} ({e})"))
            return False

        output_file = os.path.join(item.output_path(output_base), item.output_filename())
        try:
            self.writer.write(output_file, output)
        except Exception as e:
            self.record(WriteError(f"Failed to write {label} ({e})"))
            return False

        item.output_file = output_file
        self.items_written += 1
        self.logger.debug(f"Published {label} to {output_file}")

        try:
            self.hooks.call(AFTER_WRITE, item)
        except Exception as e:
            self.record(HookError(f"after_write hook failed for {label} ({e})"))

        return True

    def publish_all(self, items, output_base, context=None):
        """Render and write a batch, returning how many items made it to disk."""
        written = 0
        for item in items:
            if self.render_and_write(item, output_base, context):
                written += 1
        return written
