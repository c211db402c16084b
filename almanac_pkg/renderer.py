"""
Collaborators the build drives: source listing, Jinja2/Mistune rendering and
writing output files.
"""

import glob
import logging
import os
import re

import mistune
from jinja2 import Environment, DictLoader, StrictUndefined, Undefined

from .errors import WriteError


def list_source_files(root, recursive=False):
    """Return every '*.*' file under root, sorted. Missing roots yield nothing."""
    if not os.path.isdir(root):
        return []
    if recursive:
        pattern = os.path.join(root, '**', '*.*')
    else:
        pattern = os.path.join(root, '*.*')
    return sorted(path for path in glob.glob(pattern, recursive=recursive) if os.path.isfile(path))


def read_source(path):
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


HEADING_TAG_RE = re.compile(r'<[^>]+>')


def heading_anchor(text):
    """Anchor id for a rendered heading: tags dropped, then slugified."""
    text = HEADING_TAG_RE.sub('', text).lower()
    text = re.sub(r'[^\w]+', '-', text, flags=re.UNICODE)
    return text.strip('-_').replace('_', '-') or 'section'


class AlmanacMarkdownRenderer(mistune.HTMLRenderer):
    """
    HTML renderer for post and page bodies. Headings get anchor ids so
    long pages can be linked into; fenced code keeps its language as a
    `language-*` class.
    """

    def __init__(self):
        super().__init__(escape=False)

    def heading(self, text, level, **attrs):
        return f'<h{level} id="{heading_anchor(text)}">{text}</h{level}>\n'

    def block_code(self, code, info=None):
        language = info.split(None, 1)[0] if info and info.strip() else None
        css_class = f' class="language-{mistune.escape(language)}"' if language else ''
        return f'<pre><code{css_class}>{mistune.escape(code)}</code></pre>\n'


def create_markdown_parser(plugins=None):
    """Create a Mistune markdown parser with the Almanac renderer."""
    return mistune.create_markdown(
        renderer=AlmanacMarkdownRenderer(),
        plugins=list(plugins) if plugins is not None else ['table', 'task_lists', 'strikethrough']
    )


class TemplateRenderer:
    """
    Renders template bodies with Jinja2.

    Registered templates are also exposed through a DictLoader so layouts can
    {% include %} or {% extends %} one another by slug.
    """

    def __init__(self, markdown_enabled=True, markdown_plugins=None, strict=False):
        self.env = Environment(
            loader=DictLoader({}),
            undefined=StrictUndefined if strict else Undefined,
            keep_trailing_newline=True,
        )
        self.markdown_parser = create_markdown_parser(markdown_plugins) if markdown_enabled else None
        self.env.filters['markdown'] = self.render_markdown

    def register_templates(self, templates):
        self.env.loader = DictLoader({slug: template.body for slug, template in templates.items()})

    def render(self, template_body, context):
        return self.env.from_string(template_body).render(**context)

    def render_markdown(self, text):
        """Convert markdown text to HTML, or pass it through when markdown is off."""
        if self.markdown_parser is None:
            return text
        return self.markdown_parser(text)


class FileWriter:
    """Persists rendered output, creating parent directories as needed."""

    def __init__(self):
        self.logger = logging.getLogger('Almanac.writer')
        self.files_written = 0

    def write(self, path, content):
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'w', encoding='utf-8') as output_file:
                output_file.write(content)
        except (IOError, OSError, PermissionError) as e:
            raise WriteError(f"Failed to write {path}: {e}") from e
        self.files_written += 1
        self.logger.debug(f"Wrote {path}")
