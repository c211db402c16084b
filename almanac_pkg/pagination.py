"""
Splits an ordered collection into listing pages.

Page 1 of a scope lives at the scope's own directory; page N > 1 lives in a
'page{N}' subdirectory. Output directories and URLs are both derived from
the same list of path segments.
"""

import math
import os

from .errors import TemplateNotFoundError


def segments_url(segments):
    """['posts', '2015'] -> '/posts/2015/'; [] -> '/'."""
    if not segments:
        return '/'
    return '/' + '/'.join(str(segment) for segment in segments) + '/'


def page_numbers(current_page, total_pages, delta=2):
    """
    Returns a list of page numbers (or ellipses) to display in pagination.
    Always shows page 1 and total_pages.
    Shows `delta` pages before and after the current page.
    Inserts '...' when there is a gap.
    """
    links = [1]

    start = max(current_page - delta, 2)
    end = min(current_page + delta, total_pages - 1)

    if start > 2:
        links.append('...')

    links.extend(range(start, end + 1))

    if end < total_pages - 1:
        links.append('...')

    if total_pages > 1:
        links.append(total_pages)

    return links


class PaginationDescriptor:
    """One listing page: its slice of items plus navigation metadata."""

    def __init__(self, page, pages, total, items, base_segments, page_prefix='page', title=None):
        self.page = page
        self.pages = pages
        self.total = total
        self.items = items
        self.base_segments = list(base_segments)
        self.page_prefix = page_prefix
        self.title = title

    def _segments_for(self, page):
        if page == 1:
            return list(self.base_segments)
        return self.base_segments + [f"{self.page_prefix}{page}"]

    @property
    def output_segments(self):
        return self._segments_for(self.page)

    @property
    def path(self):
        """URL of the scope's first page."""
        return segments_url(self.base_segments)

    @property
    def url(self):
        return segments_url(self.output_segments)

    @property
    def previous_page(self):
        return self.page - 1 if self.page > 1 else None

    @property
    def next_page(self):
        return self.page + 1 if self.page < self.pages else None

    @property
    def previous_page_url(self):
        if self.previous_page is None:
            return None
        return segments_url(self._segments_for(self.previous_page))

    @property
    def next_page_url(self):
        if self.next_page is None:
            return None
        return segments_url(self._segments_for(self.next_page))

    def output_dir(self, output_root):
        return os.path.join(output_root, *self.output_segments)

    def to_context(self):
        return {
            'page': self.page,
            'pages': self.pages,
            'total': self.total,
            'path': self.path,
            'url': self.url,
            'previous_page': self.previous_page,
            'next_page': self.next_page,
            'previous_page_url': self.previous_page_url,
            'next_page_url': self.next_page_url,
            'page_numbers': page_numbers(self.page, self.pages),
        }

    def __repr__(self):
        return f"<PaginationDescriptor {self.url} {self.page}/{self.pages}>"


def paginate(items, per_page, base_segments, layout, templates, title=None, page_prefix='page'):
    """
    Build the descriptors for one pagination scope.

    Raises TemplateNotFoundError before anything is computed when `layout` is
    not in `templates`. An empty collection yields no pages at all.
    """
    if layout not in templates:
        raise TemplateNotFoundError(layout, segments_url(base_segments))
    if per_page < 1:
        raise ValueError(f"per_page must be a positive integer, got {per_page}")

    items = list(items)
    total_pages = math.ceil(len(items) / per_page)
    base_title = title if title else templates[layout].title

    descriptors = []
    for page in range(1, total_pages + 1):
        page_items = items[(page - 1) * per_page:page * per_page]

        page_title = base_title
        if page > 1:
            page_title = f"{base_title} (Page {page})" if base_title else f"Page {page}"

        descriptors.append(PaginationDescriptor(
            page, total_pages, len(items), page_items, base_segments,
            page_prefix=page_prefix, title=page_title
        ))

    return descriptors
