"""
Content items read from the source tree: posts, pages, templates and the
categories posts are filed under.
"""

import os
import re
from datetime import datetime, date, timezone

import yaml

from .errors import ContentError
from .pagination import segments_url

POST_FILENAME_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})-(.+)$')
MARKDOWN_EXTENSIONS = ('.md', '.markdown', '.mdown')
DATE_FORMATS = ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%d %H:%M:%S', '%Y-%m-%d %H:%M', '%Y-%m-%d', '%b %d, %Y']


def parse_front_matter(raw):
    """
    Split a source file into its YAML front matter and body.

    Files that do not open with a '---' line have no front matter and the
    whole text is the body.
    """
    if not raw.lstrip('\ufeff').startswith('---'):
        return {}, raw

    parts = raw.lstrip('\ufeff').split('---', 2)
    if len(parts) < 3:
        return {}, raw

    try:
        metadata = yaml.safe_load(parts[1]) or {}
    except yaml.YAMLError as e:
        raise ContentError(f"Invalid YAML front matter: {e}") from e
    if not isinstance(metadata, dict):
        raise ContentError("Front matter must be a mapping")

    return metadata, parts[2].lstrip('\n')


def parse_date(value):
    """Parse a front matter date. Returns None when nothing matches."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            # post dates are always naive; offsets fold into UTC
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(value.strip(), fmt)
            except ValueError:
                continue
    return None


def check_slug(value, kind, path):
    """Reject slugs that would escape the directory they are written into."""
    if not value or value == '.' or '..' in value or '/' in value or '\\' in value:
        raise ContentError(f"Invalid {kind} '{value}' in {path}")
    return value


def template_slug(path, root):
    """'templates/feeds/atom.xml' under 'templates' becomes 'feeds/atom'."""
    relative = os.path.relpath(path, root)
    return os.path.splitext(relative)[0].replace(os.sep, '/')


class ContentItem:
    """Anything that renders through a layout into one output file."""

    type = None

    def __init__(self, config, path=None, contents='', metadata=None):
        self.config = config
        self.path = path
        self.contents = contents or ''
        self.metadata = metadata or {}
        self.title = self.metadata.get('title')
        self.filename = 'index'
        self.extension = 'html'
        self.layout = self.metadata.get('layout')
        self.output_file = None
        self._identifier = None

    @property
    def is_markdown(self):
        return bool(self.path) and os.path.splitext(self.path)[1].lower() in MARKDOWN_EXTENSIONS

    @property
    def identifier(self):
        """What error messages call this item."""
        return self._identifier or self.path or self.output_filename()

    @identifier.setter
    def identifier(self, value):
        self._identifier = value

    def output_path(self, parent_path):
        return parent_path

    def output_filename(self):
        return f"{self.filename}.{self.extension}" if self.extension else self.filename

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.identifier!r}>"


class Page(ContentItem):
    """
    A standalone page. Source pages mirror their position under the pages
    root; synthetic pages (listings, feeds) have no path and write straight
    into whatever directory they are given.
    """

    type = 'page'

    def __init__(self, config, path=None, contents='', metadata=None, root=None):
        super().__init__(config, path, contents, metadata)
        self.root = root
        self.extension = config['file_extensions']['pages']
        if 'layout' not in self.metadata:
            self.layout = config['layouts']['page']
        if path:
            self.filename = os.path.splitext(os.path.basename(path))[0]
        if self.metadata.get('filename'):
            self.filename = check_slug(str(self.metadata['filename']), 'filename', path)

    def output_path(self, parent_path):
        if self.path is None:
            return parent_path
        relative = os.path.relpath(os.path.dirname(self.path), self.root)
        if relative == os.curdir:
            return parent_path
        return os.path.join(parent_path, relative)


class Post(ContentItem):
    """A dated blog entry, written to <posts_dir>/<slug>/index.<ext>."""

    type = 'post'

    def __init__(self, config, path, contents='', metadata=None):
        super().__init__(config, path, contents, metadata)
        self.extension = config['file_extensions']['posts']
        if 'layout' not in self.metadata:
            self.layout = config['layouts']['post']

        basename = os.path.splitext(os.path.basename(path))[0]
        match = POST_FILENAME_RE.match(basename)

        self.date = parse_date(self.metadata.get('date'))
        if self.date is None and match:
            try:
                self.date = datetime(int(match.group(1)), int(match.group(2)), int(match.group(3)))
            except ValueError:
                self.date = None
        if self.date is None:
            raise ContentError(f"Post {path} has no usable date")

        self.slug = check_slug(str(self.metadata.get('slug') or (match.group(4) if match else basename)), 'slug', path)
        self.draft = bool(self.metadata.get('draft', False))
        self.categories = [
            check_slug(slug, 'category', path) for slug in self._read_categories(self.metadata.get('categories'), path)
        ]

        self.previous_post = None
        self.next_post = None

    @staticmethod
    def _read_categories(value, path):
        if value is None or value == '' or value == []:
            return []
        if isinstance(value, str):
            return [slug.strip() for slug in value.split(',') if slug.strip()]
        if isinstance(value, (list, tuple)):
            return [str(slug) for slug in value]
        if isinstance(value, dict):
            raise ContentError(f"categories in {path} must be a list or a comma separated string")
        # a lone scalar, e.g. `categories: 2017`
        return [str(value)]

    @property
    def year(self):
        return self.date.year

    @property
    def month(self):
        return self.date.month

    @property
    def day(self):
        return self.date.day

    @property
    def directory_segments(self):
        """Output segments of the posts directory, with strftime codes in `paths.posts` filled from the post date."""
        posts_path = self.date.strftime(str(self.config['paths']['posts']))
        return [segment for segment in posts_path.split('/') if segment]

    @property
    def url(self):
        return segments_url(self.directory_segments + [self.slug])

    def output_path(self, parent_path):
        return os.path.join(parent_path, self.slug)


class Template:
    """A layout body plus the front matter that names its own parent layout."""

    def __init__(self, slug, body, metadata=None, path=None):
        self.slug = slug
        self.body = body
        self.metadata = metadata or {}
        self.path = path
        self.title = self.metadata.get('title')
        self.layout = self.metadata.get('layout')

    def __repr__(self):
        return f"<Template {self.slug!r}>"


class Category:
    """Indexes posts under one slug. Posts appear in the order they were filed."""

    def __init__(self, slug, name=None):
        self.slug = slug
        self.name = name or slug.capitalize()
        self.posts = []

    def __len__(self):
        return len(self.posts)

    def __repr__(self):
        return f"<Category {self.slug!r} ({len(self.posts)} posts)>"
