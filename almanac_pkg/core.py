import os
import shutil
import logging
import time
from datetime import datetime

import csscompressor
import rjsmin

from .archives import ArchiveIndex, index_posts
from .content import Page, Post, Template, parse_front_matter, template_slug
from .errors import (
    AssetCopyError,
    ConfigurationError,
    ContentError,
    DirectoryPreparationError,
    TemplateNotFoundError,
)
from .feeds import FeedGenerator
from .hooks import HookRegistry
from .pagination import paginate
from .publisher import Publisher
from .renderer import FileWriter, TemplateRenderer, list_source_files, read_source
from .settings import normalize_settings


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages (and every warning) to be shown in the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Starting site build",
            "Site build completed in",
            "Total posts generated:",
            "Total pages generated:",
            "Total listing pages generated:",
            "Total feeds generated:",
            "Build finished with",
            "Building archives",
            "Building categories",
            "Generating feeds",
            "Copying assets",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


class Almanac:
    """
    One site build. Holds the scanned content, the indices built from it and
    the error list for the current `generate()` call.
    """

    def __init__(self, config=None, hooks=None, page_class=Page, post_class=Post):
        try:
            self.config = normalize_settings(config or {})
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        if not issubclass(page_class, Page):
            raise ConfigurationError(f"{page_class.__name__} must subclass Page")
        if not issubclass(post_class, Post):
            raise ConfigurationError(f"{post_class.__name__} must subclass Post")
        self.page_class = page_class
        self.post_class = post_class

        root = os.path.abspath(os.path.expanduser(self.config['source']))
        self.source_paths = {'root': root}
        for name, directory in self.config['sources'].items():
            self.source_paths[name] = os.path.join(root, directory)

        site_path = os.path.join(root, os.path.expanduser(self.config['output']))
        self.output_paths = {'site': os.path.normpath(site_path)}
        for name in self.config['paths']:
            self.output_paths[name] = os.path.join(self.output_paths['site'], *self._segments(name))

        self.hooks = hooks or HookRegistry()
        self.renderer = TemplateRenderer(
            markdown_enabled=self.config['markdown']['enabled'],
            markdown_plugins=self.config['markdown']['plugins'],
        )

        self.setup_logging()
        self.prepare()

    def setup_logging(self):
        """Set up logging configuration."""
        self.logger = logging.getLogger('Almanac')
        self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            # Console handler with filter
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.addFilter(InfoFilter())
            console_handler.setFormatter(logging.Formatter('%(message)s'))
            self.logger.addHandler(console_handler)

        log_dir = self.config['log_dir']
        if log_dir and not any(isinstance(h, logging.FileHandler) for h in self.logger.handlers):
            # File handler for all logs
            logs_dir = os.path.abspath(os.path.expanduser(log_dir))
            os.makedirs(logs_dir, exist_ok=True)
            log_filename = datetime.now().strftime('almanac_%Y-%m-%d_%H-%M-%S.log')

            file_handler = logging.FileHandler(os.path.join(logs_dir, log_filename))
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            self.logger.addHandler(file_handler)

    def prepare(self):
        """Reset everything a build produces."""
        self.templates = {}
        self.pages = []
        self.posts = []
        self.index = ArchiveIndex()
        self.errors = []
        self.latest_post = None

        self.writer = FileWriter()
        self.publisher = Publisher(
            self.templates, self.renderer, self.writer, self.errors,
            hooks=self.hooks, globals={'site': self}
        )
        self.feed_generator = FeedGenerator(self.config, self.publisher)

        self.posts_generated = 0
        self.pages_generated = 0
        self.listings_generated = 0

    @property
    def categories(self):
        return self.index.categories

    @property
    def archives(self):
        return self.index

    @property
    def title(self):
        return self.config['site_title']

    @property
    def url(self):
        site_url = self.config['site_url']
        return site_url.rstrip('/') if site_url else site_url

    def set_hook(self, event, callback):
        self.hooks.register(event, callback)

    def record(self, error):
        self.errors.append(error)
        self.logger.error(str(error))

    def _segments(self, path_key, *extra):
        """Output path segments for one of the `paths` entries, relative to the site root."""
        base = [segment for segment in str(self.config['paths'][path_key]).split('/') if segment]
        return base + [str(segment) for segment in extra]

    def _read(self, path):
        try:
            return parse_front_matter(read_source(path))
        except ContentError as e:
            raise ContentError(f"Failed to read {path} ({e})") from e
        except (IOError, OSError, UnicodeDecodeError) as e:
            raise ContentError(f"Failed to read {path} ({e})") from e

    # Scanning

    def scan_files(self):
        self.read_templates()
        self.read_posts()
        self.read_pages()

    def read_templates(self):
        templates_root = self.source_paths['templates']
        for path in list_source_files(templates_root, recursive=True):
            try:
                metadata, body = self._read(path)
            except ContentError as e:
                self.record(e)
                continue
            slug = template_slug(path, templates_root)
            self.templates[slug] = Template(slug, body, metadata, path)

        self.renderer.register_templates(self.templates)
        self.logger.debug(f"Loaded {len(self.templates)} templates")

    def read_posts(self):
        posts = []
        for path in list_source_files(self.source_paths['posts']):
            try:
                metadata, body = self._read(path)
                post = self.post_class(self.config, path, body, metadata)
            except ContentError as e:
                self.record(e)
                continue
            if post.draft:
                self.logger.debug(f"Skipping draft {path}")
                continue
            posts.append(post)

        # Newest first; the source path breaks ties so builds are repeatable
        posts.sort(key=lambda p: (p.date, p.path), reverse=True)

        for position, post in enumerate(posts):
            post.next_post = posts[position - 1] if position > 0 else None
            post.previous_post = posts[position + 1] if position + 1 < len(posts) else None

        self.posts = posts
        self.latest_post = posts[0] if posts else None
        index_posts(self.posts, self.config['category_names'], self.index)

    def read_pages(self):
        pages_root = self.source_paths['pages']
        for path in list_source_files(pages_root, recursive=True):
            try:
                metadata, body = self._read(path)
            except ContentError as e:
                self.record(e)
                continue
            self.pages.append(self.page_class(self.config, path, body, metadata, root=pages_root))

    # Output

    def create_output_directory(self):
        """Remove any previous build and recreate an empty output directory."""
        site_path = self.output_paths['site']
        source_root = self.source_paths['root']

        if site_path == source_root or source_root.startswith(site_path + os.sep):
            raise DirectoryPreparationError(
                f"Refusing to clear {site_path}: it contains the source directory"
            )

        try:
            if os.path.isdir(site_path):
                shutil.rmtree(site_path)
            elif os.path.exists(site_path):
                os.remove(site_path)
            os.makedirs(site_path)
        except (IOError, OSError) as e:
            raise DirectoryPreparationError(f"Couldn't prepare the output directory {site_path} ({e})") from e

    def publish_posts(self):
        written = 0
        for post in self.posts:
            post_dir = os.path.join(self.output_paths['site'], *post.directory_segments)
            if self.publisher.render_and_write(post, post_dir):
                written += 1
        self.posts_generated = written

    def publish_pages(self):
        self.pages_generated = self.publisher.publish_all(self.pages, self.output_paths['site'])

    def paginate_posts(self, posts, segments, layout, title=None, context=None):
        """
        Write every listing page of one pagination scope. A missing layout is
        recorded and the whole scope is skipped.
        """
        try:
            descriptors = paginate(
                posts,
                self.config['pagination']['per_page'],
                segments,
                layout,
                self.templates,
                title=title,
                page_prefix=self.config['pagination']['page_prefix'],
            )
        except TemplateNotFoundError as e:
            self.record(e)
            return 0

        written = 0
        for descriptor in descriptors:
            page = self.page_class(self.config)
            page.layout = layout
            page.title = descriptor.title
            page.identifier = descriptor.url

            page_context = dict(context or {})
            page_context['posts'] = descriptor.items
            page_context['pagination'] = descriptor.to_context()

            if self.publisher.render_and_write(page, descriptor.output_dir(self.output_paths['site']), page_context):
                written += 1

        self.listings_generated += written
        return written

    def publish_listings(self):
        generation = self.config['generation']
        layouts = self.config['layouts']

        if generation['paginated_posts'] and self.posts:
            self.paginate_posts(self.posts, [], layouts['posts'])

        self.logger.info("Building archives")
        self.publish_archives()

        if generation['categories']:
            self.logger.info("Building categories")
            self.publish_categories()

    def publish_archives(self):
        for granularity in ('year', 'month', 'day'):
            if not self.config['generation'][f'{granularity}_archives']:
                continue

            for key, posts in self.index.by_granularity(granularity).items():
                archive_date = posts[0].date
                self.paginate_posts(
                    posts,
                    self._segments('archives', *key.split('-')),
                    self.config['layouts'][granularity],
                    title=archive_date.strftime(self.config['date_formats'][granularity]),
                    context={'archive_date': archive_date, 'archive_type': granularity},
                )

    def publish_categories(self):
        for slug, category in self.categories.items():
            self.paginate_posts(
                category.posts,
                self._segments('categories', slug),
                self.config['layouts']['category'],
                title=category.name,
                context={'category': category},
            )

    def publish_feeds(self):
        generation = self.config['generation']
        limit = self.config['feed_limit']

        self.logger.info("Generating feeds")
        if generation['feed'] and self.posts:
            self.feed_generator.generate_feed(self.output_paths['site'], self.posts, limit)

        if generation['categories'] and generation['category_feeds']:
            for slug, category in self.categories.items():
                self.feed_generator.generate_feed(
                    os.path.join(self.output_paths['site'], *self._segments('categories', slug)),
                    category.posts,
                    limit,
                    {'category': category},
                )

    def copy_assets(self):
        """Copy the public directory over the output root, then minify if asked."""
        public_path = self.source_paths['public']
        if not os.path.isdir(public_path):
            return

        self.logger.info("Copying assets")
        try:
            shutil.copytree(public_path, self.output_paths['site'], dirs_exist_ok=True)
        except (IOError, OSError, shutil.Error) as e:
            self.record(AssetCopyError(f"Failed to copy site assets ({e})"))
            return

        if self.config['minify']:
            self.minify_assets(public_path)

    def minify_assets(self, public_path):
        """Write .min.css / .min.js siblings for the CSS and JS that were copied."""
        for directory, _, files in os.walk(public_path):
            relative = os.path.relpath(directory, public_path)
            target_dir = os.path.normpath(os.path.join(self.output_paths['site'], relative))

            for file in sorted(files):
                if file.endswith('.css') and not file.endswith('.min.css'):
                    minify, minified_name = csscompressor.compress, file[:-len('.css')] + '.min.css'
                elif file.endswith('.js') and not file.endswith('.min.js'):
                    minify, minified_name = rjsmin.jsmin, file[:-len('.js')] + '.min.js'
                else:
                    continue

                source_path = os.path.join(target_dir, file)
                try:
                    with open(source_path, 'r', encoding='utf-8') as f:
                        minified = minify(f.read())
                    with open(os.path.join(target_dir, minified_name), 'w', encoding='utf-8') as f:
                        f.write(minified)
                    self.logger.debug(f"Minified {source_path}")
                except (IOError, OSError, UnicodeDecodeError) as e:
                    self.record(AssetCopyError(f"Failed to minify {source_path} ({e})"))

    def generate(self):
        """
        Build the whole site. Returns the list of recorded errors; only a
        DirectoryPreparationError escapes.
        """
        start_time = time.time()
        self.prepare()
        self.logger.info("Starting site build...")

        self.scan_files()
        self.create_output_directory()

        self.publish_posts()
        self.publish_pages()
        self.publish_listings()
        self.publish_feeds()
        self.copy_assets()

        self.logger.info(f"Site build completed in {time.time() - start_time:.6f} seconds.")
        self.logger.info(f"Total posts generated: {self.posts_generated}")
        self.logger.info(f"Total pages generated: {self.pages_generated}")
        self.logger.info(f"Total listing pages generated: {self.listings_generated}")
        self.logger.info(f"Total feeds generated: {self.feed_generator.feeds_written}")
        if self.errors:
            self.logger.warning(f"Build finished with {len(self.errors)} error(s)")

        return self.errors
