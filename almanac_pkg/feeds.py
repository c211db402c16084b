"""
Syndication feeds for the whole site and for each category.
"""

import logging
import os

from .content import Page


class FeedGenerator:
    """
    Writes one 'feed.<format>' per configured format whose
    '<feed layout>/<format>' template exists. Formats without a template are
    skipped quietly.
    """

    def __init__(self, config, publisher):
        self.config = config
        self.publisher = publisher
        self.logger = logging.getLogger('Almanac.feeds')
        self.feeds_written = 0

    def feed_layout(self, feed_format):
        return f"{self.config['layouts']['feed']}/{feed_format}"

    def generate_feed(self, scope_path, posts, per_feed_limit, extra_context=None):
        if per_feed_limit < 1:
            raise ValueError(f"per_feed_limit must be a positive integer, got {per_feed_limit}")

        feed_posts = list(posts)[:per_feed_limit]
        written = 0

        for feed_format in self.config['feed_formats']:
            layout = self.feed_layout(feed_format)
            if layout not in self.publisher.templates:
                self.logger.debug(f"No '{layout}' template, skipping {feed_format} feed for {scope_path}")
                continue

            feed = Page(self.config)
            feed.filename = 'feed'
            feed.extension = feed_format
            feed.layout = layout
            feed.identifier = os.path.join(scope_path, feed.output_filename())

            context = dict(extra_context or {})
            context['posts'] = feed_posts

            if self.publisher.render_and_write(feed, scope_path, context):
                written += 1

        self.feeds_written += written
        return written
