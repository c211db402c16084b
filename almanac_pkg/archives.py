"""
Date and category indices built from the published post list.
"""

from .content import Category


def year_key(post):
    return f"{post.year:04d}"


def month_key(post):
    return f"{post.year:04d}-{post.month:02d}"


def day_key(post):
    return f"{post.year:04d}-{post.month:02d}-{post.day:02d}"


class ArchiveIndex:
    """
    Posts grouped by year ('2015'), month ('2015-01') and day ('2015-01-31'),
    plus categories keyed by slug. Every mapping keeps first-seen key order and
    each bucket keeps the order posts were indexed in.
    """

    def __init__(self):
        self.years = {}
        self.months = {}
        self.days = {}
        self.categories = {}

    def by_granularity(self, granularity):
        return {'year': self.years, 'month': self.months, 'day': self.days}[granularity]

    def __bool__(self):
        return bool(self.years or self.categories)


def index_posts(posts, category_names=None, index=None):
    """
    File each post into its year, month and day buckets and under every
    category it declares.

    posts must already exclude drafts and be ordered newest first. A post that
    lists the same category twice is filed twice.
    """
    category_names = category_names or {}
    if index is None:
        index = ArchiveIndex()

    for post in posts:
        index.years.setdefault(year_key(post), []).append(post)
        index.months.setdefault(month_key(post), []).append(post)
        index.days.setdefault(day_key(post), []).append(post)

        for slug in post.categories:
            if slug not in index.categories:
                index.categories[slug] = Category(slug, category_names.get(slug))
            index.categories[slug].posts.append(post)

    return index
