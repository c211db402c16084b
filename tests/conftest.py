"""Test configuration and fixtures for Almanac tests."""

import pytest
import tempfile
import shutil
import os
from pathlib import Path

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from almanac_pkg.content import Post, Template
from almanac_pkg.settings import normalize_settings

LISTING_BODY = (
    "{% for post in posts %}[{{ post.slug }}]{% endfor %} "
    "{{ pagination.page }}/{{ pagination.pages }} "
    "prev={{ pagination.previous_page_url }} next={{ pagination.next_page_url }}"
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def config():
    """Fully resolved default configuration."""
    return normalize_settings({'log_dir': False})


@pytest.fixture
def make_post(config):
    """Build a Post without touching the filesystem."""
    def _make_post(name, categories=None, **metadata):
        if categories is not None:
            metadata['categories'] = categories
        return Post(config, os.path.join('posts', name), 'Body of ' + name, metadata)
    return _make_post


@pytest.fixture
def listing_templates():
    """Registry with every listing layout the default configuration names."""
    return {
        slug: Template(slug, LISTING_BODY, {'title': title} if title else {})
        for slug, title in [
            ('posts', 'Blog'), ('category', None), ('year', None),
            ('month', None), ('day', None),
        ]
    }


@pytest.fixture
def site_dir(temp_dir):
    """Create a complete source tree for a small blog."""
    root = Path(temp_dir) / 'blog'
    templates = root / 'templates'
    posts = root / 'posts'
    pages = root / 'pages'
    public = root / 'public'

    (templates / 'feeds').mkdir(parents=True)
    posts.mkdir(parents=True)
    (pages / 'docs').mkdir(parents=True)
    (public / 'css').mkdir(parents=True)
    (public / 'js').mkdir(parents=True)

    (templates / 'base.html').write_text(
        "<html><head><title>{{ page.title }}</title></head><body>{{ content }}</body></html>\n"
    )
    (templates / 'post.html').write_text(
        "---\nlayout: base\n---\n<article><h1>{{ post.title }}</h1>{{ content }}</article>"
    )
    (templates / 'page.html').write_text(
        "---\nlayout: base\n---\n<main>{{ content }}</main>"
    )
    (templates / 'posts.html').write_text("---\ntitle: Blog\n---\n" + LISTING_BODY)
    for slug in ('category', 'year', 'month', 'day'):
        (templates / f'{slug}.html').write_text("{{ page.title }}: " + LISTING_BODY)
    (templates / 'feeds' / 'atom.xml').write_text(
        "<feed>{% if category %}{{ category.slug }}{% endif %}"
        "{% for post in posts %}<entry>{{ post.slug }}</entry>{% endfor %}</feed>"
    )

    post_files = {
        '2015-01-01-first.md': "---\ntitle: First\ncategories: [news]\n---\nHello *world*\n",
        '2015-01-15-second.md': "---\ntitle: Second\ncategories: [news, python]\n---\nSecond post\n",
        '2015-02-03-third.md': "---\ntitle: Third\ncategories: [python]\n---\nThird post\n",
        '2016-03-04-fourth.md': "---\ntitle: Fourth\n---\nFourth post\n",
        '2016-03-04-fifth.md': "---\ntitle: Fifth\ncategories: [news]\n---\nFifth post\n",
        '2016-05-06-unfinished.md': "---\ntitle: Unfinished\ndraft: true\ncategories: [news]\n---\nNot yet\n",
    }
    for name, body in post_files.items():
        (posts / name).write_text(body)

    (pages / 'about.md').write_text("---\ntitle: About\n---\nAbout **us**\n")
    (pages / 'docs' / 'setup.md').write_text("---\ntitle: Setup\n---\nSetup notes\n")

    (public / 'css' / 'site.css').write_text("body {\n    color: red;\n}\n")
    (public / 'js' / 'site.js').write_text("function hello() {\n    return 1;\n}\n")

    return str(root)


@pytest.fixture
def site_config(site_dir):
    """Configuration for the sample blog with two posts per page."""
    return {
        'source': site_dir,
        'output': 'site',
        'log_dir': False,
        'pagination': {'per_page': 2},
        'site_title': 'Test Blog',
        'site_url': 'https://example.com/',
    }
