#!/usr/bin/env python3
"""
Command-line interface for Almanac - static site build pipeline.
"""

import os
import sys
import argparse
from typing import Dict, List, Optional

from .core import Almanac
from .errors import AlmanacError
from .settings import AlmanacSettings

STARTER_TEMPLATES = {
    'base.html': """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{% if page.title %}{{ page.title }} | {% endif %}{{ site.title or '' }}</title>
    <link rel="stylesheet" href="/css/site.css">
</head>
<body>
{{ content }}
</body>
</html>
""",
    'post.html': """---
layout: base
---
<article>
    <h1>{{ post.title }}</h1>
    <time>{{ post.date.strftime('%B %d, %Y') }}</time>
    {{ content }}
    <nav>
    {% if post.previous_post %}<a href="{{ post.previous_post.url }}">Older</a>{% endif %}
    {% if post.next_post %}<a href="{{ post.next_post.url }}">Newer</a>{% endif %}
    </nav>
</article>
""",
    'page.html': """---
layout: base
---
<main>
    <h1>{{ page.title }}</h1>
    {{ content }}
</main>
""",
    'listing.html': """<ul>
{% for post in posts %}
    <li><a href="{{ post.url }}">{{ post.title }}</a></li>
{% endfor %}
</ul>
<nav>
{% if pagination.previous_page_url %}<a href="{{ pagination.previous_page_url }}">Previous</a>{% endif %}
{% if pagination.next_page_url %}<a href="{{ pagination.next_page_url }}">Next</a>{% endif %}
</nav>
""",
    'posts.html': """---
title: Latest posts
layout: base
---
<h1>{{ page.title }}</h1>
{% include 'listing' %}
""",
    'category.html': """---
layout: base
---
<h1>{{ page.title }}</h1>
{% include 'listing' %}
""",
    'year.html': """---
layout: base
---
<h1>Archive: {{ page.title }}</h1>
{% include 'listing' %}
""",
    'month.html': """---
layout: base
---
<h1>Archive: {{ page.title }}</h1>
{% include 'listing' %}
""",
    'day.html': """---
layout: base
---
<h1>Archive: {{ page.title }}</h1>
{% include 'listing' %}
""",
    os.path.join('feeds', 'atom.xml'): """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
    <title>{{ site.title or '' }}{% if category %}: {{ category.name }}{% endif %}</title>
    <link href="{{ site.url or '' }}/"/>
    {% if posts %}<updated>{{ posts[0].date.isoformat() }}</updated>{% endif %}
    <id>{{ site.url or '' }}/</id>
    {% for post in posts %}
    <entry>
        <title>{{ post.title|e }}</title>
        <link href="{{ site.url or '' }}{{ post.url }}"/>
        <id>{{ site.url or '' }}{{ post.url }}</id>
        <updated>{{ post.date.isoformat() }}</updated>
        <content type="html">{{ post.contents|markdown|e }}</content>
    </entry>
    {% endfor %}
</feed>
""",
}

STARTER_CONTENT = {
    os.path.join('posts', '2025-01-15-welcome.md'): """---
title: Welcome to Almanac
categories:
  - general
---

# Welcome!

This is your first post. Posts live in `posts/` and are named
`YYYY-MM-DD-slug.md`. List categories in the front matter to file the post
under a category listing and feed.
""",
    os.path.join('pages', 'about.md'): """---
title: About
---

This page was built from `pages/about.md`.
""",
    os.path.join('public', 'css', 'site.css'): """body {
    font-family: sans-serif;
    max-width: 42rem;
    margin: 0 auto;
}
""",
}


def write_starter_files(files: Dict[str, str], base_dir: str) -> List[str]:
    """Write each file unless it already exists. Returns the paths created."""
    created = []
    for relative_path, contents in files.items():
        path = os.path.join(base_dir, relative_path)
        if os.path.exists(path):
            print(f"File already exists: {relative_path}")
            continue
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(contents)
        print(f"Created: {relative_path}")
        created.append(path)
    return created


def create_starter_structure(base_dir: Optional[str] = None) -> None:
    """Create complete starter structure with templates, content, and assets."""
    base_dir = base_dir or os.getcwd()

    write_starter_files({os.path.join('templates', name): body for name, body in STARTER_TEMPLATES.items()}, base_dir)
    write_starter_files(STARTER_CONTENT, base_dir)

    print("\nStarter structure created successfully!")
    print("\nNext steps:")
    print("1. Edit the configuration file (almanac.yml)")
    print("2. Customize templates in the 'templates/' directory")
    print("3. Add your content to 'posts/' and 'pages/'")
    print("4. Run 'almanac' to build your site")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Almanac - Static Site Generator')
    parser.add_argument('--source', type=str,
                        help='Source directory containing posts, pages, templates and public')
    parser.add_argument('--output', type=str,
                        help='Output directory for generated site')
    parser.add_argument('--per-page', type=int, dest='per_page',
                        help='Number of posts per listing page')
    parser.add_argument('--feed-formats', type=str, dest='feed_formats',
                        help='Comma-separated list of feed formats (e.g. atom,rss)')
    parser.add_argument('--site-title', type=str, dest='site_title', help='Site title for templates and feeds')
    parser.add_argument('--site-url', type=str, dest='site_url', help='Site URL for feeds')
    parser.add_argument('--minify', action='store_true', default=None,
                        help='Minify CSS and JS assets')
    parser.add_argument('--no-log-file', action='store_true',
                        help='Do not write a log file')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file and starter site')
    parser.add_argument('--version', action='version', version='%(prog)s 1.0.0')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    # Handle init command
    if args.init:
        settings_loader = AlmanacSettings()
        config_path = settings_loader.create_sample_config(args.init)
        print(f"Created sample configuration file: {config_path}")

        print("\nCreating starter project structure...")
        create_starter_structure()
        return 0

    try:
        # Load settings from configuration file
        settings_loader = AlmanacSettings()
        settings_loader.load_settings()

        # Command line arguments take precedence
        args_dict = {k: v for k, v in vars(args).items() if v is not None and k not in ('init', 'no_log_file')}
        if args.no_log_file:
            args_dict['log_dir'] = False
        final_settings = settings_loader.merge_with_args(args_dict)

        generator = Almanac(final_settings)
        errors = generator.generate()
    except (AlmanacError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if errors:
        print(f"\n{len(errors)} item(s) were skipped:", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
