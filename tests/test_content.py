"""Tests for content items and front matter parsing."""

import os
from datetime import datetime, date, timedelta, timezone

import pytest

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from almanac_pkg.content import Category, Page, Post, check_slug, parse_date, parse_front_matter, template_slug
from almanac_pkg.errors import ContentError


class TestFrontMatter:
    """Test cases for parse_front_matter()."""

    def test_with_front_matter(self):
        """Test metadata and body are split apart."""
        metadata, body = parse_front_matter("---\ntitle: Hello\ncategories: [a, b]\n---\nBody text\n")

        assert metadata == {'title': 'Hello', 'categories': ['a', 'b']}
        assert body == "Body text\n"

    def test_without_front_matter(self):
        """Test files without a leading '---' are all body."""
        metadata, body = parse_front_matter("<p>Just html</p>")

        assert metadata == {}
        assert body == "<p>Just html</p>"

    def test_empty_front_matter(self):
        """Test an empty block yields empty metadata."""
        metadata, body = parse_front_matter("---\n---\nBody")

        assert metadata == {}
        assert body == "Body"

    def test_invalid_yaml(self):
        """Test broken YAML raises ContentError."""
        with pytest.raises(ContentError, match="Invalid YAML"):
            parse_front_matter("---\ntitle: [unclosed\n---\nBody")

    def test_non_mapping(self):
        """Test front matter must be a mapping."""
        with pytest.raises(ContentError, match="mapping"):
            parse_front_matter("---\n- a\n- b\n---\nBody")


class TestParseDate:
    """Test cases for parse_date()."""

    def test_datetime_passthrough(self):
        value = datetime(2015, 1, 2, 3, 4, 5)
        assert parse_date(value) is value

    def test_date(self):
        assert parse_date(date(2015, 1, 2)) == datetime(2015, 1, 2)

    def test_strings(self):
        assert parse_date('2015-01-02') == datetime(2015, 1, 2)
        assert parse_date('2015-01-02T10:30:00') == datetime(2015, 1, 2, 10, 30)
        assert parse_date('2015-01-02 10:30') == datetime(2015, 1, 2, 10, 30)
        assert parse_date('Jan 02, 2015') == datetime(2015, 1, 2)

    def test_unparseable(self):
        assert parse_date('someday') is None
        assert parse_date(None) is None

    def test_aware_datetime_becomes_naive_utc(self):
        """Test offset-aware dates (as PyYAML returns them) compare with naive filename dates."""
        aware = datetime(2017, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))

        parsed = parse_date(aware)

        assert parsed == datetime(2017, 1, 1, 8, 0)
        assert parsed.tzinfo is None
        assert parsed > datetime(2016, 12, 31)


class TestPost:
    """Test cases for Post."""

    def test_filename_gives_date_and_slug(self, config):
        """Test the YYYY-MM-DD-slug filename convention."""
        post = Post(config, os.path.join('posts', '2015-01-31-hello-world.md'), 'Hi', {'title': 'Hello'})

        assert post.date == datetime(2015, 1, 31)
        assert (post.year, post.month, post.day) == (2015, 1, 31)
        assert post.slug == 'hello-world'
        assert post.title == 'Hello'
        assert post.layout == 'post'
        assert post.filename == 'index'
        assert post.extension == 'html'
        assert post.url == '/posts/hello-world/'
        assert post.is_markdown

    def test_front_matter_overrides(self, config):
        """Test date, slug and layout come from front matter when given."""
        metadata = {'date': date(2016, 2, 3), 'slug': 'custom', 'layout': 'wide'}
        post = Post(config, os.path.join('posts', '2015-01-31-hello.md'), '', metadata)

        assert post.date == datetime(2016, 2, 3)
        assert post.slug == 'custom'
        assert post.layout == 'wide'

    def test_undated_post(self, config):
        """Test a post with no usable date is rejected."""
        with pytest.raises(ContentError, match="no usable date"):
            Post(config, os.path.join('posts', 'undated.md'), '', {})

    def test_undated_filename_with_front_matter_date(self, config):
        """Test a plain filename works when front matter supplies the date."""
        post = Post(config, os.path.join('posts', 'notes.html'), '', {'date': '2015-05-05'})

        assert post.slug == 'notes'
        assert not post.is_markdown

    def test_categories_and_draft(self, config):
        """Test categories are normalised to string slugs."""
        post = Post(config, os.path.join('posts', '2015-01-01-a.md'), '', {'categories': 'news, python', 'draft': True})
        numeric = Post(config, os.path.join('posts', '2015-01-01-b.md'), '', {'categories': [1, 'two']})

        assert post.categories == ['news', 'python']
        assert post.draft is True
        assert numeric.categories == ['1', 'two']
        assert numeric.draft is False

    def test_scalar_categories(self, config):
        """Test a single non-string category is treated as one slug."""
        post = Post(config, os.path.join('posts', '2015-01-01-a.md'), '', {'categories': 2017})
        flag = Post(config, os.path.join('posts', '2015-01-01-b.md'), '', {'categories': []})

        assert post.categories == ['2017']
        assert flag.categories == []

    def test_mapping_categories_rejected(self, config):
        with pytest.raises(ContentError, match="categories"):
            Post(config, os.path.join('posts', '2015-01-01-a.md'), '', {'categories': {'a': 1}})

    @pytest.mark.parametrize('metadata', [
        {'slug': '../escape'},
        {'slug': 'a/b'},
        {'categories': ['news', '..']},
        {'categories': 'ok, ../../etc'},
    ])
    def test_unsafe_slugs_rejected(self, config, metadata):
        """Test slugs that would leave the output directory are refused."""
        with pytest.raises(ContentError, match="Invalid"):
            Post(config, os.path.join('posts', '2015-01-01-a.md'), '', metadata)

    def test_dated_posts_path(self, config):
        """Test strftime codes in paths.posts are filled from the post date."""
        config['paths']['posts'] = 'blog/%Y/%m'
        post = Post(config, os.path.join('posts', '2015-01-31-hello.md'))

        assert post.directory_segments == ['blog', '2015', '01']
        assert post.url == '/blog/2015/01/hello/'

    def test_output_path(self, config):
        """Test a post writes into a directory named after its slug."""
        post = Post(config, os.path.join('posts', '2015-01-01-a.md'))

        assert post.output_path('/out/posts') == os.path.join('/out/posts', 'a')
        assert post.output_filename() == 'index.html'


class TestPage:
    """Test cases for Page."""

    def test_source_page_mirrors_tree(self, config):
        """Test nested pages keep their directory under the output root."""
        root = os.path.join('src', 'pages')
        page = Page(config, os.path.join(root, 'docs', 'setup.md'), 'Body', {'title': 'Setup'}, root=root)

        assert page.output_path('/out') == os.path.join('/out', 'docs')
        assert page.output_filename() == 'setup.html'
        assert page.layout == 'page'

    def test_top_level_page(self, config):
        """Test a page at the pages root writes straight into the output root."""
        root = os.path.join('src', 'pages')
        page = Page(config, os.path.join(root, 'about.md'), root=root)

        assert page.output_path('/out') == '/out'
        assert page.output_filename() == 'about.html'

    def test_filename_from_front_matter(self, config):
        root = os.path.join('src', 'pages')
        page = Page(config, os.path.join(root, 'about.md'), '', {'filename': 'index'}, root=root)

        assert page.output_filename() == 'index.html'

    def test_unsafe_filename_rejected(self, config):
        root = os.path.join('src', 'pages')

        with pytest.raises(ContentError, match="Invalid filename"):
            Page(config, os.path.join(root, 'about.md'), '', {'filename': '../index'}, root=root)

    def test_synthetic_page(self, config):
        """Test a page without a source writes index.<ext> into the given directory."""
        page = Page(config)

        assert page.path is None
        assert page.output_path('/out/posts/2015') == '/out/posts/2015'
        assert page.output_filename() == 'index.html'
        assert page.identifier == 'index.html'


class TestTemplatesAndCategories:
    """Test cases for template slugs and categories."""

    def test_template_slug(self):
        root = os.path.join('site', 'templates')

        assert template_slug(os.path.join(root, 'post.html'), root) == 'post'
        assert template_slug(os.path.join(root, 'feeds', 'atom.xml'), root) == 'feeds/atom'

    def test_check_slug(self):
        assert check_slug('hello-world', 'slug', 'x.md') == 'hello-world'
        for bad in ('', '.', '..', 'a/b', 'a\\b'):
            with pytest.raises(ContentError):
                check_slug(bad, 'slug', 'x.md')

    def test_category_default_name(self):
        category = Category('python')

        assert category.name == 'Python'
        assert len(category) == 0
        assert Category('python', 'Python 3').name == 'Python 3'
