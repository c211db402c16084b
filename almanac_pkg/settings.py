#!/usr/bin/env python3
"""
Settings loader for Almanac static site generator.
Supports configuration from almanac.yml, almanac.yaml, or almanac.json files.
"""

import copy
import os
import json
import yaml
from typing import Dict, Any, Optional


def deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of base with overrides merged in, recursing into nested mappings."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class AlmanacSettings:
    """Load and manage Almanac configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'source': '.',
        'output': 'site',
        'sources': {
            'posts': 'posts',
            'pages': 'pages',
            'templates': 'templates',
            'public': 'public',
        },
        'paths': {
            'posts': 'posts',
            'archives': 'posts',
            'categories': 'posts',
        },
        'pagination': {
            'per_page': 10,
            'page_prefix': 'page',
        },
        'generation': {
            'paginated_posts': True,
            'year_archives': True,
            'month_archives': True,
            'day_archives': True,
            'categories': True,
            'category_feeds': True,
            'feed': True,
        },
        'layouts': {
            'post': 'post',
            'page': 'page',
            'posts': 'posts',
            'category': 'category',
            'year': 'year',
            'month': 'month',
            'day': 'day',
            'feed': 'feeds',
        },
        'date_formats': {
            'year': '%Y',
            'month': '%B %Y',
            'day': '%B %d, %Y',
        },
        'feed_formats': ['atom'],
        'feed_limit': 10,
        'file_extensions': {
            'pages': 'html',
            'posts': 'html',
        },
        'category_names': {},
        'markdown': {
            'enabled': True,
            'plugins': ['table', 'strikethrough', 'task_lists'],
        },
        'minify': False,
        'log_dir': 'logs',
        'site_title': None,
        'site_url': None,
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['almanac.yml', 'almanac.yaml', 'almanac.json']

    # Flat command-line options and where they live in the nested settings
    ARG_PATHS = {
        'per_page': ('pagination', 'per_page'),
    }

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        self.config_file_path = None

    def load_settings(self) -> Dict[str, Any]:
        """
        Load settings from configuration file if it exists.

        Returns:
            Dictionary of configuration settings
        """
        config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            loaded_settings = self._load_config_file(config_file)
            if loaded_settings:
                if not isinstance(loaded_settings, dict):
                    raise ValueError(f"Configuration file {config_file} must contain a mapping")
                # Merge with defaults, giving preference to loaded settings
                self.settings = deep_merge(self.settings, loaded_settings)

        return copy.deepcopy(self.settings)

    def _find_config_file(self) -> Optional[str]:
        """
        Find the first available configuration file.

        Returns:
            Path to config file or None if not found
        """
        for filename in self.CONFIG_FILES:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Dictionary of configuration settings
        """
        file_ext = os.path.splitext(config_path)[1].lower()
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext in ['.yml', '.yaml']:
                    return yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    return json.load(f) or {}
                else:
                    raise ValueError(f"Unsupported config file format: {file_ext}")
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        except PermissionError:
            raise PermissionError(f"Permission denied reading configuration file: {config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file {config_path}: {e}")

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        filename = f'almanac.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        sample_config = {
            'site_title': 'My Almanac Site',
            'site_url': 'https://example.com',
            'output': 'site',
            'pagination': {'per_page': 10},
            'feed_formats': ['atom'],
            'category_names': {'python': 'Python'},
            'minify': False,
        }

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    f.write("# Almanac Configuration File\n\n")
                    f.write("# Site information\n")
                    f.write("site_title: My Almanac Site\n")
                    f.write("site_url: https://example.com\n\n")
                    f.write("# Build settings\n")
                    f.write("output: site\n")
                    f.write("paths:\n")
                    f.write("  posts: posts\n\n")
                    f.write("# Listings\n")
                    f.write("pagination:\n")
                    f.write("  per_page: 10\n")
                    f.write("generation:\n")
                    f.write("  year_archives: true\n")
                    f.write("  month_archives: true\n")
                    f.write("  day_archives: true\n")
                    f.write("  categories: true\n")
                    f.write("  category_feeds: true\n")
                    f.write("  feed: true\n\n")
                    f.write("# Feeds (each format needs a templates/feeds/<format> template)\n")
                    f.write("feed_formats:\n")
                    f.write("  - atom\n\n")
                    f.write("# Category display names\n")
                    f.write("category_names:\n")
                    f.write("  python: Python\n\n")
                    f.write("# Assets\n")
                    f.write("minify: false\n")
                elif file_format == 'json':
                    json.dump(sample_config, f, indent=2)
                else:
                    raise ValueError(f"Unsupported config file format: {file_format}")
        except PermissionError:
            raise PermissionError(f"Permission denied creating configuration file: {config_path}")
        except (IOError, OSError) as e:
            raise IOError(f"Error writing configuration file {config_path}: {e}")

        return config_path

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.

        Args:
            args_dict: Dictionary of command-line arguments

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(self.settings)

        # Override with non-None command line arguments
        for key, value in args_dict.items():
            if value is None:
                continue
            if key in self.ARG_PATHS:
                section, name = self.ARG_PATHS[key]
                merged.setdefault(section, {})[name] = value
            elif key == 'feed_formats' and isinstance(value, str):
                # Convert comma-separated string to list
                merged[key] = [fmt.strip() for fmt in value.split(',') if fmt.strip()]
            else:
                merged[key] = value

        return normalize_settings(merged)


def normalize_settings(settings: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in missing defaults and coerce values the build relies on."""
    resolved = deep_merge(AlmanacSettings.DEFAULT_SETTINGS, settings)

    try:
        per_page = int(resolved['pagination']['per_page'])
    except (TypeError, ValueError):
        raise ValueError(f"pagination.per_page must be an integer, got {resolved['pagination']['per_page']!r}")
    resolved['pagination']['per_page'] = max(1, per_page)

    try:
        resolved['feed_limit'] = max(1, int(resolved['feed_limit']))
    except (TypeError, ValueError):
        raise ValueError(f"feed_limit must be an integer, got {resolved['feed_limit']!r}")

    if isinstance(resolved['feed_formats'], str):
        resolved['feed_formats'] = [resolved['feed_formats']]
    if resolved['category_names'] is None:
        resolved['category_names'] = {}

    return resolved
