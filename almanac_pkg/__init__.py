"""
Almanac - A static site build pipeline.

Almanac reads posts, pages and Jinja2 templates from a source tree, indexes
posts by date and category, and writes rendered posts, pages, paginated
archive and category listings, and syndication feeds to an output directory.
"""

__version__ = "1.0.0"

from .core import Almanac
from .errors import (
    AlmanacError,
    AssetCopyError,
    ConfigurationError,
    ContentError,
    DirectoryPreparationError,
    HookError,
    RenderError,
    TemplateNotFoundError,
    WriteError,
)
from .settings import AlmanacSettings

__all__ = [
    'Almanac',
    'AlmanacSettings',
    'AlmanacError',
    'AssetCopyError',
    'ConfigurationError',
    'ContentError',
    'DirectoryPreparationError',
    'HookError',
    'RenderError',
    'TemplateNotFoundError',
    'WriteError',
]
