"""
Error kinds raised and recorded while building an Almanac site.

Only DirectoryPreparationError is fatal. Everything else is collected on the
build's error list so that a single broken post never stops the whole site.
"""


class AlmanacError(Exception):
    """Base class for all Almanac build errors."""


class DirectoryPreparationError(AlmanacError):
    """The output directory could not be cleared or created."""


class TemplateNotFoundError(AlmanacError):
    """A pagination scope asked for a layout that is not registered."""

    def __init__(self, layout, scope=None):
        self.layout = layout
        self.scope = scope
        message = f"'{layout}' template not found"
        if scope:
            message += f" for {scope}"
        super().__init__(message)


class RenderError(AlmanacError):
    """A content item failed to render through its layout chain."""


class WriteError(AlmanacError):
    """Rendered output could not be persisted."""


class AssetCopyError(AlmanacError):
    """Public assets could not be copied into the output directory."""


class ContentError(AlmanacError):
    """A source file could not be read or lacks required metadata."""


class ConfigurationError(AlmanacError):
    """The resolved configuration is unusable."""


class HookError(AlmanacError):
    """A registered before/after write callback raised."""
