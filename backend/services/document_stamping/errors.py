"""
Stamping Errors
===============
Structural failures abort a call and propagate to the caller.
Cosmetic failures (images) are values, see document.ImageEmbedFailure.
"""


class StampingError(Exception):
    """Base class for every error raised by the stamping engine."""


class CorruptDocument(StampingError):
    """Source bytes are not a parseable document."""


class AssetUnavailable(StampingError):
    """A remote or local asset could not be obtained."""


class AssetFetchTimeout(AssetUnavailable):
    """An asset fetch exceeded its time budget."""


class FontUnavailable(AssetUnavailable):
    """The Thai text font could not be loaded; nothing can be rendered."""


class FontFetchTimeout(FontUnavailable, AssetFetchTimeout):
    """The font fetch timed out."""
