from __future__ import annotations


class CustomizerError(Exception):
    """Base class for layout customization failures."""


class CapabilityUnavailableError(CustomizerError):
    """The pointer-interaction capability could not be acquired."""


class LayoutFormatError(CustomizerError, ValueError):
    """A persisted layout document does not have the expected shape."""
