"""
Decode error taxonomy for the Image Viewer data layer.

Every decoder raises one of these; a failure aborts the whole load and no
partial record is returned. All of them derive from ValueError so callers
that only care about "bad input" can catch the built-in type.

Classes:
    DecodeError: Base class for every decode failure
    FormatError: Malformed content (bad magic, bad header, bad palette index)
    UnsupportedPixelFormat: Recognized but unhandled pixel or sample encoding
    TruncatedData: Declared sizes exceed the bytes actually available
    IncompleteContainer: RIFF container without a 'fmt ' or 'data' chunk
"""

from typing import Optional


class DecodeError(ValueError):
    """Base class for failures while turning a file into a record."""


class FormatError(DecodeError):
    """The file content does not follow the expected layout."""


class UnsupportedPixelFormat(DecodeError):
    """A known encoding that the decoders do not handle.

    Attributes:
        variant: Name of the specific pixel format or sample encoding
    """

    def __init__(self, variant: str, message: Optional[str] = None):
        self.variant = variant
        super().__init__(message or f"Unsupported pixel format: {variant}")


class TruncatedData(DecodeError):
    """Declared size or dimensions exceed the available bytes."""


class IncompleteContainer(DecodeError):
    """A RIFF container is missing its 'fmt ' or 'data' chunk."""
