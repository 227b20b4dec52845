"""
Compatibility wrapper around Pillow, the platform bitmap codec.

Pillow provides the `PIL` namespace. This module loads the Pillow modules the
data layer needs through importlib and re-exports them, so codec modules import
`Image` from one place and a missing Pillow install is reported once with an
actionable message.
"""
from importlib import import_module
from types import ModuleType
from typing import Optional


def _import(name: str) -> Optional[ModuleType]:
    try:
        return import_module(name)
    except ImportError:
        return None


_pil_image = _import("PIL.Image")

if _pil_image is None:
    raise ImportError("pillow (PIL) is required: install with 'pip install Pillow'")

Image = _pil_image

# Raised by Image.open() when no plugin recognizes the file
UnidentifiedImageError = getattr(_pil_image, "UnidentifiedImageError", OSError)

# Helper for type hints referencing PIL.Image.Image
ImageClass = getattr(_pil_image, "Image")
