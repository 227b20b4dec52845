"""
ImageDataLib - Canonical image data model

This module provides the record type every decoder produces, the decode
error taxonomy and the elapsed-time utility.
"""

from IV_Libs.ImageDataLib.image_models import (
    DecodedSamples,
    ImageRecord,
    PaletteEntry,
    RasterSource,
    compute_min_max,
)
from IV_Libs.ImageDataLib.errors import (
    DecodeError,
    FormatError,
    IncompleteContainer,
    TruncatedData,
    UnsupportedPixelFormat,
)
from IV_Libs.ImageDataLib.timer import Timer

__all__ = [
    "DecodedSamples",
    "ImageRecord",
    "PaletteEntry",
    "RasterSource",
    "compute_min_max",
    "DecodeError",
    "FormatError",
    "IncompleteContainer",
    "TruncatedData",
    "UnsupportedPixelFormat",
    "Timer",
]
