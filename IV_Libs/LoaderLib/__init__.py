"""
LoaderLib - Loading and saving by file suffix

This module maps file suffixes to codecs, loads files into canonical
records and saves records back to disk.
"""

from IV_Libs.LoaderLib.codec_registry import (
    CodecRegistry,
    get_default_registry,
    register_default_codecs,
)
from IV_Libs.LoaderLib.loader import load, nominal_range_warnings
from IV_Libs.LoaderLib.serializer import SaveOptions, save

__all__ = [
    "CodecRegistry",
    "get_default_registry",
    "register_default_codecs",
    "load",
    "nominal_range_warnings",
    "SaveOptions",
    "save",
]
