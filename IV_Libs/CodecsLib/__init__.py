"""
CodecsLib - File format codecs

This module provides the bitmap/indexed decoder, the portable anymap
(PNM/PGM/PPM) codec, the RIFF wave codec and the Pillow adapter used for
the common photographic formats.
"""

from IV_Libs.CodecsLib.bitmap_decoder import decode_raster, is_gray_palette, unpack_indices
from IV_Libs.CodecsLib.pnm_codec import (
    read_pnm_file,
    read_binary_pgm16,
    read_binary_pgm32,
    write_ascii_pnm,
    write_binary_pnm8,
    write_binary_pgm16,
    write_binary_pgm32,
)
from IV_Libs.CodecsLib.wav_codec import read_wav_file, select_sample_width, write_wav
from IV_Libs.CodecsLib.pil_codec import decode_bitmap_file, encode_bitmap_file, raster_from_image

__all__ = [
    "decode_raster",
    "is_gray_palette",
    "unpack_indices",
    "read_pnm_file",
    "read_binary_pgm16",
    "read_binary_pgm32",
    "write_ascii_pnm",
    "write_binary_pnm8",
    "write_binary_pgm16",
    "write_binary_pgm32",
    "read_wav_file",
    "select_sample_width",
    "write_wav",
    "decode_bitmap_file",
    "encode_bitmap_file",
    "raster_from_image",
]
