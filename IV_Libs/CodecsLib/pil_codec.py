"""
Platform bitmap codec backed by Pillow.

Pillow decodes the common photographic formats (PNG, JPEG, GIF, BMP, TIFF,
...). This module turns a decoded Pillow image into a RasterSource in the
layout the bitmap decoder expects (blue-green-red truecolor, 8-bit palette
indices, rows padded to 4 bytes) and, for saving, turns a sample buffer
back into a Pillow image.

Functions:
    pixel_format_for_mode: Map a Pillow mode to a pixel-format tag
    raster_from_image: Build a RasterSource from a Pillow image
    decode_bitmap_file: Open a file with Pillow and decode it
    image_from_samples: Build a Pillow image from a sample buffer
    encode_bitmap_file: Save a sample buffer through Pillow
"""

from pathlib import Path
from typing import List, Optional, Sequence

from IV_Libs.constants import (
    COLOR_CHANNELS,
    GRAY_CHANNELS,
    NOMINAL_MAX,
    NOMINAL_MIN,
    PIXEL_FORMAT_INDEXED_8,
    PIXEL_FORMAT_TRUECOLOR_24,
    PIXEL_FORMAT_TRUECOLOR_32,
    ROW_ALIGNMENT,
)
from IV_Libs.CodecsLib.bitmap_decoder import decode_raster
from IV_Libs.ImageDataLib.errors import FormatError, TruncatedData, UnsupportedPixelFormat
from IV_Libs.ImageDataLib.image_models import DecodedSamples, PaletteEntry, RasterSource
from IV_Libs.pillow_compat import Image, ImageClass, UnidentifiedImageError

# Pillow modes and the pixel-format tag (plus scanline rawmode) they map to
_MODE_FORMATS = {
    "RGB": (PIXEL_FORMAT_TRUECOLOR_24, "BGR"),
    "RGBA": (PIXEL_FORMAT_TRUECOLOR_32, "BGRA"),
    "P": (PIXEL_FORMAT_INDEXED_8, "P"),
    "L": (PIXEL_FORMAT_INDEXED_8, "L"),
}

# Names reported for Pillow modes the decoder does not handle
_UNSUPPORTED_MODE_NAMES = {
    "1": "1bpp-indexed",
    "I;16": "16bpp-grayscale",
    "I;16L": "16bpp-grayscale",
    "I;16B": "16bpp-grayscale",
    "I;16N": "16bpp-grayscale",
    "I": "32bpp-integer-grayscale",
    "F": "32bpp-float-grayscale",
    "LA": "gray-alpha",
    "La": "gray-alpha",
    "PA": "indexed-alpha",
    "RGBa": "premultiplied-argb",
    "CMYK": "cmyk",
    "YCbCr": "ycbcr",
    "LAB": "lab",
    "HSV": "hsv",
}

_GRAY_RAMP: List[PaletteEntry] = [(level, level, level) for level in range(256)]


def pixel_format_for_mode(mode: str) -> str:
    """
    Map a Pillow image mode to the pixel-format tag of the bitmap decoder.

    RGBX images are treated like RGBA (the fourth byte is ignored).

    Raises:
        UnsupportedPixelFormat: Naming the variant for unhandled modes
    """
    if mode == "RGBX":
        return PIXEL_FORMAT_TRUECOLOR_32
    if mode in _MODE_FORMATS:
        return _MODE_FORMATS[mode][0]
    variant = _UNSUPPORTED_MODE_NAMES.get(mode, f"pillow-mode-{mode}")
    raise UnsupportedPixelFormat(variant, f"Unsupported pixel format: {variant} (Pillow mode {mode!r})")


def _aligned_stride(row_bytes: int) -> int:
    return (row_bytes + ROW_ALIGNMENT - 1) // ROW_ALIGNMENT * ROW_ALIGNMENT


def _pad_rows(tight: bytes, row_bytes: int, height: int, stride: int) -> bytes:
    """Re-lay tightly packed rows with trailing padding up to `stride`."""
    if stride == row_bytes:
        return tight
    padding = bytes(stride - row_bytes)
    padded = bytearray()
    for y in range(height):
        padded += tight[y * row_bytes:(y + 1) * row_bytes]
        padded += padding
    return bytes(padded)


def _palette_entries(image: ImageClass) -> Optional[List[PaletteEntry]]:
    flat = image.getpalette()
    if not flat:
        return None
    return [tuple(flat[i:i + 3]) for i in range(0, len(flat) - len(flat) % 3, 3)]


def raster_from_image(image: ImageClass) -> RasterSource:
    """
    Build platform scanlines from a loaded Pillow image.

    Args:
        image: PIL Image in RGB, RGBA, RGBX, P or L mode

    Returns:
        RasterSource with 4-byte aligned rows

    Raises:
        UnsupportedPixelFormat: If the image mode is not handled
    """
    pixel_format = pixel_format_for_mode(image.mode)

    if image.mode == "RGBX":
        image = image.convert("RGBA")

    rawmode = _MODE_FORMATS[image.mode][1]
    width, height = image.size
    if pixel_format == PIXEL_FORMAT_TRUECOLOR_24:
        row_bytes = width * 3
    elif pixel_format == PIXEL_FORMAT_TRUECOLOR_32:
        row_bytes = width * 4
    else:
        row_bytes = width

    tight = image.tobytes("raw", rawmode) if width and height else b""
    stride = _aligned_stride(row_bytes)

    palette = None
    if image.mode == "P":
        palette = _palette_entries(image)
    elif image.mode == "L":
        palette = list(_GRAY_RAMP)

    return RasterSource(
        data=_pad_rows(tight, row_bytes, height, stride),
        width=width,
        height=height,
        stride=stride,
        pixel_format=pixel_format,
        palette=palette,
    )


def decode_bitmap_file(path: Path) -> DecodedSamples:
    """
    Decode an image file through Pillow and the bitmap decoder.

    Only the first frame of animated images is decoded.

    Args:
        path: Path to a PNG, JPEG, GIF, BMP, TIFF, ... file

    Returns:
        DecodedSamples (1 channel for gray palettes, 3 otherwise)

    Raises:
        FileNotFoundError: If the file does not exist
        FormatError: If Pillow does not recognize the file
        TruncatedData: If Pillow fails while reading the pixel data
        UnsupportedPixelFormat: If the image mode is not handled
    """
    path = Path(path)
    try:
        image = Image.open(path)
    except UnidentifiedImageError as exc:
        raise FormatError(f"Not a recognized image file: {path}") from exc

    with image:
        try:
            image.load()
        except OSError as exc:
            raise TruncatedData(f"Failed to read pixel data from {path}: {exc}") from exc
        raster = raster_from_image(image)

    return decode_raster(raster)


def _clamp(value: int) -> int:
    if value < NOMINAL_MIN:
        return NOMINAL_MIN
    if value > NOMINAL_MAX:
        return NOMINAL_MAX
    return value


def image_from_samples(samples: Sequence[int], width: int, height: int, channels: int) -> ImageClass:
    """
    Build a Pillow image from a sample buffer, clamping values to 0..255.

    Args:
        samples: Row-major, channel-interleaved buffer
        width: Image width
        height: Image height
        channels: 1 (mode L) or 3 (mode RGB)

    Returns:
        PIL Image
    """
    if channels == GRAY_CHANNELS:
        mode = "L"
    elif channels == COLOR_CHANNELS:
        mode = "RGB"
    else:
        raise ValueError(f"channels must be 1 or 3, got {channels}")

    expected = width * height * channels
    if len(samples) != expected:
        raise ValueError(f"Sample buffer holds {len(samples)} values, expected {expected}")

    data = bytes(_clamp(value) for value in samples)
    return Image.frombytes(mode, (width, height), data)


def encode_bitmap_file(path: Path, samples: Sequence[int], width: int, height: int, channels: int) -> None:
    """
    Save a sample buffer through Pillow. The format follows the file suffix.

    Raises:
        ValueError: If Pillow does not know the suffix
        OSError: If the file cannot be written
    """
    image = image_from_samples(samples, width, height, channels)
    image.save(Path(path))
