"""
Bitmap / Indexed Decoder.

Unpacks scanlines produced by the platform bitmap decoder into the canonical
sample buffer. Supports truecolor rasters (24 and 32 bits per pixel, stored
blue-green-red) and palette-indexed rasters (8 and 4 bits per pixel).

Indexed images whose whole palette is gray (R == G == B for every entry)
decode to one channel per pixel; any other palette decodes to R, G, B.

Functions:
    is_gray_palette: Classify a palette as gray or color
    unpack_indices: Extract palette indices from indexed scanlines
    decode_raster: Decode a RasterSource into DecodedSamples
"""

from typing import List, Sequence

from IV_Libs.constants import (
    COLOR_CHANNELS,
    GRAY_CHANNELS,
    PIXEL_FORMAT_INDEXED_4,
    PIXEL_FORMAT_INDEXED_8,
    PIXEL_FORMAT_TRUECOLOR_24,
    PIXEL_FORMAT_TRUECOLOR_32,
)
from IV_Libs.ImageDataLib.errors import FormatError, TruncatedData, UnsupportedPixelFormat
from IV_Libs.ImageDataLib.image_models import (
    DecodedSamples,
    PaletteEntry,
    RasterSource,
    compute_min_max,
)

# Bytes per pixel for truecolor formats
_TRUECOLOR_BYTES = {
    PIXEL_FORMAT_TRUECOLOR_24: 3,
    PIXEL_FORMAT_TRUECOLOR_32: 4,
}


def is_gray_palette(palette: Sequence[PaletteEntry]) -> bool:
    """
    Check whether every palette entry is a gray level.

    The whole palette is inspected, including entries no pixel refers to.

    Args:
        palette: Sequence of (R, G, B) tuples

    Returns:
        True if R == G == B holds for every entry
    """
    for red, green, blue in palette:
        if red != green or green != blue:
            return False
    return True


def _packed_row_bytes(raster: RasterSource) -> int:
    """Bytes one row occupies before alignment padding."""
    if raster.pixel_format in _TRUECOLOR_BYTES:
        return raster.width * _TRUECOLOR_BYTES[raster.pixel_format]
    if raster.pixel_format == PIXEL_FORMAT_INDEXED_8:
        return raster.width
    # indexed-4: two pixels per byte, last byte may be half used
    return (raster.width + 1) // 2


def _check_layout(raster: RasterSource) -> None:
    if raster.width < 0 or raster.height < 0:
        raise FormatError(f"Invalid raster dimensions {raster.width}x{raster.height}")

    row_bytes = _packed_row_bytes(raster)
    if raster.stride < row_bytes:
        raise FormatError(
            f"Stride {raster.stride} is smaller than the packed row size {row_bytes}"
        )

    if raster.height == 0:
        return

    needed = raster.stride * (raster.height - 1) + row_bytes
    if len(raster.data) < needed:
        raise TruncatedData(
            f"Raster {raster.width}x{raster.height} with stride {raster.stride} "
            f"needs {needed} bytes, got {len(raster.data)}"
        )


def _decode_truecolor(raster: RasterSource) -> List[int]:
    bytes_per_pixel = _TRUECOLOR_BYTES[raster.pixel_format]
    data = raster.data
    samples: List[int] = []

    for y in range(raster.height):
        p = y * raster.stride
        for _ in range(raster.width):
            # scanlines store blue, green, red (then alpha/unused for 32-bit)
            samples.append(data[p + 2])
            samples.append(data[p + 1])
            samples.append(data[p])
            p += bytes_per_pixel

    return samples


def unpack_indices(raster: RasterSource) -> List[int]:
    """
    Extract one palette index per pixel from indexed scanlines.

    For 4 bits per pixel the high nibble comes first. When the width is
    odd the low nibble of each row's last byte is discarded. Row padding
    (stride minus packed row size) is skipped.

    Args:
        raster: An indexed-8 or indexed-4 raster

    Returns:
        Row-major list of width * height indices

    Raises:
        UnsupportedPixelFormat: If the raster is not indexed
    """
    data = raster.data
    indices: List[int] = []

    if raster.pixel_format == PIXEL_FORMAT_INDEXED_8:
        for y in range(raster.height):
            start = y * raster.stride
            indices.extend(data[start:start + raster.width])
        return indices

    if raster.pixel_format == PIXEL_FORMAT_INDEXED_4:
        for y in range(raster.height):
            p = y * raster.stride
            x = 0
            while x < raster.width:
                value = data[p]
                indices.append(value >> 4)
                x += 1
                if x >= raster.width:
                    break
                indices.append(value & 0x0F)
                x += 1
                p += 1
        return indices

    raise UnsupportedPixelFormat(raster.pixel_format, f"Not an indexed pixel format: {raster.pixel_format}")


def _decode_indexed(raster: RasterSource) -> DecodedSamples:
    palette = raster.palette
    if not palette:
        raise FormatError(f"Indexed raster ({raster.pixel_format}) has no palette")

    indices = unpack_indices(raster)
    gray = is_gray_palette(palette)
    palette_size = len(palette)

    samples: List[int] = []
    for i, index in enumerate(indices):
        if index >= palette_size:
            row, col = divmod(i, raster.width)
            raise FormatError(
                f"Palette index {index} at row {row}, column {col} "
                f"exceeds palette size {palette_size}"
            )
        red, green, blue = palette[index]
        if gray:
            samples.append(red)
        else:
            samples.append(red)
            samples.append(green)
            samples.append(blue)

    min_value, max_value = compute_min_max(samples)
    return DecodedSamples(
        width=raster.width,
        height=raster.height,
        channels=GRAY_CHANNELS if gray else COLOR_CHANNELS,
        samples=samples,
        min_value=min_value,
        max_value=max_value,
    )


def decode_raster(raster: RasterSource) -> DecodedSamples:
    """
    Decode platform scanlines into the canonical sample buffer.

    Args:
        raster: Scanlines, dimensions, stride, pixel-format tag and palette

    Returns:
        DecodedSamples with 3 channels for truecolor and color palettes,
        1 channel for gray palettes

    Raises:
        UnsupportedPixelFormat: If the pixel-format tag is not handled
        FormatError: If the stride is too small, the palette is missing,
                     or a pixel refers past the end of the palette
        TruncatedData: If the scanline buffer is shorter than declared
    """
    if raster.pixel_format in _TRUECOLOR_BYTES:
        _check_layout(raster)
        samples = _decode_truecolor(raster)
        min_value, max_value = compute_min_max(samples)
        return DecodedSamples(
            width=raster.width,
            height=raster.height,
            channels=COLOR_CHANNELS,
            samples=samples,
            min_value=min_value,
            max_value=max_value,
        )

    if raster.pixel_format in (PIXEL_FORMAT_INDEXED_8, PIXEL_FORMAT_INDEXED_4):
        _check_layout(raster)
        return _decode_indexed(raster)

    raise UnsupportedPixelFormat(raster.pixel_format)
