"""
Portable Anymap Codec (PGM gray / PPM color, ascii and binary).

Reads the P2 (ascii gray), P3 (ascii color), P5 (binary gray) and P6
(binary color) formats and writes them back. A header is:

    P2                 magic token
    # comment          any number of comment lines before each stage
    w h                width and height
    maxval             read but never used to rescale samples

Ascii payloads are runs of decimal digits separated by anything else.
Binary payloads are taken as the final w * h * channels bytes of the file;
every byte before that offset is treated as header. Samples are returned
exactly as stored: a maxval above 255 only produces an advisory warning.

Also provides the non-standard 16-bit and 32-bit gray binary variants,
which store native-width words with no byte-order conversion.

Functions:
    parse_header: Parse magic, dimensions and maxval from file bytes
    read_pnm_file: Decode a P2/P3/P5/P6 file
    read_binary_pgm16 / read_binary_pgm32: Decode non-standard wide gray files
    write_ascii_pnm: Write a P2/P3 file
    write_binary_pnm8: Write a P5/P6 file with one byte per sample
    write_binary_pgm16 / write_binary_pgm32: Write non-standard wide gray files
"""

import re
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np

from IV_Libs.constants import (
    COLOR_CHANNELS,
    GRAY_CHANNELS,
    NOMINAL_MAX,
    NOMINAL_MIN,
    PNM_ASCII_COLOR,
    PNM_ASCII_COMMENT,
    PNM_ASCII_GRAY,
    PNM_BINARY16_COMMENT,
    PNM_BINARY32_COMMENT,
    PNM_BINARY8_COMMENT,
    PNM_BINARY_COLOR,
    PNM_BINARY_GRAY,
    PNM_COMMENT_PREFIX,
    PNM_DEFAULT_MAXVAL,
    PNM_MAGIC_TOKENS,
    PNM_VALUES_PER_LINE,
)
from IV_Libs.ImageDataLib.errors import FormatError, TruncatedData
from IV_Libs.ImageDataLib.image_models import DecodedSamples, compute_min_max

_DIGIT_RUN = re.compile(rb"\d+")

_CHANNELS_BY_MAGIC = {
    PNM_ASCII_GRAY: GRAY_CHANNELS,
    PNM_ASCII_COLOR: COLOR_CHANNELS,
    PNM_BINARY_GRAY: GRAY_CHANNELS,
    PNM_BINARY_COLOR: COLOR_CHANNELS,
}


@dataclass
class PnmHeader:
    """Parsed anymap header.

    Attributes:
        magic: 'P2', 'P3', 'P5' or 'P6'
        width: Image width
        height: Image height
        maxval: Declared maximum value, None if the line was unreadable
        header_end: Offset of the first byte after the maxval line
    """
    magic: str
    width: int
    height: int
    maxval: Optional[int]
    header_end: int

    @property
    def channels(self) -> int:
        return _CHANNELS_BY_MAGIC[self.magic]

    @property
    def is_binary(self) -> bool:
        return self.magic in (PNM_BINARY_GRAY, PNM_BINARY_COLOR)

    @property
    def sample_count(self) -> int:
        return self.width * self.height * self.channels


def _read_line(data: bytes, pos: int, stage: str) -> Tuple[str, int]:
    """Return the line starting at `pos` (without line end) and the next offset."""
    if pos >= len(data):
        raise TruncatedData(f"File ended while reading the PNM {stage}")
    end = data.find(b"\n", pos)
    if end == -1:
        return data[pos:].decode("latin-1").rstrip("\r"), len(data)
    return data[pos:end].decode("latin-1").rstrip("\r"), end + 1


def _read_stage(data: bytes, pos: int, stage: str) -> Tuple[str, int]:
    """Skip comment lines, then return the next line of the header."""
    line, pos = _read_line(data, pos, stage)
    while line.startswith(PNM_COMMENT_PREFIX):
        line, pos = _read_line(data, pos, stage)
    return line, pos


def parse_header(data: bytes) -> PnmHeader:
    """
    Parse the header stages (magic, dimensions, maxval) of an anymap file.

    Args:
        data: Complete file contents

    Returns:
        PnmHeader

    Raises:
        FormatError: If the magic token or the dimensions line is invalid
        TruncatedData: If the file ends inside the header
    """
    line, pos = _read_stage(data, 0, "magic token")
    magic = line.strip()
    if magic not in PNM_MAGIC_TOKENS:
        raise FormatError(f"Unknown PNM magic token: {magic!r}")

    line, pos = _read_stage(data, pos, "dimensions")
    parts = line.split()
    if len(parts) != 2 or not all(part.isdecimal() for part in parts):
        raise FormatError(f"Expected 'width height' in PNM header, got {line!r}")
    width, height = int(parts[0]), int(parts[1])

    line, pos = _read_stage(data, pos, "maxval")
    token = line.strip()
    maxval = int(token) if token.isdecimal() else None

    return PnmHeader(magic=magic, width=width, height=height, maxval=maxval, header_end=pos)


def _header_warnings(header: PnmHeader) -> List[str]:
    if header.maxval is None:
        return ["PNM maxval line is not a number; it was ignored"]
    if header.maxval > NOMINAL_MAX:
        return [
            f"Declared maxval {header.maxval} exceeds {NOMINAL_MAX}; "
            f"samples are not rescaled"
        ]
    return []


def _read_ascii_samples(data: bytes, header: PnmHeader) -> List[int]:
    count = header.sample_count
    tokens = islice(_DIGIT_RUN.finditer(data, header.header_end), count)
    samples = [int(match.group()) for match in tokens]
    if len(samples) < count:
        raise TruncatedData(
            f"PNM {header.magic} declares {count} values, found only {len(samples)}"
        )
    return samples


def _payload_from_end(data: bytes, header: PnmHeader, byte_count: int) -> bytes:
    """
    Return the final `byte_count` bytes of the file.

    Everything before the computed offset is header. The payload must not
    reach back into the lines already parsed as header.
    """
    offset = len(data) - byte_count
    if offset < header.header_end:
        raise TruncatedData(
            f"PNM {header.magic} {header.width}x{header.height} needs {byte_count} payload bytes, "
            f"only {max(0, len(data) - header.header_end)} follow the header"
        )
    return data[offset:]


def _read_file(path: Path) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def read_pnm_file(path: Path) -> DecodedSamples:
    """
    Decode a P2, P3, P5 or P6 file.

    Args:
        path: Path to the anymap file

    Returns:
        DecodedSamples with 1 channel (P2/P5) or 3 channels (P3/P6)

    Raises:
        FormatError: If the header is malformed
        TruncatedData: If fewer samples are present than declared
    """
    data = _read_file(Path(path))
    header = parse_header(data)

    if header.is_binary:
        samples = list(_payload_from_end(data, header, header.sample_count))
    else:
        samples = _read_ascii_samples(data, header)

    min_value, max_value = compute_min_max(samples)
    return DecodedSamples(
        width=header.width,
        height=header.height,
        channels=header.channels,
        samples=samples,
        min_value=min_value,
        max_value=max_value,
        warnings=_header_warnings(header),
    )


def _read_wide_gray(path: Path, dtype) -> DecodedSamples:
    data = _read_file(Path(path))
    header = parse_header(data)
    if header.magic != PNM_BINARY_GRAY:
        raise FormatError(f"Wide gray PNM must use {PNM_BINARY_GRAY}, got {header.magic}")

    count = header.width * header.height
    item_size = np.dtype(dtype).itemsize
    payload = _payload_from_end(data, header, count * item_size)
    samples = np.frombuffer(payload, dtype=dtype).tolist()

    min_value, max_value = compute_min_max(samples)
    return DecodedSamples(
        width=header.width,
        height=header.height,
        channels=GRAY_CHANNELS,
        samples=samples,
        min_value=min_value,
        max_value=max_value,
    )


def read_binary_pgm16(path: Path) -> DecodedSamples:
    """Decode a non-standard P5 file holding native-order signed 16-bit samples."""
    return _read_wide_gray(path, np.int16)


def read_binary_pgm32(path: Path) -> DecodedSamples:
    """Decode a non-standard P5 file holding native-order signed 32-bit samples."""
    return _read_wide_gray(path, np.int32)


# ============================================================================
# Writers
# ============================================================================

def _check_buffer(samples: Sequence[int], width: int, height: int, channels: int) -> None:
    if channels not in (GRAY_CHANNELS, COLOR_CHANNELS):
        raise ValueError(f"samples per pixel must be 1 or 3, got {channels}")
    expected = width * height * channels
    if len(samples) != expected:
        raise ValueError(f"Sample buffer holds {len(samples)} values, expected {expected}")


def header_maxval(samples: Sequence[int]) -> int:
    """
    Maxval written to headers: the buffer maximum, or 255 when that is not positive.
    """
    maxval = max(samples) if len(samples) else 0
    if maxval <= 0:
        maxval = PNM_DEFAULT_MAXVAL
    return maxval


def format_ascii_samples(samples: Sequence[int]) -> str:
    """
    Lay out ascii sample values.

    Values are separated by single spaces; a line break follows every
    value whose index is a positive multiple of 10. The text ends with a
    line break.
    """
    parts = []
    for i, value in enumerate(samples):
        parts.append(str(value))
        if i > 0 and i % PNM_VALUES_PER_LINE == 0:
            parts.append("\n")
        else:
            parts.append(" ")
    text = "".join(parts)
    if text:
        text = text[:-1] + "\n"
    return text


def write_ascii_pnm(path: Path, samples: Sequence[int], width: int, height: int, channels: int) -> None:
    """
    Write a P2 (gray) or P3 (color) ascii file.

    Args:
        path: Destination file
        samples: Row-major, channel-interleaved buffer
        width: Image width
        height: Image height
        channels: 1 or 3

    Raises:
        ValueError: If the buffer does not match the dimensions
        OSError: If the file cannot be written
    """
    _check_buffer(samples, width, height, channels)
    magic = PNM_ASCII_GRAY if channels == GRAY_CHANNELS else PNM_ASCII_COLOR

    text = (
        f"{magic}\n"
        f"{PNM_ASCII_COMMENT}\n"
        f"{width} {height}\n"
        f"{header_maxval(samples)}\n"
        f"{format_ascii_samples(samples)}"
    )
    with open(Path(path), "wb") as f:
        f.write(text.encode("ascii"))


def _binary_header(magic: str, comment: str, width: int, height: int, maxval: int) -> bytes:
    # Some tools are picky about line ends: CR LF for every line but the last
    return f"{magic}\r\n{comment}\r\n{width} {height}\r\n{maxval}\n".encode("ascii")


def _clamp_byte(value: int) -> int:
    if value < NOMINAL_MIN:
        return NOMINAL_MIN
    if value > NOMINAL_MAX:
        return NOMINAL_MAX
    return value


def write_binary_pnm8(path: Path, samples: Sequence[int], width: int, height: int, channels: int) -> None:
    """
    Write a P5 (gray) or P6 (color) file with one byte per sample.

    Samples outside 0..255 are clamped; the maxval line is computed over
    the clamped values.

    Raises:
        ValueError: If the buffer does not match the dimensions
        OSError: If the file cannot be written
    """
    _check_buffer(samples, width, height, channels)
    magic = PNM_BINARY_GRAY if channels == GRAY_CHANNELS else PNM_BINARY_COLOR

    payload = bytes(_clamp_byte(value) for value in samples)
    header = _binary_header(magic, PNM_BINARY8_COMMENT, width, height, header_maxval(payload))
    with open(Path(path), "wb") as f:
        f.write(header)
        f.write(payload)


def _write_wide_gray(path: Path, samples: Sequence[int], width: int, height: int, dtype, comment: str) -> None:
    _check_buffer(samples, width, height, GRAY_CHANNELS)
    info = np.iinfo(dtype)
    words = np.clip(np.asarray(samples, dtype=np.int64), info.min, info.max).astype(dtype)
    header = _binary_header(
        PNM_BINARY_GRAY, comment, width, height, header_maxval(words.tolist())
    )
    with open(Path(path), "wb") as f:
        f.write(header)
        f.write(words.tobytes())


def write_binary_pgm16(path: Path, samples: Sequence[int], width: int, height: int) -> None:
    """Write a non-standard P5 gray file with native-order signed 16-bit samples."""
    _write_wide_gray(path, samples, width, height, np.int16, PNM_BINARY16_COMMENT)


def write_binary_pgm32(path: Path, samples: Sequence[int], width: int, height: int) -> None:
    """Write a non-standard P5 gray file with native-order signed 32-bit samples."""
    _write_wide_gray(path, samples, width, height, np.int32, PNM_BINARY32_COMMENT)
