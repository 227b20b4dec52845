"""
Image data models for the Image Viewer data layer.

This module defines the canonical in-memory representation of one decoded
asset and the small structures the codecs exchange.

Classes:
    DecodedSamples: What every decoder returns (dimensions, buffer, min/max)
    ImageRecord: Canonical record with original and working sample buffers
    RasterSource: Platform raster handed to the bitmap decoder

Type Aliases:
    PaletteEntry: An (R, G, B) tuple of 8-bit values

Functions:
    compute_min_max: Scan a sample buffer for its extremes
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from IV_Libs.constants import (
    COLOR_CHANNELS,
    DOMAIN_AUDIO,
    DOMAIN_IMAGE,
    GRAY_CHANNELS,
)

PaletteEntry = Tuple[int, int, int]


def compute_min_max(samples: Sequence[int]) -> Tuple[int, int]:
    """
    Return the (min, max) of a sample buffer.

    An empty buffer reports (0, 0).
    """
    if len(samples) == 0:
        return 0, 0
    return min(samples), max(samples)


@dataclass
class DecodedSamples:
    """Result of decoding one file.

    Attributes:
        width: Image width (channel count for audio)
        height: Image height (frame count for audio)
        channels: 1 for gray/audio, 3 for color
        samples: Flat row-major, channel-interleaved sample buffer
        min_value: Smallest decoded sample
        max_value: Largest decoded sample
        sample_rate: Audio sample rate in Hz, None for images
        warnings: Advisory messages that did not stop the decode
    """
    width: int
    height: int
    channels: int
    samples: List[int]
    min_value: int
    max_value: int
    sample_rate: Optional[int] = None
    warnings: List[str] = field(default_factory=list)


@dataclass
class RasterSource:
    """Scanline data produced by the platform bitmap decoder.

    Attributes:
        data: Raw scanlines, `stride` bytes per row, top row first
        width: Pixels per row
        height: Number of rows
        stride: Bytes per row including alignment padding
        pixel_format: One of the PIXEL_FORMAT_* tags in IV_Libs.constants
        palette: Color table for indexed formats
    """
    data: bytes
    width: int
    height: int
    stride: int
    pixel_format: str
    palette: Optional[List[PaletteEntry]] = None


@dataclass
class ImageRecord:
    """Canonical record for one decoded image or audio clip.

    `samples` holds the original decoded values. `working` is an optional
    copy that callers transform in place and then `commit()`. Audio records
    reuse the raster layout: width is the channel count, height the frame
    count.
    """
    width: int
    height: int
    channels: int
    samples: List[int]
    domain: str = DOMAIN_IMAGE
    sample_rate: Optional[int] = None
    min_value: int = 0
    max_value: int = 0
    modified: bool = False
    path: Optional[Path] = None
    working: Optional[List[int]] = None
    warnings: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate the buffer layout."""
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Dimensions must be >= 0, got {self.width}x{self.height}")

        if self.channels not in (GRAY_CHANNELS, COLOR_CHANNELS):
            raise ValueError(f"channels must be 1 or 3, got {self.channels}")

        if self.domain not in (DOMAIN_IMAGE, DOMAIN_AUDIO):
            raise ValueError(f"Unsupported domain: {self.domain}")

        expected = self.width * self.height * self.channels
        if len(self.samples) != expected:
            raise ValueError(
                f"Sample buffer holds {len(self.samples)} values, expected {expected} "
                f"({self.width}x{self.height}x{self.channels})"
            )

        if self.working is not None and len(self.working) != expected:
            raise ValueError(
                f"Working buffer holds {len(self.working)} values, expected {expected}"
            )

        if self.path is not None:
            self.path = Path(self.path)

    @classmethod
    def from_decoded(
        cls,
        decoded: DecodedSamples,
        path: Optional[Path] = None,
        domain: str = DOMAIN_IMAGE,
    ) -> "ImageRecord":
        """Build a record from a decoder result."""
        return cls(
            width=decoded.width,
            height=decoded.height,
            channels=decoded.channels,
            samples=decoded.samples,
            domain=domain,
            sample_rate=decoded.sample_rate,
            min_value=decoded.min_value,
            max_value=decoded.max_value,
            path=path,
            warnings=list(decoded.warnings),
        )

    @property
    def is_color(self) -> bool:
        return self.channels == COLOR_CHANNELS

    @property
    def is_audio(self) -> bool:
        return self.domain == DOMAIN_AUDIO

    def working_copy(self) -> List[int]:
        """
        Return the working buffer, cloning it from the original on first use.

        Returns:
            The mutable working buffer (same length and layout as `samples`)
        """
        if self.working is None:
            self.working = list(self.samples)
        return self.working

    def commit(self) -> None:
        """
        Promote the working buffer to canonical status.

        Copies the working buffer into `samples`, recomputes min/max and
        marks the record as modified. The working buffer is kept so that a
        multi-stage pipeline can continue from the committed values.

        Raises:
            ValueError: If there is no working buffer or its length changed
        """
        if self.working is None:
            raise ValueError("Nothing to commit: no working buffer")

        expected = self.width * self.height * self.channels
        if len(self.working) != expected:
            raise ValueError(
                f"Working buffer holds {len(self.working)} values, expected {expected}"
            )

        self.samples = list(self.working)
        self.min_value, self.max_value = compute_min_max(self.samples)
        self.modified = True

    def output_samples(self) -> List[int]:
        """Buffer to serialize: the working buffer if any, else the original."""
        if self.working is not None:
            return self.working
        return self.samples

    def get_sample(self, index: int) -> int:
        return self.samples[index]

    def _color_offset(self, row: int, col: int) -> int:
        if not self.is_color:
            raise ValueError("Color components requested from a gray record")
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"Pixel ({row}, {col}) outside {self.width}x{self.height}")
        return COLOR_CHANNELS * (row * self.width + col)

    def get_red(self, row: int, col: int) -> int:
        return self.samples[self._color_offset(row, col)]

    def get_green(self, row: int, col: int) -> int:
        return self.samples[self._color_offset(row, col) + 1]

    def get_blue(self, row: int, col: int) -> int:
        return self.samples[self._color_offset(row, col) + 2]
