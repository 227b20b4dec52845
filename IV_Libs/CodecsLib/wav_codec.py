"""
RIFF Wave Codec.

Walks a RIFF/WAVE container chunk by chunk and decodes its PCM payload into
the canonical sample buffer. Audio is laid out as a gray raster: one column
per channel and one row per frame, so width is the channel count and height
the number of frames. The sample rate travels separately.

Container layout:

    'RIFF' <u32 size> 'WAVE'
    <4-byte id> <u32 little-endian length> <payload>   repeated to end of file

Only the 'fmt ' and 'data' chunks are used. 'fact', 'LIST', 'INFO', 'PEAK',
'id3 ' and unknown chunks are skipped by their declared length.

Functions:
    iter_chunks: Walk the chunks following the RIFF header
    read_wav_file: Decode a WAV file
    decode_samples: Turn a 'data' payload into integers
    select_sample_width: Pick a bit depth for writing a sample buffer
    write_wav: Writer entry point (bit depth selection only)
"""

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from IV_Libs.constants import (
    CHUNK_DATA,
    CHUNK_FMT,
    CHUNK_HEADER_SIZE,
    FMT_CORE_SIZE,
    FMT_SUBFORMAT_OFFSET,
    GRAY_CHANNELS,
    KNOWN_SKIPPED_CHUNKS,
    RIFF_HEADER_SIZE,
    RIFF_TAG,
    WAVE_FORM,
    WAVE_FORMAT_EXTENSIBLE,
    WAVE_FORMAT_IEEE_FLOAT,
    WAVE_FORMAT_PCM,
)
from IV_Libs.ImageDataLib.errors import (
    FormatError,
    IncompleteContainer,
    TruncatedData,
    UnsupportedPixelFormat,
)
from IV_Libs.ImageDataLib.image_models import DecodedSamples, compute_min_max

logger = logging.getLogger(__name__)

_RIFF_HEADER = struct.Struct("<4sI4s")
_CHUNK_HEADER = struct.Struct("<4sI")
_FMT_CORE = struct.Struct("<HHIIHH")
_SUBFORMAT_TAG = struct.Struct("<H")

# numpy dtypes for the sample widths that map directly onto one
_PCM_DTYPES = {
    1: np.dtype(np.uint8),
    2: np.dtype("<i2"),
    4: np.dtype("<i4"),
}


@dataclass
class RiffChunk:
    """One chunk of a RIFF container.

    Attributes:
        chunk_id: Four-byte identifier, e.g. b'fmt '
        size: Declared payload length in bytes
        offset: File offset of the payload
    """
    chunk_id: bytes
    size: int
    offset: int


@dataclass
class WaveFormat:
    """Fields of a 'fmt ' chunk."""
    format_tag: int
    channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int

    @property
    def bytes_per_sample(self) -> int:
        return self.bits_per_sample // 8


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if len(data) < size:
        raise TruncatedData(f"{what} declares {size} bytes, only {len(data)} available")
    return data


def iter_chunks(stream: BinaryIO) -> Iterator[Tuple[RiffChunk, bytes]]:
    """
    Yield every chunk after the 12-byte RIFF header until end of stream.

    Each chunk's payload is read by its declared length, never more.

    Args:
        stream: Binary file object positioned just after the RIFF header

    Yields:
        (RiffChunk, payload bytes)

    Raises:
        TruncatedData: If a chunk header or payload is cut short
    """
    while True:
        header = stream.read(CHUNK_HEADER_SIZE)
        if not header:
            return
        if len(header) < CHUNK_HEADER_SIZE:
            raise TruncatedData(f"Incomplete chunk header ({len(header)} of {CHUNK_HEADER_SIZE} bytes)")

        chunk_id, size = _CHUNK_HEADER.unpack(header)
        chunk = RiffChunk(chunk_id=chunk_id, size=size, offset=stream.tell())
        payload = _read_exact(stream, size, f"Chunk {chunk_id!r}")
        yield chunk, payload


def parse_format_chunk(payload: bytes) -> WaveFormat:
    """
    Parse the 16 core bytes of a 'fmt ' chunk.

    For WAVE_FORMAT_EXTENSIBLE the first two bytes of the SubFormat GUID
    replace the format tag, so extensible PCM and float files decode like
    their plain counterparts. Any other extension bytes are ignored.

    Raises:
        FormatError: If the chunk is shorter than 16 bytes
    """
    if len(payload) < FMT_CORE_SIZE:
        raise FormatError(f"'fmt ' chunk is {len(payload)} bytes, expected at least {FMT_CORE_SIZE}")
    wave_format = WaveFormat(*_FMT_CORE.unpack_from(payload))

    if (wave_format.format_tag == WAVE_FORMAT_EXTENSIBLE
            and len(payload) >= FMT_SUBFORMAT_OFFSET + _SUBFORMAT_TAG.size):
        (wave_format.format_tag,) = _SUBFORMAT_TAG.unpack_from(payload, FMT_SUBFORMAT_OFFSET)
    return wave_format


def _decode_24bit(payload: bytes) -> np.ndarray:
    triples = np.frombuffer(payload, dtype=np.uint8).reshape(-1, 3).astype(np.int32)
    values = triples[:, 0] | (triples[:, 1] << 8) | (triples[:, 2] << 16)
    return np.where(values & 0x800000, values - (1 << 24), values)


def decode_samples(payload: bytes, wave_format: WaveFormat) -> List[int]:
    """
    Decode a 'data' payload into one integer per sample.

    | bytes/sample | interpretation               |
    |--------------|------------------------------|
    | 1            | unsigned 8-bit               |
    | 2            | signed little-endian 16-bit  |
    | 3            | signed little-endian 24-bit  |
    | 4 (PCM)      | signed little-endian 32-bit  |

    Bytes that do not form a complete frame are dropped.

    Raises:
        FormatError: If the format declares zero channels
        UnsupportedPixelFormat: For other sample widths, compressed formats
                                and 32-bit float (no integer scale defined)
    """
    if wave_format.format_tag not in (WAVE_FORMAT_PCM, WAVE_FORMAT_IEEE_FLOAT):
        raise UnsupportedPixelFormat(f"wave-format-{wave_format.format_tag}")

    if wave_format.channels == 0:
        raise FormatError("'fmt ' chunk declares zero channels")

    width = wave_format.bytes_per_sample
    if not 1 <= width <= 4:
        raise UnsupportedPixelFormat(f"{wave_format.bits_per_sample}-bit samples")

    frames = len(payload) // width // wave_format.channels
    usable = payload[:frames * wave_format.channels * width]

    if wave_format.format_tag == WAVE_FORMAT_IEEE_FLOAT:
        if width != 4:
            raise UnsupportedPixelFormat(f"{wave_format.bits_per_sample}-bit float samples")
        floats = np.frombuffer(usable, dtype="<f4")
        if floats.size:
            logger.debug(f"float samples range from {floats.min()} to {floats.max()}")
        raise UnsupportedPixelFormat(
            "32-bit IEEE float samples",
            "Unsupported pixel format: 32-bit IEEE float samples have no defined integer scale",
        )

    if width == 3:
        values = _decode_24bit(usable)
    else:
        values = np.frombuffer(usable, dtype=_PCM_DTYPES[width])
    return values.tolist()


def read_wav_file(path: Path) -> DecodedSamples:
    """
    Decode a RIFF/WAVE file.

    A wrong 'RIFF' tag or form type is reported as a warning only.

    Args:
        path: Path to the .wav file

    Returns:
        DecodedSamples with width = channel count, height = frame count,
        one channel per raster cell and the sample rate set

    Raises:
        TruncatedData: If the file is shorter than its headers declare
        IncompleteContainer: If no 'fmt ' or no 'data' chunk was found
        UnsupportedPixelFormat: If the sample encoding is not handled
    """
    path = Path(path)
    warnings: List[str] = []
    wave_format: Optional[WaveFormat] = None
    payload: Optional[bytes] = None

    with open(path, "rb") as stream:
        header = _read_exact(stream, RIFF_HEADER_SIZE, "RIFF header")
        riff_tag, riff_size, form_type = _RIFF_HEADER.unpack(header)
        logger.debug(f"{path.name}: {riff_tag!r} size={riff_size} form={form_type!r}")

        if riff_tag != RIFF_TAG:
            warnings.append(f"Container tag is {riff_tag!r}, expected {RIFF_TAG!r}")
        if form_type != WAVE_FORM:
            warnings.append(f"RIFF form type is {form_type!r}, expected {WAVE_FORM!r}")

        for chunk, body in iter_chunks(stream):
            if chunk.chunk_id == CHUNK_FMT:
                wave_format = parse_format_chunk(body)
            elif chunk.chunk_id == CHUNK_DATA:
                payload = body
            elif chunk.chunk_id in KNOWN_SKIPPED_CHUNKS:
                logger.debug(f"Skipped {chunk.chunk_id!r} chunk ({chunk.size} bytes)")
            else:
                logger.debug(f"Skipped unknown chunk {chunk.chunk_id!r} ({chunk.size} bytes)")

    if wave_format is None or payload is None:
        missing = [name for name, found in (("'fmt '", wave_format), ("'data'", payload)) if found is None]
        raise IncompleteContainer(f"{path} has no {' or '.join(missing)} chunk")

    samples = decode_samples(payload, wave_format)
    frames = len(samples) // wave_format.channels
    min_value, max_value = compute_min_max(samples)

    return DecodedSamples(
        width=wave_format.channels,
        height=frames,
        channels=GRAY_CHANNELS,
        samples=samples,
        min_value=min_value,
        max_value=max_value,
        sample_rate=wave_format.sample_rate,
        warnings=warnings,
    )


def select_sample_width(samples: Sequence[int]) -> int:
    """
    Pick the bit depth a sample buffer would be written with.

    Returns:
        8 if every sample fits 0..255, 16 if every sample fits
        -32768..32767, else 32
    """
    if len(samples) == 0:
        return 8
    low, high = min(samples), max(samples)
    if low >= 0 and high <= 255:
        return 8
    if low >= -32768 and high <= 32767:
        return 16
    return 32


def write_wav(path: Path, samples: Sequence[int], width: int, height: int, sample_rate: int) -> None:
    """
    Writer entry point for WAV files.

    Validates the buffer and selects a bit depth, then reports that
    assembling the container is not implemented. The destination is never
    touched.

    Args:
        path: Destination file
        samples: Interleaved samples, width (channels) * height (frames)
        width: Channel count
        height: Frame count
        sample_rate: Sample rate in Hz

    Raises:
        ValueError: If the buffer does not match width * height
        NotImplementedError: Always, after validation
    """
    if len(samples) != width * height:
        raise ValueError(f"Sample buffer holds {len(samples)} values, expected {width * height}")

    bits = select_sample_width(samples)
    raise NotImplementedError(
        f"WAV writing is not implemented ({width} channel(s), {height} frames, "
        f"{sample_rate} Hz, would use {bits}-bit samples): {path}"
    )
