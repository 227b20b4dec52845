"""
Serializer.

Saves an ImageRecord by destination suffix:

- .binary.pnm / .binary.ppm / .binary.pgm -> binary anymap (P5/P6)
- .pnm / .ppm / .pgm                      -> ascii anymap (P2/P3)
- .wav / .wave                            -> RIFF wave writer
- anything else                           -> Pillow (format from the suffix)

The record's working buffer is written when present, else the original
buffer. By default the file is written to a temporary name in the
destination directory and renamed on success, so a failed save leaves an
existing destination untouched.

Classes:
    SaveOptions: Configuration for one save call

Functions:
    save: Serialize a record to disk
    encode_ascii_pnm / encode_binary_pnm / encode_wav / encode_bitmap:
        Encoder entries registered in the codec registry
"""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import logging
import os
import stat
import tempfile

from IV_Libs.constants import GRAY_CHANNELS, PNM_BIT_DEPTHS
from IV_Libs.CodecsLib.pil_codec import encode_bitmap_file
from IV_Libs.CodecsLib.pnm_codec import (
    write_ascii_pnm,
    write_binary_pgm16,
    write_binary_pgm32,
    write_binary_pnm8,
)
from IV_Libs.CodecsLib.wav_codec import write_wav
from IV_Libs.ImageDataLib.image_models import ImageRecord
from IV_Libs.LoaderLib.codec_registry import CodecRegistry, get_default_registry

logger = logging.getLogger(__name__)


@dataclass
class SaveOptions:
    """Configuration for saving a record.

    Attributes:
        overwrite: Replace an existing destination (default: True)
        create_directories: Create missing parent directories (default: False)
        atomic: Write to a temporary file and rename on success (default: True)
        pnm_bit_depth: Sample width for binary anymap output: 8 (standard),
                       16 or 32 (non-standard, gray only)
    """
    overwrite: bool = True
    create_directories: bool = False
    atomic: bool = True
    pnm_bit_depth: int = 8

    def __post_init__(self):
        """Validate option values."""
        if self.pnm_bit_depth not in PNM_BIT_DEPTHS:
            raise ValueError(f"pnm_bit_depth must be one of {PNM_BIT_DEPTHS}, got {self.pnm_bit_depth}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SaveOptions":
        """Create from dictionary, ignoring unknown keys."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)


# ============================================================================
# Encoders
# ============================================================================

def encode_ascii_pnm(path: Path, record: ImageRecord, options: SaveOptions) -> None:
    """Write a P2/P3 file."""
    write_ascii_pnm(path, record.output_samples(), record.width, record.height, record.channels)


def encode_binary_pnm(path: Path, record: ImageRecord, options: SaveOptions) -> None:
    """
    Write a binary anymap at the configured bit depth.

    Raises:
        ValueError: If a 16 or 32-bit depth is requested for a color record
    """
    samples = record.output_samples()

    if options.pnm_bit_depth == 8:
        write_binary_pnm8(path, samples, record.width, record.height, record.channels)
        return

    if record.channels != GRAY_CHANNELS:
        raise ValueError(f"{options.pnm_bit_depth}-bit binary PNM output supports gray records only")

    if options.pnm_bit_depth == 16:
        write_binary_pgm16(path, samples, record.width, record.height)
    else:
        write_binary_pgm32(path, samples, record.width, record.height)


def encode_wav(path: Path, record: ImageRecord, options: SaveOptions) -> None:
    """
    Hand a gray or audio record to the WAV writer.

    Raises:
        ValueError: If the record is color or has no sample rate
        NotImplementedError: From the WAV writer
    """
    if record.channels != GRAY_CHANNELS:
        raise ValueError("Only gray or audio records can be written as WAV")
    if record.sample_rate is None:
        raise ValueError("Record has no sample rate; cannot write WAV")
    write_wav(path, record.output_samples(), record.width, record.height, record.sample_rate)


def encode_bitmap(path: Path, record: ImageRecord, options: SaveOptions) -> None:
    """Save through Pillow; samples are clamped to 0..255."""
    encode_bitmap_file(path, record.output_samples(), record.width, record.height, record.channels)


# ============================================================================
# Save
# ============================================================================

def _temporary_path(destination: Path) -> Path:
    """Create an empty temporary file next to the destination, keeping its suffix."""
    fd, name = tempfile.mkstemp(
        dir=destination.parent,
        prefix=f".{destination.name}.",
        suffix=destination.suffix,
    )
    os.close(fd)
    return Path(name)


def _destination_mode(destination: Path) -> int:
    """
    Permission bits the saved file should carry: those of the file being
    replaced, or 0o666 minus the process umask for a new file.
    """
    if destination.exists():
        return stat.S_IMODE(destination.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def save(
    record: ImageRecord,
    path: Path,
    options: Optional[SaveOptions] = None,
    registry: Optional[CodecRegistry] = None,
) -> Path:
    """
    Save a record; the encoder is chosen by the destination suffix.

    Args:
        record: Record to save (its working buffer if present)
        path: Destination file
        options: Save configuration (default: SaveOptions())
        registry: Codec registry to use (default: the global registry)

    Returns:
        Path where the record was saved

    Raises:
        FileExistsError: If the destination exists and overwrite is False
        ValueError: If the record cannot be represented in the chosen format
        NotImplementedError: If the chosen encoder is not implemented (WAV)
        OSError: If the file cannot be written
    """
    path = Path(path)
    options = options or SaveOptions()
    registry = registry or get_default_registry()

    if options.create_directories:
        path.parent.mkdir(parents=True, exist_ok=True)

    if path.exists() and not options.overwrite:
        raise FileExistsError(
            f"Output file already exists: {path}. "
            f"Set overwrite=True to replace."
        )

    suffix, encoder = registry.find_encoder(path)
    logger.debug(f"Encoding {path} with the '{suffix}' encoder")

    try:
        if options.atomic:
            temp_path = _temporary_path(path)
            try:
                encoder(temp_path, record, options)
                # mkstemp creates 0600 files
                os.chmod(temp_path, _destination_mode(path))
                os.replace(temp_path, path)
            finally:
                if temp_path.exists():
                    temp_path.unlink()
        else:
            encoder(path, record, options)
    except (NotImplementedError, ValueError):
        raise
    except OSError as e:
        raise OSError(f"Failed to save {path}: {str(e)}") from e

    logger.info(f"Saved {path}")
    return path
