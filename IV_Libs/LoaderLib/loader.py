"""
Loader Dispatch.

Chooses a decoder by file name suffix and wraps its result in an
ImageRecord:

- .ppm / .pnm / .pgm -> portable anymap codec
- .wav               -> RIFF wave codec (audio record)
- anything else      -> Pillow-backed bitmap decoder

Functions:
    load: Decode a file into an ImageRecord
    nominal_range_warnings: Advisory messages for samples outside 0..255
"""

from pathlib import Path
from typing import List, Optional
import logging

from IV_Libs.constants import DOMAIN_IMAGE, NOMINAL_MAX, NOMINAL_MIN
from IV_Libs.ImageDataLib.image_models import ImageRecord
from IV_Libs.ImageDataLib.timer import Timer
from IV_Libs.LoaderLib.codec_registry import DECODER, CodecRegistry, get_default_registry

logger = logging.getLogger(__name__)


def nominal_range_warnings(min_value: int, max_value: int) -> List[str]:
    """
    Describe samples outside the displayable 0..255 range.

    Returns:
        List of advisory messages (empty when the range is nominal)
    """
    warnings = []
    if max_value > NOMINAL_MAX:
        warnings.append(f"Max value of {max_value} exceeds limit of {NOMINAL_MAX}")
    if min_value < NOMINAL_MIN:
        warnings.append(f"Min value of {min_value} is below {NOMINAL_MIN}")
    return warnings


def load(path: Path, registry: Optional[CodecRegistry] = None) -> ImageRecord:
    """
    Load an image or audio file into a canonical record.

    Args:
        path: File to decode; its suffix selects the decoder
        registry: Codec registry to use (default: the global registry)

    Returns:
        ImageRecord with `path` set. Advisory warnings (declared maxval
        above 255, image samples outside 0..255, RIFF form mismatch) are
        logged and kept in `record.warnings`.

    Raises:
        FileNotFoundError: If the path does not exist or is not a file
        DecodeError: Any FormatError, UnsupportedPixelFormat, TruncatedData
                     or IncompleteContainer raised by the decoder
    """
    path = Path(path)
    if not path.exists() or not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")

    registry = registry or get_default_registry()
    suffix, decoder = registry.find_decoder(path)
    domain = registry.get_metadata(DECODER, suffix)["domain"]
    logger.debug(f"Decoding {path} with the '{suffix}' decoder")

    timer = Timer()
    decoded = decoder(path)
    timer.report(f"decode {path.name}")

    record = ImageRecord.from_decoded(decoded, path=path, domain=domain)
    if domain == DOMAIN_IMAGE:
        record.warnings.extend(nominal_range_warnings(record.min_value, record.max_value))

    for message in record.warnings:
        logger.warning(f"{path}: {message}")

    return record
