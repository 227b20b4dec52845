"""
Codec Registry.

This module provides a centralized registry mapping file suffixes to decoder
and encoder functions. The loader and the serializer look codecs up here, so
new formats can be added without touching the dispatch code.

Suffixes are matched case-insensitively against the end of the file name and
the longest registered suffix wins, so '.binary.pgm' is preferred over
'.pgm'. The '*' key registers the fallback codec used when nothing matches.

Classes:
    CodecRegistry: Registry for decoders and encoders

Functions:
    get_default_registry: Get the global default registry (singleton)
    register_default_codecs: Register all built-in codecs
"""

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from IV_Libs.constants import (
    ASCII_PNM_SUFFIXES,
    BINARY_PNM_SUFFIXES,
    DEFAULT_CODEC_KEY,
    DOMAIN_AUDIO,
    DOMAIN_IMAGE,
    PNM_SUFFIXES,
    WAV_INPUT_SUFFIXES,
    WAV_OUTPUT_SUFFIXES,
)

logger = logging.getLogger(__name__)

# Type aliases for codec functions
DecoderFunction = Callable[[Path], Any]
EncoderFunction = Callable[[Path, Any, Any], None]

DECODER = "decoder"
ENCODER = "encoder"


class CodecRegistry:
    """
    Registry for suffix-keyed decoders and encoders.

    Example:
        >>> registry = CodecRegistry()
        >>> registry.register_decoder(".pgm", read_pnm_file)
        >>> registry.register_decoder("*", decode_bitmap_file)
        >>> suffix, decoder = registry.find_decoder(Path("photo.PGM"))
        >>> decoded = decoder(Path("photo.PGM"))
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._codecs: Dict[str, Dict[str, Callable]] = {DECODER: {}, ENCODER: {}}
        self._metadata: Dict[str, Dict[str, Dict[str, Any]]] = {DECODER: {}, ENCODER: {}}

    @staticmethod
    def _normalize_suffix(suffix: str) -> str:
        suffix = str(suffix).strip().lower()
        if not suffix:
            raise ValueError("suffix cannot be empty")
        if suffix != DEFAULT_CODEC_KEY and not suffix.startswith("."):
            raise ValueError(f"suffix must start with '.' or be '{DEFAULT_CODEC_KEY}', got {suffix!r}")
        return suffix

    def _register(
        self,
        kind: str,
        suffix: str,
        codec: Callable,
        metadata: Dict[str, Any],
    ) -> None:
        suffix = self._normalize_suffix(suffix)

        if not callable(codec):
            raise ValueError(f"{kind} must be callable, got {type(codec)}")

        if suffix in self._codecs[kind]:
            raise RuntimeError(
                f"A {kind} for '{suffix}' is already registered. "
                f"Use unregister_{kind}() first to replace it."
            )

        self._codecs[kind][suffix] = codec
        self._metadata[kind][suffix] = metadata
        logger.debug(f"Registered {kind} for suffix: {suffix}")

    def register_decoder(
        self,
        suffix: str,
        decoder: DecoderFunction,
        description: str = "",
        domain: str = DOMAIN_IMAGE,
    ) -> None:
        """
        Register a decoder.

        Args:
            suffix: File suffix such as '.pgm', or '*' for the fallback
            decoder: Callable taking a Path and returning DecodedSamples
            description: Human-readable description
            domain: Domain of the records it produces ('image' or 'audio')

        Raises:
            ValueError: If suffix is malformed, decoder is not callable,
                        or domain is unknown
            RuntimeError: If the suffix already has a decoder
        """
        if domain not in (DOMAIN_IMAGE, DOMAIN_AUDIO):
            raise ValueError(f"Unsupported domain: {domain}")

        self._register(DECODER, suffix, decoder, {
            "description": str(description),
            "domain": domain,
        })

    def register_encoder(
        self,
        suffix: str,
        encoder: EncoderFunction,
        description: str = "",
    ) -> None:
        """
        Register an encoder.

        Args:
            suffix: File suffix such as '.binary.pgm', or '*' for the fallback
            encoder: Callable taking (path, record, options) and writing the file
            description: Human-readable description

        Raises:
            ValueError: If suffix is malformed or encoder is not callable
            RuntimeError: If the suffix already has an encoder
        """
        self._register(ENCODER, suffix, encoder, {
            "description": str(description),
        })

    def _unregister(self, kind: str, suffix: str) -> bool:
        suffix = str(suffix).strip().lower()
        if suffix in self._codecs[kind]:
            del self._codecs[kind][suffix]
            del self._metadata[kind][suffix]
            logger.debug(f"Unregistered {kind} for suffix: {suffix}")
            return True
        return False

    def unregister_decoder(self, suffix: str) -> bool:
        """Remove a decoder. Returns False if none was registered."""
        return self._unregister(DECODER, suffix)

    def unregister_encoder(self, suffix: str) -> bool:
        """Remove an encoder. Returns False if none was registered."""
        return self._unregister(ENCODER, suffix)

    def _find(self, kind: str, path: Path) -> Tuple[str, Callable]:
        name = Path(path).name.lower()
        table = self._codecs[kind]

        matches = [
            suffix for suffix in table
            if suffix != DEFAULT_CODEC_KEY and name.endswith(suffix)
        ]
        if matches:
            suffix = max(matches, key=len)
            return suffix, table[suffix]

        if DEFAULT_CODEC_KEY in table:
            return DEFAULT_CODEC_KEY, table[DEFAULT_CODEC_KEY]

        available = ", ".join(self._list(kind))
        raise KeyError(
            f"No {kind} registered for '{name}'. "
            f"Available suffixes: {available}"
        )

    def find_decoder(self, path: Path) -> Tuple[str, DecoderFunction]:
        """
        Find the decoder for a file name.

        Returns:
            (matched suffix, decoder); the suffix is '*' for the fallback

        Raises:
            KeyError: If nothing matches and no fallback is registered
        """
        return self._find(DECODER, path)

    def find_encoder(self, path: Path) -> Tuple[str, EncoderFunction]:
        """
        Find the encoder for a destination file name.

        Returns:
            (matched suffix, encoder); the suffix is '*' for the fallback

        Raises:
            KeyError: If nothing matches and no fallback is registered
        """
        return self._find(ENCODER, path)

    def has_decoder(self, suffix: str) -> bool:
        return str(suffix).strip().lower() in self._codecs[DECODER]

    def has_encoder(self, suffix: str) -> bool:
        return str(suffix).strip().lower() in self._codecs[ENCODER]

    def _list(self, kind: str) -> List[str]:
        return sorted(self._codecs[kind].keys())

    def list_decoder_suffixes(self) -> List[str]:
        """Sorted list of suffixes with a registered decoder."""
        return self._list(DECODER)

    def list_encoder_suffixes(self) -> List[str]:
        """Sorted list of suffixes with a registered encoder."""
        return self._list(ENCODER)

    def get_metadata(self, kind: str, suffix: str) -> Dict[str, Any]:
        """
        Get metadata for a registered codec.

        Args:
            kind: 'decoder' or 'encoder'
            suffix: The registered suffix

        Returns:
            Copy of the metadata dictionary

        Raises:
            KeyError: If nothing is registered under that suffix
        """
        suffix = str(suffix).strip().lower()
        if kind not in self._metadata or suffix not in self._metadata[kind]:
            raise KeyError(f"No {kind} metadata for suffix: {suffix}")
        return dict(self._metadata[kind][suffix])


# Global singleton registry
_default_registry: Optional[CodecRegistry] = None


def get_default_registry() -> CodecRegistry:
    """
    Get the global default registry (singleton).

    Creates the registry on first call and registers the built-in codecs.
    """
    global _default_registry

    if _default_registry is None:
        _default_registry = CodecRegistry()
        register_default_codecs(_default_registry)

    return _default_registry


def register_default_codecs(registry: CodecRegistry) -> None:
    """
    Register all built-in codecs.

    Decoders: .ppm/.pnm/.pgm (anymap), .wav (RIFF wave), '*' (Pillow).
    Encoders: .binary.pnm/.binary.ppm/.binary.pgm (binary anymap),
    .pnm/.ppm/.pgm (ascii anymap), .wav/.wave (RIFF wave), '*' (Pillow).

    Args:
        registry: The registry to register codecs with
    """
    from IV_Libs.CodecsLib.pnm_codec import read_pnm_file
    from IV_Libs.CodecsLib.wav_codec import read_wav_file
    from IV_Libs.CodecsLib.pil_codec import decode_bitmap_file
    from IV_Libs.LoaderLib.serializer import (
        encode_ascii_pnm,
        encode_binary_pnm,
        encode_bitmap,
        encode_wav,
    )

    for suffix in PNM_SUFFIXES:
        registry.register_decoder(
            suffix,
            read_pnm_file,
            description="Portable anymap, ascii (P2/P3) or binary (P5/P6)",
        )

    for suffix in WAV_INPUT_SUFFIXES:
        registry.register_decoder(
            suffix,
            read_wav_file,
            description="RIFF wave audio decoded as a gray raster",
            domain=DOMAIN_AUDIO,
        )

    registry.register_decoder(
        DEFAULT_CODEC_KEY,
        decode_bitmap_file,
        description="Platform bitmap decoder (Pillow)",
    )

    for suffix in BINARY_PNM_SUFFIXES:
        registry.register_encoder(
            suffix,
            encode_binary_pnm,
            description="Binary anymap (P5/P6, or wide gray P5)",
        )

    for suffix in ASCII_PNM_SUFFIXES:
        registry.register_encoder(
            suffix,
            encode_ascii_pnm,
            description="Ascii anymap (P2/P3)",
        )

    for suffix in WAV_OUTPUT_SUFFIXES:
        registry.register_encoder(
            suffix,
            encode_wav,
            description="RIFF wave audio",
        )

    registry.register_encoder(
        DEFAULT_CODEC_KEY,
        encode_bitmap,
        description="Platform bitmap encoder (Pillow)",
    )

    logger.info("Registered default codecs")
