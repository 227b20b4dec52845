"""
Constants and configuration values for the Image Viewer data layer.

This module centralizes file suffixes, format magic numbers, chunk ids
and other fixed values used by the codecs and the loader.
"""

# Record domains
DOMAIN_IMAGE = "image"
DOMAIN_AUDIO = "audio"

# Channel counts
GRAY_CHANNELS = 1
COLOR_CHANNELS = 3

# Input suffixes (lowercase)
PNM_SUFFIXES = (".ppm", ".pnm", ".pgm")
WAV_INPUT_SUFFIXES = (".wav",)

# Output suffixes (lowercase)
BINARY_PNM_SUFFIXES = (".binary.pnm", ".binary.ppm", ".binary.pgm")
ASCII_PNM_SUFFIXES = PNM_SUFFIXES
WAV_OUTPUT_SUFFIXES = (".wav", ".wave")

# Registry keys for the platform (Pillow) fallback codec
DEFAULT_CODEC_KEY = "*"

# Anymap magic tokens
PNM_ASCII_GRAY = "P2"
PNM_ASCII_COLOR = "P3"
PNM_BINARY_GRAY = "P5"
PNM_BINARY_COLOR = "P6"
PNM_MAGIC_TOKENS = (PNM_ASCII_GRAY, PNM_ASCII_COLOR, PNM_BINARY_GRAY, PNM_BINARY_COLOR)
PNM_COMMENT_PREFIX = "#"

# Anymap writer header comments
PNM_ASCII_COMMENT = "# created by Image Viewer (ASCII)"
PNM_BINARY8_COMMENT = "# created by Image Viewer (raw-8)"
PNM_BINARY16_COMMENT = "# created by Image Viewer (raw-16)"
PNM_BINARY32_COMMENT = "# created by Image Viewer (raw-32)"
PNM_VALUES_PER_LINE = 10
PNM_DEFAULT_MAXVAL = 255
PNM_BIT_DEPTHS = (8, 16, 32)

# Nominal sample range of 8-bit displays
NOMINAL_MIN = 0
NOMINAL_MAX = 255

# RIFF / WAVE chunk ids
RIFF_TAG = b"RIFF"
WAVE_FORM = b"WAVE"
CHUNK_FMT = b"fmt "
CHUNK_FACT = b"fact"
CHUNK_DATA = b"data"
CHUNK_LIST = b"LIST"
CHUNK_INFO = b"INFO"
CHUNK_PEAK = b"PEAK"
CHUNK_ID3 = b"id3 "
KNOWN_SKIPPED_CHUNKS = {CHUNK_FACT, CHUNK_LIST, CHUNK_INFO, CHUNK_PEAK, CHUNK_ID3}
RIFF_HEADER_SIZE = 12
CHUNK_HEADER_SIZE = 8
FMT_CORE_SIZE = 16
# Extensible fmt: the SubFormat GUID starts at this offset; its first two bytes are the real tag
FMT_SUBFORMAT_OFFSET = 24

# WAVE format tags
WAVE_FORMAT_PCM = 1
WAVE_FORMAT_IEEE_FLOAT = 3
WAVE_FORMAT_EXTENSIBLE = 0xFFFE

# Bitmap pixel-format tags handed over by the platform decoder
PIXEL_FORMAT_TRUECOLOR_24 = "truecolor-24"
PIXEL_FORMAT_TRUECOLOR_32 = "truecolor-32"
PIXEL_FORMAT_INDEXED_8 = "indexed-8"
PIXEL_FORMAT_INDEXED_4 = "indexed-4"
SUPPORTED_PIXEL_FORMATS = {
    PIXEL_FORMAT_TRUECOLOR_24,
    PIXEL_FORMAT_TRUECOLOR_32,
    PIXEL_FORMAT_INDEXED_8,
    PIXEL_FORMAT_INDEXED_4,
}

# Platform scanlines are padded to this many bytes
ROW_ALIGNMENT = 4
