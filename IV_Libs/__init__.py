"""
IV_Libs - Image Viewer Library Modules

This package contains the data-acquisition and codec layer of the Image
Viewer, organized into specialized sub-packages:

- ImageDataLib: Canonical record, decode errors, elapsed-time utility
- CodecsLib: Bitmap/indexed decoder, PNM/PGM/PPM codec, WAV codec, Pillow adapter
- LoaderLib: Suffix-based codec registry, loader dispatch and serializer
"""

__version__ = "0.1.0"
