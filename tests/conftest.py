"""
Pytest configuration and shared fixtures for Image Viewer tests.

This module provides shared test fixtures used across multiple test
modules: palettes, small image files and a WAV file factory.
"""

import pytest
from PIL import Image

from riff_builder import build_wav


@pytest.fixture
def gray_palette():
    """A 16-entry palette where every entry has R == G == B."""
    return [(level * 17, level * 17, level * 17) for level in range(16)]


@pytest.fixture
def color_palette():
    """A 16-entry gray palette with a single non-gray entry."""
    palette = [(level * 17, level * 17, level * 17) for level in range(16)]
    palette[15] = (255, 0, 0)
    return palette


@pytest.fixture
def sample_png(tmp_path):
    """
    Create a small color PNG for testing.

    Args:
        tmp_path: Pytest's built-in temporary directory fixture

    Returns:
        Path to a 4x3 RGB PNG filled with (120, 60, 30)
    """
    path = tmp_path / "sample.png"
    Image.new("RGB", (4, 3), (120, 60, 30)).save(path)
    return path


@pytest.fixture
def sample_pgm(tmp_path):
    """Create a 3x1 ascii PGM holding 3, 250, 10."""
    path = tmp_path / "sample.pgm"
    path.write_bytes(b"P2\n# fixture\n3 1\n255\n3 250 10\n")
    return path


@pytest.fixture
def make_wav(tmp_path):
    """
    Provide a factory that writes a WAV file and returns its path.

    Usage:
        path = make_wav([build_chunk(b"fmt ", build_fmt_payload()), build_chunk(b"data", b"...")])
    """
    def _make(chunks, name="clip.wav", **kwargs):
        path = tmp_path / name
        path.write_bytes(build_wav(chunks, **kwargs))
        return path

    return _make
