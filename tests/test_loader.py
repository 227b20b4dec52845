"""
Tests for the loader dispatch.

Covers suffix routing, record stamping and advisory warnings.
"""

import logging
import struct
from pathlib import Path

import pytest
from PIL import Image

from IV_Libs.ImageDataLib.errors import FormatError, UnsupportedPixelFormat
from IV_Libs.LoaderLib.codec_registry import CodecRegistry
from IV_Libs.LoaderLib.loader import load, nominal_range_warnings
from riff_builder import build_chunk, build_fmt_payload


class TestNominalRangeWarnings:
    """Tests for nominal_range_warnings function."""

    def test_nominal_range(self):
        assert nominal_range_warnings(0, 255) == []

    def test_above_and_below(self):
        warnings = nominal_range_warnings(-3, 300)

        assert warnings == [
            "Max value of 300 exceeds limit of 255",
            "Min value of -3 is below 0",
        ]


class TestLoad:
    """Tests for load function."""

    def test_ascii_pgm(self, sample_pgm):
        record = load(sample_pgm)

        assert record.domain == "image"
        assert record.samples == [3, 250, 10]
        assert (record.min_value, record.max_value) == (3, 250)
        assert record.path == sample_pgm
        assert not record.modified

    def test_uppercase_suffix(self, tmp_path):
        path = tmp_path / "SCAN.PGM"
        path.write_bytes(b"P5\n2 1\n255\n\x05\x06")

        assert load(path).samples == [5, 6]

    def test_wav_gives_audio_record(self, make_wav):
        path = make_wav([
            build_chunk(b"fmt ", build_fmt_payload(channels=2, sample_rate=44100)),
            build_chunk(b"data", struct.pack("<hhhh", -1000, 1000, 0, 300)),
        ])

        record = load(path)

        assert record.is_audio
        assert (record.width, record.height) == (2, 2)
        assert record.sample_rate == 44100
        # audio samples are not held to the image range
        assert record.warnings == []

    def test_png_through_pillow(self, sample_png):
        record = load(str(sample_png))

        assert record.is_color
        assert (record.width, record.height) == (4, 3)
        assert record.samples[:3] == [120, 60, 30]
        assert isinstance(record.path, Path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load(tmp_path / "nothing.pgm")

    def test_directory_is_not_a_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load(tmp_path)

    def test_unsupported_pillow_mode(self, tmp_path):
        path = tmp_path / "bits.png"
        Image.new("1", (8, 2)).save(path)

        with pytest.raises(UnsupportedPixelFormat):
            load(path)

    def test_format_error_propagates(self, tmp_path):
        path = tmp_path / "bad.ppm"
        path.write_bytes(b"P9\n1 1\n255\n0\n")

        with pytest.raises(FormatError):
            load(path)

    def test_out_of_range_samples_warn(self, tmp_path, caplog):
        path = tmp_path / "hot.pgm"
        path.write_bytes(b"P2\n2 1\n65535\n0 1000\n")

        with caplog.at_level(logging.WARNING, logger="IV_Libs.LoaderLib.loader"):
            record = load(path)

        assert record.samples == [0, 1000]
        assert any("65535" in message for message in record.warnings)
        assert "Max value of 1000 exceeds limit of 255" in record.warnings
        assert "exceeds limit of 255" in caplog.text

    def test_custom_registry(self, tmp_path):
        def failing_decoder(p):
            raise FormatError("custom")

        registry = CodecRegistry()
        registry.register_decoder(".pgm", failing_decoder)
        path = tmp_path / "x.pgm"
        path.write_bytes(b"")

        with pytest.raises(FormatError, match="custom"):
            load(path, registry=registry)
