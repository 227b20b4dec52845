"""
Unit tests for the serializer.

Tests suffix routing, SaveOptions, overwrite handling and the temporary
file plus rename write path.
"""

import os
import stat
import tempfile
import unittest
from pathlib import Path

from IV_Libs.CodecsLib.pnm_codec import read_binary_pgm16, read_pnm_file
from IV_Libs.ImageDataLib.image_models import ImageRecord
from IV_Libs.LoaderLib.codec_registry import CodecRegistry
from IV_Libs.LoaderLib.loader import load
from IV_Libs.LoaderLib.serializer import SaveOptions, save


def gray_record():
    return ImageRecord(
        width=3, height=1, channels=1, samples=[3, 250, 10], min_value=3, max_value=250
    )


def color_record():
    return ImageRecord(
        width=2, height=1, channels=3, samples=[255, 0, 0, 0, 0, 255], min_value=0, max_value=255
    )


class TestSaveOptions(unittest.TestCase):
    """Test cases for SaveOptions dataclass."""

    def test_defaults(self):
        options = SaveOptions()

        self.assertTrue(options.overwrite)
        self.assertFalse(options.create_directories)
        self.assertTrue(options.atomic)
        self.assertEqual(options.pnm_bit_depth, 8)

    def test_invalid_bit_depth(self):
        with self.assertRaises(ValueError):
            SaveOptions(pnm_bit_depth=12)

    def test_to_dict_and_back(self):
        options = SaveOptions(overwrite=False, pnm_bit_depth=16)

        restored = SaveOptions.from_dict(options.to_dict())

        self.assertEqual(restored, options)

    def test_from_dict_ignores_unknown_keys(self):
        options = SaveOptions.from_dict({"pnm_bit_depth": 32, "quality": 90})

        self.assertEqual(options.pnm_bit_depth, 32)


class TestSave(unittest.TestCase):
    """Test cases for save function."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.base = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def leftovers(self):
        return [p.name for p in self.base.iterdir() if p.name.startswith(".")]

    def test_ascii_pgm(self):
        path = save(gray_record(), self.base / "out.pgm")

        self.assertTrue(path.read_bytes().startswith(b"P2\n"))
        self.assertEqual(read_pnm_file(path).samples, [3, 250, 10])
        self.assertEqual(self.leftovers(), [])

    def test_binary_ppm(self):
        path = save(color_record(), self.base / "out.binary.ppm")

        self.assertTrue(path.read_bytes().startswith(b"P6\r\n"))
        self.assertEqual(read_pnm_file(path).samples, [255, 0, 0, 0, 0, 255])

    def test_working_buffer_is_written(self):
        record = gray_record()
        record.working_copy()[0] = 99

        path = save(record, self.base / "out.pgm")

        self.assertEqual(read_pnm_file(path).samples, [99, 250, 10])
        self.assertEqual(record.samples, [3, 250, 10])

    def test_png_round_trip(self):
        path = save(color_record(), self.base / "out.png")

        self.assertEqual(load(path).samples, [255, 0, 0, 0, 0, 255])

    def test_16bit_gray(self):
        record = ImageRecord(width=2, height=1, channels=1, samples=[-300, 1000])

        path = save(record, self.base / "wide.binary.pgm", SaveOptions(pnm_bit_depth=16))

        self.assertEqual(read_binary_pgm16(path).samples, [-300, 1000])

    def test_16bit_color_rejected(self):
        with self.assertRaises(ValueError):
            save(color_record(), self.base / "wide.binary.ppm", SaveOptions(pnm_bit_depth=16))

        self.assertFalse((self.base / "wide.binary.ppm").exists())
        self.assertEqual(self.leftovers(), [])

    def test_no_overwrite(self):
        path = self.base / "out.pgm"
        path.write_text("keep me")

        with self.assertRaises(FileExistsError):
            save(gray_record(), path, SaveOptions(overwrite=False))

        self.assertEqual(path.read_text(), "keep me")

    def test_overwrite_replaces(self):
        path = self.base / "out.pgm"
        path.write_text("old")

        save(gray_record(), path)

        self.assertTrue(path.read_bytes().startswith(b"P2"))

    def test_create_directories(self):
        path = self.base / "nested" / "deeper" / "out.pgm"

        save(gray_record(), path, SaveOptions(create_directories=True))

        self.assertTrue(path.exists())

    def test_missing_directory_raises_os_error(self):
        with self.assertRaises(OSError):
            save(gray_record(), self.base / "missing" / "out.pgm")

    def test_failing_encoder_leaves_destination(self):
        def failing_encoder(path, record, options):
            Path(path).write_bytes(b"partial")
            raise OSError("disk full")

        registry = CodecRegistry()
        registry.register_encoder("*", failing_encoder)
        path = self.base / "out.pgm"
        path.write_text("original")

        with self.assertRaises(OSError) as ctx:
            save(gray_record(), path, registry=registry)

        self.assertIn("Failed to save", str(ctx.exception))
        self.assertEqual(path.read_text(), "original")
        self.assertEqual(self.leftovers(), [])

    @unittest.skipUnless(os.name == "posix", "POSIX permission bits")
    def test_new_file_follows_umask(self):
        old_umask = os.umask(0o022)
        try:
            path = save(gray_record(), self.base / "out.pgm")
        finally:
            os.umask(old_umask)

        self.assertEqual(stat.S_IMODE(path.stat().st_mode), 0o644)

    @unittest.skipUnless(os.name == "posix", "POSIX permission bits")
    def test_overwrite_keeps_existing_mode(self):
        path = self.base / "out.pgm"
        path.write_text("old")
        os.chmod(path, 0o640)

        save(gray_record(), path)

        self.assertEqual(stat.S_IMODE(path.stat().st_mode), 0o640)
        self.assertTrue(path.read_bytes().startswith(b"P2"))

    def test_non_atomic_writes_directly(self):
        path = save(gray_record(), self.base / "out.pgm", SaveOptions(atomic=False))

        self.assertEqual(read_pnm_file(path).samples, [3, 250, 10])

    def test_wav_not_implemented(self):
        record = ImageRecord(
            width=1, height=3, channels=1, samples=[1, 2, 3], domain="audio", sample_rate=8000
        )
        path = self.base / "out.wav"
        path.write_bytes(b"existing")

        with self.assertRaises(NotImplementedError):
            save(record, path)

        self.assertEqual(path.read_bytes(), b"existing")
        self.assertEqual(self.leftovers(), [])

    def test_wav_requires_sample_rate(self):
        with self.assertRaises(ValueError):
            save(gray_record(), self.base / "out.wave")

    def test_pnm_load_save_round_trip(self):
        source = self.base / "in.pgm"
        source.write_bytes(b"P2\n# hello\n2 2\n255\n1 2\n3 4\n")

        record = load(source)
        save(record, self.base / "out.binary.pgm")

        self.assertEqual(load(self.base / "out.binary.pgm").samples, [1, 2, 3, 4])


if __name__ == "__main__":
    unittest.main()
