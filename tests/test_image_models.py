"""
Unit tests for image_models module.

Tests the canonical record (validation, working buffer, commit) and the
min/max helper.
"""

from pathlib import Path

import pytest

from IV_Libs.ImageDataLib.image_models import (
    DecodedSamples,
    ImageRecord,
    compute_min_max,
)


class TestComputeMinMax:
    """Tests for compute_min_max function."""

    def test_gray_buffer(self):
        """Should report min 3 and max 250 for {3, 250, 10}."""
        assert compute_min_max([3, 250, 10]) == (3, 250)

    def test_negative_values(self):
        assert compute_min_max([-7, 0, 12]) == (-7, 12)

    def test_empty_buffer(self):
        """Should report (0, 0) for an empty buffer."""
        assert compute_min_max([]) == (0, 0)


class TestImageRecordValidation:
    """Tests for ImageRecord construction."""

    def test_valid_gray_record(self):
        record = ImageRecord(width=2, height=2, channels=1, samples=[1, 2, 3, 4])

        assert record.domain == "image"
        assert not record.is_color
        assert not record.is_audio
        assert record.working is None
        assert not record.modified

    def test_buffer_length_must_match(self):
        """Should reject buffers whose length is not W*H*C."""
        with pytest.raises(ValueError):
            ImageRecord(width=2, height=2, channels=3, samples=[0] * 4)

    def test_channels_must_be_one_or_three(self):
        with pytest.raises(ValueError):
            ImageRecord(width=1, height=1, channels=4, samples=[0] * 4)

    def test_unknown_domain(self):
        with pytest.raises(ValueError):
            ImageRecord(width=1, height=1, channels=1, samples=[0], domain="video")

    def test_negative_dimensions(self):
        with pytest.raises(ValueError):
            ImageRecord(width=-1, height=1, channels=1, samples=[])

    def test_zero_sized_record(self):
        record = ImageRecord(width=0, height=5, channels=3, samples=[])
        assert record.samples == []

    def test_path_converted_to_path(self):
        record = ImageRecord(width=1, height=1, channels=1, samples=[0], path="a/b.pgm")
        assert record.path == Path("a/b.pgm")


class TestFromDecoded:
    """Tests for building records from decoder results."""

    def test_copies_all_fields(self):
        decoded = DecodedSamples(
            width=2, height=3, channels=1, samples=[0, 1, 2, 3, 4, 5],
            min_value=0, max_value=5, sample_rate=44100, warnings=["note"],
        )

        record = ImageRecord.from_decoded(decoded, path=Path("clip.wav"), domain="audio")

        assert record.width == 2
        assert record.height == 3
        assert record.min_value == 0
        assert record.max_value == 5
        assert record.sample_rate == 44100
        assert record.is_audio
        assert record.warnings == ["note"]
        assert record.path == Path("clip.wav")

    def test_warnings_are_not_shared(self):
        decoded = DecodedSamples(width=1, height=1, channels=1, samples=[0], min_value=0, max_value=0)
        record = ImageRecord.from_decoded(decoded)

        record.warnings.append("added later")

        assert decoded.warnings == []


class TestWorkingBufferAndCommit:
    """Tests for the working buffer lifecycle."""

    def make_record(self):
        return ImageRecord(
            width=3, height=1, channels=1, samples=[3, 250, 10], min_value=3, max_value=250
        )

    def test_working_copy_is_lazy_clone(self):
        record = self.make_record()

        working = record.working_copy()

        assert working == [3, 250, 10]
        assert working is not record.samples
        assert record.working_copy() is working

    def test_mutating_working_leaves_original(self):
        record = self.make_record()
        record.working_copy()[0] = 99

        assert record.samples == [3, 250, 10]
        assert record.output_samples() == [99, 250, 10]

    def test_output_samples_without_working(self):
        record = self.make_record()
        assert record.output_samples() is record.samples

    def test_commit_promotes_and_recomputes(self):
        """Commit should copy working into samples and recompute min/max."""
        record = self.make_record()
        working = record.working_copy()
        working[:] = [-4, 17, 600]

        record.commit()

        assert record.samples == [-4, 17, 600]
        assert record.min_value == -4
        assert record.max_value == 600
        assert record.modified

    def test_commit_supports_multiple_stages(self):
        record = self.make_record()
        record.working_copy()[1] = 100
        record.commit()
        record.working_copy()[2] = 1
        record.commit()

        assert record.samples == [3, 100, 1]
        assert (record.min_value, record.max_value) == (1, 100)

    def test_commit_detached_from_working(self):
        record = self.make_record()
        record.working_copy()
        record.commit()

        record.working[0] = 42

        assert record.samples[0] == 3

    def test_commit_without_working_raises(self):
        with pytest.raises(ValueError):
            self.make_record().commit()

    def test_commit_with_resized_working_raises(self):
        record = self.make_record()
        record.working_copy().append(1)

        with pytest.raises(ValueError):
            record.commit()


class TestColorAccessors:
    """Tests for per-component accessors."""

    def test_rgb_components(self):
        record = ImageRecord(
            width=2, height=1, channels=3, samples=[1, 2, 3, 4, 5, 6]
        )

        assert record.is_color
        assert record.get_red(0, 1) == 4
        assert record.get_green(0, 1) == 5
        assert record.get_blue(0, 1) == 6
        assert record.get_sample(2) == 3

    def test_gray_record_has_no_components(self):
        record = ImageRecord(width=1, height=1, channels=1, samples=[9])
        with pytest.raises(ValueError):
            record.get_red(0, 0)

    def test_out_of_bounds(self):
        record = ImageRecord(width=1, height=1, channels=3, samples=[1, 2, 3])
        with pytest.raises(IndexError):
            record.get_blue(1, 0)
