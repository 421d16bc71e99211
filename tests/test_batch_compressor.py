"""
Unit tests for batch_compressor module.

Tests upload filtering, the all-or-nothing capacity limit, per-entry
quality changes and zip export.
"""

import io
import logging
import zipfile

import pytest

from OR_Libs.BatchLib.batch_compressor import (
    BatchCompressor,
    BatchConfig,
    BatchImageEntry,
    UploadedFile,
    output_name,
)
from OR_Libs.BatchLib import batch_compressor
from OR_Libs.errors import BatchChangedError, CapacityExceededError, EditorError, EmptyBatchError


@pytest.fixture
def make_uploads(jpeg_bytes):
    """Factory for JPEG uploads named photo_<n>.jpg."""
    def factory(count, start=0):
        return [
            UploadedFile(f"photo_{n}.jpg", jpeg_bytes, "image/jpeg")
            for n in range(start, start + count)
        ]
    return factory


@pytest.fixture
def batch():
    return BatchCompressor(BatchConfig(max_workers=4))


class TestUploadedFile:
    """Tests for UploadedFile."""

    def test_declared_type_wins(self):
        assert UploadedFile("x.png", b"", "IMAGE/JPEG").mime_type == "image/jpeg"

    def test_type_guessed_from_name(self):
        assert UploadedFile("x.jpeg", b"").mime_type == "image/jpeg"
        assert UploadedFile("x.png", b"").mime_type == "image/png"

    def test_from_path(self, tmp_path, jpeg_bytes):
        path = tmp_path / "beach.jpg"
        path.write_bytes(jpeg_bytes)

        upload = UploadedFile.from_path(path)

        assert upload.name == "beach.jpg"
        assert upload.size == len(jpeg_bytes)

    @pytest.mark.parametrize("name, expected", [
        ("holiday.jpeg", "holiday.jpg"),
        ("a.b.JPG", "a.b.jpg"),
        ("noext", "noext.jpg"),
    ])
    def test_output_name(self, name, expected):
        assert output_name(name) == expected


class TestAddFiles:
    """Tests for BatchCompressor.add_files."""

    def test_adds_in_upload_order(self, batch, make_uploads):
        added = batch.add_files(make_uploads(5))

        assert [entry.display_name for entry in added] == [f"photo_{n}.jpg" for n in range(5)]
        assert batch.entries == tuple(added)
        assert all(entry.quality == 0.7 for entry in added)

    def test_sizes_recorded(self, batch, make_uploads, jpeg_bytes):
        entry = batch.add_files(make_uploads(1))[0]

        assert entry.original_size == len(jpeg_bytes)
        assert entry.compressed_size == len(entry.compressed_bytes)

    def test_group_over_limit_rejected_from_empty(self, batch, make_uploads):
        with pytest.raises(CapacityExceededError) as excinfo:
            batch.add_files(make_uploads(25))

        assert len(batch) == 0
        assert excinfo.value.incoming == 25
        assert excinfo.value.limit == 20

    def test_group_over_limit_leaves_existing(self, batch, make_uploads):
        batch.add_files(make_uploads(15))
        before = batch.entries

        with pytest.raises(CapacityExceededError):
            batch.add_files(make_uploads(6, start=15))

        assert batch.entries == before
        assert len(batch) == 15

    def test_exactly_at_limit(self, batch, make_uploads):
        batch.add_files(make_uploads(15))
        batch.add_files(make_uploads(5, start=15))
        assert len(batch) == 20
        assert batch.remaining_capacity == 0

    def test_other_formats_excluded(self, batch, make_uploads, png_bytes):
        uploads = make_uploads(2) + [
            UploadedFile("diagram.png", png_bytes, "image/png"),
            UploadedFile("notes.txt", b"hello"),
        ]

        added = batch.add_files(uploads)

        assert len(added) == 2
        assert len(batch) == 2

    def test_excluded_files_do_not_count(self, batch, make_uploads, png_bytes):
        batch.add_files(make_uploads(19))
        extra = make_uploads(1, start=19) + [UploadedFile("a.png", png_bytes)] * 5

        batch.add_files(extra)

        assert len(batch) == 20

    def test_undecodable_jpeg_skipped(self, batch, make_uploads, caplog):
        uploads = make_uploads(1) + [UploadedFile("broken.jpg", b"\xff\xd8garbage")]

        with caplog.at_level(logging.WARNING):
            added = batch.add_files(uploads)

        assert [entry.source_name for entry in added] == ["photo_0.jpg"]
        assert "broken.jpg" in caplog.text

    def test_large_file_warns(self, make_uploads, caplog):
        batch = BatchCompressor(BatchConfig(max_file_size_bytes=10))

        with caplog.at_level(logging.WARNING):
            batch.add_files(make_uploads(1))

        assert len(batch) == 1
        assert "photo_0.jpg" in caplog.text

    def test_capacity_notice(self, make_uploads):
        messages = []
        batch = BatchCompressor(notifier=messages.append)

        with pytest.raises(CapacityExceededError):
            batch.add_files(make_uploads(21))

        assert messages == ["Upload limit of 20 images reached."]


class TestEntries:
    """Tests for per-entry operations."""

    def test_update_quality_replaces_only_that_entry(self, batch, make_uploads):
        batch.add_files(make_uploads(3))
        before = batch.entries

        updated = batch.update_quality(1, 0.2)

        assert batch[1] is updated
        assert updated.quality == 0.2
        assert updated.compressed_size == len(updated.compressed_bytes)
        assert updated.source_bytes == before[1].source_bytes
        assert batch[0] is before[0]
        assert batch[2] is before[2]

    def test_lower_quality_not_larger(self, batch, make_uploads):
        batch.add_files(make_uploads(1))
        high = batch.update_quality(0, 0.9).compressed_size
        low = batch.update_quality(0, 0.2).compressed_size
        assert high >= low

    def test_update_quality_validates(self, batch, make_uploads):
        batch.add_files(make_uploads(1))
        with pytest.raises(ValueError):
            batch.update_quality(0, 0)

    def test_update_quality_bad_index(self, batch):
        with pytest.raises(IndexError):
            batch.update_quality(0, 0.5)

    def test_entry_removed_during_update(self, batch, make_uploads, monkeypatch):
        batch.add_files(make_uploads(2))
        real_recompress = batch_compressor.recompress_entry

        def recompress_then_remove(entry, quality):
            result = real_recompress(entry, quality)
            batch.remove(0)
            return result

        monkeypatch.setattr(batch_compressor, "recompress_entry", recompress_then_remove)

        with pytest.raises(BatchChangedError) as excinfo:
            batch.update_quality(1, 0.3)

        assert isinstance(excinfo.value, EditorError)
        assert [e.source_name for e in batch.entries] == ["photo_1.jpg"]
        assert batch[0].quality == 0.7

    def test_remove_and_clear(self, batch, make_uploads):
        batch.add_files(make_uploads(3))

        removed = batch.remove(0)

        assert isinstance(removed, BatchImageEntry)
        assert [e.source_name for e in batch.entries] == ["photo_1.jpg", "photo_2.jpg"]
        batch.clear()
        assert len(batch) == 0

    def test_savings_percent(self, batch, make_uploads):
        batch.add_files(make_uploads(1))
        entry = batch.update_quality(0, 0.1)

        expected = 100 * (entry.original_size - entry.compressed_size) / entry.original_size
        assert entry.savings_percent == pytest.approx(expected)

    def test_savings_percent_of_empty_source(self):
        entry = BatchImageEntry("a.jpg", "a.jpg", b"", b"", 0.7, 0, 0)
        assert entry.savings_percent == 0.0

    def test_totals(self, batch, make_uploads, jpeg_bytes):
        batch.add_files(make_uploads(2))
        assert batch.total_original_size == 2 * len(jpeg_bytes)
        assert batch.total_compressed_size == sum(e.compressed_size for e in batch.entries)

    def test_preview_is_png(self, batch, make_uploads):
        batch.add_files(make_uploads(1))
        assert batch.preview(0).startswith(b"\x89PNG")


class TestExport:
    """Tests for export_zip and write_zip."""

    def test_zip_contains_each_entry(self, batch, make_uploads):
        batch.add_files(make_uploads(3))
        batch.update_quality(2, 0.4)

        with zipfile.ZipFile(io.BytesIO(batch.export_zip())) as archive:
            assert archive.namelist() == ["photo_0.jpg", "photo_1.jpg", "photo_2.jpg"]
            assert archive.read("photo_2.jpg") == batch[2].compressed_bytes

    def test_duplicate_names_are_suffixed(self, batch, jpeg_bytes):
        batch.add_files([
            UploadedFile("dup.jpg", jpeg_bytes),
            UploadedFile("dup.jpeg", jpeg_bytes),
        ])
        assert batch.archive_names() == ["dup.jpg", "dup_1.jpg"]

    def test_empty_batch(self, batch):
        with pytest.raises(EmptyBatchError):
            batch.export_zip()

    def test_write_zip(self, batch, make_uploads, tmp_path):
        batch.add_files(make_uploads(2))

        path = batch.write_zip(tmp_path)

        assert path == tmp_path / "compressed_images.zip"
        with zipfile.ZipFile(path) as archive:
            assert len(archive.namelist()) == 2

    def test_write_zip_missing_dir(self, batch, make_uploads, tmp_path):
        batch.add_files(make_uploads(1))
        with pytest.raises(OSError):
            batch.write_zip(tmp_path / "missing")


class TestBatchConfig:
    """Tests for BatchConfig."""

    def test_round_trip_dict(self):
        config = BatchConfig(max_files=5, default_quality=0.4)
        assert BatchConfig.from_dict(config.to_dict()) == config

    @pytest.mark.parametrize("kwargs", [{"max_files": 0}, {"default_quality": 1.5}])
    def test_validation(self, kwargs):
        with pytest.raises(ValueError):
            BatchConfig(**kwargs)
