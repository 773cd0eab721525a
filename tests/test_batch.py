"""Archive packaging."""
import io
import zipfile

import pytest

from converter.batch import create_archive
from converter.conversion.models import EncodedOutput, ProcessedFile
from converter.exceptions import NameCollisionError


def _processed(base, **slots) -> ProcessedFile:
    processed = ProcessedFile(base_name=base, original_filename=f"{base}.png")
    for fmt, payload in slots.items():
        setattr(processed, fmt, EncodedOutput(f"{base}.{fmt}", payload))
    return processed


def _read(archive) -> dict[str, bytes]:
    with zipfile.ZipFile(io.BytesIO(archive.buffer)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


class TestCreateArchive:
    def test_fixed_format_order(self):
        archive = create_archive([_processed("photo", avif=b"A", jpeg=b"J", webp=b"W")])
        assert archive.entries == ["photo.jpeg", "photo.webp", "photo.avif"]
        assert _read(archive) == {"photo.jpeg": b"J", "photo.webp": b"W", "photo.avif": b"A"}

    def test_file_order_then_format_order(self):
        archive = create_archive([_processed("b", webp=b"1", jpeg=b"2"), _processed("a", jpeg=b"3")])
        assert archive.entries == ["b.jpeg", "b.webp", "a.jpeg"]

    def test_size_matches_buffer(self):
        archive = create_archive([_processed("x", jpeg=b"data")])
        assert archive.size == len(archive.buffer) > 0
        assert zipfile.is_zipfile(io.BytesIO(archive.buffer))

    def test_empty_slots_add_nothing(self):
        archive = create_archive([_processed("empty"), _processed("full", jpeg=b"J")])
        assert archive.entries == ["full.jpeg"]

    def test_collision_renamed(self):
        archive = create_archive(
            [_processed("photo", jpeg=b"1"), _processed("photo", jpeg=b"2"), _processed("photo", jpeg=b"3")],
            collision_policy="rename",
        )
        assert archive.entries == ["photo.jpeg", "photo-1.jpeg", "photo-2.jpeg"]
        assert _read(archive)["photo-1.jpeg"] == b"2"

    def test_collision_rejected(self):
        with pytest.raises(NameCollisionError) as exc_info:
            create_archive([_processed("photo", webp=b"1"), _processed("photo", webp=b"2")], collision_policy="reject")
        assert exc_info.value.entry_name == "photo.webp"

    def test_same_base_different_formats_do_not_collide(self):
        archive = create_archive([_processed("photo", jpeg=b"1"), _processed("photo", webp=b"2")], collision_policy="reject")
        assert archive.entries == ["photo.jpeg", "photo.webp"]
