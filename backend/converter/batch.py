"""Archive packaging: all surviving outputs of a batch into one in-memory zip."""
import io
import logging
import zipfile
from typing import Iterable

from converter.config import NAME_COLLISION_POLICY
from converter.conversion.models import Archive, ProcessedFile
from converter.exceptions import NameCollisionError

logger = logging.getLogger("converter.batch")


def _disambiguate(name: str, taken: set[str]) -> str:
    """photo.jpeg -> photo-1.jpeg, photo-2.jpeg, ... (first free one)."""
    stem, dot, ext = name.rpartition(".")
    if not dot:
        stem, ext = name, ""
    n = 1
    while True:
        candidate = f"{stem}-{n}.{ext}" if dot else f"{stem}-{n}"
        if candidate not in taken:
            return candidate
        n += 1


def create_archive(files: Iterable[ProcessedFile], collision_policy: str = NAME_COLLISION_POLICY) -> Archive:
    """
    Zip every present output, file order first then jpeg, webp, avif.
    collision_policy: rename (suffix -1, -2, ...) | reject (raise NameCollisionError).
    """
    buf = io.BytesIO()
    entries: list[str] = []
    taken: set[str] = set()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for processed in files:
            for output in processed.outputs():
                arcname = output.output_file_name
                if arcname in taken:
                    if collision_policy == "reject":
                        raise NameCollisionError(arcname)
                    renamed = _disambiguate(arcname, taken)
                    logger.warning("Duplicate entry %s from %s, stored as %s", arcname, processed.original_filename, renamed)
                    arcname = renamed
                taken.add(arcname)
                entries.append(arcname)
                zf.writestr(arcname, output.buffer)
    archive = Archive(buffer=buf.getvalue(), entries=entries)
    logger.info("Created zip with %s entries (%s bytes)", len(entries), archive.size)
    return archive
