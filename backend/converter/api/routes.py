"""API routes for upload, conversion and archive download."""
import json
import logging
from typing import Optional

from fastapi import APIRouter, Body, File, Form, UploadFile
from fastapi.responses import JSONResponse, Response

from converter.batch import create_archive
from converter.config import (
    ALLOWED_MIME_TYPES,
    ARCHIVE_FILENAME,
    DEFAULT_QUALITY,
    MAX_FILES_PER_UPLOAD,
    MAX_PAYLOAD_BYTES,
    OUTPUT_FORMATS,
    UPLOAD_FIELD,
)
from converter.conversion.encoder import output_name
from converter.conversion.models import UploadedFile
from converter.conversion.service import derive_base_name, get_conversion_service
from converter.conversion.settings import resolve_settings

logger = logging.getLogger("converter.api")
router = APIRouter(prefix="/api", tags=["converter"])

WARNINGS_HEADER = "X-Conversion-Warnings"


def failure(message: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status_code)


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/limits")
def get_limits():
    """Return upload limits for the client."""
    return {
        "max_payload_mb": MAX_PAYLOAD_BYTES // (1024 * 1024),
        "max_payload_bytes": MAX_PAYLOAD_BYTES,
        "max_files_per_upload": MAX_FILES_PER_UPLOAD or None,
        "allowed_mime_types": sorted(ALLOWED_MIME_TYPES),
    }


@router.get("/formats")
def get_formats():
    return {
        "input": sorted(ALLOWED_MIME_TYPES),
        "output": list(OUTPUT_FORMATS),
        "default_quality": DEFAULT_QUALITY,
    }


@router.post("/preview-names")
def preview_names(
    filenames: list[str] = Body(..., embed=True),
    jpeg: bool = Body(False, embed=True),
    webp: bool = Body(False, embed=True),
    avif: bool = Body(False, embed=True),
):
    """Output names each file would get with the given format selection."""
    settings = resolve_settings({"jpeg": "on" if jpeg else None, "webp": "on" if webp else None, "avif": "on" if avif else None})
    out = []
    for filename in filenames:
        base_name = derive_base_name(filename)
        names = {}
        if base_name:
            for fmt in settings.enabled_formats:
                names[fmt.value] = output_name(base_name, fmt)
        out.append(names)
    return {"files": out}


@router.post("/files")
async def convert_files(
    files: Optional[list[UploadFile]] = File(None, alias=UPLOAD_FIELD),
    quality: Optional[str] = Form(None),
    width: Optional[str] = Form(None),
    jpeg: Optional[str] = Form(None),
    webp: Optional[str] = Form(None),
    avif: Optional[str] = Form(None),
):
    """Convert one or many uploaded images and return them as a single zip."""
    if not files:
        return failure("Data is empty!")
    if MAX_FILES_PER_UPLOAD and len(files) > MAX_FILES_PER_UPLOAD:
        return failure(f"Max {MAX_FILES_PER_UPLOAD} files per upload", status_code=400)

    settings = resolve_settings({"quality": quality, "width": width, "jpeg": jpeg, "webp": webp, "avif": avif})
    uploads = [UploadedFile(original_filename=f.filename, mime_type=f.content_type, source=f.file) for f in files]
    svc = get_conversion_service()
    try:
        result = await svc.convert_batch(uploads, settings)
        archive = create_archive(result.files)
    finally:
        for f in files:
            await f.close()

    headers = {"Content-Disposition": f"attachment; filename={ARCHIVE_FILENAME}"}
    if result.failures:
        headers[WARNINGS_HEADER] = json.dumps([w.to_dict() for w in result.failures])
    logger.info("Sending %s (%s entries, %s bytes)", ARCHIVE_FILENAME, len(archive.entries), archive.size)
    return Response(content=archive.buffer, media_type="application/zip", headers=headers)


@router.api_route("/files", methods=["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "DELETE"], include_in_schema=False)
def files_method_not_allowed():
    return failure("Only POST requests allowed", status_code=405)
