"""Per-file processing and concurrent batch orchestration."""
import asyncio
import logging
from pathlib import PurePosixPath
from typing import Callable, Iterable, Optional, Union

from converter.config import ALLOWED_MIME_TYPES, ENCODE_FAILURE_POLICY
from converter.conversion.encoder import encode_image
from converter.conversion.models import (
    BatchResult,
    EncodedOutput,
    EncodeFailure,
    OutputFormat,
    ProcessedFile,
    Settings,
    UploadedFile,
)
from converter.exceptions import EncodeError, NoFilesProcessedError

logger = logging.getLogger("converter.service")

Encoder = Callable[..., EncodedOutput]


def derive_base_name(filename: Optional[str]) -> str:
    """Filename without directories and without its last extension; "" if nothing is left."""
    if not filename:
        return ""
    name = PurePosixPath(filename.replace("\\", "/")).name
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[0]


class ConversionService:
    """Validates uploads and fans them out to the encoder, one task per (file, format)."""

    def __init__(self, encode_failure_policy: str = ENCODE_FAILURE_POLICY, encoder: Encoder = encode_image):
        self.encode_failure_policy = encode_failure_policy
        self._encoder = encoder

    async def _encode(
        self,
        data: bytes,
        settings: Settings,
        fmt: OutputFormat,
        base_name: str,
        filename: str,
    ) -> Union[EncodedOutput, EncodeFailure]:
        try:
            return await asyncio.to_thread(self._encoder, data, settings, fmt, base_name, filename)
        except EncodeError as e:
            if self.encode_failure_policy == "abort":
                logger.error("Encoding %s as %s failed, aborting batch: %s", filename, fmt.value, e.reason)
                raise
            logger.warning("Encoding %s as %s failed, skipping: %s", filename, fmt.value, e.reason)
            return EncodeFailure(original_filename=filename, format=fmt, message=e.reason)

    async def process_file(self, upload: UploadedFile, settings: Settings) -> Optional[ProcessedFile]:
        """Convert one upload into every enabled format. None means the file was skipped."""
        if upload.mime_type not in ALLOWED_MIME_TYPES:
            logger.warning("Skipping %s: unsupported type %s", upload.original_filename, upload.mime_type)
            return None
        base_name = derive_base_name(upload.original_filename)
        if not base_name:
            logger.warning("Skipping %r: no base name", upload.original_filename)
            return None
        filename = upload.original_filename or base_name
        processed = ProcessedFile(base_name=base_name, original_filename=filename)
        formats = settings.enabled_formats
        if not formats:
            return processed

        data = await asyncio.to_thread(upload.read)
        results = await asyncio.gather(
            *(self._encode(data, settings, fmt, base_name, filename) for fmt in formats)
        )
        for fmt, result in zip(formats, results):
            if isinstance(result, EncodeFailure):
                processed.failures.append(result)
            else:
                processed.set_output(fmt, result)
        return processed

    async def convert_batch(self, uploads: Union[UploadedFile, Iterable[UploadedFile]], settings: Settings) -> BatchResult:
        """
        Process all uploads concurrently and wait for every one of them.
        Skipped files are dropped; raises NoFilesProcessedError if nothing would reach the archive.
        """
        if isinstance(uploads, UploadedFile):
            uploads = [uploads]
        uploads = list(uploads)
        outcomes = await asyncio.gather(*(self.process_file(u, settings) for u in uploads))

        result = BatchResult()
        for upload, processed in zip(uploads, outcomes):
            if processed is None:
                result.skipped.append(upload.original_filename or "")
            else:
                result.files.append(processed)
        logger.info(
            "Batch done: %s processed, %s skipped, %s encode failures",
            len(result.files), len(result.skipped), len(result.failures),
        )
        if not any(p.has_outputs for p in result.files):
            raise NoFilesProcessedError()
        return result


# Singleton
_conversion_service: Optional[ConversionService] = None


def get_conversion_service() -> ConversionService:
    global _conversion_service
    if _conversion_service is None:
        _conversion_service = ConversionService()
    return _conversion_service
