from .service import ConversionService, derive_base_name, get_conversion_service
from .settings import resolve_settings
from .models import (
    Archive,
    BatchResult,
    EncodedOutput,
    EncodeFailure,
    OutputFormat,
    ProcessedFile,
    Settings,
    UploadedFile,
)

__all__ = [
    "Archive",
    "BatchResult",
    "ConversionService",
    "EncodedOutput",
    "EncodeFailure",
    "OutputFormat",
    "ProcessedFile",
    "Settings",
    "UploadedFile",
    "derive_base_name",
    "get_conversion_service",
    "resolve_settings",
]
