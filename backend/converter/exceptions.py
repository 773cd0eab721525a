"""Errors raised by the conversion pipeline."""
from typing import Optional


class ConverterError(Exception):
    """Base class for conversion and packaging errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EncodeError(ConverterError):
    """A codec failed to decode or encode one (file, format) pair."""

    status_code = 422

    def __init__(self, filename: Optional[str], format: str, message: str):
        super().__init__(f"Could not encode {filename or 'file'} as {format}: {message}")
        self.filename = filename
        self.format = format
        self.reason = message


class NameCollisionError(ConverterError):
    """Two outputs would be written under the same archive entry name."""

    status_code = 422

    def __init__(self, entry_name: str):
        super().__init__(f"Duplicate output name in batch: {entry_name}")
        self.entry_name = entry_name


class NoFilesProcessedError(ConverterError):
    """Every file in the batch was skipped or produced no output."""

    status_code = 200

    def __init__(self, message: str = "No files processed"):
        super().__init__(message)
