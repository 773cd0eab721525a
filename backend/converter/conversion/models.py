"""Conversion request/response models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Iterator, Optional


class OutputFormat(str, Enum):
    JPEG = "jpeg"
    WEBP = "webp"
    AVIF = "avif"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def pil_format(self) -> str:
        return self.value.upper()


# Archive entry order for each file
FORMAT_ORDER = (OutputFormat.JPEG, OutputFormat.WEBP, OutputFormat.AVIF)


@dataclass(frozen=True)
class Settings:
    """Resolved, read-only settings shared by every file in a batch."""

    quality: int = 80
    width: Optional[int] = None  # None keeps the original dimensions
    use_jpeg: bool = False
    use_webp: bool = False
    use_avif: bool = False

    def is_enabled(self, fmt: OutputFormat) -> bool:
        return {
            OutputFormat.JPEG: self.use_jpeg,
            OutputFormat.WEBP: self.use_webp,
            OutputFormat.AVIF: self.use_avif,
        }[fmt]

    @property
    def enabled_formats(self) -> list[OutputFormat]:
        return [fmt for fmt in FORMAT_ORDER if self.is_enabled(fmt)]


@dataclass
class UploadedFile:
    """An uploaded part. The HTTP layer owns `source` and closes it."""

    original_filename: Optional[str]
    mime_type: Optional[str]
    source: BinaryIO

    def read(self) -> bytes:
        self.source.seek(0)
        return self.source.read()


@dataclass(frozen=True)
class EncodedOutput:
    output_file_name: str
    buffer: bytes


@dataclass(frozen=True)
class EncodeFailure:
    original_filename: str
    format: OutputFormat
    message: str

    def to_dict(self) -> dict:
        return {"filename": self.original_filename, "format": self.format.value, "message": self.message}


@dataclass
class ProcessedFile:
    base_name: str
    original_filename: str
    jpeg: Optional[EncodedOutput] = None
    webp: Optional[EncodedOutput] = None
    avif: Optional[EncodedOutput] = None
    failures: list[EncodeFailure] = field(default_factory=list)

    def set_output(self, fmt: OutputFormat, output: EncodedOutput) -> None:
        setattr(self, fmt.value, output)

    def get_output(self, fmt: OutputFormat) -> Optional[EncodedOutput]:
        return getattr(self, fmt.value)

    def outputs(self) -> Iterator[EncodedOutput]:
        """Present slots in archive order (jpeg, webp, avif)."""
        for fmt in FORMAT_ORDER:
            output = self.get_output(fmt)
            if output is not None:
                yield output

    @property
    def has_outputs(self) -> bool:
        return any(True for _ in self.outputs())


@dataclass
class BatchResult:
    files: list[ProcessedFile] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def failures(self) -> list[EncodeFailure]:
        return [f for processed in self.files for f in processed.failures]


@dataclass(frozen=True)
class Archive:
    buffer: bytes
    entries: list[str]

    @property
    def size(self) -> int:
        return len(self.buffer)
