"""Format encoder adapter over Pillow: one encoded buffer per (file, format)."""
import io
import logging

from PIL import Image

from converter.config import WEBP_METHOD
from converter.conversion.models import EncodedOutput, OutputFormat, Settings
from converter.conversion.resize import prepare_mode, resize_to_width
from converter.exceptions import EncodeError

logger = logging.getLogger("converter.encoder")

# Pillow raises these for corrupt input, unsupported modes/sizes and missing codecs
CODEC_ERRORS = (OSError, ValueError, KeyError, SyntaxError, Image.DecompressionBombError)


def output_name(base_name: str, fmt: OutputFormat) -> str:
    return f"{base_name}.{fmt.extension}"


def save_options(fmt: OutputFormat, quality: int) -> dict:
    options = {"format": fmt.pil_format, "quality": quality}
    if fmt == OutputFormat.JPEG:
        options.update(optimize=True, progressive=True)
    elif fmt == OutputFormat.WEBP:
        options["method"] = WEBP_METHOD
    return options


def encode_image(
    data: bytes,
    settings: Settings,
    fmt: OutputFormat,
    base_name: str,
    filename: str = "",
) -> EncodedOutput:
    """
    Decode `data`, resize to settings.width if set, and encode as `fmt`.
    Blocking; the service runs it in a worker thread. Raises EncodeError on codec failure.
    """
    fmt = OutputFormat(fmt)
    out = io.BytesIO()
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            work = prepare_mode(img, fmt)
            if settings.width is not None:
                work = resize_to_width(work, settings.width)
            work.save(out, **save_options(fmt, settings.quality))
    except CODEC_ERRORS as e:
        raise EncodeError(filename or base_name, fmt.value, str(e) or type(e).__name__) from e
    name = output_name(base_name, fmt)
    logger.info("Encoded %s -> %s (%s bytes)", filename or base_name, name, out.tell())
    return EncodedOutput(output_file_name=name, buffer=out.getvalue())
