"""Shared fixtures: synthetic images and upload helpers."""
import io

import pytest
from PIL import Image, ImageDraw, features

from converter.conversion.models import EncodedOutput, OutputFormat, Settings, UploadedFile
from converter.exceptions import EncodeError

HAS_AVIF = features.check("avif")
requires_avif = pytest.mark.skipif(not HAS_AVIF, reason="Pillow built without AVIF support")


def _draw_pattern(img: Image.Image) -> Image.Image:
    draw = ImageDraw.Draw(img)
    w, h = img.size
    for i in range(20):
        x, y = (i * 17) % w, (i * 11) % h
        color = (i * 13 % 256, i * 7 % 256, i * 29 % 256)
        if img.mode == "RGBA":
            color = color + (80 + i * 8,)
        draw.rectangle([x, y, x + w // 5, y + h // 5], fill=color)
    return img


def image_bytes(fmt: str = "PNG", size=(120, 80), mode: str = "RGB") -> bytes:
    background = (255, 255, 255, 0) if mode == "RGBA" else "white"
    img = _draw_pattern(Image.new(mode, size, color=background))
    buf = io.BytesIO()
    img.save(buf, fmt)
    return buf.getvalue()


def make_upload(filename, mime_type="image/png", data=None) -> UploadedFile:
    if data is None:
        data = image_bytes()
    return UploadedFile(original_filename=filename, mime_type=mime_type, source=io.BytesIO(data))


def fake_encoder(data, settings, fmt, base_name, filename=""):
    """Deterministic stand-in for the Pillow encoder: buffer records its inputs."""
    fmt = OutputFormat(fmt)
    return EncodedOutput(
        output_file_name=f"{base_name}.{fmt.extension}",
        buffer=f"{fmt.value}:{settings.quality}:{settings.width}:{len(data)}".encode(),
    )


def failing_encoder(*bad_formats: str):
    """Fake encoder that raises EncodeError for the given formats."""

    def encode(data, settings, fmt, base_name, filename=""):
        fmt = OutputFormat(fmt)
        if fmt.value in bad_formats:
            raise EncodeError(filename, fmt.value, "cannot identify image file")
        return fake_encoder(data, settings, fmt, base_name, filename)

    return encode


@pytest.fixture
def png_bytes() -> bytes:
    return image_bytes("PNG")


@pytest.fixture
def rgba_png_bytes() -> bytes:
    return image_bytes("PNG", size=(64, 64), mode="RGBA")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return image_bytes("JPEG", size=(200, 100))


@pytest.fixture
def all_formats() -> Settings:
    return Settings(quality=80, width=None, use_jpeg=True, use_webp=True, use_avif=True)


@pytest.fixture
def jpeg_only() -> Settings:
    return Settings(quality=80, width=None, use_jpeg=True)
