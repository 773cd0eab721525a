"""Resize and mode helpers applied before encoding."""
import logging

from PIL import Image

from converter.conversion.models import OutputFormat

logger = logging.getLogger("converter.resize")

# Modes each encoder accepts as-is
_NATIVE_MODES = {
    OutputFormat.JPEG: ("RGB", "L", "CMYK"),
    OutputFormat.WEBP: ("RGB", "RGBA"),
    OutputFormat.AVIF: ("RGB", "RGBA"),
}


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info


def prepare_mode(img: Image.Image, fmt: OutputFormat) -> Image.Image:
    """Convert to a mode the target encoder can write. JPEG drops alpha."""
    if img.mode in _NATIVE_MODES[fmt]:
        return img
    if fmt != OutputFormat.JPEG and _has_alpha(img):
        return img.convert("RGBA")
    return img.convert("RGB")


def resize_to_width(img: Image.Image, target_width: int) -> Image.Image:
    """
    Scale image to target_width, maintaining aspect ratio.
    Upscales when the source is narrower than the target.
    """
    w, h = img.size
    if w == target_width:
        return img
    scale = target_width / w
    new_h = max(1, int(round(h * scale)))
    logger.debug("Resizing %sx%s -> %sx%s", w, h, target_width, new_h)
    return img.resize((target_width, new_h), Image.Resampling.LANCZOS)
