"""Resolve raw form fields into conversion settings. Never raises."""
import logging
import math
import re
from typing import Mapping, Optional

from converter.config import DEFAULT_QUALITY, MAX_QUALITY, MIN_QUALITY
from converter.conversion.models import Settings

logger = logging.getLogger("converter.settings")

# Leading number of a form value, the way browsers' parseInt/parseFloat read it ("85%" -> 85)
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    m = _INT_PREFIX.match(str(value))
    return int(m.group(1)) if m else None


def _parse_number(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    m = _NUMBER_PREFIX.match(str(value))
    return float(m.group(1)) if m else None


def resolve_quality(value: Optional[str]) -> int:
    quality = _parse_int(value)
    if quality is None:
        quality = DEFAULT_QUALITY
    return min(max(quality, MIN_QUALITY), MAX_QUALITY)


def resolve_width(value: Optional[str]) -> Optional[int]:
    """
    Positive width in pixels, or None for "keep original".
    Zero, negative and non-numeric values mean no resize; a fraction below one floors to 1.
    """
    if not value:
        return None
    width = _parse_number(value)
    if width is None or not math.isfinite(width) or width <= 0:
        return None
    return max(int(width), 1)


def _is_checked(value: Optional[str]) -> bool:
    return value is not None and str(value) != ""


def resolve_settings(fields: Mapping[str, Optional[str]]) -> Settings:
    """Build Settings from form fields quality, width, jpeg, webp, avif."""
    settings = Settings(
        quality=resolve_quality(fields.get("quality")),
        width=resolve_width(fields.get("width")),
        use_jpeg=_is_checked(fields.get("jpeg")),
        use_webp=_is_checked(fields.get("webp")),
        use_avif=_is_checked(fields.get("avif")),
    )
    logger.debug("Resolved settings %s", settings)
    return settings
