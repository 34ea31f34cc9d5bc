"""
Resolución de dimensiones de salida

Traduce la calidad y la relación de aspecto elegidas por el usuario a las
dimensiones exactas en píxeles, y detecta la relación canónica más cercana
para dimensiones personalizadas (``WxH``).
"""

import re
from functools import lru_cache

from stylestudio.errors import InvalidDimensions
from stylestudio.schemas import QualityTier, Resolution

# Declaration order breaks ties in nearest_canonical_ratio
CANONICAL_RATIOS: dict[str, float] = {
    "1:1": 1.0,
    "16:9": 16 / 9,
    "9:16": 9 / 16,
    "4:3": 4 / 3,
    "3:4": 3 / 4,
}

FALLBACK_RATIO = "1:1"

RESOLUTION_TABLE: dict[QualityTier, dict[str, tuple[int, int]]] = {
    QualityTier.Q1K: {
        "1:1": (1024, 1024),
        "3:4": (1080, 1440),
        "4:3": (1440, 1080),
        "9:16": (1080, 1920),
        "16:9": (1920, 1080),
    },
    QualityTier.Q2K: {
        "1:1": (2048, 2048),
        "3:4": (2160, 2880),
        "4:3": (2880, 2160),
        "9:16": (2160, 3840),
        "16:9": (3840, 2160),
    },
    QualityTier.Q4K: {
        "1:1": (4096, 4096),
        "3:4": (3072, 4096),
        "4:3": (4096, 3072),
        "9:16": (2304, 4096),
        "16:9": (4096, 2304),
    },
}

_CUSTOM_PATTERN = re.compile(r"^\s*(\d{1,4})\s*[xX]\s*(\d{1,4})\s*$")


def is_canonical(aspect: str) -> bool:
    return aspect in CANONICAL_RATIOS


def parse_custom_dimensions(value: str) -> tuple[int, int]:
    """
    Parse a ``WxH`` string into two positive integers of at most four digits.
    """
    match = _CUSTOM_PATTERN.match(value or "")
    if not match:
        raise InvalidDimensions(f"Invalid custom dimensions: {value!r}")
    width, height = int(match.group(1)), int(match.group(2))
    if width <= 0 or height <= 0:
        raise InvalidDimensions(f"Custom dimensions must be positive: {value!r}")
    return width, height


def nearest_canonical_ratio(width: int, height: int) -> str:
    target = width / height
    closest = FALLBACK_RATIO
    min_diff = float("inf")
    for name, value in CANONICAL_RATIOS.items():
        diff = abs(target - value)
        if diff < min_diff:
            min_diff = diff
            closest = name
    return closest


@lru_cache(maxsize=256)
def resolve(quality: QualityTier, aspect: str) -> Resolution:
    """
    Compute the target pixel dimensions for a quality/aspect selection.

    Canonical ratios are looked up in ``RESOLUTION_TABLE``. Custom ``WxH``
    strings are honoured verbatim and ignore the quality tier; their
    ``canonical_ratio`` is only advisory.

    Raises:
        InvalidDimensions: the aspect is neither canonical nor a valid ``WxH``.
    """
    quality = QualityTier(quality)
    if is_canonical(aspect):
        width, height = RESOLUTION_TABLE[quality][aspect]
        return Resolution(target_width=width, target_height=height, canonical_ratio=aspect)

    width, height = parse_custom_dimensions(aspect)
    return Resolution(
        target_width=width,
        target_height=height,
        canonical_ratio=nearest_canonical_ratio(width, height),
    )


def backend_aspect_ratio(aspect: str) -> str:
    """Canonical token to send to the backend; ``1:1`` when nothing matches."""
    if is_canonical(aspect):
        return aspect
    try:
        width, height = parse_custom_dimensions(aspect)
    except InvalidDimensions:
        return FALLBACK_RATIO
    return nearest_canonical_ratio(width, height)
