"""
utils/helpers.py
Shared utility functions used across services.
"""
import logging
import math
import re

from reportlab.lib import colors

# Configure module logger
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0


def get_logger(name: str) -> logging.Logger:
    """Return a named logger."""
    return logging.getLogger(name)


def pt_to_mm(pt: float) -> float:
    """Convert typographic points to millimeters (1pt = 25.4/72 mm)."""
    return pt * MM_PER_INCH / POINTS_PER_INCH


def mm_to_pt(value_mm: float) -> float:
    """Convert millimeters to typographic points."""
    return value_mm * POINTS_PER_INCH / MM_PER_INCH


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round with ties going towards +infinity (2.5 -> 3, -2.5 -> -2).

    Python's round() uses banker's rounding, which would turn 37.125 into
    37.12. Non-finite values pass through unchanged.
    """
    if not math.isfinite(value):
        return value
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def parse_color(value: str | None, default: colors.Color = colors.black) -> colors.Color:
    """Parse '#RRGGBB' (or 'RRGGBB'). Anything unparseable falls back to `default`."""
    if not value:
        return default
    try:
        return colors.HexColor("#" + str(value).strip().lstrip("#"))
    except (ValueError, TypeError):
        return default


def color_to_rgb(color: colors.Color) -> tuple[int, int, int]:
    """0-255 channels for Pillow."""
    return tuple(round(channel * 255) for channel in color.rgb())


def safe_filename(name: str) -> str:
    """Turn a participant name into a filesystem-friendly stem."""
    stem = re.sub(r"[^A-Za-z0-9_\-]+", "_", name.strip()).strip("_")
    return stem or "certificate"
