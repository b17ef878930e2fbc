"""
services/font_service.py
Maps editor font tokens onto the small font set both renderers share,
and loads the matching glyph files for Pillow.

Each family/weight is backed by exactly one font program: the Type 1 file
ReportLab ships for its standard PDF font. The PDF names the font and the
preview rasterizes that same file, so both measure identical advance widths.
"""
from functools import lru_cache
from typing import Union

from PIL import ImageFont
from reportlab.pdfbase import pdfmetrics

from certlayout.core.errors import FontUnavailableError
from certlayout.models.certificate_model import FontFamily, FontWeight
from certlayout.utils.helpers import get_logger

logger = get_logger(__name__)

_FAMILY_ALIASES: dict[str, FontFamily] = {
    "arial": FontFamily.SANS,
    "helvetica": FontFamily.SANS,
    "helvetica neue": FontFamily.SANS,
    "sans-serif": FontFamily.SANS,
    "base-sans": FontFamily.SANS,
    "times": FontFamily.SERIF,
    "times new roman": FontFamily.SERIF,
    "times-roman": FontFamily.SERIF,
    "serif": FontFamily.SERIF,
    "base-serif": FontFamily.SERIF,
    "courier": FontFamily.MONO,
    "courier new": FontFamily.MONO,
    "monospace": FontFamily.MONO,
    "base-mono": FontFamily.MONO,
}

DEFAULT_FAMILY = FontFamily.SANS

# ReportLab's standard Type 1 fonts; no embedding needed.
_PDF_FONTS: dict[tuple[FontFamily, FontWeight], str] = {
    (FontFamily.SANS, FontWeight.NORMAL): "Helvetica",
    (FontFamily.SANS, FontWeight.BOLD): "Helvetica-Bold",
    (FontFamily.SERIF, FontWeight.NORMAL): "Times-Roman",
    (FontFamily.SERIF, FontWeight.BOLD): "Times-Bold",
    (FontFamily.MONO, FontWeight.NORMAL): "Courier",
    (FontFamily.MONO, FontWeight.BOLD): "Courier-Bold",
}

# Type 1 programs are drawn on a 1000-unit em.
FONT_UNITS_PER_EM = 1000


def resolve_font(token: Union[str, FontFamily, None]) -> FontFamily:
    """
    Resolve a font token to one of the shared families.

    Accepts CSS font stacks ('"Times New Roman", Times, serif'): only the
    first family counts. Unknown tokens quietly become the sans default.
    """
    if isinstance(token, FontFamily):
        return token
    first = (token or "").split(",")[0].strip().strip("'\"").lower()
    family = _FAMILY_ALIASES.get(first)
    if family is None:
        logger.debug(f"Unknown font token {token!r}, using {DEFAULT_FAMILY.value}")
        return DEFAULT_FAMILY
    return family


def normalize_weight(weight: Union[str, int, float, FontWeight, None]) -> FontWeight:
    """Numeric weights >= 600 and 'bold'/'bolder' are bold; everything else normal."""
    if isinstance(weight, FontWeight):
        return weight
    if isinstance(weight, bool) or weight is None:
        return FontWeight.NORMAL
    if isinstance(weight, (int, float)):
        return FontWeight.BOLD if weight >= 600 else FontWeight.NORMAL
    value = str(weight).strip().lower()
    if value.isdigit():
        return normalize_weight(int(value))
    return FontWeight.BOLD if value in ("bold", "bolder") else FontWeight.NORMAL


def pdf_font_name(family: FontFamily, weight: FontWeight) -> str:
    """ReportLab font name for a resolved family/weight."""
    return _PDF_FONTS[(family, weight)]


@lru_cache(maxsize=None)
def font_file(family: FontFamily, weight: FontWeight) -> str:
    """
    Path of the glyph file behind `pdf_font_name(family, weight)`.

    Raises FontUnavailableError when the ReportLab installation lacks it;
    measuring the preview with any other face would move line breaks.
    """
    font_name = pdf_font_name(family, weight)
    path = pdfmetrics.getTypeFace(font_name).findT1File()
    if not path:
        raise FontUnavailableError(
            f"Font file for {font_name} not found in ReportLab's font search path; "
            "reinstall reportlab or restore its fonts directory."
        )
    logger.debug(f"{family.value}/{weight.value} -> {path}")
    return path


def load_font(family: FontFamily, weight: FontWeight, size_px: float) -> ImageFont.FreeTypeFont:
    """
    Load the shared face for a family/weight at `size_px` (fractional sizes allowed).

    Basic layout keeps Pillow from kerning, as ReportLab's drawString does not kern.
    """
    return ImageFont.truetype(font_file(family, weight), size_px, layout_engine=ImageFont.Layout.BASIC)


def check_fonts() -> list[str]:
    """Resolve every face up front so a broken installation fails at startup."""
    return [font_file(family, weight) for family, weight in _PDF_FONTS]
