"""
services/measurer.py
Text width measurement for the two rendering back ends.

Both measurers return widths in millimeters so the fitter can compare them
directly against box geometry.
"""
from abc import ABC, abstractmethod
from typing import Union

from PIL import ImageFont
from reportlab.pdfbase.pdfmetrics import stringWidth

from certlayout.models.certificate_model import FontFamily, FontWeight
from certlayout.services.font_service import (
    FONT_UNITS_PER_EM,
    load_font,
    normalize_weight,
    pdf_font_name,
    resolve_font,
)
from certlayout.utils.helpers import pt_to_mm


class TextMeasurer(ABC):
    """Measures rendered text width. One instance per request; not thread-safe."""

    @abstractmethod
    def measure_width(
        self,
        text: str,
        font_token: Union[str, FontFamily],
        weight: Union[str, int, FontWeight],
        size_pt: float,
    ) -> float:
        """Width of `text` in millimeters at `size_pt`."""


class PdfTextMeasurer(TextMeasurer):
    """Uses the AFM metrics ReportLab lays out the final PDF with."""

    def measure_width(self, text, font_token, weight, size_pt):
        font_name = pdf_font_name(resolve_font(font_token), normalize_weight(weight))
        return pt_to_mm(stringWidth(text, font_name, size_pt))


class CanvasTextMeasurer(TextMeasurer):
    """
    Uses Pillow's FreeType metrics, as the raster preview draws with them.

    Faces are measured at one pixel per font unit, so every advance is a whole
    number of units (no hinting round-off), then scaled to the requested size.
    """

    def __init__(self):
        self._fonts: dict[tuple[FontFamily, FontWeight, float], ImageFont.FreeTypeFont] = {}

    def font_for(self, family: FontFamily, weight: FontWeight, size_px: float) -> ImageFont.FreeTypeFont:
        key = (family, weight, size_px)
        if key not in self._fonts:
            self._fonts[key] = load_font(family, weight, size_px)
        return self._fonts[key]

    def measure_width(self, text, font_token, weight, size_pt):
        if not text:
            return 0.0
        font = self.font_for(resolve_font(font_token), normalize_weight(weight), FONT_UNITS_PER_EM)
        width_pt = font.getlength(text) * size_pt / FONT_UNITS_PER_EM
        return pt_to_mm(width_pt)
