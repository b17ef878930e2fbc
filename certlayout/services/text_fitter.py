"""
services/text_fitter.py
Finds the largest font size at which a name fits its box, wrapping on words.

The same BoxTextFitter drives both the PDF and the on-screen preview; only
the TextMeasurer differs, so both agree on size and line breaks.
"""
from typing import List, Union

from certlayout.core.config import settings
from certlayout.core.errors import InvalidArgumentError
from certlayout.models.certificate_model import (
    FitResult,
    FontFamily,
    FontWeight,
    PlacedLine,
    TextAlign,
)
from certlayout.models.geometry import MillimeterBox
from certlayout.services.font_service import normalize_weight, resolve_font
from certlayout.services.measurer import TextMeasurer
from certlayout.utils.helpers import get_logger, pt_to_mm

logger = get_logger(__name__)

# Baseline sits this fraction of the font size below the top of its line.
BASELINE_RATIO = 0.8


def wrap_words(
    text: str,
    measurer: TextMeasurer,
    font: FontFamily,
    weight: FontWeight,
    size_pt: float,
    max_width: float,
) -> List[str]:
    """
    Greedy word wrap: pack whole words into each line while it still fits.

    A word that is wider than `max_width` on its own gets a line to itself.
    """
    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if measurer.measure_width(candidate, font, weight, size_pt) <= max_width:
            current = candidate
            continue
        if current:
            lines.append(current)
        current = word
    if current:
        lines.append(current)
    return lines


class BoxTextFitter:
    """
    Binary search over integer font sizes combined with greedy wrapping.

    All tuning values are explicit so the fitter holds no hidden state:
    two calls with the same inputs return the same FitResult.
    """

    def __init__(
        self,
        measurer: TextMeasurer,
        min_font_size_pt: int = 8,
        padding_mm: float = 2.0,
        line_height_multiplier: float = 1.2,
        max_font_size_cap_pt: int = 72,
    ):
        self.measurer = measurer
        self.min_font_size_pt = min_font_size_pt
        self.padding_mm = padding_mm
        self.line_height_multiplier = line_height_multiplier
        self.max_font_size_cap_pt = max_font_size_cap_pt

    def _layout(self, text, font, weight, size_pt, available_width):
        lines = wrap_words(text, self.measurer, font, weight, size_pt, available_width)
        widths = [self.measurer.measure_width(line, font, weight, size_pt) for line in lines]
        return lines, widths

    def _fits(self, lines, widths, size_pt, available_width, available_height) -> bool:
        total_height = len(lines) * pt_to_mm(size_pt) * self.line_height_multiplier
        return total_height <= available_height and all(w <= available_width for w in widths)

    def fit(
        self,
        text: str,
        box: MillimeterBox,
        font_token: Union[str, FontFamily] = FontFamily.SANS,
        weight: Union[str, int, FontWeight] = FontWeight.BOLD,
        max_font_size_pt: int = 32,
        align: TextAlign = TextAlign.CENTER,
    ) -> FitResult:
        if text is None or not text.strip():
            raise InvalidArgumentError("Text to fit must not be empty.")
        if box is None:
            raise InvalidArgumentError("A name box is required.")
        if max_font_size_pt <= 0:
            raise InvalidArgumentError(f"Max font size must be positive, got {max_font_size_pt}")

        font = resolve_font(font_token)
        weight = normalize_weight(weight)
        align = TextAlign(align)

        available_width = box.width_mm - 2 * self.padding_mm
        available_height = box.height_mm - 2 * self.padding_mm

        low = self.min_font_size_pt
        high = max(low, min(int(max_font_size_pt), self.max_font_size_cap_pt))

        best = None
        while low <= high:
            size = (low + high) // 2
            lines, widths = self._layout(text, font, weight, size, available_width)
            if self._fits(lines, widths, size, available_width, available_height):
                logger.debug(f"{size}pt fits in {len(lines)} line(s)")
                best = (size, lines, widths)
                low = size + 1
            else:
                logger.debug(f"{size}pt does not fit")
                high = size - 1

        degraded = best is None
        if degraded:
            size = self.min_font_size_pt
            lines, widths = self._layout(text, font, weight, size, available_width)
            logger.warning(
                f"'{text}' does not fit {box.width_mm}x{box.height_mm}mm even at {size}pt; text may be clipped"
            )
        else:
            size, lines, widths = best

        line_height_mm = pt_to_mm(size) * self.line_height_multiplier
        placements = self._place(lines, widths, size, line_height_mm, box, available_height, align)
        return FitResult(
            font_size_pt=size,
            lines=tuple(lines),
            line_height_mm=line_height_mm,
            placements=tuple(placements),
            degraded=degraded,
        )

    def _place(self, lines, widths, size_pt, line_height_mm, box, available_height, align):
        """Center the block vertically, then align each line by its own width."""
        block_height = len(lines) * line_height_mm
        vertical_offset = max(0.0, (available_height - block_height) / 2)
        first_baseline = box.y_mm + self.padding_mm + vertical_offset + pt_to_mm(size_pt) * BASELINE_RATIO

        placements = []
        for index, (line, width) in enumerate(zip(lines, widths)):
            if align == TextAlign.CENTER:
                x = box.x_mm + (box.width_mm - width) / 2
            elif align == TextAlign.RIGHT:
                x = box.x_mm + box.width_mm - self.padding_mm - width
            else:
                x = box.x_mm + self.padding_mm
            placements.append(
                PlacedLine(
                    text=line,
                    x_mm=x,
                    baseline_y_mm=first_baseline + index * line_height_mm,
                    width_mm=width,
                )
            )
        return placements


def build_fitter(measurer: TextMeasurer) -> BoxTextFitter:
    """A fitter configured from application settings."""
    return BoxTextFitter(
        measurer,
        min_font_size_pt=settings.MIN_FONT_SIZE_PT,
        padding_mm=settings.NAME_PADDING_MM,
        line_height_multiplier=settings.LINE_HEIGHT_MULTIPLIER,
        max_font_size_cap_pt=settings.MAX_FONT_SIZE_CAP_PT,
    )
