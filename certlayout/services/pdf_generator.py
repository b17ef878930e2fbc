"""
services/pdf_generator.py
Generates a certificate PDF: the backdrop filling an A4 landscape page
with the participant name fitted into the name box.
- Backdrop problems never abort generation (text-only page + warning)
- Layout comes from BoxTextFitter with ReportLab's own font metrics
"""
import io
import math
from pathlib import Path
from typing import Optional

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from certlayout.core.errors import InvalidArgumentError
from certlayout.models.certificate_model import FitResult, GenerationOptions, GenerationResult
from certlayout.models.geometry import A4_LANDSCAPE, MillimeterBox
from certlayout.services.backdrop_service import decode_backdrop
from certlayout.services.font_service import normalize_weight, pdf_font_name, resolve_font
from certlayout.services.measurer import PdfTextMeasurer, TextMeasurer
from certlayout.services.text_fitter import build_fitter
from certlayout.services.transform import compute_cover_crop, px_to_mm
from certlayout.utils.helpers import get_logger, parse_color

logger = get_logger(__name__)

CLIPPED_WARNING = "Name does not fit the box even at the minimum font size; text may be clipped."
BACKDROP_WARNING = "Backdrop image could not be decoded; the certificate was generated without it."


def resolve_name_box(options: GenerationOptions) -> MillimeterBox:
    """Use the explicit mm box if given, otherwise convert the pixel box."""
    if options.name_box_mm is not None:
        box = options.name_box_mm
    elif options.name_box_px is not None:
        box = px_to_mm(options.name_box_px, options.canvas_size, A4_LANDSCAPE, options.device_pixel_ratio)
    else:
        raise InvalidArgumentError("Either name_box_px or name_box_mm is required.")

    # A zero-sized canvas maps the box to infinity; nothing can be drawn there.
    if not all(math.isfinite(v) for v in (box.x_mm, box.y_mm, box.width_mm, box.height_mm)):
        raise InvalidArgumentError(
            f"Name box does not map onto the page: ({box.x_mm}, {box.y_mm}) {box.width_mm}x{box.height_mm}mm"
        )
    return box


def fit_name(options: GenerationOptions, measurer: TextMeasurer) -> tuple[MillimeterBox, FitResult]:
    """Run the shared fitter for a request with the given measurer."""
    box = resolve_name_box(options)
    fit = build_fitter(measurer).fit(
        options.participant_name,
        box,
        font_token=options.font.family_token,
        weight=options.font.weight,
        max_font_size_pt=options.font.max_size_pt,
        align=options.style.align,
    )
    return box, fit


def _draw_backdrop(pdf_canvas: canvas.Canvas, backdrop: Optional[bytes], warnings: list[str]) -> None:
    if not backdrop:
        return
    image = decode_backdrop(backdrop)
    if image is None:
        warnings.append(BACKDROP_WARNING)
        return

    page_w, page_h = A4_LANDSCAPE.width_mm * mm, A4_LANDSCAPE.height_mm * mm
    crop = compute_cover_crop(image.width, image.height, A4_LANDSCAPE.width_mm, A4_LANDSCAPE.height_mm)
    region = image.crop((crop.left, crop.top, crop.right, crop.bottom))
    pdf_canvas.drawImage(ImageReader(region), 0, 0, width=page_w, height=page_h)
    logger.info(f"Backdrop {image.width}x{image.height}px cropped to {region.width}x{region.height}px")


def _draw_name(pdf_canvas: canvas.Canvas, options: GenerationOptions, fit: FitResult) -> None:
    page_h = A4_LANDSCAPE.height_mm * mm
    font_name = pdf_font_name(resolve_font(options.font.family_token), normalize_weight(options.font.weight))
    pdf_canvas.setFont(font_name, fit.font_size_pt)
    pdf_canvas.setFillColor(parse_color(options.style.color_hex))
    # ReportLab's origin is bottom-left, the layout's is top-left.
    for line in fit.placements:
        pdf_canvas.drawString(line.x_mm * mm, page_h - line.baseline_y_mm * mm, line.text)


def generate_certificate_pdf(
    options: GenerationOptions,
    backdrop: Optional[bytes] = None,
    output_path: str | Path | None = None,
    measurer: Optional[TextMeasurer] = None,
) -> GenerationResult:
    """
    Generate a PDF certificate for one participant.

    Steps:
      1. Convert the name box to page millimeters
      2. Fit the name with ReportLab metrics
      3. Draw the cover-cropped backdrop over the full page
      4. Draw the fitted lines in the requested font and colour
      5. Optionally write the PDF to `output_path`
    """
    warnings: list[str] = []
    box, fit = fit_name(options, measurer or PdfTextMeasurer())
    if fit.degraded:
        warnings.append(CLIPPED_WARNING)

    logger.info(
        f"Rendering '{options.participant_name}' | {fit.font_size_pt}pt | "
        f"{len(fit.lines)} line(s) | box ({box.x_mm}, {box.y_mm}) {box.width_mm}x{box.height_mm}mm"
    )

    buffer = io.BytesIO()
    page_size = (A4_LANDSCAPE.width_mm * mm, A4_LANDSCAPE.height_mm * mm)
    pdf_canvas = canvas.Canvas(buffer, pagesize=page_size)
    pdf_canvas.setTitle(f"Certificate - {options.participant_name}")

    _draw_backdrop(pdf_canvas, backdrop, warnings)
    _draw_name(pdf_canvas, options, fit)

    pdf_canvas.showPage()
    pdf_canvas.save()
    pdf_bytes = buffer.getvalue()

    if output_path is not None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(pdf_bytes)
        logger.info(f"Certificate PDF saved: {output_path}")

    return GenerationResult(pdf_bytes=pdf_bytes, fit=fit, name_box_mm=box, warnings=warnings)
