"""
services/preview_renderer.py
Raster preview of a certificate for the editor, drawn with Pillow.

The preview runs the same fitter as the PDF, only with Pillow's metrics,
then maps the mm layout onto an A4-proportioned image.
"""
import io
from typing import Optional

from PIL import Image, ImageDraw

from certlayout.models.certificate_model import FitResult, GenerationOptions
from certlayout.models.geometry import A4_LANDSCAPE, CanvasSize, MillimeterBox
from certlayout.services.backdrop_service import decode_backdrop, fill_backdrop
from certlayout.services.font_service import normalize_weight, resolve_font
from certlayout.services.measurer import CanvasTextMeasurer
from certlayout.services.pdf_generator import BACKDROP_WARNING, CLIPPED_WARNING, fit_name
from certlayout.services.transform import mm_point_to_px, resolve_device_ratio
from certlayout.utils.helpers import color_to_rgb, get_logger, parse_color, pt_to_mm

logger = get_logger(__name__)

PLACEHOLDER_BACKGROUND = (243, 244, 246)
BOX_OUTLINE = (59, 130, 246)


def preview_size(options: GenerationOptions) -> CanvasSize:
    """Output pixel size: the canvas width times the device ratio, at A4 proportions."""
    width = max(1, round(options.canvas_size.width_px * resolve_device_ratio(options.device_pixel_ratio)))
    height = max(1, round(width * A4_LANDSCAPE.height_mm / A4_LANDSCAPE.width_mm))
    return CanvasSize(width_px=width, height_px=height)


def text_size_px(font_size_pt: float, px_per_mm: float) -> float:
    """Face size for drawing; kept fractional so glyphs match the measured layout."""
    return pt_to_mm(font_size_pt) * px_per_mm


def fit_preview_layout(
    options: GenerationOptions,
    measurer: Optional[CanvasTextMeasurer] = None,
) -> tuple[MillimeterBox, FitResult]:
    """The layout the preview shows; same fitter as the PDF, Pillow metrics."""
    return fit_name(options, measurer or CanvasTextMeasurer())


def render_preview_png(
    options: GenerationOptions,
    backdrop: Optional[bytes] = None,
    measurer: Optional[CanvasTextMeasurer] = None,
    show_box: bool = False,
) -> tuple[bytes, FitResult, list[str]]:
    """Render the preview and return (png_bytes, fit, warnings)."""
    measurer = measurer or CanvasTextMeasurer()
    warnings: list[str] = []
    box, fit = fit_preview_layout(options, measurer)
    if fit.degraded:
        warnings.append(CLIPPED_WARNING)

    size = preview_size(options)
    width, height = int(size.width_px), int(size.height_px)

    image = decode_backdrop(backdrop)
    if image is None:
        if backdrop:
            warnings.append(BACKDROP_WARNING)
        canvas_image = Image.new("RGB", (width, height), PLACEHOLDER_BACKGROUND)
    else:
        canvas_image = fill_backdrop(image, width, height)

    draw = ImageDraw.Draw(canvas_image)
    px_per_mm = width / A4_LANDSCAPE.width_mm

    if show_box:
        left, top = mm_point_to_px(box.x_mm, box.y_mm, size)
        right, bottom = mm_point_to_px(box.x_mm + box.width_mm, box.y_mm + box.height_mm, size)
        draw.rectangle([left, top, right, bottom], outline=BOX_OUTLINE, width=max(1, round(px_per_mm / 2)))

    font = measurer.font_for(
        resolve_font(options.font.family_token),
        normalize_weight(options.font.weight),
        text_size_px(fit.font_size_pt, px_per_mm),
    )
    fill = color_to_rgb(parse_color(options.style.color_hex))
    for line in fit.placements:
        x, y = mm_point_to_px(line.x_mm, line.baseline_y_mm, size)
        draw.text((x, y), line.text, font=font, fill=fill, anchor="ls")

    logger.info(f"Preview {width}x{height}px | {fit.font_size_pt}pt | {len(fit.lines)} line(s)")

    buffer = io.BytesIO()
    canvas_image.save(buffer, format="PNG")
    return buffer.getvalue(), fit, warnings
