"""
services/transform.py
Pixel <-> millimeter conversion between the editing canvas and the printed page.
"""
import math
from typing import Optional

from certlayout.core.config import settings
from certlayout.core.errors import InvalidArgumentError
from certlayout.models.geometry import (
    A4_LANDSCAPE,
    CanvasSize,
    CoverCrop,
    DpiReport,
    MillimeterBox,
    PageSize,
    PixelBox,
)
from certlayout.utils.helpers import MM_PER_INCH, round_half_up


def resolve_device_ratio(device_pixel_ratio: Optional[float]) -> float:
    # A missing or zero ratio means "not reported", as in browsers.
    if device_pixel_ratio is None:
        device_pixel_ratio = settings.DEFAULT_DEVICE_PIXEL_RATIO
    if device_pixel_ratio < 0:
        raise InvalidArgumentError(f"Device pixel ratio must be >= 0, got {device_pixel_ratio}")
    return device_pixel_ratio or 1.0


def _check_page(page: PageSize) -> None:
    if page.width_mm < 0 or page.height_mm < 0:
        raise InvalidArgumentError(f"Page size must not be negative: {page.width_mm}x{page.height_mm}mm")


def _convert(value: float, to_dim: float, from_dim: float) -> float:
    """
    Scale `value` by to_dim / from_dim.

    A zero value or zero target dimension gives 0; a zero source dimension
    gives +/-inf. Multiplying before dividing keeps exact inputs exact.
    """
    if value == 0 or to_dim == 0:
        return 0.0
    if from_dim == 0:
        return math.copysign(math.inf, value * to_dim)
    return value * to_dim / from_dim


def px_to_mm(
    box: PixelBox,
    canvas: CanvasSize,
    page: PageSize = A4_LANDSCAPE,
    device_pixel_ratio: Optional[float] = None,
) -> MillimeterBox:
    """
    Convert a canvas box (pixels) to a page box (millimeters).

    Outputs are rounded half-up to 2 decimals. A zero canvas dimension maps
    every non-zero coordinate on that axis to +/-inf; a zero page dimension
    maps it to 0. Negative coordinates stay negative.
    """
    if box is None:
        raise InvalidArgumentError("A name box is required.")
    _check_page(page)
    ratio = resolve_device_ratio(device_pixel_ratio)

    # Scale is page / (canvas / ratio), applied to box / ratio.
    canvas_w, canvas_h = canvas.width_px / ratio, canvas.height_px / ratio

    return MillimeterBox(
        x_mm=round_half_up(_convert(box.x / ratio, page.width_mm, canvas_w), 2),
        y_mm=round_half_up(_convert(box.y / ratio, page.height_mm, canvas_h), 2),
        width_mm=round_half_up(_convert(box.width / ratio, page.width_mm, canvas_w), 2),
        height_mm=round_half_up(_convert(box.height / ratio, page.height_mm, canvas_h), 2),
    )


def mm_to_px(
    box: MillimeterBox,
    canvas: CanvasSize,
    page: PageSize = A4_LANDSCAPE,
    device_pixel_ratio: Optional[float] = None,
) -> PixelBox:
    """Inverse of px_to_mm. Outputs are rounded half-up to whole pixels."""
    if box is None:
        raise InvalidArgumentError("A name box is required.")
    _check_page(page)
    ratio = resolve_device_ratio(device_pixel_ratio)

    device_w, device_h = canvas.width_px * ratio, canvas.height_px * ratio

    return PixelBox(
        x=round_half_up(_convert(box.x_mm, device_w, page.width_mm) / ratio),
        y=round_half_up(_convert(box.y_mm, device_h, page.height_mm) / ratio),
        width=round_half_up(_convert(box.width_mm, device_w, page.width_mm) / ratio),
        height=round_half_up(_convert(box.height_mm, device_h, page.height_mm) / ratio),
    )


def mm_point_to_px(
    x_mm: float,
    y_mm: float,
    canvas: CanvasSize,
    page: PageSize = A4_LANDSCAPE,
) -> tuple[float, float]:
    """Map a single page point onto the canvas without rounding (for drawing)."""
    _check_page(page)
    return (
        _convert(x_mm, canvas.width_px, page.width_mm),
        _convert(y_mm, canvas.height_px, page.height_mm),
    )


def calculate_dpi(
    image_width_px: float,
    image_height_px: float,
    page_width_mm: float = A4_LANDSCAPE.width_mm,
    page_height_mm: float = A4_LANDSCAPE.height_mm,
) -> DpiReport:
    """Effective print resolution of an image stretched over the page."""
    dpi_x = _convert(image_width_px, MM_PER_INCH, page_width_mm)
    dpi_y = _convert(image_height_px, MM_PER_INCH, page_height_mm)
    return DpiReport(dpi_x=dpi_x, dpi_y=dpi_y, min_dpi=min(dpi_x, dpi_y))


def compute_cover_crop(image_width: int, image_height: int, target_width: float, target_height: float) -> CoverCrop:
    """
    Largest centered region of the image with the target's aspect ratio.

    Stretching that region over the target gives CSS `object-fit: cover`;
    the PDF and the preview both use it so the backdrop lines up the same way.
    """
    if image_width <= 0 or image_height <= 0 or target_width <= 0 or target_height <= 0:
        return CoverCrop(left=0, top=0, right=max(image_width, 0), bottom=max(image_height, 0))

    target_ratio = target_width / target_height
    if image_width / image_height > target_ratio:
        crop_w = max(1, int(round_half_up(image_height * target_ratio)))
        left = (image_width - crop_w) // 2
        return CoverCrop(left=left, top=0, right=left + crop_w, bottom=image_height)

    crop_h = max(1, int(round_half_up(image_width / target_ratio)))
    top = (image_height - crop_h) // 2
    return CoverCrop(left=0, top=top, right=image_width, bottom=top + crop_h)
