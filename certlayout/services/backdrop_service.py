"""
services/backdrop_service.py
Decodes certificate backdrops and checks whether they are good enough to print.
"""
import io
from typing import Optional

from PIL import Image, UnidentifiedImageError

from certlayout.core.config import settings
from certlayout.models.certificate_model import BackdropValidation
from certlayout.models.geometry import A4_LANDSCAPE
from certlayout.services.transform import calculate_dpi, compute_cover_crop
from certlayout.utils.helpers import get_logger

logger = get_logger(__name__)


def decode_backdrop(data: Optional[bytes]) -> Optional[Image.Image]:
    """
    Decode PNG/JPEG bytes into an RGB image.

    Returns None (and logs a warning) when the bytes are missing or not an image.
    """
    if not data:
        return None
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        logger.warning(f"Backdrop could not be decoded: {e}")
        return None
    return image.convert("RGB")


def fill_backdrop(image: Image.Image, width_px: int, height_px: int) -> Image.Image:
    """Cover-crop the image to the target aspect ratio and stretch it to size."""
    crop = compute_cover_crop(image.width, image.height, width_px, height_px)
    region = image.crop((crop.left, crop.top, crop.right, crop.bottom))
    return region.resize((max(1, width_px), max(1, height_px)), Image.Resampling.LANCZOS)


def validate_backdrop(data: bytes) -> BackdropValidation:
    """Check resolution, aspect ratio and file size of an uploaded backdrop."""
    warnings: list[str] = []
    errors: list[str] = []

    image = decode_backdrop(data)
    if image is None:
        return BackdropValidation(
            is_valid=False,
            errors=["Invalid image file. Please upload a valid PNG or JPG image."],
        )

    min_dpi = calculate_dpi(image.width, image.height).min_dpi
    if min_dpi < settings.MIN_BACKDROP_DPI:
        errors.append(
            f"Low resolution: {round(min_dpi)} DPI. "
            f"Recommended: {settings.RECOMMENDED_BACKDROP_DPI:g}+ DPI for print quality."
        )
    elif min_dpi < settings.RECOMMENDED_BACKDROP_DPI:
        warnings.append(
            f"Medium resolution: {round(min_dpi)} DPI. "
            f"Consider {settings.RECOMMENDED_BACKDROP_DPI:g}+ DPI for best print quality."
        )

    aspect_ratio = image.width / image.height
    expected_ratio = A4_LANDSCAPE.width_mm / A4_LANDSCAPE.height_mm
    if abs(aspect_ratio - expected_ratio) > settings.ASPECT_RATIO_TOLERANCE:
        warnings.append(
            f"Aspect ratio {aspect_ratio:.2f}:1 differs from A4 landscape ({expected_ratio:.2f}:1). "
            "Image will be cropped to fit."
        )

    size_mb = len(data) / (1024 * 1024)
    if size_mb > settings.MAX_BACKDROP_MB:
        errors.append(f"File size {size_mb:.1f}MB exceeds {settings.MAX_BACKDROP_MB:g}MB limit.")

    logger.info(f"Backdrop {image.width}x{image.height}px, {min_dpi:.0f} DPI, {len(errors)} error(s)")
    return BackdropValidation(
        is_valid=not errors,
        warnings=warnings,
        errors=errors,
        dpi=round(min_dpi),
        width_px=image.width,
        height_px=image.height,
    )
