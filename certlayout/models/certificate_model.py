"""
models/certificate_model.py
Pydantic models for font/style options, fitted layouts and generation requests.
"""
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from certlayout.core.config import settings
from certlayout.models.geometry import CanvasSize, MillimeterBox, PixelBox


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class FontFamily(str, Enum):
    """The closed set of families both rendering back ends can draw."""
    SANS = "base-sans"
    SERIF = "base-serif"
    MONO = "base-mono"


class FontWeight(str, Enum):
    NORMAL = "normal"
    BOLD = "bold"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class FontSpec(_CamelModel):
    family_token: str = "helvetica"
    weight: Union[int, str] = "bold"
    max_size_pt: int = Field(default=settings.DEFAULT_FONT_SIZE_PT, gt=0)


class TextStyle(_CamelModel):
    color_hex: str = "#000000"
    align: TextAlign = TextAlign.CENTER


class PlacedLine(_CamelModel):
    """One wrapped line with its left edge and baseline on the page (mm)."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    text: str
    x_mm: float
    baseline_y_mm: float
    width_mm: float


class FitResult(_CamelModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    font_size_pt: int
    lines: tuple[str, ...]
    line_height_mm: float
    placements: tuple[PlacedLine, ...] = ()
    # True when nothing in range fitted and the minimum size was used anyway;
    # callers show this as "text may be clipped".
    degraded: bool = False


class GenerationOptions(_CamelModel):
    """Everything the editor sends for one certificate."""
    participant_name: str
    name_box_px: Optional[PixelBox] = None
    name_box_mm: Optional[MillimeterBox] = None
    canvas_size: CanvasSize = CanvasSize(width_px=800, height_px=600)
    device_pixel_ratio: Optional[float] = None
    font: FontSpec = FontSpec()
    style: TextStyle = TextStyle()


class GenerationResult(BaseModel):
    pdf_bytes: bytes
    fit: FitResult
    name_box_mm: MillimeterBox
    warnings: list[str] = []


class BackdropValidation(_CamelModel):
    is_valid: bool
    warnings: list[str] = []
    errors: list[str] = []
    dpi: Optional[int] = None
    width_px: Optional[int] = None
    height_px: Optional[int] = None


class ConvertRequest(_CamelModel):
    """Request model for a pixel -> millimeter box conversion."""
    box: PixelBox
    canvas_size: CanvasSize
    device_pixel_ratio: Optional[float] = None
