"""
models/geometry.py
Boxes and sizes in the two coordinate spaces (canvas pixels, page millimeters).

Field names are snake_case in Python and camelCase on the wire, so the
editing UI can post `{"widthPx": 800, "heightPx": 600}` as it always has.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Geometry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class PixelBox(_Geometry):
    """Region on the editing canvas, in pixels. Sub-pixel values are allowed."""
    x: float
    y: float
    width: float
    height: float


class MillimeterBox(_Geometry):
    """Region on the printed page, in millimeters."""
    x_mm: float
    y_mm: float
    width_mm: float
    height_mm: float


class CanvasSize(_Geometry):
    width_px: float
    height_px: float


class PageSize(_Geometry):
    width_mm: float
    height_mm: float


class DpiReport(_Geometry):
    dpi_x: float
    dpi_y: float
    min_dpi: float


class CoverCrop(_Geometry):
    """Source-image rectangle (pixels) that fills a target aspect ratio."""
    left: int
    top: int
    right: int
    bottom: int


# Every certificate is printed on A4 landscape.
A4_LANDSCAPE = PageSize(width_mm=297, height_mm=210)
