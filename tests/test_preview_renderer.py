import io

import pytest
from PIL import Image

from certlayout.core.errors import InvalidArgumentError
from certlayout.models.certificate_model import FontFamily, FontSpec, FontWeight
from certlayout.models.geometry import CanvasSize
from certlayout.services.measurer import CanvasTextMeasurer
from certlayout.services.pdf_generator import BACKDROP_WARNING, fit_name
from certlayout.services.preview_renderer import (
    fit_preview_layout,
    preview_size,
    render_preview_png,
    text_size_px,
)


def test_preview_is_a4_proportioned(options, backdrop_png) -> None:
    png, fit, warnings = render_preview_png(options, backdrop_png)
    image = Image.open(io.BytesIO(png))
    assert image.size == (800, 566)
    assert warnings == []
    assert fit.lines == ("John Doe",)


def test_preview_honours_device_pixel_ratio(options) -> None:
    size = preview_size(options.model_copy(update={"device_pixel_ratio": 2}))
    assert (size.width_px, size.height_px) == (1600, 1131)


def test_preview_without_backdrop_uses_placeholder(options) -> None:
    png, _, warnings = render_preview_png(options, None, show_box=True)
    image = Image.open(io.BytesIO(png)).convert("RGB")
    assert image.getpixel((1, 1)) == (243, 244, 246)
    assert warnings == []


def test_preview_survives_broken_backdrop(options) -> None:
    png, _, warnings = render_preview_png(options, b"\x89PNG broken")
    assert png.startswith(b"\x89PNG")
    assert warnings == [BACKDROP_WARNING]


def test_preview_draws_the_name(options) -> None:
    png, fit, _ = render_preview_png(options, None)
    image = Image.open(io.BytesIO(png)).convert("RGB")
    line = fit.placements[0]
    scale = image.width / 297
    row = round((line.baseline_y_mm - 1) * scale)
    xs = range(round(line.x_mm * scale), round((line.x_mm + line.width_mm) * scale))
    assert any(image.getpixel((x, row)) != (243, 244, 246) for x in xs)


def test_preview_and_pdf_share_the_fitter(options, fixed_measurer) -> None:
    assert fit_preview_layout(options, fixed_measurer) == fit_name(options, fixed_measurer)


def test_rendered_layout_matches_reported_layout(options) -> None:
    _, fit, _ = render_preview_png(options, None)
    _, expected = fit_preview_layout(options, CanvasTextMeasurer())
    assert fit == expected


def test_drawn_text_matches_laid_out_width(options) -> None:
    small = options.model_copy(
        update={"font": FontSpec(family_token="helvetica", weight="bold", max_size_pt=8)}
    )
    measurer = CanvasTextMeasurer()
    _, fit, _ = render_preview_png(small, None, measurer)
    assert fit.font_size_pt == 8

    px_per_mm = preview_size(small).width_px / 297
    font = measurer.font_for(FontFamily.SANS, FontWeight.BOLD, text_size_px(fit.font_size_pt, px_per_mm))
    for line in fit.placements:
        laid_out = line.width_mm * px_per_mm
        # Hinting may round each advance to a whole pixel, never more.
        assert abs(font.getlength(line.text) - laid_out) <= 0.5 * len(line.text)


def test_zero_canvas_preview_is_rejected(options) -> None:
    flat = options.model_copy(update={"canvas_size": CanvasSize(width_px=0, height_px=0)})
    with pytest.raises(InvalidArgumentError):
        render_preview_png(flat, None)
