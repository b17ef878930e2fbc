import pytest
from PIL import Image
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from certlayout.core.errors import InvalidArgumentError
from certlayout.models.certificate_model import FontSpec, TextStyle
from certlayout.models.geometry import CanvasSize, MillimeterBox
from certlayout.services.pdf_generator import (
    BACKDROP_WARNING,
    CLIPPED_WARNING,
    generate_certificate_pdf,
    resolve_name_box,
)
from tests.conftest import make_png


def _spy(monkeypatch, method_name: str) -> list:
    calls = []
    original = getattr(canvas.Canvas, method_name)

    def spy(self, *args, **kwargs):
        calls.append(args)
        return original(self, *args, **kwargs)

    monkeypatch.setattr(canvas.Canvas, method_name, spy)
    return calls


def test_generates_pdf_with_backdrop(options, backdrop_png) -> None:
    result = generate_certificate_pdf(options, backdrop_png)
    assert result.pdf_bytes.startswith(b"%PDF")
    assert result.warnings == []
    assert result.fit.lines == ("John Doe",)
    assert result.fit.font_size_pt <= 32


def test_name_box_is_converted_to_mm(options) -> None:
    box = resolve_name_box(options)
    assert box == MillimeterBox(x_mm=74.25, y_mm=52.5, width_mm=148.5, height_mm=28)


def test_explicit_mm_box_wins(options) -> None:
    explicit = MillimeterBox(x_mm=10, y_mm=10, width_mm=100, height_mm=40)
    result = generate_certificate_pdf(options.model_copy(update={"name_box_mm": explicit}))
    assert result.name_box_mm == explicit


def test_missing_box_is_rejected(options) -> None:
    with pytest.raises(InvalidArgumentError):
        generate_certificate_pdf(options.model_copy(update={"name_box_px": None}))


def test_empty_name_is_rejected(options) -> None:
    with pytest.raises(InvalidArgumentError):
        generate_certificate_pdf(options.model_copy(update={"participant_name": ""}))


def test_undecodable_backdrop_gives_text_only_pdf(options, monkeypatch) -> None:
    drawn = _spy(monkeypatch, "drawString")
    result = generate_certificate_pdf(options, b"definitely not an image")
    assert result.pdf_bytes.startswith(b"%PDF")
    assert result.warnings == [BACKDROP_WARNING]
    assert [call[2] for call in drawn] == ["John Doe"]


def test_name_is_drawn_inside_the_box(options, monkeypatch) -> None:
    drawn = _spy(monkeypatch, "drawString")
    result = generate_certificate_pdf(options)
    box = result.name_box_mm
    ((x, y, text),) = [call[:3] for call in drawn]
    assert text == "John Doe"
    assert box.x_mm <= x / mm <= box.x_mm + box.width_mm
    baseline_from_top = 210 - y / mm
    assert box.y_mm <= baseline_from_top <= box.y_mm + box.height_mm


def test_unknown_font_and_bad_colour_fall_back(options, monkeypatch) -> None:
    fonts = _spy(monkeypatch, "setFont")
    colours = _spy(monkeypatch, "setFillColor")
    styled = options.model_copy(
        update={
            "font": FontSpec(family_token="Wingdings", weight="bold", max_size_pt=24),
            "style": TextStyle(color_hex="invalid-color"),
        }
    )
    result = generate_certificate_pdf(styled)
    assert ("Helvetica-Bold", result.fit.font_size_pt) in fonts
    assert colours[-1][0].rgb() == (0.0, 0.0, 0.0)


def test_text_colour_from_hex(options, monkeypatch) -> None:
    colours = _spy(monkeypatch, "setFillColor")
    generate_certificate_pdf(options.model_copy(update={"style": TextStyle(color_hex="#2D3748")}))
    assert colours[-1][0].rgb() == (45 / 255, 55 / 255, 72 / 255)


def test_clipped_name_is_flagged(options) -> None:
    tiny = options.model_copy(update={"name_box_mm": MillimeterBox(x_mm=0, y_mm=0, width_mm=8, height_mm=6)})
    result = generate_certificate_pdf(tiny)
    assert result.fit.degraded
    assert CLIPPED_WARNING in result.warnings


def test_inputs_are_not_mutated(options, backdrop_png) -> None:
    before = options.model_dump()
    generate_certificate_pdf(options, backdrop_png)
    assert options.model_dump() == before


def test_writes_output_file(options, tmp_path) -> None:
    target = tmp_path / "out" / "cert.pdf"
    result = generate_certificate_pdf(options, output_path=target)
    assert target.read_bytes() == result.pdf_bytes


def test_zero_canvas_is_rejected(options) -> None:
    flat = options.model_copy(update={"canvas_size": CanvasSize(width_px=0, height_px=0)})
    with pytest.raises(InvalidArgumentError):
        resolve_name_box(flat)
    with pytest.raises(InvalidArgumentError):
        generate_certificate_pdf(flat)


def test_decompression_bomb_backdrop_gives_text_only_pdf(options, monkeypatch) -> None:
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    result = generate_certificate_pdf(options, make_png(200, 200))
    assert result.pdf_bytes.startswith(b"%PDF")
    assert result.warnings == [BACKDROP_WARNING]
