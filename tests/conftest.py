"""
Shared fixtures for the certificate layout tests.
"""
import io
import os
import sys

import pytest
from PIL import Image


def _ensure_repo_on_path() -> None:
    """Ensure the repository root is on sys.path."""
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


_ensure_repo_on_path()

from certlayout.models.certificate_model import GenerationOptions  # noqa: E402
from certlayout.models.geometry import CanvasSize, PixelBox  # noqa: E402
from certlayout.services.measurer import TextMeasurer  # noqa: E402


class FixedWidthMeasurer(TextMeasurer):
    """Every character is 0.1mm wide per point of font size; counts calls."""

    MM_PER_CHAR_PER_PT = 0.1

    def __init__(self):
        self.calls = 0

    def measure_width(self, text, font_token, weight, size_pt):
        self.calls += 1
        return len(text) * size_pt * self.MM_PER_CHAR_PER_PT


def make_png(width: int, height: int, color=(200, 180, 120)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def fixed_measurer() -> FixedWidthMeasurer:
    return FixedWidthMeasurer()


@pytest.fixture
def backdrop_png() -> bytes:
    return make_png(594, 420)


@pytest.fixture
def options() -> GenerationOptions:
    return GenerationOptions(
        participant_name="John Doe",
        name_box_px=PixelBox(x=200, y=150, width=400, height=80),
        canvas_size=CanvasSize(width_px=800, height_px=600),
        device_pixel_ratio=1,
    )
