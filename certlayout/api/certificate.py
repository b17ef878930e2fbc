"""
api/certificate.py
FastAPI router for certificate layout, preview and generation endpoints.
"""
import io
import json
import zipfile
from enum import Enum
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response, StreamingResponse
from pydantic import ValidationError

from certlayout.models.certificate_model import (
    BackdropValidation,
    ConvertRequest,
    FitResult,
    GenerationOptions,
)
from certlayout.models.geometry import A4_LANDSCAPE, MillimeterBox
from certlayout.services.backdrop_service import validate_backdrop
from certlayout.services.csv_service import parse_names_csv
from certlayout.services.measurer import CanvasTextMeasurer, PdfTextMeasurer
from certlayout.services.pdf_generator import fit_name, generate_certificate_pdf
from certlayout.services.preview_renderer import render_preview_png
from certlayout.services.transform import px_to_mm
from certlayout.utils.helpers import get_logger, safe_filename

logger = get_logger(__name__)
router = APIRouter(prefix="/api/certificates", tags=["Certificates"])

WARNINGS_HEADER = "X-Certificate-Warnings"


class MeasureBackend(str, Enum):
    PDF = "pdf"
    PREVIEW = "preview"


def _parse_options(raw: str, participant_name: Optional[str] = None) -> GenerationOptions:
    """Parse the JSON options form field; bulk runs supply the name themselves."""
    try:
        if participant_name is None:
            return GenerationOptions.model_validate_json(raw)
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise HTTPException(status_code=422, detail="Options must be a JSON object.")
        data.setdefault("participantName", participant_name)
        return GenerationOptions.model_validate(data)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=422, detail=f"Options are not valid JSON: {e}")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))


async def _read_optional(upload: Optional[UploadFile]) -> Optional[bytes]:
    if upload is None:
        return None
    return await upload.read() or None


def _layout_headers(fit: FitResult, warnings: list[str]) -> dict[str, str]:
    headers = {"X-Font-Size-Pt": str(fit.font_size_pt), "X-Line-Count": str(len(fit.lines))}
    if warnings:
        headers[WARNINGS_HEADER] = " | ".join(warnings)
    return headers


# ── Geometry ───────────────────────────────────────────────────────────────────

@router.post("/convert", response_model=MillimeterBox)
async def convert_box(request: ConvertRequest):
    """Convert a name box from canvas pixels to page millimeters."""
    return px_to_mm(request.box, request.canvas_size, A4_LANDSCAPE, request.device_pixel_ratio)


@router.post("/fit", response_model=FitResult)
async def fit_text(
    options: GenerationOptions,
    backend: MeasureBackend = Query(MeasureBackend.PDF),
):
    """Return the fitted layout (font size, lines, positions) without rendering."""
    measurer = PdfTextMeasurer() if backend == MeasureBackend.PDF else CanvasTextMeasurer()
    _, fit = fit_name(options, measurer)
    return fit


# ── Backdrop ───────────────────────────────────────────────────────────────────

@router.post("/validate-backdrop", response_model=BackdropValidation)
async def check_backdrop(file: UploadFile = File(...)):
    """Check an uploaded backdrop's resolution, aspect ratio and size."""
    content = await file.read()
    return validate_backdrop(content)


# ── Rendering ──────────────────────────────────────────────────────────────────

@router.post("/preview")
async def preview_certificate(
    options: str = Form(...),
    backdrop: Optional[UploadFile] = File(None),
    show_box: bool = Form(False),
):
    """Render the editor preview as a PNG."""
    parsed = _parse_options(options)
    backdrop_bytes = await _read_optional(backdrop)
    png, fit, warnings = await run_in_threadpool(render_preview_png, parsed, backdrop_bytes, None, show_box)
    return Response(content=png, media_type="image/png", headers=_layout_headers(fit, warnings))


@router.post("/generate")
async def generate_certificate(
    options: str = Form(...),
    backdrop: Optional[UploadFile] = File(None),
):
    """Generate the final certificate PDF for one participant."""
    parsed = _parse_options(options)
    backdrop_bytes = await _read_optional(backdrop)
    result = await run_in_threadpool(generate_certificate_pdf, parsed, backdrop_bytes)

    headers = _layout_headers(result.fit, result.warnings)
    headers["Content-Disposition"] = (
        f"attachment; filename={safe_filename(parsed.participant_name)}_certificate.pdf"
    )
    return Response(content=result.pdf_bytes, media_type="application/pdf", headers=headers)


def _build_zip(options: GenerationOptions, names: list[str], backdrop: Optional[bytes]) -> tuple[io.BytesIO, int]:
    zip_buffer = io.BytesIO()
    degraded = 0
    used: set[str] = set()
    with zipfile.ZipFile(zip_buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name in names:
            result = generate_certificate_pdf(options.model_copy(update={"participant_name": name}), backdrop)
            if result.fit.degraded:
                degraded += 1
            stem = safe_filename(name)
            arcname = f"{stem}_certificate.pdf"
            suffix = 2
            while arcname in used:
                arcname = f"{stem}_{suffix}_certificate.pdf"
                suffix += 1
            used.add(arcname)
            zf.writestr(arcname, result.pdf_bytes)
    zip_buffer.seek(0)
    return zip_buffer, degraded


@router.post("/bulk")
async def generate_bulk(
    options: str = Form(...),
    csv_file: UploadFile = File(...),
    backdrop: Optional[UploadFile] = File(None),
):
    """Generate one certificate per CSV row and return them as a ZIP."""
    if not (csv_file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Must be a CSV file.")

    names = parse_names_csv(await csv_file.read())
    if not names:
        raise HTTPException(status_code=400, detail="CSV contains no valid names.")
    parsed = _parse_options(options, participant_name=names[0])

    backdrop_bytes = await _read_optional(backdrop)
    zip_buffer, degraded = await run_in_threadpool(_build_zip, parsed, names, backdrop_bytes)
    logger.info(f"Bulk generation: {len(names)} certificates, {degraded} with clipped names")

    headers = {
        "Content-Disposition": "attachment; filename=certificates.zip",
        "X-Certificate-Count": str(len(names)),
    }
    if degraded:
        headers[WARNINGS_HEADER] = f"{degraded} name(s) may be clipped."
    return StreamingResponse(zip_buffer, media_type="application/zip", headers=headers)
