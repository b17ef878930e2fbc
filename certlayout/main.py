"""
certlayout/main.py
FastAPI application factory and startup configuration.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from certlayout.core.config import settings
from certlayout.core.errors import InvalidArgumentError
from certlayout.services.font_service import check_fonts
from certlayout.utils.helpers import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check font files and log startup/shutdown; no external connections are held."""
    font_files = check_fonts()
    logger.info(
        f"Certificate layout service starting ({len(font_files)} font faces, "
        f"font range {settings.MIN_FONT_SIZE_PT}-{settings.MAX_FONT_SIZE_CAP_PT}pt)"
    )
    yield  # App is running
    logger.info("Shutting down certificate layout service.")


# ── App factory ────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Certificate Layout Service",
    description="Place, fit and render participant names on certificate backdrops.",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS middleware ────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Certificate-Warnings", "X-Font-Size-Pt", "X-Line-Count", "X-Certificate-Count"],
)


# ── Error handlers ─────────────────────────────────────────────────────────────
@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
    logger.info(f"Rejected request to {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal server error."})


# ── Include routers ────────────────────────────────────────────────────────────
from certlayout.api.certificate import router as certificate_router
app.include_router(certificate_router)


# ── Health check ───────────────────────────────────────────────────────────────
@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok", "service": "Certificate Layout"}


def run() -> None:
    """Entry point for `certlayout-server`."""
    import uvicorn

    uvicorn.run("certlayout.main:app", host=settings.APP_HOST, port=settings.APP_PORT)
