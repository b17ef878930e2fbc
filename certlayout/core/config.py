"""
core/config.py
Centralized configuration using environment variables.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # App
    APP_HOST: str = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT: int = int(os.getenv("APP_PORT", 8000))
    FRONTEND_ORIGIN: str = os.getenv("FRONTEND_ORIGIN", "http://localhost:5173")

    # Text fitting
    MIN_FONT_SIZE_PT: int = int(os.getenv("MIN_FONT_SIZE_PT", 8))
    MAX_FONT_SIZE_CAP_PT: int = int(os.getenv("MAX_FONT_SIZE_CAP_PT", 72))
    DEFAULT_FONT_SIZE_PT: int = int(os.getenv("DEFAULT_FONT_SIZE_PT", 32))
    NAME_PADDING_MM: float = float(os.getenv("NAME_PADDING_MM", 2.0))
    LINE_HEIGHT_MULTIPLIER: float = float(os.getenv("LINE_HEIGHT_MULTIPLIER", 1.2))

    # Preview
    DEFAULT_DEVICE_PIXEL_RATIO: float = float(os.getenv("DEFAULT_DEVICE_PIXEL_RATIO", 1.0))

    # Backdrop checks
    MIN_BACKDROP_DPI: float = float(os.getenv("MIN_BACKDROP_DPI", 150))
    RECOMMENDED_BACKDROP_DPI: float = float(os.getenv("RECOMMENDED_BACKDROP_DPI", 300))
    MAX_BACKDROP_MB: float = float(os.getenv("MAX_BACKDROP_MB", 10))
    ASPECT_RATIO_TOLERANCE: float = float(os.getenv("ASPECT_RATIO_TOLERANCE", 0.1))

    # Bulk
    MAX_BULK_ROWS: int = int(os.getenv("MAX_BULK_ROWS", 500))

settings = Settings()
