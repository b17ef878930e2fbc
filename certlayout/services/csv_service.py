"""
services/csv_service.py
Parses uploaded CSV files into the participant names for bulk generation.
"""
import io
import pandas as pd
from typing import List

from certlayout.core.config import settings
from certlayout.core.errors import InvalidArgumentError
from certlayout.utils.helpers import get_logger

logger = get_logger(__name__)


def parse_names_csv(file_bytes: bytes) -> List[str]:
    """
    Parse a CSV file and return the participant names in file order.

    Expected CSV column: Name (case-insensitive); other columns are ignored.
    Skips rows with a missing or blank name.
    """
    try:
        df = pd.read_csv(io.BytesIO(file_bytes), dtype=str, encoding="utf-8")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        logger.error(f"CSV parsing failed: {e}")
        raise InvalidArgumentError(f"Failed to parse CSV: {e}")

    # Normalize column names
    df.columns = [str(col).strip().lower() for col in df.columns]
    if "name" not in df.columns:
        raise InvalidArgumentError("CSV must contain a 'Name' column.")

    names = df["name"].dropna().astype(str).str.strip()
    names = names[names.str.len() > 0]

    if len(names) > settings.MAX_BULK_ROWS:
        raise InvalidArgumentError(f"CSV has {len(names)} names; the limit is {settings.MAX_BULK_ROWS}.")

    records = names.tolist()
    logger.info(f"Parsed {len(records)} valid names from CSV.")
    return records
