"""
Price list reader.

Reads the first sheet of a supplier's .xlsx, .xls or .csv price list into
raw rows. Row 0 is the header row; nothing is interpreted here beyond
turning blanks into None.
"""

from datetime import date, datetime
from io import BytesIO
from pathlib import Path
from typing import Any
import structlog

import pandas as pd

from exceptions import PriceListParseError

logger = structlog.get_logger(__name__)

SPREADSHEET_ENGINES = {
    ".xlsx": "openpyxl",
    ".xlsm": "openpyxl",
    ".xls": "xlrd",
}
SUPPORTED_EXTENSIONS = set(SPREADSHEET_ENGINES) | {".csv", ".pdf"}


def file_extension(filename: str) -> str:
    return Path(filename or "").suffix.lower()


def is_pdf(filename: str) -> bool:
    return file_extension(filename) == ".pdf"


def _cell_value(value: Any) -> Any:
    """Plain Python value for a DataFrame cell; blanks become None."""
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if pd.isna(value):
        return None
    if hasattr(value, "item"):
        # numpy scalar
        value = value.item()
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def dataframe_to_rows(df: pd.DataFrame) -> list[list[Any]]:
    """
    Convert a header=None DataFrame to rows.

    Blank rows above the header are dropped so the header is row 0;
    trailing blank rows are dropped too.
    """
    rows = [[_cell_value(v) for v in record] for record in df.itertuples(index=False)]

    while rows and all(v is None for v in rows[0]):
        rows.pop(0)
    while rows and all(v is None for v in rows[-1]):
        rows.pop()
    return rows


def read_price_list(content: bytes, filename: str) -> list[list[Any]]:
    """
    Read a spreadsheet price list.

    Args:
        content: Uploaded file bytes
        filename: Original filename (extension picks the reader)

    Returns:
        Rows as lists of cell values, header row first

    Raises:
        PriceListParseError: If the file type is unsupported, unreadable,
            or holds no rows
    """
    extension = file_extension(filename)
    logger.info("parsing_price_list", filename=filename, extension=extension)

    if extension not in SPREADSHEET_ENGINES and extension != ".csv":
        raise PriceListParseError(
            message=f"Unsupported file type: {extension or 'none'}",
            details={"filename": filename, "supported": sorted(SUPPORTED_EXTENSIONS)}
        )

    try:
        if extension == ".csv":
            df = pd.read_csv(BytesIO(content), header=None, dtype=str, skip_blank_lines=False)
        else:
            df = pd.read_excel(
                BytesIO(content),
                sheet_name=0,
                header=None,
                engine=SPREADSHEET_ENGINES[extension]
            )
    except Exception as e:
        logger.error("price_list_read_failed", filename=filename, error=str(e))
        raise PriceListParseError(
            message=f"Failed to read {filename}",
            details={"filename": filename, "original_error": str(e)}
        )

    rows = dataframe_to_rows(df)
    if not rows:
        raise PriceListParseError(
            message=f"{filename} contains no rows",
            details={"filename": filename}
        )

    logger.info("price_list_parsed", filename=filename, rows=len(rows), columns=len(rows[0]))
    return rows
