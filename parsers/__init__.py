"""
Price list file parsers.
"""

from parsers.price_list_parser import (
    read_price_list,
    dataframe_to_rows,
    is_pdf,
    SUPPORTED_EXTENSIONS,
)

__all__ = [
    "read_price_list",
    "dataframe_to_rows",
    "is_pdf",
    "SUPPORTED_EXTENSIONS",
]
