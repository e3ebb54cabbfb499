"""
PDF price list to table converter.

Extracts the tables of a PDF price list with pdfplumber and prints them as
one JSON array of rows on stdout. The first row is the header row; header
rows repeated at the top of later pages are dropped.

Usage:
    python scripts/pdf_to_table.py path/to/price_list.pdf

Exit status is 1 (with a message on stderr) when the file cannot be read
or holds no table.
"""

import argparse
import json
import sys
from typing import Optional

import pdfplumber


def _clean(cell: Optional[str]) -> Optional[str]:
    if cell is None:
        return None
    text = " ".join(str(cell).split())
    return text or None


def extract_rows(path: str) -> list[list[Optional[str]]]:
    """All table rows of the PDF, header first."""
    rows: list[list[Optional[str]]] = []
    header: Optional[list[Optional[str]]] = None

    with pdfplumber.open(path) as pdf:
        for page in pdf.pages:
            for table in page.extract_tables():
                for raw in table:
                    row = [_clean(cell) for cell in raw]
                    if all(cell is None for cell in row):
                        continue
                    if header is None:
                        header = row
                    elif row == header:
                        continue
                    rows.append(row)
    return rows


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Convert a PDF price list to a JSON array of rows."
    )
    parser.add_argument("pdf", help="Path to the PDF file")
    args = parser.parse_args(argv)

    try:
        rows = extract_rows(args.pdf)
    except Exception as e:
        print(f"Failed to read {args.pdf}: {e}", file=sys.stderr)
        return 1

    if not rows:
        print(f"No table found in {args.pdf}", file=sys.stderr)
        return 1

    json.dump(rows, sys.stdout)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
