"""
Unit tests for the price list reader.

Run: pytest tests/unit/test_price_list_parser.py -v
"""

from io import BytesIO

import pandas as pd
import pytest

from parsers.price_list_parser import dataframe_to_rows, is_pdf, read_price_list
from exceptions import PriceListParseError


def xlsx_bytes(rows):
    buffer = BytesIO()
    pd.DataFrame(rows).to_excel(buffer, header=False, index=False, engine="openpyxl")
    return buffer.getvalue()


class TestReadCsv:
    """Tests for CSV price lists"""

    def test_reads_rows_as_text(self):
        # Arrange
        content = b"Producer,Wine,Vintage,FOB\nCatena,Malbec,2019,120\nZuccardi,Q,,95.5\n"

        # Act
        rows = read_price_list(content, "acme.csv")

        # Assert
        assert rows[0] == ["Producer", "Wine", "Vintage", "FOB"]
        assert rows[1] == ["Catena", "Malbec", "2019", "120"]
        assert rows[2] == ["Zuccardi", "Q", None, "95.5"]

    def test_leading_blank_rows_dropped(self):
        content = b",\n,\nProducer,Wine\nCatena,Malbec\n,\n"

        rows = read_price_list(content, "acme.CSV")

        assert rows == [["Producer", "Wine"], ["Catena", "Malbec"]]


class TestReadSpreadsheet:
    """Tests for Excel price lists"""

    def test_reads_first_sheet(self):
        content = xlsx_bytes([
            ["Producer", "Wine", "Case Cost"],
            ["Catena", "Malbec", 120],
            ["  Zuccardi ", "Q", None],
        ])

        rows = read_price_list(content, "acme.xlsx")

        assert rows[0] == ["Producer", "Wine", "Case Cost"]
        assert rows[1][0] == "Catena"
        assert rows[1][2] == 120
        assert rows[2] == ["Zuccardi", "Q", None]

    def test_corrupt_file_raises(self):
        with pytest.raises(PriceListParseError) as exc_info:
            read_price_list(b"not a spreadsheet", "acme.xlsx")

        assert exc_info.value.details["filename"] == "acme.xlsx"


class TestReadErrors:
    """Tests for unreadable uploads"""

    @pytest.mark.parametrize("filename", ["acme.docx", "acme", ""])
    def test_unsupported_extension(self, filename):
        with pytest.raises(PriceListParseError) as exc_info:
            read_price_list(b"data", filename)

        assert ".xlsx" in exc_info.value.details["supported"]

    def test_blank_csv_raises(self):
        with pytest.raises(PriceListParseError):
            read_price_list(b",,\n,,\n", "empty.csv")


class TestHelpers:
    """Tests for is_pdf() and dataframe_to_rows()"""

    @pytest.mark.parametrize("filename,expected", [
        ("list.pdf", True),
        ("LIST.PDF", True),
        ("list.xlsx", False),
        (None, False),
    ])
    def test_is_pdf(self, filename, expected):
        assert is_pdf(filename) is expected

    def test_numpy_values_become_python(self):
        df = pd.DataFrame([["Producer", "Pack"], ["Catena", 12]], dtype=object)
        df.iloc[1, 1] = pd.Series([12]).iloc[0]

        rows = dataframe_to_rows(df)

        assert rows[1][1] == 12
        assert type(rows[1][1]) is int
