"""
Unit tests for PdfConverterService and the bundled converter script.

Run: pytest tests/unit/test_pdf_converter_service.py -v
"""

import json
import os
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from services.pdf_converter_service import PdfConverterService
from exceptions import PDFConversionError


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


ROWS = [["Producer", "Wine", "FOB"], ["Catena", "Malbec", "120"]]


class TestConvertFile:
    """Tests for PdfConverterService.convert_file()"""

    def test_parses_json_rows(self):
        """Should append the path to the command and parse stdout."""
        # Arrange
        service = PdfConverterService(command="pdf2table --json", timeout_seconds=30)

        with patch("services.pdf_converter_service.subprocess.run",
                   return_value=completed(stdout=json.dumps(ROWS))) as mock_run:
            # Act
            rows = service.convert_file("/tmp/list.pdf")

        # Assert
        assert rows == ROWS
        args, kwargs = mock_run.call_args
        assert args[0] == ["pdf2table", "--json", "/tmp/list.pdf"]
        assert kwargs["timeout"] == 30

    def test_nonzero_exit_carries_stderr(self):
        """Should name the file and keep the tool's stderr as diagnostic."""
        service = PdfConverterService(command="pdf2table")

        with patch("services.pdf_converter_service.subprocess.run",
                   return_value=completed(returncode=2, stderr="encrypted PDF")):
            with pytest.raises(PDFConversionError) as exc_info:
                service.convert_file("/tmp/x.pdf", "Acme.pdf")

        error = exc_info.value
        assert error.status_code == 503
        assert "Acme.pdf" in error.message
        assert error.details["diagnostic"] == "encrypted PDF"
        assert error.details["returncode"] == 2

    @pytest.mark.parametrize("stdout", ["", "   ", "not json", '{"rows": []}', "[]"])
    def test_unusable_output_raises(self, stdout):
        service = PdfConverterService(command="pdf2table")

        with patch("services.pdf_converter_service.subprocess.run",
                   return_value=completed(stdout=stdout)):
            with pytest.raises(PDFConversionError):
                service.convert_file("/tmp/x.pdf")

    def test_timeout_raises(self):
        service = PdfConverterService(command="pdf2table", timeout_seconds=5)

        with patch("services.pdf_converter_service.subprocess.run",
                   side_effect=subprocess.TimeoutExpired(cmd="pdf2table", timeout=5)):
            with pytest.raises(PDFConversionError) as exc_info:
                service.convert_file("/tmp/x.pdf")

        assert "timed out" in exc_info.value.details["diagnostic"]

    def test_missing_command_raises(self):
        service = PdfConverterService(command="no-such-converter")

        with patch("services.pdf_converter_service.subprocess.run",
                   side_effect=FileNotFoundError("no-such-converter")):
            with pytest.raises(PDFConversionError):
                service.convert_file("/tmp/x.pdf")


class TestConvertUpload:
    """Tests for PdfConverterService.convert_upload()"""

    def test_temp_file_removed_on_success(self):
        service = PdfConverterService(command="pdf2table")
        seen = {}

        def fake_run(args, **kwargs):
            seen["path"] = args[-1]
            with open(args[-1], "rb") as f:
                seen["content"] = f.read()
            return completed(stdout=json.dumps(ROWS))

        with patch("services.pdf_converter_service.subprocess.run", side_effect=fake_run):
            rows = service.convert_upload(b"%PDF-1.4 test", "Acme.pdf")

        assert rows == ROWS
        assert seen["content"] == b"%PDF-1.4 test"
        assert not os.path.exists(seen["path"])

    def test_temp_file_removed_on_failure(self):
        service = PdfConverterService(command="pdf2table")
        seen = {}

        def fake_run(args, **kwargs):
            seen["path"] = args[-1]
            return completed(returncode=1, stderr="boom")

        with patch("services.pdf_converter_service.subprocess.run", side_effect=fake_run):
            with pytest.raises(PDFConversionError):
                service.convert_upload(b"%PDF", "Acme.pdf")

        assert not os.path.exists(seen["path"])


class TestPdfToTableScript:
    """Tests for scripts/pdf_to_table.py"""

    def fake_pdf(self, pages):
        pdf = MagicMock()
        pdf.pages = []
        for tables in pages:
            page = MagicMock()
            page.extract_tables.return_value = tables
            pdf.pages.append(page)
        pdf.__enter__.return_value = pdf
        return pdf

    def test_repeated_headers_dropped(self):
        from scripts.pdf_to_table import extract_rows

        pdf = self.fake_pdf([
            [[["Producer", "Wine"], ["Catena", "Malbec"]]],
            [[["Producer", "Wine"], [" Zuccardi ", None], [None, None]]],
        ])

        with patch("scripts.pdf_to_table.pdfplumber.open", return_value=pdf):
            rows = extract_rows("list.pdf")

        assert rows == [["Producer", "Wine"], ["Catena", "Malbec"], ["Zuccardi", None]]

    def test_no_table_exits_nonzero(self, capsys):
        from scripts.pdf_to_table import main

        with patch("scripts.pdf_to_table.pdfplumber.open", return_value=self.fake_pdf([[]])):
            status = main(["empty.pdf"])

        assert status == 1
        assert "No table found" in capsys.readouterr().err

    def test_prints_json(self, capsys):
        from scripts.pdf_to_table import main

        pdf = self.fake_pdf([[[["Producer"], ["Catena"]]]])
        with patch("scripts.pdf_to_table.pdfplumber.open", return_value=pdf):
            status = main(["list.pdf"])

        assert status == 0
        assert json.loads(capsys.readouterr().out) == [["Producer"], ["Catena"]]
