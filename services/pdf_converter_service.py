"""
PDF price-list conversion.

PDF table extraction runs out of process: the configured converter command
gets the PDF path as its last argument and must print a JSON array of rows
(the first row being headers) on stdout.
"""

import json
import os
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Optional
import structlog

from config import settings
from exceptions import PDFConversionError

logger = structlog.get_logger(__name__)


class PdfConverterService:
    """Runs the external PDF-to-table converter."""

    def __init__(
        self,
        command: Optional[str] = None,
        timeout_seconds: Optional[int] = None
    ):
        self.command = command or settings.pdf_converter_command
        self.timeout_seconds = timeout_seconds or settings.pdf_converter_timeout_seconds

    def convert_file(self, path: str, filename: Optional[str] = None) -> list[list[Any]]:
        """
        Convert a PDF on disk to rows.

        Args:
            path: PDF path handed to the converter
            filename: Name reported in errors (defaults to the path's name)

        Returns:
            Rows as lists of cell values

        Raises:
            PDFConversionError: On non-zero exit, timeout, empty output or
                output that is not a JSON array of rows
        """
        filename = filename or Path(path).name
        args = shlex.split(self.command) + [path]
        logger.info("pdf_conversion_started", filename=filename, command=args[0])

        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds
            )
        except subprocess.TimeoutExpired:
            logger.error("pdf_conversion_timeout", filename=filename, timeout=self.timeout_seconds)
            raise PDFConversionError(
                filename,
                f"Converter timed out after {self.timeout_seconds}s"
            )
        except OSError as e:
            logger.error("pdf_conversion_failed", filename=filename, error=str(e))
            raise PDFConversionError(filename, str(e))

        diagnostic = (result.stderr or "").strip() or (result.stdout or "").strip()
        if result.returncode != 0:
            logger.error(
                "pdf_conversion_failed",
                filename=filename,
                returncode=result.returncode,
                stderr=diagnostic[:500]
            )
            raise PDFConversionError(
                filename,
                diagnostic,
                details={"returncode": result.returncode}
            )

        output = (result.stdout or "").strip()
        if not output:
            logger.error("pdf_conversion_empty", filename=filename)
            raise PDFConversionError(filename, diagnostic or "Converter produced no output")

        try:
            rows = json.loads(output)
        except ValueError as e:
            logger.error("pdf_conversion_bad_output", filename=filename, error=str(e))
            raise PDFConversionError(filename, f"Converter output is not JSON: {e}")

        if not isinstance(rows, list) or not all(isinstance(r, list) for r in rows):
            raise PDFConversionError(filename, "Converter output is not an array of rows")
        if not rows:
            raise PDFConversionError(filename, diagnostic or "No table found in PDF")

        logger.info("pdf_conversion_complete", filename=filename, rows=len(rows))
        return rows

    def convert_upload(self, content: bytes, filename: str) -> list[list[Any]]:
        """
        Convert uploaded PDF bytes to rows.

        The bytes go to a temp file that is removed whatever the outcome.
        """
        with tempfile.NamedTemporaryFile(delete=False, suffix=".pdf") as tmp:
            tmp.write(content)
            tmp_path = tmp.name

        try:
            return self.convert_file(tmp_path, filename)
        finally:
            try:
                os.unlink(tmp_path)
            except OSError as e:
                logger.warning("pdf_temp_cleanup_failed", path=tmp_path, error=str(e))


# Singleton instance for convenience
_pdf_converter_service: Optional[PdfConverterService] = None


def get_pdf_converter_service() -> PdfConverterService:
    """Get or create PdfConverterService instance."""
    global _pdf_converter_service
    if _pdf_converter_service is None:
        _pdf_converter_service = PdfConverterService()
    return _pdf_converter_service
