"""PDF text extraction."""

import io
import logging
from abc import abstractmethod

import pdfplumber

from fintrack.domain.errors import StatementParseError
from fintrack.parsers.base import ParseResult, StatementParser

logger = logging.getLogger(__name__)


def extract_pdf_text(data: bytes) -> str:
    """Extract the text layer of every page, joined by newlines.

    Raises:
        StatementParseError: If the bytes are not a readable PDF
    """
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        raise StatementParseError(f"Could not read PDF file: {e}") from e

    text = "\n".join(pages)
    if not text.strip():
        logger.warning("No text extracted from PDF - it may be a scanned image")
    logger.debug("Extracted %d characters from %d PDF pages", len(text), len(pages))
    return text


class PdfStatementParser(StatementParser):
    """Parser whose format is the text layer of a PDF statement."""

    extensions = (".pdf",)

    def parse(self, data: bytes) -> ParseResult:
        return self.parse_text(extract_pdf_text(data))

    @abstractmethod
    def parse_text(self, text: str) -> ParseResult:
        """Parse the extracted statement text."""
        pass
