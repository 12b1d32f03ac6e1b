"""PDF text extraction — page-numbered, whitespace-normalised text."""

from __future__ import annotations

import io
import logging
import re

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from helpdesk_rag.errors import ValidationError

logger = logging.getLogger(__name__)

_BLANK_RUNS = re.compile(r"\n{3,}")


def normalize_page_text(text: str) -> str:
    """Trim every line and collapse runs of blank lines to a single one."""
    lines = (line.strip() for line in text.splitlines())
    return _BLANK_RUNS.sub("\n\n", "\n".join(lines)).strip()


def read_pages(data: bytes) -> dict[int, str]:
    """Extract the text of every page of the PDF held in *data*.

    Returns
    -------
    dict[int, str]
        1-based page number → normalised text.  Pages without extractable
        text map to an empty string so the page count stays accurate.

    Raises
    ------
    ValidationError
        When *data* is not a readable PDF.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        pages: dict[int, str] = {}
        for number, page in enumerate(reader.pages, start=1):
            pages[number] = normalize_page_text(page.extract_text() or "")
    except (PdfReadError, ValueError, OSError) as exc:
        logger.warning("Unreadable PDF upload: %s", exc)
        raise ValidationError(f"Could not read PDF: {exc}") from exc

    logger.info("Extracted %d page(s) from PDF", len(pages))
    return pages
