"""PDF text extraction with PyMuPDF."""

import logging
from typing import List

import fitz

from ..core.errors import ExtractionError

logger = logging.getLogger(__name__)

ITEM_SEPARATOR = " "


def _page_text(page: "fitz.Page") -> str:
    # one text item per line, joined like a flowing paragraph
    lines = (line.strip() for line in page.get_text("text").splitlines())
    return ITEM_SEPARATOR.join(line for line in lines if line)


def extract_texts(data: bytes) -> List[str]:
    """Return the text of every page that has any, in page order.

    Raises:
        ExtractionError: if ``data`` is empty or not a readable PDF.
    """
    if not data:
        raise ExtractionError("Uploaded document is empty")

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as e:  # FileDataError is a RuntimeError
        raise ExtractionError(f"Could not read PDF document: {e}") from e

    with doc:
        if doc.needs_pass:
            raise ExtractionError("Could not read PDF document: it is password protected")
        if doc.page_count == 0:
            raise ExtractionError("Could not read PDF document: no pages found")
        try:
            texts = [text for text in (_page_text(page) for page in doc) if text]
        except (RuntimeError, ValueError) as e:
            raise ExtractionError(f"Could not read PDF document: {e}") from e
        logger.info("Extracted text from %d of %d pages", len(texts), doc.page_count)
    return texts
