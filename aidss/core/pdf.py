"""PDF text extraction for attachments."""

import logging
from pathlib import Path
from typing import Union

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from .exceptions import TextExtractionFailed

logger = logging.getLogger("aidss.core.pdf")


def extract_pdf_text(pdf_path: Union[str, Path]) -> str:
    """Return the embedded text of every page, one page per line block.

    Pages without extractable text are skipped.

    Raises:
        TextExtractionFailed: if the file cannot be opened or parsed
    """
    pdf_path = Path(pdf_path)
    try:
        reader = PdfReader(pdf_path)
        pages = []
        for idx, page in enumerate(reader.pages, start=1):
            text = page.extract_text() or ""
            logger.debug(f"PDF {pdf_path.name} page {idx}: {len(text)} chars")
            if text.strip():
                pages.append(text)
    except (OSError, PyPdfError) as e:
        raise TextExtractionFailed(str(pdf_path), str(e)) from e

    if not pages:
        logger.warning(f"{pdf_path}: no embedded text")
    return "\n".join(pages)
