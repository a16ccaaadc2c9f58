"""Plain-text extraction from in-memory PDF bytes using PyMuPDF."""

from __future__ import annotations

import asyncio
import logging

import pymupdf

PDF_MAGIC = b"%PDF-"

logger = logging.getLogger(__name__)


class PdfTextExtractionError(RuntimeError):
    """Raised when the bytes cannot be opened or read as a PDF."""


def looks_like_pdf(data: bytes) -> bool:
    """Check the magic bytes; a declared media type alone is only a hint."""
    # The header may follow a little leading garbage in real-world files.
    return PDF_MAGIC in data[:1024]


class PdfTextExtractor:
    """Extract reading-order text from every page of a PDF."""

    def extract_text(self, data: bytes) -> str:
        """Return the concatenated page text; empty for image-only documents."""
        try:
            with pymupdf.open(stream=data, filetype="pdf") as document:
                page_count = document.page_count
                pages = [page.get_text("text", sort=True) for page in document]
        except (pymupdf.FileDataError, RuntimeError, ValueError) as exc:
            raise PdfTextExtractionError(f"Unable to read PDF: {exc}") from exc
        # MuPDF repairs broken files silently; a repair that finds nothing is unreadable.
        if page_count == 0:
            raise PdfTextExtractionError("Unable to read PDF: the document has no pages.")
        logger.debug("Extracted text from %d page(s).", page_count)
        return "\n".join(pages)

    async def extract_text_async(self, data: bytes) -> str:
        """Run :meth:`extract_text` in a worker thread."""
        return await asyncio.to_thread(self.extract_text, data)


__all__ = [
    "PDF_MAGIC",
    "PdfTextExtractionError",
    "PdfTextExtractor",
    "looks_like_pdf",
]
