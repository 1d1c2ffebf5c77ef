"""
PDF text extraction.

Reads an uploaded résumé entirely into memory and pulls the text layer
out of every page with ``pdfplumber``.  Pages are joined with a blank
line so page boundaries remain visible to the model.  A page that
fails on its own is skipped; the rest of the document still counts.

Failures reach the caller as one of three typed errors (see
:mod:`cvmatch.errors`).  Parser internals are logged, never returned.
"""

from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pdfplumber
from pdfminer.pdfdocument import PDFEncryptionError, PDFPasswordIncorrect

from ..errors import EmptyOrUnreadableDocument, PasswordProtected, UnreadableDocument

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"
PDF_MAGIC = b"%PDF"


@dataclass(frozen=True)
class SelectedFile:
    """An uploaded document held in memory."""

    name: str
    data: bytes

    @classmethod
    def from_path(cls, path: str) -> "SelectedFile":
        file_path = Path(path)
        return cls(name=file_path.name, data=file_path.read_bytes())

    @property
    def size_mb(self) -> float:
        return len(self.data) / (1024 * 1024)

    def looks_like_pdf(self) -> bool:
        """True if the name or the leading bytes identify a PDF."""
        return self.name.lower().endswith(".pdf") or self.data[:1024].lstrip().startswith(PDF_MAGIC)


def _is_password_error(exc: Optional[BaseException]) -> bool:
    # pdfplumber may wrap pdfminer errors, so walk args and the cause chain.
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, (PDFPasswordIncorrect, PDFEncryptionError)):
            return True
        if any(isinstance(arg, (PDFPasswordIncorrect, PDFEncryptionError)) for arg in exc.args):
            return True
        exc = exc.__cause__ or exc.__context__
    return False


def _extract_pages(data: bytes) -> str:
    text = ""
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for number, page in enumerate(pdf.pages, start=1):
            try:
                page_text = page.extract_text() or ""
            except Exception as exc:  # noqa: BLE001
                logger.warning("Error extracting text from page %d: %s", number, exc)
                continue
            text += page_text + PAGE_SEPARATOR
    return text


def extract_text(data: bytes) -> str:
    """Extract the text layer of a PDF document.

    Args:
        data: Raw bytes of the whole document.

    Returns:
        Concatenated page text, pages separated by a blank line.

    Raises:
        EmptyOrUnreadableDocument: No page yielded any non-blank text.
        PasswordProtected: The document is encrypted.
        UnreadableDocument: Any other parse failure.
    """
    try:
        text = _extract_pages(data)
    except Exception as exc:  # noqa: BLE001
        if _is_password_error(exc):
            logger.info("PDF is password protected")
            raise PasswordProtected() from exc
        logger.exception("Error extracting text from PDF")
        raise UnreadableDocument() from exc
    if not text.strip():
        raise EmptyOrUnreadableDocument()
    logger.debug("Extracted %d characters of text", len(text))
    return text


async def extract_text_async(file: SelectedFile) -> str:
    """Run :func:`extract_text` on the default executor."""
    loop = asyncio.get_running_loop()
    logger.debug("Extracting %s on the default executor", file.name)
    return await loop.run_in_executor(None, extract_text, file.data)
