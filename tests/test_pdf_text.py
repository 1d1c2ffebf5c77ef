"""Tests for PDF text extraction.

pdfplumber is replaced with a fake ``open`` returning fake pages, so
these tests exercise page joining, per-page failure handling and error
classification without real PDF files.
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from pdfminer.pdfdocument import PDFPasswordIncorrect
from pdfplumber.utils.exceptions import PdfminerException

from cvmatch.errors import EmptyOrUnreadableDocument, PasswordProtected, UnreadableDocument
from cvmatch.extract import pdf_text
from cvmatch.extract.pdf_text import SelectedFile, extract_text, extract_text_async


class FakePage:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error

    def extract_text(self):
        if self.error is not None:
            raise self.error
        return self.text


class FakePDF:
    def __init__(self, pages):
        self.pages = pages

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def _patch_pages(monkeypatch: pytest.MonkeyPatch, pages) -> None:
    monkeypatch.setattr(pdf_text, "pdfplumber", SimpleNamespace(open=lambda stream: FakePDF(pages)))


def _patch_open_error(monkeypatch: pytest.MonkeyPatch, error: Exception) -> None:
    def fake_open(stream):
        raise error

    monkeypatch.setattr(pdf_text, "pdfplumber", SimpleNamespace(open=fake_open))


def test_pages_joined_with_blank_line(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_pages(monkeypatch, [FakePage("page one"), FakePage("page two")])
    assert extract_text(b"%PDF-1.4") == "page one\n\npage two\n\n"


def test_failing_page_is_skipped(monkeypatch: pytest.MonkeyPatch) -> None:
    pages = [FakePage("page one"), FakePage(error=RuntimeError("bad glyph")), FakePage("page three")]
    _patch_pages(monkeypatch, pages)
    text = extract_text(b"%PDF-1.4")
    assert "page one" in text
    assert "page three" in text
    assert text == "page one\n\npage three\n\n"


def test_pages_without_text_layer_are_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_pages(monkeypatch, [FakePage(None), FakePage("   \n ")])
    with pytest.raises(EmptyOrUnreadableDocument):
        extract_text(b"%PDF-1.4")


def test_all_pages_failing_is_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_pages(monkeypatch, [FakePage(error=ValueError("x")), FakePage(error=ValueError("y"))])
    with pytest.raises(EmptyOrUnreadableDocument):
        extract_text(b"%PDF-1.4")


def test_password_protected(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_open_error(monkeypatch, PDFPasswordIncorrect())
    with pytest.raises(PasswordProtected):
        extract_text(b"%PDF-1.4")


def test_wrapped_password_error(monkeypatch: pytest.MonkeyPatch) -> None:
    # pdfplumber wraps pdfminer errors in its own exception type.
    _patch_open_error(monkeypatch, PdfminerException(PDFPasswordIncorrect()))
    with pytest.raises(PasswordProtected):
        extract_text(b"%PDF-1.4")


def test_other_failures_are_generic(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_open_error(monkeypatch, ValueError("xref table corrupt at offset 1234"))
    with pytest.raises(UnreadableDocument) as excinfo:
        extract_text(b"not a pdf")
    assert "xref" not in str(excinfo.value)
    assert str(excinfo.value) == UnreadableDocument.user_message


def test_extract_text_async(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_pages(monkeypatch, [FakePage("Experienced Python developer")])
    file = SelectedFile(name="cv.pdf", data=b"%PDF-1.4")
    text = asyncio.run(extract_text_async(file))
    assert text.strip() == "Experienced Python developer"


def test_selected_file_pdf_detection(tmp_path) -> None:
    assert SelectedFile("cv.PDF", b"anything").looks_like_pdf()
    assert SelectedFile("upload", b"%PDF-1.7\n...").looks_like_pdf()
    assert not SelectedFile("cv.docx", b"PK\x03\x04").looks_like_pdf()

    path = tmp_path / "resume.pdf"
    path.write_bytes(b"%PDF-1.4 body")
    selected = SelectedFile.from_path(str(path))
    assert selected.name == "resume.pdf"
    assert selected.data == b"%PDF-1.4 body"


def test_extract_text_async_propagates_typed_error(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_open_error(monkeypatch, PdfminerException(PDFPasswordIncorrect()))
    with pytest.raises(PasswordProtected):
        asyncio.run(extract_text_async(SelectedFile(name="locked.pdf", data=b"%PDF-1.4")))
