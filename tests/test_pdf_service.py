from io import BytesIO
from unittest.mock import MagicMock, patch

import pytest
from docx import Document

from placement.core.errors import ExtractionFailed
from placement.services.pdf_service import DOC_MIME, DOCX_MIME, PDF_MIME, extract_text

LONG_LINE = "Software engineering student with Python, SQL and Docker experience at Acme."


def _docx_bytes(*paragraphs: str) -> bytes:
    doc = Document()
    for p in paragraphs:
        doc.add_paragraph(p)
    buf = BytesIO()
    doc.save(buf)
    return buf.getvalue()


def _fake_reader(*page_texts):
    reader = MagicMock()
    pages = []
    for text in page_texts:
        page = MagicMock()
        page.extract_text.return_value = text
        pages.append(page)
    reader.pages = pages
    return reader


def test_empty_file_is_rejected():
    with pytest.raises(ExtractionFailed, match="empty"):
        extract_text(b"", PDF_MIME)


def test_pdf_without_signature_is_rejected():
    with pytest.raises(ExtractionFailed, match="signature"):
        extract_text(b"hello world, definitely not a pdf document at all" * 3, PDF_MIME)


def test_pdf_pages_are_joined():
    with patch("placement.services.pdf_service.PdfReader", return_value=_fake_reader(LONG_LINE, None, "Page three")):
        text = extract_text(b"%PDF-1.4 fake", PDF_MIME)
    assert LONG_LINE in text
    assert "Page three" in text


def test_pdf_converter_error_becomes_extraction_failed():
    with patch("placement.services.pdf_service.PdfReader", side_effect=ValueError("EOF marker not found")):
        with pytest.raises(ExtractionFailed, match="EOF marker"):
            extract_text(b"%PDF-1.4 broken", PDF_MIME)


def test_short_text_is_rejected():
    with patch("placement.services.pdf_service.PdfReader", return_value=_fake_reader("Jane Doe")):
        with pytest.raises(ExtractionFailed, match="enough text"):
            extract_text(b"%PDF-1.4 scanned", PDF_MIME)


def test_docx_paragraphs_are_extracted():
    content = _docx_bytes("Jane Doe", LONG_LINE)
    text = extract_text(content, DOCX_MIME)
    assert text.startswith("Jane Doe")
    assert LONG_LINE in text


def test_legacy_doc_is_not_readable():
    with pytest.raises(ExtractionFailed, match=".doc"):
        extract_text(b"\xd0\xcf\x11\xe0 legacy word file", DOC_MIME)


def test_unsupported_mime_type():
    with pytest.raises(ExtractionFailed, match="Unsupported"):
        extract_text(b"plain text resume", "text/plain")
