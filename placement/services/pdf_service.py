import logging
from io import BytesIO

from docx import Document
from pypdf import PdfReader

from placement.core.config import get_settings
from placement.core.errors import ExtractionFailed

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOC_MIME = "application/msword"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

ALLOWED_MIME_TYPES = {
    PDF_MIME: "pdf",
    DOC_MIME: "doc",
    DOCX_MIME: "docx",
}


def extract_text_from_pdf(pdf_content: bytes) -> str:
    """
    Extract text from a PDF file and return the raw text.
    """
    if not pdf_content.startswith(b"%PDF-"):
        raise ExtractionFailed("Invalid PDF file: missing PDF signature")
    try:
        reader = PdfReader(BytesIO(pdf_content))
        text = ""
        for page in reader.pages:
            text += (page.extract_text() or "") + "\n"
        return text.strip()
    except Exception as e:
        raise ExtractionFailed(f"Error extracting text from PDF: {str(e)}")


def extract_text_from_docx(docx_content: bytes) -> str:
    try:
        doc = Document(BytesIO(docx_content))
        parts = [p.text for p in doc.paragraphs if p.text.strip()]
        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    parts.append(" | ".join(cells))
        return "\n".join(parts).strip()
    except Exception as e:
        raise ExtractionFailed(f"Error extracting text from DOCX: {str(e)}")


def extract_text(file_content: bytes, mime_type: str) -> str:
    """Turn a resume file into plain text.

    Raises ExtractionFailed for empty input, unsupported formats, converter
    errors and text too short to be a resume.
    """
    if not file_content:
        raise ExtractionFailed("Resume file is empty")

    if mime_type == PDF_MIME:
        text = extract_text_from_pdf(file_content)
    elif mime_type == DOCX_MIME:
        text = extract_text_from_docx(file_content)
    elif mime_type == DOC_MIME:
        raise ExtractionFailed("Legacy .doc files cannot be read. Please upload a PDF or DOCX file.")
    else:
        raise ExtractionFailed(f"Unsupported file type: {mime_type}")

    min_length = get_settings().MIN_RESUME_TEXT_LENGTH
    if len(text) < min_length:
        logger.info("Extracted text too short (%s chars)", len(text))
        raise ExtractionFailed(
            "Could not extract enough text from the resume. "
            "The file may be scanned or image-based."
        )
    return text
