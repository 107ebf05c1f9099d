import asyncio
import logging

from placement.core.errors import PdfGenerationFailed

logger = logging.getLogger(__name__)


def create_pdf(html_content: str) -> bytes:
    """Renders an HTML document into PDF bytes using WeasyPrint."""
    try:
        # WeasyPrint needs Pango at import time; keep it off the module import path
        from weasyprint import HTML
        pdf_bytes = HTML(string=html_content, base_url=".").write_pdf()
    except Exception as e:
        logger.exception("Error during PDF generation")
        raise PdfGenerationFailed(f"Failed to generate PDF: {e}")
    if not pdf_bytes:
        raise PdfGenerationFailed("PDF renderer returned an empty document")
    return pdf_bytes


async def render_pdf(html_content: str) -> bytes:
    return await asyncio.to_thread(create_pdf, html_content)
