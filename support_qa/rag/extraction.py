"""Text extraction from raw document bytes."""

import io
import logging
from typing import Iterable, Optional

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from support_qa.exceptions import InvalidInputError, UnsupportedContentTypeError

logger = logging.getLogger(__name__)

PDF = "application/pdf"
TEXT_TYPES = ("text/plain", "text/markdown")


def normalize_content_type(content_type: Optional[str]) -> str:
    """Lower-case a MIME type and drop parameters such as charset."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def extract_text(
    content: bytes,
    content_type: Optional[str],
    supported_types: Iterable[str] = (PDF,) + TEXT_TYPES,
) -> str:
    """Extract plain text from document bytes.

    Args:
        content: Raw file bytes
        content_type: MIME type of the content
        supported_types: Content types accepted for ingestion

    Returns:
        Extracted text (may be empty)

    Raises:
        UnsupportedContentTypeError: If the content type is not supported
        InvalidInputError: If a PDF cannot be parsed
    """
    media_type = normalize_content_type(content_type)
    if media_type not in supported_types:
        raise UnsupportedContentTypeError(content_type)

    if media_type == PDF:
        try:
            reader = PdfReader(io.BytesIO(content))
            pages = [page.extract_text() or "" for page in reader.pages]
        except PyPdfError as e:
            raise InvalidInputError(f"Could not parse PDF: {e}") from e
        text = "\n".join(pages)
        logger.info("PDF parsed: %d pages, %d characters", len(pages), len(text))
        return text

    if media_type in TEXT_TYPES:
        return content.decode("utf-8", errors="replace")

    raise UnsupportedContentTypeError(content_type)
