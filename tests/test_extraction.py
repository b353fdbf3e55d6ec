"""Unit tests for text extraction."""

import io
import pytest
from pypdf import PdfWriter

from support_qa.exceptions import InvalidInputError, UnsupportedContentTypeError
from support_qa.rag.extraction import extract_text, normalize_content_type


class TestNormalizeContentType:
    """Tests for normalize_content_type."""

    def test_strips_parameters(self):
        assert normalize_content_type("Text/Plain; charset=utf-8") == "text/plain"

    def test_missing(self):
        assert normalize_content_type(None) == ""


class TestExtractText:
    """Tests for extract_text."""

    def test_plain_text(self):
        assert extract_text("Hello world".encode(), "text/plain") == "Hello world"

    def test_markdown_with_charset(self):
        assert extract_text(b"# Title", "text/markdown; charset=utf-8") == "# Title"

    def test_invalid_utf8_is_replaced(self):
        text = extract_text(b"caf\xe9", "text/plain")
        assert text.startswith("caf")

    def test_unsupported_content_type(self):
        """Unsupported types are rejected with the offending type attached."""
        with pytest.raises(UnsupportedContentTypeError) as exc_info:
            extract_text(b"data", "image/png")
        assert exc_info.value.content_type == "image/png"
        assert isinstance(exc_info.value, InvalidInputError)

    def test_missing_content_type(self):
        with pytest.raises(UnsupportedContentTypeError):
            extract_text(b"data", None)

    def test_supported_types_are_configurable(self):
        """Only the configured types are accepted."""
        with pytest.raises(UnsupportedContentTypeError):
            extract_text(b"text", "text/plain", supported_types=("application/pdf",))

    def test_blank_pdf(self):
        """A PDF without text yields an empty string."""
        writer = PdfWriter()
        writer.add_blank_page(width=200, height=200)
        buffer = io.BytesIO()
        writer.write(buffer)

        assert extract_text(buffer.getvalue(), "application/pdf").strip() == ""

    def test_corrupt_pdf(self):
        with pytest.raises(InvalidInputError):
            extract_text(b"not a pdf", "application/pdf")
