"""
Exceptions
==========

Error taxonomy for the Support Q&A service.

Input errors are rejected immediately. Backend errors (embedding or
generation model unreachable or timed out) are never retried within a
request and reach users only as a generic apology.
"""

from typing import Optional


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidInputError(ApplicationError):
    """Empty question or otherwise malformed caller input."""


class UnsupportedContentTypeError(InvalidInputError):
    """Raised when a document's content type cannot be ingested."""

    def __init__(self, content_type: Optional[str], details: Optional[dict] = None):
        self.content_type = content_type
        super().__init__(f"Unsupported content type: {content_type}", details)


class DocumentNotFoundError(ApplicationError):
    """Raised when a document id is unknown to the document store."""

    def __init__(self, document_id: int):
        self.document_id = document_id
        super().__init__(f"Document with id '{document_id}' not found")


class ConfigurationError(ApplicationError):
    """Invalid configuration value."""


class ExternalServiceError(ApplicationError):
    """Base exception for model backend failures."""


class EmbeddingUnavailableError(ExternalServiceError):
    """The embedding backend failed or timed out."""


class GenerationUnavailableError(ExternalServiceError):
    """The generation backend failed or timed out."""
