"""API module for the Support Q&A service."""

from support_qa.api.routes import router
from support_qa.api.schemas import (
    AnswerResponse,
    ChatRequest,
    ChatResponse,
    QuestionRequest,
    UploadResponse,
)

__all__ = [
    "router",
    "AnswerResponse",
    "ChatRequest",
    "ChatResponse",
    "QuestionRequest",
    "UploadResponse",
]
