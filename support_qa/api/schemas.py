"""Pydantic schemas for API request/response validation."""

from typing import Optional
from pydantic import BaseModel, Field


class QuestionRequest(BaseModel):
    """Request schema for asking a question about uploaded documents."""
    question: str = Field(..., max_length=2000, description="The question to ask")


class AnswerResponse(BaseModel):
    """Response schema for an answered question."""
    question: str
    answer: str
    status: str
    response_time_ms: int = 0


class ChatRequest(BaseModel):
    """Request schema for the ticket chatbot."""
    message: Optional[str] = Field(None, max_length=2000, description="The question to ask")


class ChatResponse(BaseModel):
    """Response schema for the ticket chatbot."""
    response: str
    success: bool


class UploadResponse(BaseModel):
    """Response schema for a document upload."""
    document_id: int
    processed: bool
    message: str
    segments_indexed: int = 0
    segments_failed: int = 0


class DocumentInfo(BaseModel):
    """Schema for document information."""
    id: int
    title: str
    processed: bool
    content_type: Optional[str] = None
    uploaded_at: Optional[str] = None


class DocumentListResponse(BaseModel):
    """Response schema for document list."""
    documents: list[DocumentInfo]


class DiagnosticsResponse(BaseModel):
    """Response schema for document ingestion diagnostics."""
    documents: list[DocumentInfo]
    document_count: int
    processed_documents: int
    indexed_segments: int


class DatabaseHealth(BaseModel):
    """Store counts reported by the health check."""
    status: str
    document_count: int
    processed_documents: int
    product_count: int
    ticket_count: int
    update_count: int


class ModelHealth(BaseModel):
    """Generation backend status reported by the health check."""
    status: str
    ollama_url: str
    model_name: str
    test_response: Optional[str] = None
    response_time_ms: int = 0
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Response schema for health check."""
    status: str
    version: str
    timestamp: str
    database: DatabaseHealth
    ai_model: ModelHealth


class ModelTestResponse(BaseModel):
    """Response schema for an ad-hoc generation backend test."""
    status: str
    test_query: str
    response: Optional[str] = None
    response_time_ms: int = 0
    error: Optional[str] = None
