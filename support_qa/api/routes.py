"""API routes for the Support Q&A service."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from support_qa.api.schemas import (
    AnswerResponse,
    ChatRequest,
    ChatResponse,
    DatabaseHealth,
    DiagnosticsResponse,
    DocumentInfo,
    DocumentListResponse,
    HealthResponse,
    ModelHealth,
    ModelTestResponse,
    QuestionRequest,
    UploadResponse,
)
from support_qa.config import AppConfig, get_config, DOMAIN_DOCUMENTS, DOMAIN_TICKETS
from support_qa.database.db import DatabaseManager
from support_qa.database.models import Document
from support_qa.exceptions import ApplicationError
from support_qa.qa.generation import GenerationClient, HEALTH_PROBE_PROMPT
from support_qa.qa.orchestrator import (
    AnswerStatus,
    FailureReason,
    QAOrchestrator,
    INVALID_INPUT_MESSAGE,
)
from support_qa.rag.indexer import DocumentIndexer
from support_qa import __version__

logger = logging.getLogger(__name__)

router = APIRouter()

CHAT_ERROR_MESSAGE = "An error occurred while processing your request."
EXAMPLE_QUERIES = [
    "How do I fix Apache server startup issues?",
    "What causes Tomcat OutOfMemoryError?",
    "Show me WebSphere cluster problems",
    "What are common WebLogic performance issues?",
]

# Global instances (initialized in main.py)
_orchestrator: Optional[QAOrchestrator] = None
_db_manager: Optional[DatabaseManager] = None
_indexer: Optional[DocumentIndexer] = None
_generation_client: Optional[GenerationClient] = None
_config: Optional[AppConfig] = None


def set_dependencies(
    orchestrator: QAOrchestrator,
    db_manager: DatabaseManager,
    indexer: DocumentIndexer,
    generation_client: GenerationClient,
    config: AppConfig
):
    """Set the global dependencies for the API routes."""
    global _orchestrator, _db_manager, _indexer, _generation_client, _config
    _orchestrator = orchestrator
    _db_manager = db_manager
    _indexer = indexer
    _generation_client = generation_client
    _config = config


def get_orchestrator() -> QAOrchestrator:
    """Get the QA orchestrator."""
    if _orchestrator is None:
        raise HTTPException(status_code=500, detail="Orchestrator not initialized")
    return _orchestrator


def get_db() -> DatabaseManager:
    """Get the database manager."""
    if _db_manager is None:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return _db_manager


def get_indexer() -> DocumentIndexer:
    """Get the document indexer."""
    if _indexer is None:
        raise HTTPException(status_code=500, detail="Indexer not initialized")
    return _indexer


def get_generation_client() -> GenerationClient:
    """Get the generation client."""
    if _generation_client is None:
        raise HTTPException(status_code=500, detail="Generation client not initialized")
    return _generation_client


def get_app_config() -> AppConfig:
    """Get the app config."""
    if _config is None:
        return get_config()
    return _config


def _document_info(document: Document) -> DocumentInfo:
    return DocumentInfo(
        id=document.id,
        title=document.title,
        processed=document.processed,
        content_type=document.content_type,
        uploaded_at=document.uploaded_at.isoformat() if document.uploaded_at else None
    )


# Documents

@router.post("/documents/upload", response_model=UploadResponse)
def upload_document(file: UploadFile = File(...)):
    """Store an uploaded document and try to ingest it right away.

    Processing problems are reported in the message; the upload itself is kept
    and the background sweep will retry it if it is still unprocessed.
    """
    db = get_db()
    indexer = get_indexer()

    content = file.file.read()

    filename = file.filename or "upload"
    document = db.save_document(
        title=filename,
        filename=filename,
        content=content,
        content_type=file.content_type
    )

    try:
        report = indexer.process_document(document)
    except ApplicationError as e:
        logger.error("Error processing uploaded document %s: %s", document.id, e.message,
                     extra={"document_id": document.id, "stage": "upload"})
        return UploadResponse(
            document_id=document.id,
            processed=False,
            message=f"Document uploaded with ID: {document.id}, but processing failed: {e.message}"
        )
    except Exception as e:
        logger.exception("Unexpected error processing uploaded document %s", document.id,
                         extra={"document_id": document.id, "stage": "upload"})
        return UploadResponse(
            document_id=document.id,
            processed=False,
            message=f"Document uploaded with ID: {document.id}, but processing failed: {e}"
        )

    failed = len(report.failed_segments)
    if not report.succeeded:
        message = (f"Document uploaded with ID: {document.id}, but processing failed: "
                   f"none of the {report.segments_total} segments could be embedded")
    elif failed:
        message = (f"Document uploaded and processed with ID: {document.id}; "
                   f"{failed} of {report.segments_total} segments could not be embedded")
    else:
        message = f"Document uploaded and processed successfully with ID: {document.id}"

    return UploadResponse(
        document_id=document.id,
        processed=document.processed,
        message=message,
        segments_indexed=report.segments_indexed,
        segments_failed=failed
    )


@router.get("/documents", response_model=DocumentListResponse)
def list_documents():
    """Get list of all uploaded documents."""
    db = get_db()
    return DocumentListResponse(
        documents=[_document_info(d) for d in db.list_documents()]
    )


@router.post("/documents/ask", response_model=AnswerResponse)
def ask_question(request: QuestionRequest):
    """Answer a question from the uploaded documents."""
    orchestrator = get_orchestrator()

    result = orchestrator.ask(request.question, domain=DOMAIN_DOCUMENTS)
    if result.failure == FailureReason.INVALID_INPUT:
        raise HTTPException(status_code=400, detail=result.answer)

    return AnswerResponse(
        question=result.question,
        answer=result.answer,
        status=result.status.value,
        response_time_ms=result.total_time_ms
    )


@router.get("/documents/diagnostics", response_model=DiagnosticsResponse)
def document_diagnostics():
    """Report ingestion state of all documents."""
    db = get_db()
    indexer = get_indexer()

    documents = db.list_documents()
    return DiagnosticsResponse(
        documents=[_document_info(d) for d in documents],
        document_count=len(documents),
        processed_documents=sum(1 for d in documents if d.processed),
        indexed_segments=indexer.get_indexed_count()
    )


# Ticket chat

@router.post("/chat", response_model=ChatResponse)
def chat(request: ChatRequest):
    """Answer a question from historical support tickets."""
    message = (request.message or "").strip()
    if not message:
        return JSONResponse(
            status_code=400,
            content=ChatResponse(response=INVALID_INPUT_MESSAGE, success=False).model_dump()
        )

    try:
        result = get_orchestrator().ask(message, domain=DOMAIN_TICKETS)
    except Exception:
        logger.exception("Error processing chat request")
        return JSONResponse(
            status_code=500,
            content=ChatResponse(response=CHAT_ERROR_MESSAGE, success=False).model_dump()
        )

    return ChatResponse(
        response=result.answer,
        success=result.status != AnswerStatus.FAILED
    )


@router.get("/chat/health")
def chat_health():
    """Liveness check for the chatbot."""
    return "Chatbot service is running"


@router.get("/chat/examples", response_model=list[str])
def chat_examples():
    """Example questions for the ticket chatbot."""
    return EXAMPLE_QUERIES


# System

@router.get("/system/health", response_model=HealthResponse)
def system_health():
    """Store counts plus a round-trip probe of the generation backend."""
    db = get_db()
    config = get_app_config()

    probe = get_generation_client().probe(HEALTH_PROBE_PROMPT)
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.utcnow().isoformat(),
        database=DatabaseHealth(
            status="connected",
            document_count=db.count_documents(),
            processed_documents=db.count_processed_documents(),
            product_count=db.count_products(),
            ticket_count=db.count_tickets(),
            update_count=db.count_updates()
        ),
        ai_model=ModelHealth(
            status="available" if probe.available else "unavailable",
            ollama_url=config.ollama.host,
            model_name=config.ollama.llm_model,
            test_response=probe.response,
            response_time_ms=probe.response_time_ms,
            error=probe.error
        )
    )


@router.get("/system/test-ai", response_model=ModelTestResponse)
def test_ai_model(query: str = "Hello, are you working?"):
    """Send a custom prompt to the generation backend and time the reply."""
    probe = get_generation_client().probe(query)
    result = ModelTestResponse(
        status="success" if probe.available else "error",
        test_query=query,
        response=probe.response,
        response_time_ms=probe.response_time_ms,
        error=probe.error
    )
    if not probe.available:
        return JSONResponse(status_code=503, content=result.model_dump())
    return result
