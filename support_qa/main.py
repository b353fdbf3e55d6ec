"""FastAPI application entry point for the Support Q&A service."""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI
import ollama

from support_qa.config import AppConfig, get_config
from support_qa.api.routes import router as api_router, set_dependencies
from support_qa.database.db import DatabaseManager
from support_qa.log_config import setup_logging
from support_qa.qa.generation import GenerationClient
from support_qa.qa.orchestrator import QAOrchestrator, build_orchestrator
from support_qa.rag.embeddings import EmbeddingClient
from support_qa.rag.indexer import DocumentIndexer
from support_qa.rag.keyword_index import KeywordIndex
from support_qa.rag.retriever import DocumentRetriever
from support_qa.rag.ticket_retriever import TicketRetriever
from support_qa.rag.vector_index import ChromaVectorIndex, InMemoryVectorIndex, VectorIndex
from support_qa.scheduler import IngestionScheduler
from support_qa import __version__

logger = logging.getLogger(__name__)


@dataclass
class AppComponents:
    """Everything the API routes need, wired together."""
    config: AppConfig
    db_manager: DatabaseManager
    vector_index: VectorIndex
    indexer: DocumentIndexer
    generation_client: GenerationClient
    orchestrator: QAOrchestrator
    scheduler: IngestionScheduler


def create_vector_index(config: AppConfig) -> VectorIndex:
    """Create the configured vector index backend."""
    backend = config.rag.vector_backend
    if backend == "memory":
        return InMemoryVectorIndex()
    if backend == "chroma":
        return ChromaVectorIndex(
            collection_name=config.chroma.collection_name,
            persist_directory=config.chroma.persist_directory
        )
    raise ValueError(f"Unknown vector backend '{backend}', expected 'memory' or 'chroma'")


def build_components(
    config: AppConfig,
    ollama_client: Optional[ollama.Client] = None,
) -> AppComponents:
    """Build and wire all service components.

    Args:
        config: Application configuration
        ollama_client: Shared Ollama client (optional, creates default)

    Returns:
        Wired AppComponents
    """
    ollama_client = ollama_client or ollama.Client(
        host=config.ollama.host,
        timeout=config.ollama.timeout
    )

    db_manager = DatabaseManager(config)
    vector_index = create_vector_index(config)
    embedding_client = EmbeddingClient(config=config, ollama_client=ollama_client)
    generation_client = GenerationClient(config=config, ollama_client=ollama_client)

    indexer = DocumentIndexer(
        db_manager=db_manager,
        vector_index=vector_index,
        embedding_client=embedding_client,
        config=config
    )
    orchestrator = build_orchestrator(
        generation_client=generation_client,
        document_retriever=DocumentRetriever(
            vector_index=vector_index,
            embedding_client=embedding_client,
            config=config
        ),
        ticket_retriever=TicketRetriever(KeywordIndex(db_manager), config=config),
        active_domain=config.active_domain
    )
    scheduler = IngestionScheduler(indexer, interval_seconds=config.scheduler.interval_seconds)

    return AppComponents(
        config=config,
        db_manager=db_manager,
        vector_index=vector_index,
        indexer=indexer,
        generation_client=generation_client,
        orchestrator=orchestrator,
        scheduler=scheduler,
    )


def create_app(
    config: Optional[AppConfig] = None,
    components: Optional[AppComponents] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Application configuration (uses default if None)
        components: Pre-built components (built at startup if None)

    Returns:
        Configured FastAPI application
    """
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        setup_logging(config.log_level, json_format=config.log_json)
        logger.info("Starting Support Q&A v%s", __version__)

        parts = components or build_components(config)
        set_dependencies(
            parts.orchestrator,
            parts.db_manager,
            parts.indexer,
            parts.generation_client,
            config
        )

        if config.scheduler.enabled:
            parts.scheduler.start()

        # Store in app state for access
        app.state.config = config
        app.state.components = parts

        yield

        # Shutdown
        logger.info("Shutting down...")
        if parts.scheduler.is_running:
            parts.scheduler.stop()

    app = FastAPI(
        title="Support Q&A",
        description="Retrieval-augmented answers over uploaded documents and support tickets",
        version=__version__,
        debug=config.debug,
        lifespan=lifespan
    )

    # Include API router
    app.include_router(api_router, prefix=config.api_prefix)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "support_qa.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
