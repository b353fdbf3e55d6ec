"""Configuration settings for the Support Q&A service."""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from support_qa.exceptions import ConfigurationError

# Base paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = BASE_DIR / "data"

DOMAIN_DOCUMENTS = "documents"
DOMAIN_TICKETS = "tickets"


@dataclass
class OllamaConfig:
    """Ollama embedding and generation backend configuration."""
    host: str = "http://localhost:11434"
    llm_model: str = "llama3"
    embedding_model: str = "nomic-embed-text"
    # Local models can be slow, so the timeout is in minutes rather than seconds
    timeout: float = 600.0
    temperature: float = 0.1


@dataclass
class ChromaConfig:
    """ChromaDB configuration (only used by the chroma vector backend)."""
    collection_name: str = "document_segments"
    persist_directory: Optional[str] = None


@dataclass
class DatabaseConfig:
    """SQLite database configuration."""
    url: str = field(default_factory=lambda: f"sqlite:///{DATA_DIR / 'support_qa.db'}")
    echo: bool = False


@dataclass
class RAGConfig:
    """Retrieval configuration."""
    chunk_size: int = 2000
    chunk_strategy: str = "fixed"
    top_k: int = 5
    min_score: float = 0.6
    vector_backend: str = "memory"
    max_ticket_results: int = 5
    min_keyword_length: int = 3
    supported_content_types: tuple[str, ...] = (
        "application/pdf",
        "text/plain",
        "text/markdown",
    )


@dataclass
class SchedulerConfig:
    """Background ingestion sweep configuration."""
    enabled: bool = True
    interval_seconds: float = 60.0


@dataclass
class AppConfig:
    """Main application configuration."""
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    chroma: ChromaConfig = field(default_factory=ChromaConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    rag: RAGConfig = field(default_factory=RAGConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)

    active_domain: str = DOMAIN_DOCUMENTS

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # API settings
    api_prefix: str = "/api"
    debug: bool = False


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("true", "1", "yes")


def _env_number(name: str, cast):
    raw = os.getenv(name)
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid value for {name}: {raw!r}",
            details={"variable": name},
        ) from e


def get_config() -> AppConfig:
    """Get application configuration, optionally loading from environment."""
    config = AppConfig()

    # Override from environment variables if present
    if os.getenv("OLLAMA_HOST"):
        config.ollama.host = os.getenv("OLLAMA_HOST")
    if os.getenv("OLLAMA_LLM_MODEL"):
        config.ollama.llm_model = os.getenv("OLLAMA_LLM_MODEL")
    if os.getenv("OLLAMA_EMBEDDING_MODEL"):
        config.ollama.embedding_model = os.getenv("OLLAMA_EMBEDDING_MODEL")
    if os.getenv("OLLAMA_TIMEOUT"):
        config.ollama.timeout = _env_number("OLLAMA_TIMEOUT", float)
    if os.getenv("RAG_CHUNK_SIZE"):
        config.rag.chunk_size = _env_number("RAG_CHUNK_SIZE", int)
    if os.getenv("RAG_CHUNK_STRATEGY"):
        config.rag.chunk_strategy = os.getenv("RAG_CHUNK_STRATEGY")
    if os.getenv("RAG_TOP_K"):
        config.rag.top_k = _env_number("RAG_TOP_K", int)
    if os.getenv("RAG_MIN_SCORE"):
        config.rag.min_score = _env_number("RAG_MIN_SCORE", float)
    if os.getenv("VECTOR_BACKEND"):
        config.rag.vector_backend = os.getenv("VECTOR_BACKEND")
    if os.getenv("CHROMA_PERSIST_DIRECTORY"):
        config.chroma.persist_directory = os.getenv("CHROMA_PERSIST_DIRECTORY")
    if os.getenv("DATABASE_URL"):
        config.database.url = os.getenv("DATABASE_URL")
    if os.getenv("INGESTION_SCHEDULER_ENABLED"):
        config.scheduler.enabled = _env_flag("INGESTION_SCHEDULER_ENABLED")
    if os.getenv("INGESTION_INTERVAL_SECONDS"):
        config.scheduler.interval_seconds = _env_number("INGESTION_INTERVAL_SECONDS", float)
    if os.getenv("QA_DOMAIN"):
        config.active_domain = os.getenv("QA_DOMAIN")
    if os.getenv("LOG_LEVEL"):
        config.log_level = os.getenv("LOG_LEVEL")
    if os.getenv("LOG_JSON"):
        config.log_json = _env_flag("LOG_JSON")
    if os.getenv("DEBUG"):
        config.debug = _env_flag("DEBUG")

    if config.active_domain not in (DOMAIN_DOCUMENTS, DOMAIN_TICKETS):
        raise ConfigurationError(
            f"Unknown QA domain: {config.active_domain!r}",
            details={"variable": "QA_DOMAIN"},
        )

    return config


# Ensure data directory exists
DATA_DIR.mkdir(parents=True, exist_ok=True)
