"""Pytest fixtures for testing the Support Q&A service."""

import re
import zlib
from pathlib import Path
from unittest.mock import Mock
import pytest

from support_qa.config import (
    AppConfig,
    ChromaConfig,
    DatabaseConfig,
    OllamaConfig,
    RAGConfig,
    SchedulerConfig,
)
from support_qa.database.db import DatabaseManager
from support_qa.rag.embeddings import EmbeddingClient
from support_qa.rag.vector_index import InMemoryVectorIndex
from support_qa.qa.generation import GenerationClient

EMBEDDING_DIMENSIONS = 256


def fake_embedding(text: str, dimensions: int = EMBEDDING_DIMENSIONS) -> list[float]:
    """Deterministic bag-of-words vector: texts sharing words point the same way."""
    vector = [0.0] * dimensions
    for word in re.findall(r"\w+", text.lower()):
        vector[zlib.crc32(word.encode()) % dimensions] += 1.0
    if not any(vector):
        vector[0] = 1.0
    return vector


@pytest.fixture
def test_config(tmp_path: Path) -> AppConfig:
    """Create test configuration with temporary directories."""
    return AppConfig(
        ollama=OllamaConfig(
            host="http://localhost:11434",
            llm_model="llama3",
            embedding_model="nomic-embed-text",
            timeout=30
        ),
        chroma=ChromaConfig(
            collection_name="test_segments",
            persist_directory=None
        ),
        database=DatabaseConfig(
            url=f"sqlite:///{tmp_path / 'test.db'}",
            echo=False
        ),
        rag=RAGConfig(
            chunk_size=2000,
            top_k=5,
            min_score=0.6
        ),
        scheduler=SchedulerConfig(
            enabled=False,
            interval_seconds=0.05
        ),
        debug=True
    )


@pytest.fixture
def mock_ollama_client() -> Mock:
    """Create a mock Ollama client for testing."""
    client = Mock()

    # Mock chat method (for LLM calls)
    client.chat.return_value = {
        "message": {
            "content": "This is a mock response from the LLM."
        }
    }

    # Mock embeddings method
    def mock_embeddings(model, prompt, **kwargs):
        return {"embedding": fake_embedding(prompt)}

    client.embeddings.side_effect = mock_embeddings

    return client


@pytest.fixture
def flaky_ollama():
    """Factory for mock Ollama clients whose n-th embedding calls (1-based) fail."""
    def factory(fail_on: set[int]) -> Mock:
        calls = {"count": 0}

        def mock_embeddings(model, prompt, **kwargs):
            calls["count"] += 1
            if calls["count"] in fail_on:
                raise ConnectionError("embedding backend unreachable")
            return {"embedding": fake_embedding(prompt)}

        client = Mock()
        client.embeddings.side_effect = mock_embeddings
        return client

    return factory


@pytest.fixture
def embedding_client(test_config: AppConfig, mock_ollama_client: Mock) -> EmbeddingClient:
    """Embedding client backed by the mock Ollama client."""
    return EmbeddingClient(config=test_config, ollama_client=mock_ollama_client)


@pytest.fixture
def generation_client(test_config: AppConfig, mock_ollama_client: Mock) -> GenerationClient:
    """Generation client backed by the mock Ollama client."""
    return GenerationClient(config=test_config, ollama_client=mock_ollama_client)


@pytest.fixture
def vector_index() -> InMemoryVectorIndex:
    """Empty in-memory vector index."""
    return InMemoryVectorIndex()


@pytest.fixture
def db_manager(test_config: AppConfig) -> DatabaseManager:
    """Database manager on a fresh temporary SQLite file."""
    return DatabaseManager(test_config)


@pytest.fixture
def seeded_db(db_manager: DatabaseManager) -> DatabaseManager:
    """Ticket store with a handful of middleware products and tickets."""
    apache = db_manager.add_product(
        "Apache HTTP Server", "2.4.57", "Web Server",
        "Apache HTTP Server is a free and open-source web server."
    )
    tomcat = db_manager.add_product(
        "Apache Tomcat", "10.1.17", "Application Server",
        "Apache Tomcat is an open-source Jakarta Servlet container."
    )
    websphere = db_manager.add_product(
        "IBM WebSphere", "9.0.5", "Application Server",
        "IBM WebSphere Application Server is a Java server runtime."
    )
    weblogic = db_manager.add_product(
        "Oracle WebLogic", "14.1.1", "Application Server",
        "Oracle WebLogic Server is a platform for enterprise applications."
    )

    db_manager.add_ticket(
        apache,
        ticket_number="INC000123456",
        title="Apache server failing to start after configuration change",
        description="After updating httpd.conf with virtual host settings the server fails to start. "
                    "Error log shows AH00526: Syntax error on line 217: Invalid command 'VirtualHos'.",
        priority="High",
        status="Resolved",
        assignee="John Smith",
        reporter="Alice Johnson",
        resolution="Corrected the typo in httpd.conf. Changed 'VirtualHos' to 'VirtualHost' on line 217.",
        environment="Production",
        component="Configuration",
        updates=[
            ("Initial investigation started. Looking at configuration files.", "John Smith", "Comment"),
            ("Found typo in VirtualHost directive on line 217.", "John Smith", "Comment"),
            ("Changed status from In Progress to Resolved", "System", "Status Change"),
        ],
    )
    db_manager.add_ticket(
        apache,
        ticket_number="INC000123789",
        title="Apache server high CPU usage during peak hours",
        description="CPU usage reaches 90% during business hours and some requests time out.",
        priority="Medium",
        status="In Progress",
        assignee="Sarah Williams",
        reporter="Bob Roberts",
        environment="Production",
        component="Performance",
        updates=[
            ("Worker MPM settings may need tuning.", "Sarah Williams", "Comment"),
            ("Looking into enabling HTTP/2 to reduce connection overhead.", "Sarah Williams", "Comment"),
        ],
    )
    db_manager.add_ticket(
        tomcat,
        ticket_number="INC000125678",
        title="Tomcat OutOfMemoryError: Java heap space",
        description="Tomcat server crashes with OutOfMemoryError: Java heap space after running for 12 hours. "
                    "Current JVM settings: -Xms1G -Xmx2G",
        priority="Critical",
        status="Resolved",
        assignee="Mike Wilson",
        reporter="Karen Davis",
        resolution="Increased JVM heap to -Xms2G -Xmx4G and fixed a connection leak in the application.",
        environment="Production",
        component="Memory Management",
        updates=[
            ("Investigating memory usage patterns using jmap and jstat.", "Mike Wilson", "Comment"),
            ("Found memory leak in ConnectionManager class.", "Mike Wilson", "Comment"),
            ("Solution verified. Server has been stable for 72 hours.", "Karen Davis", "Comment"),
        ],
    )
    db_manager.add_ticket(
        tomcat,
        ticket_number="INC000126789",
        title="Tomcat SSL/TLS certificate expiration warning",
        description="The SSL certificate for our Tomcat server will expire in 15 days and must be renewed.",
        priority="Medium",
        status="In Progress",
        assignee="Jennifer Lee",
        reporter="David Brown",
        environment="Production",
        component="Security",
        updates=[
            ("Requested new certificate from the CA.", "Jennifer Lee", "Comment"),
            ("Reassigned to the security team.", "System", "Assignment Change"),
        ],
    )
    db_manager.add_ticket(
        websphere,
        ticket_number="INC000127890",
        title="WebSphere cluster member fails to join the cell",
        description="A new cluster member cannot synchronize with the deployment manager after node federation.",
        priority="High",
        status="Resolved",
        assignee="Raj Patel",
        reporter="Emily Chen",
        resolution="Regenerated the node certificates and resynchronized the node with the deployment manager.",
        environment="Staging",
        component="Clustering",
    )
    db_manager.add_ticket(
        weblogic,
        ticket_number="INC000128901",
        title="WebLogic managed server reports stuck threads",
        description="Stuck thread warnings appear during nightly batch processing on the managed server.",
        priority="High",
        status="In Progress",
        assignee="Laura Martinez",
        reporter="Tom Harris",
        environment="Production",
        component="Performance",
        updates=[
            ("Thread dumps show threads waiting on a JDBC connection pool.", "Laura Martinez", "Comment"),
        ],
    )
    return db_manager


# Marker for integration tests
def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
