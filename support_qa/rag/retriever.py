"""Document retriever - similarity search over indexed document segments."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from support_qa.config import AppConfig, get_config
from support_qa.rag.embeddings import EmbeddingClient
from support_qa.rag.vector_index import Segment, VectorIndex

logger = logging.getLogger(__name__)


class ContextRetriever(ABC):
    """Anything that turns a question into formatted context blocks."""

    @abstractmethod
    def retrieve(self, query: str) -> list[str]:
        """Return context blocks for a query, best first."""


@dataclass
class RetrievalResult:
    """Represents a retrieval result from the vector search."""
    segment: Segment
    score: float

    @property
    def content(self) -> str:
        return self.segment.text

    @property
    def document_name(self) -> str:
        return self.segment.document_title or "unknown"


class DocumentRetriever(ContextRetriever):
    """Retrieves relevant document segments based on query similarity."""

    def __init__(
        self,
        vector_index: VectorIndex,
        embedding_client: EmbeddingClient,
        config: Optional[AppConfig] = None,
    ):
        """Initialize the document retriever.

        Args:
            vector_index: Index to search
            embedding_client: Embedding backend used for the query
            config: Application configuration
        """
        self.config = config or get_config()
        self.vector_index = vector_index
        self.embedding_client = embedding_client

    def search(
        self,
        query: str,
        top_k: Optional[int] = None,
        min_score: Optional[float] = None,
    ) -> list[RetrievalResult]:
        """Search for relevant segments.

        Args:
            query: Search query
            top_k: Maximum results (uses config default if None)
            min_score: Similarity floor (uses config default if None)

        Returns:
            Results sorted by descending similarity

        Raises:
            EmbeddingUnavailableError: If the query cannot be embedded
        """
        top_k = top_k if top_k is not None else self.config.rag.top_k
        min_score = min_score if min_score is not None else self.config.rag.min_score

        query_embedding = self.embedding_client.embed(query)
        hits = self.vector_index.search(query_embedding, top_k, min_score)
        logger.info("Document search returned %d segments (top_k=%d, min_score=%.2f)",
                    len(hits), top_k, min_score)

        return [RetrievalResult(segment=hit.segment, score=hit.score) for hit in hits]

    def retrieve(self, query: str) -> list[str]:
        """Search and format each matching segment as a context block."""
        return [self.format_result(result) for result in self.search(query)]

    @staticmethod
    def format_result(result: RetrievalResult) -> str:
        """Format a retrieval result as a context block."""
        return f"[Source: {result.document_name}]\n{result.content}"
