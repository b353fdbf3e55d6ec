"""Retrieval components: chunking, indexing and search over documents and tickets."""

from support_qa.rag.chunker import Chunker, FixedSizeChunker, ParagraphChunker, get_chunker
from support_qa.rag.embeddings import EmbeddingClient
from support_qa.rag.indexer import DocumentIndexer, IngestionReport
from support_qa.rag.keyword_index import KeywordIndex
from support_qa.rag.retriever import ContextRetriever, DocumentRetriever, RetrievalResult
from support_qa.rag.ticket_retriever import TicketRetriever, format_ticket
from support_qa.rag.vector_index import (
    ChromaVectorIndex,
    InMemoryVectorIndex,
    SearchHit,
    Segment,
    VectorIndex,
)

__all__ = [
    "Chunker",
    "FixedSizeChunker",
    "ParagraphChunker",
    "get_chunker",
    "EmbeddingClient",
    "DocumentIndexer",
    "IngestionReport",
    "KeywordIndex",
    "ContextRetriever",
    "DocumentRetriever",
    "RetrievalResult",
    "TicketRetriever",
    "format_ticket",
    "ChromaVectorIndex",
    "InMemoryVectorIndex",
    "SearchHit",
    "Segment",
    "VectorIndex",
]
