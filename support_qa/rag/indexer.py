"""Document indexer - extracts, chunks, embeds and stores documents.

Segments are embedded and written to the vector index one at a time, in
chunk order, so a shared embedding backend never sees more than one request
from ingestion at once. A segment whose embedding fails is logged and
skipped; the remaining segments are still attempted.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from support_qa.config import AppConfig, get_config
from support_qa.database.db import DatabaseManager
from support_qa.database.models import Document
from support_qa.exceptions import ApplicationError, EmbeddingUnavailableError
from support_qa.rag.chunker import Chunker, get_chunker
from support_qa.rag.embeddings import EmbeddingClient
from support_qa.rag.extraction import extract_text
from support_qa.rag.vector_index import Segment, VectorIndex

logger = logging.getLogger(__name__)


@dataclass
class IngestionReport:
    """Outcome of ingesting one document."""
    document_id: int
    segments_total: int = 0
    segments_indexed: int = 0
    failed_segments: list[int] = field(default_factory=list)
    skipped: bool = False

    @property
    def succeeded(self) -> bool:
        """True unless every segment failed (an empty document is a successful no-op)."""
        return self.segments_total == 0 or self.segments_indexed > 0

    @property
    def partial(self) -> bool:
        """True if some, but not all, segments failed to embed."""
        return bool(self.failed_segments) and self.segments_indexed > 0


class DocumentIndexer:
    """Ingests documents from the document store into a vector index."""

    def __init__(
        self,
        db_manager: DatabaseManager,
        vector_index: VectorIndex,
        embedding_client: EmbeddingClient,
        config: Optional[AppConfig] = None,
        chunker: Optional[Chunker] = None,
    ):
        """Initialize the document indexer.

        Args:
            db_manager: Document store
            vector_index: Index that receives segment embeddings
            embedding_client: Embedding backend
            config: Application configuration
            chunker: Chunking strategy (uses the configured strategy if None)
        """
        self.config = config or get_config()
        self.db_manager = db_manager
        self.vector_index = vector_index
        self.embedding_client = embedding_client
        self.chunker = chunker or get_chunker(
            self.config.rag.chunk_strategy,
            self.config.rag.chunk_size
        )
        # Upload-triggered ingestion and the background sweep share one writer lock
        self._lock = threading.RLock()

    def chunk_document(self, document: Document) -> list[Segment]:
        """Extract a document's text and split it into segments.

        Raises:
            UnsupportedContentTypeError: If the content type cannot be ingested
        """
        text = extract_text(
            document.content,
            document.content_type,
            self.config.rag.supported_content_types
        )
        logger.info("Document %s: extracted %d characters", document.id, len(text))

        return [
            Segment(
                text=chunk,
                document_id=document.id,
                document_title=document.title,
                chunk_index=i
            )
            for i, chunk in enumerate(self.chunker.split(text))
        ]

    def ingest(self, document: Document) -> IngestionReport:
        """Embed and index every segment of a document.

        Args:
            document: Document to ingest

        Returns:
            IngestionReport with per-segment outcome

        Raises:
            UnsupportedContentTypeError: If the content type cannot be ingested
        """
        segments = self.chunk_document(document)
        report = IngestionReport(document_id=document.id, segments_total=len(segments))

        if not segments:
            logger.warning("Document %s produced no segments; nothing to index", document.id)
            return report

        logger.info("Document %s split into %d segments", document.id, len(segments))

        for i, segment in enumerate(segments):
            try:
                vector = self.embedding_client.embed(segment.text)
                self.vector_index.add([segment], [vector])
            except Exception as e:
                # Any backend error skips this segment only
                report.failed_segments.append(i)
                logger.error(
                    "Error processing segment %d of %d for document %s: %s",
                    i + 1, len(segments), document.id, e,
                    exc_info=not isinstance(e, EmbeddingUnavailableError),
                    extra={"document_id": document.id, "segment": i + 1, "stage": "embedding"},
                )
                continue
            report.segments_indexed += 1
            logger.debug("Indexed segment %d of %d for document %s", i + 1, len(segments), document.id)

        if report.failed_segments:
            logger.warning(
                "Document %s indexed with failures: %d of %d segments failed",
                document.id, len(report.failed_segments), len(segments),
                extra={"document_id": document.id, "failed_segments": report.failed_segments},
            )
        else:
            logger.info("Document %s indexed: %d segments", document.id, report.segments_indexed)
        return report

    def process_document(self, document: Document) -> IngestionReport:
        """Ingest a document unless already processed, then mark it processed.

        Re-processing a processed document is a no-op. The processed flag is set
        whenever ingestion runs to completion, even if some segments failed.

        Raises:
            UnsupportedContentTypeError: If the content type cannot be ingested
                (the document stays unprocessed)
        """
        with self._lock:
            # The caller's copy may be stale if another writer got there first
            current = self.db_manager.get_document(document.id)
            if document.processed or (current is not None and current.processed):
                logger.debug("Document %s already processed; skipping", document.id)
                document.processed = True
                return IngestionReport(document_id=document.id, skipped=True)

            report = self.ingest(document)
            self.db_manager.mark_processed(document.id)
            document.processed = True
            return report

    def process_unprocessed(self) -> list[IngestionReport]:
        """Sweep the document store and ingest every unprocessed document in turn.

        A failure on one document is logged and does not stop the sweep.

        Returns:
            Reports for the documents that were ingested
        """
        with self._lock:
            documents = self.db_manager.list_unprocessed_documents()
            logger.info("Found %d unprocessed documents", len(documents))

            reports = []
            for document in documents:
                logger.info("Processing document %s: %s", document.id, document.title)
                try:
                    reports.append(self.process_document(document))
                except ApplicationError as e:
                    logger.error(
                        "Error processing document %s (%s): %s",
                        document.id, document.title, e.message,
                        extra={"document_id": document.id, "stage": "ingestion"},
                    )
                except Exception:
                    logger.exception(
                        "Unexpected error processing document %s (%s)", document.id, document.title,
                        extra={"document_id": document.id, "stage": "ingestion"},
                    )
            return reports

    def get_indexed_count(self) -> int:
        """Get the number of indexed segments."""
        return self.vector_index.count()
