"""Background ingestion scheduler.

A single daemon thread sweeps the document store at a fixed interval and
ingests every unprocessed document, one at a time. The indexer serializes
sweeps with upload-triggered ingestion, so the vector index only ever has
one writer.
"""

import logging
import threading
from typing import Optional

from support_qa.rag.indexer import DocumentIndexer, IngestionReport

logger = logging.getLogger(__name__)


class IngestionScheduler:
    """Runs DocumentIndexer.process_unprocessed periodically."""

    def __init__(self, indexer: DocumentIndexer, interval_seconds: float = 60.0):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.indexer = indexer
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> list[IngestionReport]:
        """Run one sweep now, waiting for any ingestion already in progress."""
        return self.indexer.process_unprocessed()

    def start(self) -> None:
        """Start the background thread; the first sweep runs immediately."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="ingestion-scheduler",
            daemon=True
        )
        self._thread.start()
        logger.info("Ingestion scheduler started (every %.0fs)", self.interval_seconds)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the thread to stop and wait for the current sweep to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Ingestion scheduler stopped")

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.run_once()
            except Exception:
                # Keep the thread alive; the next sweep retries
                logger.exception("Ingestion sweep failed")
            self._stop_event.wait(self.interval_seconds)
