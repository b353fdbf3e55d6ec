"""Embedding client - turns text into vectors using an Ollama embedding model."""

import logging
from typing import Optional

import httpx
import ollama

from support_qa.config import AppConfig, get_config
from support_qa.exceptions import EmbeddingUnavailableError

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """Calls the embedding backend; any failure or timeout becomes EmbeddingUnavailableError."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        ollama_client: Optional[ollama.Client] = None,
    ):
        """Initialize the embedding client.

        Args:
            config: Application configuration
            ollama_client: Ollama client (optional, creates one with the configured timeout)
        """
        self.config = config or get_config()
        self.ollama_client = ollama_client or ollama.Client(
            host=self.config.ollama.host,
            timeout=self.config.ollama.timeout
        )

    @property
    def model(self) -> str:
        return self.config.ollama.embedding_model

    def embed(self, text: str) -> list[float]:
        """Generate an embedding for a text.

        Args:
            text: Text to embed

        Returns:
            Embedding vector

        Raises:
            EmbeddingUnavailableError: If the backend errors, times out or returns no vector
        """
        try:
            response = self.ollama_client.embeddings(
                model=self.model,
                prompt=text
            )
        except (ollama.ResponseError, httpx.HTTPError, ConnectionError) as e:
            raise EmbeddingUnavailableError(
                f"Embedding backend unavailable: {e}",
                details={"host": self.config.ollama.host, "model": self.model},
            ) from e

        embedding = response["embedding"]
        if not embedding:
            raise EmbeddingUnavailableError(
                "Embedding backend returned an empty vector",
                details={"host": self.config.ollama.host, "model": self.model},
            )
        return list(embedding)
