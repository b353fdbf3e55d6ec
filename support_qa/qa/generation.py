"""Generation client - sends prompts to an Ollama chat model."""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx
import ollama

from support_qa.config import AppConfig, get_config
from support_qa.exceptions import GenerationUnavailableError

logger = logging.getLogger(__name__)

HEALTH_PROBE_PROMPT = "Test connection - respond with 'OK'"


@dataclass
class ProbeResult:
    """Result of a round-trip test against the generation backend."""
    available: bool
    prompt: str
    response: Optional[str] = None
    response_time_ms: int = 0
    error: Optional[str] = None


class GenerationClient:
    """Prompt in, text out. Failures and timeouts become GenerationUnavailableError."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        ollama_client: Optional[ollama.Client] = None,
    ):
        """Initialize the generation client.

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
        return self.config.ollama.llm_model

    def generate(self, prompt: str) -> str:
        """Generate a completion for a prompt.

        Args:
            prompt: Complete prompt text

        Returns:
            The model's reply

        Raises:
            GenerationUnavailableError: If the backend errors or times out
        """
        try:
            response = self.ollama_client.chat(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                options={"temperature": self.config.ollama.temperature}
            )
        except (ollama.ResponseError, httpx.HTTPError, ConnectionError) as e:
            raise GenerationUnavailableError(
                f"Generation backend unavailable: {e}",
                details={"host": self.config.ollama.host, "model": self.model},
            ) from e

        return response["message"]["content"]

    def probe(self, prompt: str = HEALTH_PROBE_PROMPT) -> ProbeResult:
        """Send a test prompt and measure the round trip."""
        start = time.time()
        try:
            response = self.generate(prompt)
        except GenerationUnavailableError as e:
            logger.warning("Generation backend probe failed: %s", e.message)
            return ProbeResult(
                available=False,
                prompt=prompt,
                response_time_ms=int((time.time() - start) * 1000),
                error=e.message
            )
        return ProbeResult(
            available=True,
            prompt=prompt,
            response=response.strip(),
            response_time_ms=int((time.time() - start) * 1000)
        )
