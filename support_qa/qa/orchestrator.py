"""QA orchestrator - retrieve, assemble prompt, generate.

Every question ends in one of three states:

- ``ANSWERED``: the generation backend replied.
- ``NO_CONTEXT``: retrieval found nothing; a fixed message is returned and
  the generation backend is not called.
- ``FAILED``: blank question, or a backend that errored or timed out. The
  caller gets a fixed apology, never the underlying error.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from support_qa.config import DOMAIN_DOCUMENTS, DOMAIN_TICKETS
from support_qa.exceptions import EmbeddingUnavailableError, GenerationUnavailableError
from support_qa.qa.generation import GenerationClient
from support_qa.qa.prompts import DOCUMENT_TEMPLATE, TICKET_TEMPLATE, PromptBuilder
from support_qa.rag.retriever import ContextRetriever

logger = logging.getLogger(__name__)

INVALID_INPUT_MESSAGE = "Please provide a valid question."
DOCUMENT_NO_CONTEXT_MESSAGE = "I don't have enough information to answer this question accurately."
TICKET_NO_CONTEXT_MESSAGE = (
    "I couldn't find any relevant tickets or information related to your query. "
    "Please try rephrasing your question or ask about specific middleware products "
    "like Apache, Tomcat, WebSphere, or WebLogic."
)
ERROR_MESSAGE = (
    "I apologize, but I encountered an error while processing your request. "
    "Please try again or contact support if the issue persists."
)


class AnswerStatus(str, Enum):
    ANSWERED = "answered"
    NO_CONTEXT = "no_context"
    FAILED = "failed"


class FailureReason(str, Enum):
    INVALID_INPUT = "invalid_input"
    EMBEDDING_UNAVAILABLE = "embedding_unavailable"
    RETRIEVAL_UNAVAILABLE = "retrieval_unavailable"
    GENERATION_UNAVAILABLE = "generation_unavailable"


@dataclass
class DomainProfile:
    """How one QA domain retrieves context and phrases its prompt."""
    retriever: ContextRetriever
    prompt_builder: PromptBuilder
    no_context_message: str


@dataclass
class QAResult:
    """Outcome of answering one question."""
    question: str
    domain: str
    status: AnswerStatus
    answer: str
    failure: Optional[FailureReason] = None
    contexts: list[str] = field(default_factory=list)

    # Timing
    retrieval_time_ms: int = 0
    generation_time_ms: int = 0
    total_time_ms: int = 0

    @property
    def answered(self) -> bool:
        return self.status == AnswerStatus.ANSWERED


class AnswerService(ABC):
    """Answers natural-language questions."""

    @abstractmethod
    def answer(self, question: str) -> str:
        """Return an answer for the question."""


class QAOrchestrator(AnswerService):
    """Routes a question through the active domain's retriever and the generation backend."""

    def __init__(
        self,
        generation_client: GenerationClient,
        profiles: dict[str, DomainProfile],
        active_domain: str = DOMAIN_DOCUMENTS,
    ):
        """Initialize the orchestrator.

        Args:
            generation_client: Generation backend
            profiles: Retrieval and prompt profile per domain name
            active_domain: Domain used when a call does not name one
        """
        if active_domain not in profiles:
            raise ValueError(f"No profile for active domain '{active_domain}'")
        self.generation_client = generation_client
        self.profiles = profiles
        self.active_domain = active_domain

    def ask(self, question: Optional[str], domain: Optional[str] = None) -> QAResult:
        """Answer a question.

        Args:
            question: Raw user question
            domain: Domain name (uses the active domain if None)

        Returns:
            QAResult in one of the terminal states
        """
        domain = domain or self.active_domain
        profile = self.profiles[domain]
        total_start = time.time()

        question = (question or "").strip()
        if not question:
            return QAResult(
                question="",
                domain=domain,
                status=AnswerStatus.FAILED,
                answer=INVALID_INPUT_MESSAGE,
                failure=FailureReason.INVALID_INPUT,
            )

        logger.info("Processing %s query: %s", domain, question)

        # Stage 1: Retrieval
        retrieval_start = time.time()
        try:
            contexts = profile.retriever.retrieve(question)
        except EmbeddingUnavailableError as e:
            logger.error("Retrieval failed for %s query: %s", domain, e.message,
                         extra={"stage": "retrieval", "domain": domain})
            return self._failed(question, domain, FailureReason.EMBEDDING_UNAVAILABLE, total_start)
        except Exception:
            logger.exception("Retrieval failed for %s query", domain,
                             extra={"stage": "retrieval", "domain": domain})
            return self._failed(question, domain, FailureReason.RETRIEVAL_UNAVAILABLE, total_start)
        retrieval_time_ms = int((time.time() - retrieval_start) * 1000)

        if not contexts:
            logger.info("No context found for %s query", domain)
            return QAResult(
                question=question,
                domain=domain,
                status=AnswerStatus.NO_CONTEXT,
                answer=profile.no_context_message,
                retrieval_time_ms=retrieval_time_ms,
                total_time_ms=int((time.time() - total_start) * 1000),
            )

        # Stage 2: Prompt
        prompt = profile.prompt_builder.build(question, contexts)

        # Stage 3: Generation
        logger.info("Sending prompt to LLM with %d context blocks", len(contexts))
        generation_start = time.time()
        try:
            answer = self.generation_client.generate(prompt)
        except GenerationUnavailableError as e:
            logger.error("Generation failed for %s query: %s", domain, e.message,
                         extra={"stage": "generation", "domain": domain})
            result = self._failed(question, domain, FailureReason.GENERATION_UNAVAILABLE, total_start)
            result.contexts = contexts
            result.retrieval_time_ms = retrieval_time_ms
            return result
        generation_time_ms = int((time.time() - generation_start) * 1000)
        logger.info("Received response from LLM")

        return QAResult(
            question=question,
            domain=domain,
            status=AnswerStatus.ANSWERED,
            answer=answer,
            contexts=contexts,
            retrieval_time_ms=retrieval_time_ms,
            generation_time_ms=generation_time_ms,
            total_time_ms=int((time.time() - total_start) * 1000),
        )

    def answer(self, question: str) -> str:
        """Answer text for the active domain."""
        return self.ask(question).answer

    @staticmethod
    def _failed(question: str, domain: str, reason: FailureReason, start: float) -> QAResult:
        return QAResult(
            question=question,
            domain=domain,
            status=AnswerStatus.FAILED,
            answer=ERROR_MESSAGE,
            failure=reason,
            total_time_ms=int((time.time() - start) * 1000),
        )


def build_orchestrator(
    generation_client: GenerationClient,
    document_retriever: ContextRetriever,
    ticket_retriever: ContextRetriever,
    active_domain: str = DOMAIN_DOCUMENTS,
) -> QAOrchestrator:
    """Orchestrator serving both the document and the ticket domain."""
    return QAOrchestrator(
        generation_client=generation_client,
        profiles={
            DOMAIN_DOCUMENTS: DomainProfile(
                retriever=document_retriever,
                prompt_builder=PromptBuilder(DOCUMENT_TEMPLATE),
                no_context_message=DOCUMENT_NO_CONTEXT_MESSAGE,
            ),
            DOMAIN_TICKETS: DomainProfile(
                retriever=ticket_retriever,
                prompt_builder=PromptBuilder(TICKET_TEMPLATE),
                no_context_message=TICKET_NO_CONTEXT_MESSAGE,
            ),
        },
        active_domain=active_domain,
    )
