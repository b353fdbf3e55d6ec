"""Question answering: prompt assembly, generation and orchestration."""

from support_qa.qa.generation import GenerationClient, ProbeResult
from support_qa.qa.prompts import DOCUMENT_TEMPLATE, TICKET_TEMPLATE, PromptBuilder, PromptTemplate
from support_qa.qa.orchestrator import (
    AnswerService,
    AnswerStatus,
    DomainProfile,
    FailureReason,
    QAOrchestrator,
    QAResult,
    build_orchestrator,
)

__all__ = [
    "GenerationClient",
    "ProbeResult",
    "DOCUMENT_TEMPLATE",
    "TICKET_TEMPLATE",
    "PromptBuilder",
    "PromptTemplate",
    "AnswerService",
    "AnswerStatus",
    "DomainProfile",
    "FailureReason",
    "QAOrchestrator",
    "QAResult",
    "build_orchestrator",
]
