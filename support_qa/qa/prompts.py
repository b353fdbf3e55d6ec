"""Prompt templates and the context assembler."""

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class PromptTemplate:
    """Fixed text surrounding the retrieved context and the question."""
    header: str
    context_intro: str
    block_label: str
    footer: str


DOCUMENT_TEMPLATE = PromptTemplate(
    header="""You are an enterprise document assistant that answers questions based on the provided context.
Only use the information from the retrieved documents to answer questions.
If you don't know the answer based on the provided context, say so clearly.
Keep answers concise, professional, and factual.
Format your answers in a readable way using markdown when appropriate.
If the context is insufficient, just say 'I don't have enough information to answer this question accurately.'""",
    context_intro="Relevant excerpts from uploaded documents",
    block_label="Excerpt",
    footer="Answer the question using only the excerpts above.",
)

TICKET_TEMPLATE = PromptTemplate(
    header="""You are a helpful middleware support expert assistant. You have access to a database of ServiceNow tickets
related to middleware products (Apache HTTP Server, Apache Tomcat, IBM WebSphere, Oracle WebLogic).

Your role is to:
1. Answer questions about middleware issues based on the provided ticket data
2. Provide helpful troubleshooting guidance
3. Reference specific tickets when relevant
4. Suggest solutions based on past resolutions
5. Be concise but thorough in your responses""",
    context_intro="Relevant tickets from database",
    block_label="Ticket",
    footer="""Please provide a helpful response based on the ticket information above. If you reference specific tickets,
mention their ticket numbers. If no directly relevant information is found, provide general guidance
based on your knowledge of middleware technologies.""",
)


class PromptBuilder:
    """Assembles instructions, numbered context blocks and the question into one prompt."""

    def __init__(self, template: PromptTemplate = DOCUMENT_TEMPLATE):
        self.template = template

    def build_context(self, contexts: Sequence[str]) -> str:
        """Number each context block from 1 and join them."""
        parts = []
        for i, block in enumerate(contexts, 1):
            parts.append(f"{self.template.block_label} {i}:\n{block.rstrip()}\n")
        return "\n".join(parts)

    def build(self, query: str, contexts: Sequence[str]) -> str:
        """Build the full prompt.

        Args:
            query: User question, included verbatim
            contexts: Retrieved context blocks, already capped upstream

        Returns:
            Prompt text
        """
        return (
            f"{self.template.header}\n\n"
            f"Context ({self.template.context_intro}):\n\n"
            f"{self.build_context(contexts)}\n"
            f"User Question: {query}\n\n"
            f"{self.template.footer}\n\n"
            "Response:"
        )
