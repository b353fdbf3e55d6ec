"""Ticket retriever - keyword search over historical support tickets."""

import logging
from typing import Optional

from support_qa.config import AppConfig, get_config
from support_qa.database.models import Ticket
from support_qa.rag.keyword_index import KeywordIndex
from support_qa.rag.retriever import ContextRetriever

logger = logging.getLogger(__name__)

# Checked in order against the lower-cased query; first match wins
PRODUCT_FALLBACKS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("apache", "http"), "Apache HTTP Server"),
    (("tomcat",), "Apache Tomcat"),
    (("websphere",), "IBM WebSphere"),
    (("weblogic",), "Oracle WebLogic"),
)


def tokenize(query: str, min_length: int = 3) -> list[str]:
    """Lower-case, split on whitespace and drop tokens shorter than min_length."""
    return [token for token in query.lower().split() if len(token) >= min_length]


def fallback_product(query: str) -> Optional[str]:
    """Name of the first product whose trigger words appear in the query."""
    lowered = query.lower()
    for triggers, product_name in PRODUCT_FALLBACKS:
        if any(trigger in lowered for trigger in triggers):
            return product_name
    return None


def format_ticket(ticket: Ticket) -> str:
    """Render a ticket as a context document for the language model."""
    product = ticket.product
    lines = [
        f"Ticket Number: {ticket.ticket_number}",
        f"Product: {product.name} {product.version}",
        f"Title: {ticket.title}",
        f"Priority: {ticket.priority}",
        f"Status: {ticket.status}",
        f"Environment: {ticket.environment}",
        f"Component: {ticket.component}",
        f"Assignee: {ticket.assignee}",
        f"Description: {ticket.description}",
    ]
    if ticket.resolution is not None:
        lines.append(f"Resolution: {ticket.resolution}")

    if ticket.updates:
        lines.append("Updates and Comments:")
        lines.extend(f"- [{update.author}]: {update.comment}" for update in ticket.updates)

    return "\n".join(lines) + "\n\n---\n\n"


class TicketRetriever(ContextRetriever):
    """Finds tickets relevant to a question by keyword, with a product-name fallback."""

    def __init__(self, keyword_index: KeywordIndex, config: Optional[AppConfig] = None):
        """Initialize the ticket retriever.

        Args:
            keyword_index: Ticket keyword index
            config: Application configuration
        """
        self.config = config or get_config()
        self.keyword_index = keyword_index

    @property
    def max_results(self) -> int:
        return self.config.rag.max_ticket_results

    def find_tickets(self, query: str) -> list[Ticket]:
        """Relevant tickets, each at most once, in order of first match.

        Args:
            query: User question

        Returns:
            At most max_results tickets
        """
        tickets: list[Ticket] = []
        seen: set[int] = set()

        for keyword in tokenize(query, self.config.rag.min_keyword_length):
            for ticket in self.keyword_index.search(keyword):
                if ticket.id in seen:
                    continue
                seen.add(ticket.id)
                tickets.append(ticket)

        if not tickets:
            product_name = fallback_product(query)
            if product_name:
                logger.info("No keyword matches; falling back to product '%s'", product_name)
                for ticket in self.keyword_index.tickets_for_product(product_name):
                    if ticket.id not in seen:
                        seen.add(ticket.id)
                        tickets.append(ticket)

        logger.info("Ticket search matched %d tickets", len(tickets))
        return tickets[:self.max_results]

    def retrieve(self, query: str) -> list[str]:
        """Relevant tickets formatted as context documents."""
        return [format_ticket(ticket) for ticket in self.find_tickets(query)]
