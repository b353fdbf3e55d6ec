"""Database module: document store and ticket store."""

from support_qa.database.models import Base, Document, Product, Ticket, TicketUpdate
from support_qa.database.db import DatabaseManager

__all__ = [
    "Base",
    "Document",
    "Product",
    "Ticket",
    "TicketUpdate",
    "DatabaseManager",
]
