"""Keyword index - substring search over ticket fields and comment text."""

from support_qa.database.db import DatabaseManager
from support_qa.database.models import Ticket


class KeywordIndex:
    """Case-insensitive keyword lookup over the ticket store."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    def search(self, keyword: str) -> list[Ticket]:
        """Tickets matching keyword in title, description or resolution, followed
        by tickets matching it in an update comment.

        The two result sets are concatenated, so a ticket may appear twice.
        """
        tickets = self.db_manager.search_tickets_by_keyword(keyword)
        tickets.extend(self.db_manager.search_tickets_by_update_comment(keyword))
        return tickets

    def tickets_for_product(self, product_name: str) -> list[Ticket]:
        """All tickets for a product, by exact product name."""
        return self.db_manager.find_tickets_by_product_name(product_name)
