"""Unit tests for the database module."""

import pytest
from datetime import datetime

from support_qa.database.db import DatabaseManager
from support_qa.exceptions import DocumentNotFoundError
from support_qa.config import AppConfig


class TestDocumentModel:
    """Tests for Document model."""

    def test_document_to_dict(self, db_manager: DatabaseManager):
        """Test Document to_dict method."""
        document = db_manager.save_document(
            title="Runbook",
            filename="runbook.md",
            content=b"# Runbook",
            content_type="text/markdown"
        )

        d = document.to_dict()

        assert d["id"] == document.id
        assert d["title"] == "Runbook"
        assert d["filename"] == "runbook.md"
        assert d["content_type"] == "text/markdown"
        assert d["processed"] is False
        assert d["uploaded_at"] is not None
        assert "content" not in d


class TestDocumentStore:
    """Tests for document persistence."""

    def test_save_and_get(self, db_manager: DatabaseManager):
        saved = db_manager.save_document("Guide", "guide.txt", b"hello", "text/plain")

        loaded = db_manager.get_document(saved.id)

        assert loaded.content == b"hello"
        assert loaded.processed is False

    def test_get_missing(self, db_manager: DatabaseManager):
        assert db_manager.get_document(999) is None

    def test_list_unprocessed_and_mark(self, db_manager: DatabaseManager):
        """Marking a document processed removes it from the unprocessed list."""
        first = db_manager.save_document("A", "a.txt", b"a", "text/plain")
        second = db_manager.save_document("B", "b.txt", b"b", "text/plain")

        db_manager.mark_processed(first.id)

        assert [d.id for d in db_manager.list_unprocessed_documents()] == [second.id]
        assert db_manager.count_documents() == 2
        assert db_manager.count_processed_documents() == 1
        assert [d.id for d in db_manager.list_documents()] == [first.id, second.id]

    def test_mark_processed_missing(self, db_manager: DatabaseManager):
        with pytest.raises(DocumentNotFoundError) as exc_info:
            db_manager.mark_processed(42)
        assert exc_info.value.document_id == 42

    def test_persists_across_managers(self, test_config: AppConfig):
        """A second manager on the same database sees earlier documents."""
        DatabaseManager(test_config).save_document("A", "a.txt", b"a", "text/plain")
        assert DatabaseManager(test_config).count_documents() == 1


class TestTicketStore:
    """Tests for ticket persistence and search."""

    def test_counts(self, seeded_db: DatabaseManager):
        assert seeded_db.count_products() == 4
        assert seeded_db.count_tickets() == 6
        assert seeded_db.count_updates() == 11

    def test_ticket_loaded_with_relations(self, seeded_db: DatabaseManager):
        """Tickets come back with product and chronologically ordered updates."""
        ticket = seeded_db.get_ticket_by_number("INC000123456")

        assert ticket.product.name == "Apache HTTP Server"
        assert [u.update_type for u in ticket.updates] == ["Comment", "Comment", "Status Change"]
        assert ticket.updates[0].comment.startswith("Initial investigation")

    def test_ticket_to_dict(self, seeded_db: DatabaseManager):
        d = seeded_db.get_ticket_by_number("INC000125678").to_dict()

        assert d["ticket_number"] == "INC000125678"
        assert d["product"] == "Apache Tomcat"
        assert d["priority"] == "Critical"
        assert d["resolved_at"] is None

    def test_explicit_timestamps(self, db_manager: DatabaseManager):
        product = db_manager.add_product("Apache Tomcat", "10.1.17", "Application Server")
        created = datetime(2024, 1, 15, 9, 30)
        resolved = datetime(2024, 1, 17, 16, 0)

        ticket = db_manager.add_ticket(
            product, "INC1", "Title", "Description", "Low", "Resolved",
            created_at=created, resolved_at=resolved
        )

        assert ticket.created_at == created
        assert ticket.resolved_at == resolved

    def test_unknown_update_type(self, db_manager: DatabaseManager):
        product = db_manager.add_product("Apache Tomcat", "10.1.17", "Application Server")
        with pytest.raises(ValueError):
            db_manager.add_ticket(
                product, "INC1", "Title", "Description", "Low", "Open",
                updates=[("note", "someone", "Escalation")]
            )
        assert db_manager.count_tickets() == 0

    def test_keyword_search_case_insensitive(self, seeded_db: DatabaseManager):
        upper = seeded_db.search_tickets_by_keyword("STUCK")
        lower = seeded_db.search_tickets_by_keyword("stuck")
        assert [t.ticket_number for t in upper] == [t.ticket_number for t in lower] == ["INC000128901"]

    def test_keyword_search_resolution(self, seeded_db: DatabaseManager):
        tickets = seeded_db.search_tickets_by_keyword("connection leak")
        assert [t.ticket_number for t in tickets] == ["INC000125678"]

    def test_keyword_search_non_ascii(self, db_manager: DatabaseManager):
        """Case folding also applies to accented letters."""
        product = db_manager.add_product("Apache Tomcat", "10.1.17", "Application Server")
        db_manager.add_ticket(
            product, "INC1", "ÉCHEC de connexion au pool JDBC", "Le pool refuse les connexions.",
            "High", "Open", updates=[("Redémarrage PRÉVU ce soir.", "Admin", "Comment")]
        )

        assert [t.ticket_number for t in db_manager.search_tickets_by_keyword("échec")] == ["INC1"]
        assert [t.ticket_number for t in db_manager.search_tickets_by_update_comment("prévu")] == ["INC1"]

    def test_comment_search(self, seeded_db: DatabaseManager):
        tickets = seeded_db.search_tickets_by_update_comment("jdbc")
        assert [t.ticket_number for t in tickets] == ["INC000128901"]

    def test_comment_search_one_row_per_ticket(self, seeded_db: DatabaseManager):
        """A ticket with several matching comments is returned once."""
        tickets = seeded_db.search_tickets_by_update_comment("memory")
        assert [t.ticket_number for t in tickets] == ["INC000125678"]

    def test_find_by_product(self, seeded_db: DatabaseManager):
        tickets = seeded_db.find_tickets_by_product_name("Apache HTTP Server")
        assert [t.ticket_number for t in tickets] == ["INC000123456", "INC000123789"]
        assert seeded_db.find_tickets_by_product_name("apache http server") == []

    def test_products(self, seeded_db: DatabaseManager):
        assert [p.name for p in seeded_db.list_products()] == [
            "Apache HTTP Server", "Apache Tomcat", "IBM WebSphere", "Oracle WebLogic"
        ]
        assert seeded_db.get_product_by_name("IBM WebSphere").version == "9.0.5"
        assert seeded_db.get_product_by_name("JBoss") is None


class TestDatabaseManager:
    """Tests for DatabaseManager maintenance operations."""

    def test_clear_all(self, seeded_db: DatabaseManager):
        """Test clearing all data."""
        seeded_db.save_document("A", "a.txt", b"a", "text/plain")

        seeded_db.clear_all()

        assert seeded_db.count_documents() == 0
        assert seeded_db.count_tickets() == 0
        assert seeded_db.count_updates() == 0
        assert seeded_db.count_products() == 0
