"""Document store and ticket store backed by SQLAlchemy."""

from datetime import datetime
from typing import Iterable, Optional
from sqlalchemy import create_engine, event, func
from sqlalchemy.orm import selectinload, sessionmaker, Session

from support_qa.config import AppConfig, get_config
from support_qa.database.models import Base, Document, Product, Ticket, TicketUpdate
from support_qa.exceptions import DocumentNotFoundError

UPDATE_TYPES = ("Comment", "Status Change", "Assignment Change")


def _contains(column, keyword: str):
    """Case-insensitive substring predicate; LIKE wildcards in keyword are literal."""
    return func.lower(column).contains(keyword.lower(), autoescape=True)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_connection, connection_record):
    # SQLite's built-in lower() only folds ASCII
    dbapi_connection.create_function("lower", 1, _unicode_lower)


class DatabaseManager:
    """Manages document and ticket persistence."""

    def __init__(self, config: Optional[AppConfig] = None):
        """Initialize the database manager.

        Args:
            config: Application configuration
        """
        self.config = config or get_config()
        self.engine = create_engine(
            self.config.database.url,
            echo=self.config.database.echo
        )
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _register_sqlite_functions)
        # Loaded objects stay readable after their session closes
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

        # Create tables
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionLocal()

    # Document store

    def save_document(
        self,
        title: str,
        filename: str,
        content: bytes,
        content_type: Optional[str],
    ) -> Document:
        """Store an uploaded document as not yet processed.

        Args:
            title: Display title
            filename: Original file name
            content: Raw file bytes
            content_type: MIME type reported by the uploader

        Returns:
            The saved Document
        """
        session = self.get_session()
        try:
            document = Document(
                title=title,
                filename=filename,
                content=content,
                content_type=content_type,
                processed=False,
                uploaded_at=datetime.utcnow()
            )
            session.add(document)
            session.commit()
            session.refresh(document)
            return document
        finally:
            session.close()

    def get_document(self, document_id: int) -> Optional[Document]:
        """Get a document by ID, or None if not found."""
        session = self.get_session()
        try:
            return session.get(Document, document_id)
        finally:
            session.close()

    def list_documents(self) -> list[Document]:
        """Get all documents in upload order."""
        session = self.get_session()
        try:
            return session.query(Document).order_by(Document.id).all()
        finally:
            session.close()

    def list_unprocessed_documents(self) -> list[Document]:
        """Get documents whose processed flag is still false."""
        session = self.get_session()
        try:
            return session.query(Document).filter(
                Document.processed.is_(False)
            ).order_by(Document.id).all()
        finally:
            session.close()

    def mark_processed(self, document_id: int) -> Document:
        """Set a document's processed flag.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        session = self.get_session()
        try:
            document = session.get(Document, document_id)
            if document is None:
                raise DocumentNotFoundError(document_id)
            document.processed = True
            session.commit()
            return document
        finally:
            session.close()

    def count_documents(self) -> int:
        """Get total number of documents."""
        session = self.get_session()
        try:
            return session.query(func.count(Document.id)).scalar() or 0
        finally:
            session.close()

    def count_processed_documents(self) -> int:
        """Get number of processed documents."""
        session = self.get_session()
        try:
            return session.query(func.count(Document.id)).filter(
                Document.processed.is_(True)
            ).scalar() or 0
        finally:
            session.close()

    # Ticket store

    def add_product(
        self,
        name: str,
        version: str,
        category: str,
        description: Optional[str] = None,
    ) -> Product:
        """Create a product."""
        session = self.get_session()
        try:
            product = Product(
                name=name,
                version=version,
                category=category,
                description=description
            )
            session.add(product)
            session.commit()
            session.refresh(product)
            return product
        finally:
            session.close()

    def add_ticket(
        self,
        product: Product,
        ticket_number: str,
        title: str,
        description: str,
        priority: str,
        status: str,
        assignee: Optional[str] = None,
        reporter: Optional[str] = None,
        resolution: Optional[str] = None,
        environment: Optional[str] = None,
        component: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        resolved_at: Optional[datetime] = None,
        updates: Iterable[tuple[str, str, str]] = (),
    ) -> Ticket:
        """Create a ticket with its updates.

        Args:
            product: Product the ticket is raised against
            updates: (comment, author, update_type) tuples in chronological order

        Returns:
            The saved Ticket with product and updates loaded
        """
        now = datetime.utcnow()
        session = self.get_session()
        try:
            ticket = Ticket(
                ticket_number=ticket_number,
                title=title,
                description=description,
                priority=priority,
                status=status,
                assignee=assignee,
                reporter=reporter,
                resolution=resolution,
                environment=environment,
                component=component,
                created_at=created_at or now,
                updated_at=updated_at or now,
                resolved_at=resolved_at,
                product_id=product.id
            )
            for comment, author, update_type in updates:
                if update_type not in UPDATE_TYPES:
                    raise ValueError(f"Unknown update type: {update_type}")
                ticket.updates.append(TicketUpdate(
                    comment=comment,
                    author=author,
                    update_type=update_type,
                    created_at=now
                ))
            session.add(ticket)
            session.commit()
            ticket_id = ticket.id
        finally:
            session.close()
        return self._get_ticket(Ticket.id == ticket_id)

    def _ticket_query(self, session: Session):
        return session.query(Ticket).options(
            selectinload(Ticket.product),
            selectinload(Ticket.updates)
        )

    def _get_ticket(self, criterion) -> Optional[Ticket]:
        session = self.get_session()
        try:
            return self._ticket_query(session).filter(criterion).first()
        finally:
            session.close()

    def _find_tickets(self, *criteria) -> list[Ticket]:
        session = self.get_session()
        try:
            return self._ticket_query(session).filter(*criteria).order_by(Ticket.id).all()
        finally:
            session.close()

    def get_ticket_by_number(self, ticket_number: str) -> Optional[Ticket]:
        """Get a ticket by its ticket number."""
        return self._get_ticket(Ticket.ticket_number == ticket_number)

    def search_tickets_by_keyword(self, keyword: str) -> list[Ticket]:
        """Tickets whose title, description or resolution contains keyword (case-insensitive)."""
        return self._find_tickets(
            _contains(Ticket.title, keyword)
            | _contains(Ticket.description, keyword)
            | _contains(Ticket.resolution, keyword)
        )

    def search_tickets_by_update_comment(self, keyword: str) -> list[Ticket]:
        """Tickets with at least one update comment containing keyword (case-insensitive)."""
        return self._find_tickets(
            Ticket.updates.any(_contains(TicketUpdate.comment, keyword))
        )

    def find_tickets_by_product_name(self, product_name: str) -> list[Ticket]:
        """All tickets raised against the named product."""
        return self._find_tickets(Ticket.product.has(Product.name == product_name))

    def list_products(self) -> list[Product]:
        """Get all products."""
        session = self.get_session()
        try:
            return session.query(Product).order_by(Product.id).all()
        finally:
            session.close()

    def get_product_by_name(self, name: str) -> Optional[Product]:
        """Get a product by exact name."""
        session = self.get_session()
        try:
            return session.query(Product).filter(Product.name == name).first()
        finally:
            session.close()

    def count_products(self) -> int:
        """Get total number of products."""
        session = self.get_session()
        try:
            return session.query(func.count(Product.id)).scalar() or 0
        finally:
            session.close()

    def count_tickets(self) -> int:
        """Get total number of tickets."""
        session = self.get_session()
        try:
            return session.query(func.count(Ticket.id)).scalar() or 0
        finally:
            session.close()

    def count_updates(self) -> int:
        """Get total number of ticket updates."""
        session = self.get_session()
        try:
            return session.query(func.count(TicketUpdate.id)).scalar() or 0
        finally:
            session.close()

    def clear_all(self):
        """Clear all data from the database. Use with caution!"""
        session = self.get_session()
        try:
            session.query(TicketUpdate).delete()
            session.query(Ticket).delete()
            session.query(Product).delete()
            session.query(Document).delete()
            session.commit()
        finally:
            session.close()
