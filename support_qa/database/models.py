"""SQLAlchemy models for the document and ticket stores."""

from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, LargeBinary, String, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Document(Base):
    """An uploaded source document awaiting or past ingestion."""

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    filename = Column(String(255), nullable=False)
    content = Column(LargeBinary, nullable=False)
    content_type = Column(String(100), nullable=True)
    processed = Column(Boolean, nullable=False, default=False)
    uploaded_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<Document(id={self.id}, title='{self.title}', processed={self.processed})>"

    def to_dict(self):
        """Convert to dictionary (raw content excluded)."""
        return {
            "id": self.id,
            "title": self.title,
            "filename": self.filename,
            "content_type": self.content_type,
            "processed": self.processed,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
        }


class Product(Base):
    """A supported middleware product that tickets are raised against."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    version = Column(String(50), nullable=False)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    tickets = relationship("Ticket", back_populates="product")

    def __repr__(self):
        return f"<Product(name='{self.name}', version='{self.version}')>"

    def to_dict(self):
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "category": self.category,
            "description": self.description,
        }


class Ticket(Base):
    """A historical support ticket."""

    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_number = Column(String(50), nullable=False, unique=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(String(50), nullable=False)
    status = Column(String(50), nullable=False)
    assignee = Column(String(255), nullable=True)
    reporter = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    resolved_at = Column(DateTime, nullable=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    resolution = Column(Text, nullable=True)
    environment = Column(String(100), nullable=True)
    component = Column(String(100), nullable=True)

    product = relationship("Product", back_populates="tickets")
    updates = relationship(
        "TicketUpdate",
        back_populates="ticket",
        cascade="all, delete-orphan",
        order_by="TicketUpdate.id",
    )

    def __repr__(self):
        return f"<Ticket(number='{self.ticket_number}', status='{self.status}')>"

    def to_dict(self):
        """Convert to dictionary."""
        return {
            "id": self.id,
            "ticket_number": self.ticket_number,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "status": self.status,
            "assignee": self.assignee,
            "reporter": self.reporter,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "resolved_at": self.resolved_at.isoformat() if self.resolved_at else None,
            "product": self.product.name if self.product else None,
            "resolution": self.resolution,
            "environment": self.environment,
            "component": self.component,
        }


class TicketUpdate(Base):
    """A comment, status change or assignment change on a ticket."""

    __tablename__ = "ticket_updates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id"), nullable=False)
    comment = Column(Text, nullable=False)
    author = Column(String(255), nullable=False)
    update_type = Column(String(50), nullable=False, default="Comment")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    ticket = relationship("Ticket", back_populates="updates")

    def __repr__(self):
        return f"<TicketUpdate(author='{self.author}', type='{self.update_type}')>"
