"""
SQLAlchemy database models.
"""
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4
from sqlalchemy import (
    String, Text, DateTime, Boolean,
    ForeignKey, JSON, Index
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ontology_manager.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a naive stored timestamp."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def new_id() -> str:
    return str(uuid4())


class Ontology(Base):
    """Ontology record stored as a loosely structured document."""
    __tablename__ = "ontologies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # source_url / image_url live in the JSON document; is_public is a column so it can be queried
    properties: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    # Relationships
    comments = relationship("Comment", back_populates="ontology", cascade="all, delete-orphan")

    # Indexes
    __table_args__ = (
        Index("idx_ontologies_owner_id", "owner_id"),
        Index("idx_ontologies_is_public", "is_public"),
    )

    def is_visible_to(self, user_id: str) -> bool:
        return bool(self.is_public) or self.owner_id == user_id


class Comment(Base):
    """Comment left on an ontology record."""
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    ontology_id: Mapped[str] = mapped_column(String(36), ForeignKey("ontologies.id", ondelete="CASCADE"), nullable=False)
    author_id: Mapped[str] = mapped_column(String(128), nullable=False)
    author_name: Mapped[Optional[str]] = mapped_column(Text)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    # Relationships
    ontology = relationship("Ontology", back_populates="comments")

    # Indexes
    __table_args__ = (
        Index("idx_comments_ontology_id", "ontology_id"),
        Index("idx_comments_created_at", "created_at"),
    )
