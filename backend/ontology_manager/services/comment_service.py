"""
Comment service for ontology records.
"""
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from ontology_manager.errors import ValidationError
from ontology_manager.models.database import Comment, as_utc, utcnow
from ontology_manager.models.schemas import Comment as CommentSchema, CommentCreate, Principal
from ontology_manager.services.ontology_service import ontology_service

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 5000


class CommentService:
    """Service for reading and writing comments."""

    @staticmethod
    def to_schema(comment: Comment) -> CommentSchema:
        return CommentSchema(
            id=comment.id,
            ontology_id=comment.ontology_id,
            author_id=comment.author_id,
            author_name=comment.author_name,
            content=comment.content,
            created_at=as_utc(comment.created_at),
        )

    async def list_comments(
        self,
        db: AsyncSession,
        user_id: str,
        ontology_id: str
    ) -> List[Comment]:
        """
        List comments on a record visible to the user, oldest first.

        Raises:
            NotFoundError: If the record is missing or hidden from the user
        """
        await ontology_service.get_visible_ontology(db, user_id, ontology_id)

        stmt = select(Comment).where(
            Comment.ontology_id == ontology_id
        ).order_by(Comment.created_at, Comment.id)

        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def add_comment(
        self,
        db: AsyncSession,
        principal: Principal,
        comment_data: CommentCreate
    ) -> Comment:
        """
        Add a comment to a record visible to the principal.

        Raises:
            NotFoundError: If the record is missing or hidden from the user
            ValidationError: If the content is empty or too long
        """
        content = (comment_data.content or "").strip()
        if not content:
            raise ValidationError("Comment content is required")
        if len(content) > MAX_COMMENT_LENGTH:
            raise ValidationError(f"Comment exceeds {MAX_COMMENT_LENGTH} characters")

        ontology = await ontology_service.get_visible_ontology(db, principal.user_id, comment_data.ontology_id)

        comment = Comment(
            ontology_id=ontology.id,
            author_id=principal.user_id,
            author_name=principal.full_name or principal.email or None,
            content=content,
            created_at=utcnow()
        )

        db.add(comment)
        await db.commit()
        await db.refresh(comment)

        logger.debug(f"Comment {comment.id} added to ontology {ontology.id}")
        return comment


# Service instance
comment_service = CommentService()
