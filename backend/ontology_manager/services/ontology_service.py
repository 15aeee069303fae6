"""
Ontology record storage service.
"""
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
import logging

from ontology_manager.errors import ForbiddenError, NotFoundError, ValidationError
from ontology_manager.models.database import Ontology, Comment, as_utc, utcnow
from ontology_manager.models.schemas import (
    Ontology as OntologySchema,
    OntologyCreate,
    OntologyProperties,
    OntologyUpdate,
)

logger = logging.getLogger(__name__)


class OntologyService:
    """Service for managing ontology records."""

    @staticmethod
    def to_schema(ontology: Ontology) -> OntologySchema:
        """Render a stored record into its canonical wire shape."""
        properties = dict(ontology.properties or {})
        return OntologySchema(
            id=ontology.id,
            name=ontology.name,
            description=ontology.description,
            properties=OntologyProperties(
                source_url=properties.get("source_url") or "",
                image_url=properties.get("image_url") or "",
                is_public=bool(ontology.is_public),
                tags=list(ontology.tags or []),
            ),
            owner_id=ontology.owner_id,
            created_at=as_utc(ontology.created_at),
            updated_at=as_utc(ontology.updated_at),
        )

    @staticmethod
    def _require_text(value: Optional[str], field: str) -> str:
        text = (value or "").strip()
        if not text:
            raise ValidationError("Name and description are required", details=f"'{field}' must not be empty")
        return text

    async def search_ontologies(
        self,
        db: AsyncSession,
        user_id: str
    ) -> List[Ontology]:
        """
        Get every record visible to a user: public ones and the user's own.

        Args:
            db: Database session
            user_id: Requesting principal

        Returns:
            List[Ontology]: Visible records, each appearing once
        """
        public_stmt = select(Ontology).where(Ontology.is_public.is_(True))
        public_result = await db.execute(public_stmt)

        owned_stmt = select(Ontology).where(Ontology.owner_id == user_id)
        owned_result = await db.execute(owned_stmt)

        # Combine and remove duplicates, first occurrence wins
        seen = set()
        ontologies = []
        for ontology in list(public_result.scalars().all()) + list(owned_result.scalars().all()):
            if ontology.id in seen:
                continue
            seen.add(ontology.id)
            ontologies.append(ontology)

        logger.debug(f"Found {len(ontologies)} ontologies for user {user_id}")
        return ontologies

    async def get_ontology(
        self,
        db: AsyncSession,
        ontology_id: str
    ) -> Optional[Ontology]:
        """Get a record by ID regardless of visibility."""
        stmt = select(Ontology).where(Ontology.id == ontology_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_visible_ontology(
        self,
        db: AsyncSession,
        user_id: str,
        ontology_id: str
    ) -> Ontology:
        """
        Get a record the user is allowed to see.

        Raises:
            NotFoundError: If the record is missing or hidden from the user
        """
        ontology = await self.get_ontology(db, ontology_id)
        if not ontology or not ontology.is_visible_to(user_id):
            raise NotFoundError("Ontology not found")
        return ontology

    async def get_owned_ontology(
        self,
        db: AsyncSession,
        user_id: str,
        ontology_id: str
    ) -> Ontology:
        """
        Load a record for mutation by its owner.

        Raises:
            NotFoundError: If no record has this ID
            ForbiddenError: If the user is not the owner
        """
        ontology = await self.get_ontology(db, ontology_id)
        if not ontology:
            raise NotFoundError("Ontology not found", details=f"No ontology with id {ontology_id}")
        if ontology.owner_id != user_id:
            logger.warning(f"User {user_id} attempted to modify ontology {ontology_id} owned by {ontology.owner_id}")
            raise ForbiddenError("Forbidden - You can only modify your own ontologies")
        return ontology

    async def create_ontology(
        self,
        db: AsyncSession,
        user_id: str,
        ontology_data: OntologyCreate
    ) -> Ontology:
        """
        Create a new record owned by the user.

        Args:
            db: Database session
            user_id: Owner, taken from the verified token
            ontology_data: Ontology creation data

        Returns:
            Ontology: Created record

        Raises:
            ValidationError: If name or description is empty after trimming
        """
        name = self._require_text(ontology_data.name, "name")
        description = self._require_text(ontology_data.description, "description")
        properties = ontology_data.properties

        now = utcnow()
        ontology = Ontology(
            owner_id=user_id,
            name=name,
            description=description,
            properties={
                "source_url": (properties.source_url or "").strip(),
                "image_url": (properties.image_url or "").strip(),
            },
            is_public=bool(properties.is_public),
            tags=[tag.strip() for tag in properties.tags if tag.strip()],
            created_at=now,
            updated_at=now
        )

        db.add(ontology)
        await db.commit()
        await db.refresh(ontology)

        logger.info(f"Ontology created with ID: {ontology.id}")
        return ontology

    async def update_ontology(
        self,
        db: AsyncSession,
        user_id: str,
        update_data: OntologyUpdate
    ) -> Ontology:
        """
        Update a record owned by the user.

        Only fields present in the request are changed; omitted properties,
        including ``is_public``, keep their stored values.

        Raises:
            NotFoundError: If the record does not exist
            ForbiddenError: If the user is not the owner
            ValidationError: If a supplied name or description is empty
        """
        ontology = await self.get_owned_ontology(db, user_id, update_data.id)
        update_dict = update_data.model_dump(exclude_unset=True)

        if "name" in update_dict:
            ontology.name = self._require_text(update_data.name, "name")
        if "description" in update_dict:
            ontology.description = self._require_text(update_data.description, "description")

        if update_data.properties is not None:
            changes = update_data.properties.model_dump(exclude_unset=True, exclude_none=True)
            properties = dict(ontology.properties or {})
            for key in ("source_url", "image_url"):
                if key in changes:
                    properties[key] = changes[key].strip()
            ontology.properties = properties
            if "is_public" in changes:
                ontology.is_public = changes["is_public"]
            if "tags" in changes:
                ontology.tags = [tag.strip() for tag in changes["tags"] if tag.strip()]

        # Top-level tags take precedence over properties.tags
        if update_data.tags is not None:
            ontology.tags = [tag.strip() for tag in update_data.tags if tag.strip()]

        ontology.updated_at = self._next_updated_at(ontology.updated_at)

        await db.commit()
        await db.refresh(ontology)

        logger.info(f"Ontology {ontology.id} updated by {user_id}")
        return ontology

    async def delete_ontology(
        self,
        db: AsyncSession,
        user_id: str,
        ontology_id: str
    ) -> None:
        """
        Permanently delete a record and its comments.

        Raises:
            NotFoundError: If the record does not exist
            ForbiddenError: If the user is not the owner
        """
        ontology = await self.get_owned_ontology(db, user_id, ontology_id)

        await db.execute(delete(Comment).where(Comment.ontology_id == ontology.id))
        await db.execute(delete(Ontology).where(Ontology.id == ontology.id))
        await db.commit()

        logger.info(f"Ontology {ontology_id} deleted by {user_id}")

    @staticmethod
    def _next_updated_at(previous: Optional[datetime]) -> datetime:
        """Current time, nudged forward so it is strictly after ``previous``."""
        now = utcnow()
        if previous is not None and now <= previous:
            return previous + timedelta(microseconds=1)
        return now


# Service instance
ontology_service = OntologyService()
