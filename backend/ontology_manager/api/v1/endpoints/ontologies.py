"""
Ontology record endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ontology_manager.core.database import get_db
from ontology_manager.core.security import require_principal
from ontology_manager.services.ontology_service import ontology_service
from ontology_manager.models.schemas import (
    DeleteResponse,
    OntologyCreate,
    OntologyDelete,
    OntologyResponse,
    OntologyUpdate,
    Principal,
    SearchOntologiesResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/search_ontologies", response_model=SearchOntologiesResponse)
async def search_ontologies(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Search for ontologies - returns all ontologies a user creates or public ontologies.
    """
    logger.debug(f"Searching ontologies for user: {principal.user_id}")

    ontologies = await ontology_service.search_ontologies(db=db, user_id=principal.user_id)

    return SearchOntologiesResponse(
        ontologies=[ontology_service.to_schema(o) for o in ontologies]
    )


@router.post("/add_ontology", response_model=OntologyResponse, status_code=201)
async def add_ontology(
    ontology_data: OntologyCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Add a new ontology owned by the authenticated user.
    """
    ontology = await ontology_service.create_ontology(
        db=db,
        user_id=principal.user_id,
        ontology_data=ontology_data
    )
    return OntologyResponse(ontology=ontology_service.to_schema(ontology))


@router.post("/update_ontology", response_model=OntologyResponse)
async def update_ontology(
    update_data: OntologyUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Update an ontology. Only the owner may update it.
    """
    ontology = await ontology_service.update_ontology(
        db=db,
        user_id=principal.user_id,
        update_data=update_data
    )
    return OntologyResponse(ontology=ontology_service.to_schema(ontology))


@router.post("/delete_ontology", response_model=DeleteResponse)
async def delete_ontology(
    delete_data: OntologyDelete,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Delete an ontology. Only the owner may delete it; deletion is permanent.
    """
    await ontology_service.delete_ontology(
        db=db,
        user_id=principal.user_id,
        ontology_id=delete_data.id
    )

    return DeleteResponse(
        message="Ontology deleted successfully",
        deleted_id=delete_data.id
    )
