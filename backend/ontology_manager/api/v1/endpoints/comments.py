"""
Comment endpoints.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ontology_manager.core.database import get_db
from ontology_manager.core.security import require_principal
from ontology_manager.services.comment_service import comment_service
from ontology_manager.models.schemas import (
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    Principal,
)

router = APIRouter()


@router.get("/list_comments", response_model=CommentListResponse)
async def list_comments(
    ontology_id: str = Query(...),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    List comments on an ontology the user can see.
    """
    comments = await comment_service.list_comments(
        db=db,
        user_id=principal.user_id,
        ontology_id=ontology_id
    )
    return CommentListResponse(comments=[comment_service.to_schema(c) for c in comments])


@router.post("/add_comment", response_model=CommentResponse, status_code=201)
async def add_comment(
    comment_data: CommentCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Comment on an ontology the user can see.
    """
    comment = await comment_service.add_comment(
        db=db,
        principal=principal,
        comment_data=comment_data
    )
    return CommentResponse(comment=comment_service.to_schema(comment))
