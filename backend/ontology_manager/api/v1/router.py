"""
Main API router for v1 endpoints.
"""
from fastapi import APIRouter

from ontology_manager.api.v1.endpoints import (
    comments,
    graph,
    ontologies,
)

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(ontologies.router, tags=["ontologies"])
api_router.include_router(comments.router, tags=["comments"])
api_router.include_router(graph.router, prefix="/graph", tags=["graph"])
