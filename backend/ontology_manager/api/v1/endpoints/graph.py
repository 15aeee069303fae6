"""
Graph database endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ontology_manager.core.database import get_db
from ontology_manager.core.security import require_principal
from ontology_manager.services.graph_service import graph_service
from ontology_manager.services.ontology_service import ontology_service
from ontology_manager.models.schemas import (
    GraphCredentials,
    GraphData,
    GraphDatabaseInfo,
    GraphNodesResponse,
    GraphPushRequest,
    GraphPushResponse,
    GraphQuery,
    GraphQueryResponse,
    GraphStatus,
    Principal,
    SearchOntologiesResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/status", response_model=GraphStatus)
async def graph_status(principal: Principal = Depends(require_principal)):
    return GraphStatus(connected=graph_service.is_connected())


@router.post("/connect", response_model=GraphStatus)
async def connect_graph(
    credentials: Optional[GraphCredentials] = None,
    principal: Principal = Depends(require_principal)
):
    """
    Connect to a graph database. Without a body the configured NEO4J_* settings are used.
    """
    logger.info(f"User {principal.user_id} connecting to graph database")
    await graph_service.connect(credentials)
    return GraphStatus(connected=True)


@router.post("/disconnect", response_model=GraphStatus)
async def disconnect_graph(principal: Principal = Depends(require_principal)):
    await graph_service.disconnect()
    return GraphStatus(connected=False)


@router.get("/info", response_model=GraphDatabaseInfo)
async def graph_info(principal: Principal = Depends(require_principal)):
    """
    Labels, relationship types and counts of the connected database.
    """
    return await graph_service.get_database_info()


@router.get("/data", response_model=GraphData)
async def graph_data(
    limit: int = Query(100, ge=1, le=1000),
    principal: Principal = Depends(require_principal)
):
    return await graph_service.get_graph_data(limit=limit)


@router.get("/nodes", response_model=GraphNodesResponse)
async def graph_nodes(
    label: str = Query(...),
    limit: int = Query(50, ge=1, le=1000),
    principal: Principal = Depends(require_principal)
):
    nodes = await graph_service.get_nodes_by_label(label, limit=limit)
    return GraphNodesResponse(nodes=nodes)


@router.post("/query", response_model=GraphQueryResponse)
async def graph_query(
    graph_query: GraphQuery,
    principal: Principal = Depends(require_principal)
):
    """
    Run a Cypher query against the connected database.
    """
    records = await graph_service.execute_query(graph_query.query, graph_query.parameters)
    return GraphQueryResponse(records=records)


@router.post("/push_ontology", response_model=GraphPushResponse)
async def push_ontology(
    push_request: GraphPushRequest,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_principal)
):
    """
    Write a record the user can see into the graph as an :Ontology node.
    """
    ontology = await ontology_service.get_visible_ontology(
        db=db,
        user_id=principal.user_id,
        ontology_id=push_request.id
    )
    node = await graph_service.push_ontology(ontology_service.to_schema(ontology))
    return GraphPushResponse(node=node)


@router.get("/pull_ontologies", response_model=SearchOntologiesResponse)
async def pull_ontologies(
    limit: int = Query(100, ge=1, le=1000),
    principal: Principal = Depends(require_principal)
):
    """
    Read :Ontology nodes back out of the graph.
    """
    ontologies = await graph_service.pull_ontologies(limit=limit)
    return SearchOntologiesResponse(ontologies=ontologies)
