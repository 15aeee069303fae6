"""
Graph database service.

Thin wrapper around the Neo4j async driver used to inspect a target graph
and to push ontology records into it or pull them back out.
"""
import re
from typing import Any, Callable, Dict, List, Optional
import logging

from neo4j import AsyncGraphDatabase
from neo4j.exceptions import Neo4jError, DriverError

from ontology_manager.client.normalization import normalize_ontology
from ontology_manager.config import settings
from ontology_manager.errors import GraphConnectionError, ValidationError
from ontology_manager.models.schemas import (
    GraphCredentials,
    GraphData,
    GraphDatabaseInfo,
    GraphNode,
    GraphRelationship,
    Ontology,
)

logger = logging.getLogger(__name__)

CYPHER_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

GRAPH_SAMPLE_QUERY = """
MATCH (n)-[r]->(m)
RETURN n, r, m
LIMIT $limit
"""

PUSH_ONTOLOGY_QUERY = """
MERGE (o:Ontology {id: $id})
SET o.name = $name,
    o.description = $description,
    o.source_url = $source_url,
    o.image_url = $image_url,
    o.is_public = $is_public,
    o.tags = $tags,
    o.ownerId = $owner_id,
    o.createdAt = $created_at,
    o.updatedAt = $updated_at
RETURN o
"""

PULL_ONTOLOGIES_QUERY = """
MATCH (o:Ontology)
RETURN o
LIMIT $limit
"""


def _node_to_schema(node: Any) -> GraphNode:
    return GraphNode(
        id=str(node.element_id),
        labels=sorted(node.labels),
        properties=dict(node.items()),
    )


def _relationship_to_schema(relationship: Any) -> GraphRelationship:
    return GraphRelationship(
        id=str(relationship.element_id),
        type=relationship.type,
        start_node_id=str(relationship.start_node.element_id),
        end_node_id=str(relationship.end_node.element_id),
        properties=dict(relationship.items()),
    )


class GraphService:
    """Service wrapping one Neo4j driver connection."""

    def __init__(self, driver_factory: Optional[Callable[..., Any]] = None):
        self._driver_factory = driver_factory or AsyncGraphDatabase.driver
        self._driver = None

    def is_connected(self) -> bool:
        return self._driver is not None

    async def connect(self, credentials: Optional[GraphCredentials] = None) -> bool:
        """
        Open a driver and verify connectivity.

        Args:
            credentials: Connection details; defaults to the NEO4J_* settings

        Raises:
            GraphConnectionError: If the database is unreachable or credentials are missing
        """
        if credentials is None:
            if not (settings.NEO4J_URI and settings.NEO4J_USERNAME):
                raise GraphConnectionError("Graph database credentials not configured")
            credentials = GraphCredentials(
                uri=settings.NEO4J_URI,
                username=settings.NEO4J_USERNAME,
                password=settings.NEO4J_PASSWORD or "",
            )

        await self.disconnect()
        driver = None
        try:
            driver = self._driver_factory(
                credentials.uri,
                auth=(credentials.username, credentials.password)
            )
            await driver.verify_connectivity()
        except (Neo4jError, DriverError, OSError, ValueError) as e:
            logger.error(f"Failed to connect to graph database: {e}")
            if driver is not None:
                await self._close_quietly(driver)
            raise GraphConnectionError(f"Connection failed: {e}") from e

        self._driver = driver
        logger.info(f"Connected to graph database at {credentials.uri}")
        return True

    async def disconnect(self) -> None:
        if self._driver is None:
            return
        driver, self._driver = self._driver, None
        if await self._close_quietly(driver):
            logger.info("Disconnected from graph database")

    @staticmethod
    async def _close_quietly(driver: Any) -> bool:
        try:
            await driver.close()
        except (Neo4jError, DriverError, OSError) as e:
            logger.error(f"Error closing graph database driver: {e}")
            return False
        return True

    async def _run(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> List[Any]:
        if self._driver is None:
            raise GraphConnectionError("Not connected to graph database")

        try:
            async with self._driver.session() as session:
                result = await session.run(query, parameters or {})
                return [record async for record in result]
        except (Neo4jError, DriverError) as e:
            logger.error(f"Graph query failed: {e}")
            raise GraphConnectionError(f"Query execution failed: {e}") from e

    async def get_graph_data(self, limit: int = 100) -> GraphData:
        """Sample up to ``limit`` relationships together with their end nodes."""
        records = await self._run(GRAPH_SAMPLE_QUERY, {"limit": limit})

        nodes: Dict[str, GraphNode] = {}
        relationships: List[GraphRelationship] = []
        for record in records:
            for key in ("n", "m"):
                node = record[key]
                if node is not None and str(node.element_id) not in nodes:
                    nodes[str(node.element_id)] = _node_to_schema(node)
            if record["r"] is not None:
                relationships.append(_relationship_to_schema(record["r"]))

        return GraphData(nodes=list(nodes.values()), relationships=relationships)

    async def get_nodes_by_label(self, label: str, limit: int = 50) -> List[GraphNode]:
        """
        Fetch nodes carrying ``label``.

        Raises:
            ValidationError: If the label is not a plain identifier
        """
        if not CYPHER_IDENTIFIER_PATTERN.match(label or ""):
            raise ValidationError(f"Invalid label: {label!r}")

        records = await self._run(f"MATCH (n:`{label}`) RETURN n LIMIT $limit", {"limit": limit})
        return [_node_to_schema(record["n"]) for record in records]

    async def execute_query(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run an arbitrary Cypher query and return each record as a dict."""
        records = await self._run(query, parameters)
        return [dict(record.items()) for record in records]

    async def get_database_info(self) -> GraphDatabaseInfo:
        labels = await self._run("CALL db.labels()")
        relationship_types = await self._run("CALL db.relationshipTypes()")
        node_count = await self._run("MATCH (n) RETURN count(n) AS nodeCount")
        relationship_count = await self._run("MATCH ()-[r]->() RETURN count(r) AS relationshipCount")

        return GraphDatabaseInfo(
            labels=[record["label"] for record in labels],
            relationship_types=[record["relationshipType"] for record in relationship_types],
            node_count=node_count[0]["nodeCount"] if node_count else 0,
            relationship_count=relationship_count[0]["relationshipCount"] if relationship_count else 0,
        )

    async def push_ontology(self, ontology: Ontology) -> GraphNode:
        """
        Write a record into the graph as an ``:Ontology`` node keyed by id.

        Raises:
            ValidationError: If the record has no id yet
        """
        if not ontology.id:
            raise ValidationError("Only stored ontologies can be pushed to the graph")

        records = await self._run(PUSH_ONTOLOGY_QUERY, {
            "id": ontology.id,
            "name": ontology.name,
            "description": ontology.description,
            "source_url": ontology.properties.source_url,
            "image_url": ontology.properties.image_url,
            "is_public": ontology.properties.is_public,
            "tags": list(ontology.properties.tags),
            "owner_id": ontology.owner_id,
            "created_at": ontology.created_at.isoformat() if ontology.created_at else None,
            "updated_at": ontology.updated_at.isoformat() if ontology.updated_at else None,
        })
        logger.info(f"Pushed ontology {ontology.id} to graph database")
        return _node_to_schema(records[0]["o"])

    async def pull_ontologies(self, limit: int = 100) -> List[Ontology]:
        """Read ``:Ontology`` nodes back into canonical records."""
        records = await self._run(PULL_ONTOLOGIES_QUERY, {"limit": limit})
        return [normalize_ontology(dict(record["o"].items())) for record in records]


# Service instance
graph_service = GraphService()
