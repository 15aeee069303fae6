"""
Pydantic models for request/response schemas.
"""
from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, field_validator


# Base schemas
class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
        "use_enum_values": True,
    }


# Ontology schemas
class OntologyProperties(BaseSchema):
    source_url: str = ""
    image_url: str = ""
    is_public: bool = False
    tags: List[str] = Field(default_factory=list)


class OntologyPropertiesUpdate(BaseSchema):
    """Partial properties; omitted keys keep their stored value."""
    source_url: Optional[str] = None
    image_url: Optional[str] = None
    is_public: Optional[bool] = None
    tags: Optional[List[str]] = None


class OntologyCreate(BaseSchema):
    name: str = ""
    description: str = ""
    properties: OntologyProperties = Field(default_factory=OntologyProperties)

    @field_validator("name", "description", mode="before")
    @classmethod
    def coerce_missing(cls, v: Any) -> Any:
        return "" if v is None else v


class OntologyUpdate(BaseSchema):
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    properties: Optional[OntologyPropertiesUpdate] = None
    tags: Optional[List[str]] = None


class OntologyDelete(BaseSchema):
    id: str


class Ontology(BaseSchema):
    """Canonical ontology record as exchanged on the wire."""
    id: Optional[str] = None
    name: str
    description: str
    properties: OntologyProperties = Field(default_factory=OntologyProperties)
    owner_id: str = Field(default="", alias="ownerId")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    node_count: Optional[int] = None
    relationship_count: Optional[int] = None

    def is_visible_to(self, user_id: str) -> bool:
        return self.properties.is_public or self.owner_id == user_id


class SearchOntologiesResponse(BaseSchema):
    success: bool = True
    ontologies: List[Ontology]


class OntologyResponse(BaseSchema):
    success: bool = True
    ontology: Ontology


class DeleteResponse(BaseSchema):
    success: bool = True
    message: str
    deleted_id: Optional[str] = None


# Comment schemas
class CommentCreate(BaseSchema):
    ontology_id: str
    content: str = ""


class Comment(BaseSchema):
    id: str
    ontology_id: str = Field(alias="ontologyId")
    author_id: str = Field(alias="authorId")
    author_name: Optional[str] = Field(default=None, alias="authorName")
    content: str
    created_at: datetime = Field(alias="createdAt")


class CommentListResponse(BaseSchema):
    success: bool = True
    comments: List[Comment]


class CommentResponse(BaseSchema):
    success: bool = True
    comment: Comment


# Principal extracted from a verified bearer token
class Principal(BaseSchema):
    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


# Health check
class HealthCheck(BaseSchema):
    status: str
    environment: str


# Error schemas
class ErrorResponse(BaseSchema):
    error: str
    details: Optional[str] = None


# Graph schemas
class GraphCredentials(BaseSchema):
    uri: str
    username: str
    password: str


class GraphNode(BaseSchema):
    id: str
    labels: List[str]
    properties: Dict[str, Any] = Field(default_factory=dict)


class GraphRelationship(BaseSchema):
    id: str
    type: str
    start_node_id: str = Field(alias="startNodeId")
    end_node_id: str = Field(alias="endNodeId")
    properties: Dict[str, Any] = Field(default_factory=dict)


class GraphData(BaseSchema):
    nodes: List[GraphNode] = Field(default_factory=list)
    relationships: List[GraphRelationship] = Field(default_factory=list)


class GraphDatabaseInfo(BaseSchema):
    labels: List[str] = Field(default_factory=list)
    relationship_types: List[str] = Field(default_factory=list, alias="relationshipTypes")
    node_count: int = Field(default=0, alias="nodeCount")
    relationship_count: int = Field(default=0, alias="relationshipCount")


class GraphStatus(BaseSchema):
    success: bool = True
    connected: bool


class GraphQuery(BaseSchema):
    query: str = Field(min_length=1)
    parameters: Dict[str, Any] = Field(default_factory=dict)


class GraphQueryResponse(BaseSchema):
    success: bool = True
    records: List[Dict[str, Any]]


class GraphNodesResponse(BaseSchema):
    success: bool = True
    nodes: List[GraphNode]


class GraphPushRequest(BaseSchema):
    id: str


class GraphPushResponse(BaseSchema):
    success: bool = True
    node: GraphNode
