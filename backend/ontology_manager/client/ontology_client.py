"""
Client façade for the ontology endpoints.

Every operation fetches a fresh bearer token, performs one request, and
returns an :class:`OperationResult`. Read-path failures go through the
fallback policy; nothing is retried.
"""
from typing import Any, Awaitable, Callable, Dict, List, Optional
import logging

import httpx

from ontology_manager.client.fallback import (
    FallbackDiagnostics,
    OperationResult,
    handle_create_fallback,
    handle_search_fallback,
)
from ontology_manager.client.normalization import (
    dedupe_by_id,
    normalize_ontologies,
    normalize_ontology,
)
from ontology_manager.config import settings
from ontology_manager.errors import (
    NotFoundError,
    OntologyManagerError,
    TransportError,
    UnknownError,
    ValidationError,
    error_for_status,
)
from ontology_manager.models.schemas import (
    Comment,
    OntologyCreate,
    OntologyProperties,
)

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[str]]


class OntologyClient:
    """Single entry point for record operations."""

    def __init__(
        self,
        token_provider: TokenProvider,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.token_provider = token_provider
        self.base_url = (base_url or settings.ONTOLOGY_API_URL).rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS,
            transport=transport
        )
        self._diagnostics = FallbackDiagnostics()

    async def __aenter__(self) -> "OntologyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Fallback tracking
    # ------------------------------------------------------------------

    def was_fallback_used(self) -> FallbackDiagnostics:
        """Fallback status of the most recent call on this client."""
        return self._diagnostics.model_copy()

    def reset_fallback_tracking(self) -> None:
        self._diagnostics = FallbackDiagnostics()

    def _track(self, result: OperationResult) -> OperationResult:
        self._diagnostics = result.diagnostics.model_copy()
        return result

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Perform one authenticated request and return the decoded JSON body.

        Raises:
            AuthenticationError: If no token can be obtained or the backend rejects it
            TransportError: If the backend cannot be reached
            UnknownError: If the request fails outside the transport or returns invalid JSON
            OntologyManagerError: The taxonomy error matching a non-2xx status
        """
        token = await self.token_provider()

        try:
            response = await self._http.request(
                method,
                path,
                json=json,
                params=params,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                }
            )
        except httpx.TransportError as e:
            logger.error(f"Request to {path} failed: {e}")
            raise TransportError(f"Failed to fetch: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"Request to {path} failed: {e}")
            raise UnknownError(f"Request failed: {e}") from e

        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            if not isinstance(error_data, dict):
                error_data = {}
            message = error_data.get("error") or f"HTTP error! status: {response.status_code}"
            logger.error(f"API error response from {path}: {response.status_code} {error_data}")
            raise error_for_status(response.status_code, message, error_data.get("details"))

        try:
            data = response.json()
        except ValueError as e:
            raise UnknownError(f"Invalid JSON in response from {path}") from e
        return data if isinstance(data, dict) else {"ontologies": data}

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def search(self) -> OperationResult:
        """
        Fetch every record visible to the current principal.

        Network, server and rate-limit failures return substitute data with
        ``diagnostics.used`` set; authentication and unknown failures fail.
        """
        try:
            data = await self._request("GET", "/search_ontologies")
        except OntologyManagerError as e:
            return self._track(handle_search_fallback(e))

        ontologies = dedupe_by_id(normalize_ontologies(data))
        logger.debug(f"Loaded {len(ontologies)} ontologies")
        return self._track(OperationResult.ok(data=ontologies))

    async def create(
        self,
        name: str,
        description: str,
        is_public: bool = False,
        source_url: Optional[str] = None,
        image_url: Optional[str] = None,
        tags: Optional[List[str]] = None
    ) -> OperationResult:
        """
        Create a record; name and description must be non-empty after trimming.
        """
        name = (name or "").strip()
        description = (description or "").strip()
        if not name:
            return self._track(OperationResult.fail(ValidationError("Ontology name is required")))
        if not description:
            return self._track(OperationResult.fail(ValidationError("Ontology description is required")))

        draft = OntologyCreate(
            name=name,
            description=description,
            properties=OntologyProperties(
                source_url=(source_url or "").strip(),
                image_url=(image_url or "").strip(),
                is_public=is_public,
                tags=[tag.strip() for tag in (tags or []) if tag.strip()],
            )
        )

        try:
            data = await self._request("POST", "/add_ontology", json=draft.model_dump(mode="json"))
        except OntologyManagerError as e:
            return self._track(handle_create_fallback(e, draft))

        return self._track(OperationResult.ok(data=normalize_ontology(data.get("ontology") or data)))

    async def update(self, ontology_id: str, partial: Dict[str, Any]) -> OperationResult:
        """
        Update a record owned by the current principal.

        Only keys present in ``partial`` are sent, so omitted properties such
        as ``is_public`` keep their stored values.
        """
        payload: Dict[str, Any] = {"id": ontology_id}
        for key in ("name", "description", "tags"):
            if key in partial:
                payload[key] = partial[key]
        if "properties" in partial and partial["properties"] is not None:
            payload["properties"] = {
                key: value
                for key, value in dict(partial["properties"]).items()
                if key in ("source_url", "image_url", "is_public", "tags") and value is not None
            }

        for key in ("name", "description"):
            if key in payload and not str(payload[key] or "").strip():
                return self._track(OperationResult.fail(ValidationError(f"Ontology {key} must not be empty")))

        try:
            data = await self._request("POST", "/update_ontology", json=payload)
        except OntologyManagerError as e:
            logger.error(f"Error updating ontology {ontology_id}: {e.message}")
            return self._track(OperationResult.fail(e))

        return self._track(OperationResult.ok(data=normalize_ontology(data.get("ontology") or data)))

    async def delete(self, ontology_id: str) -> OperationResult:
        """Delete a record owned by the current principal."""
        try:
            await self._request("POST", "/delete_ontology", json={"id": ontology_id})
        except OntologyManagerError as e:
            logger.error(f"Error deleting ontology {ontology_id}: {e.message}")
            return self._track(OperationResult.fail(e))

        return self._track(OperationResult.ok())

    async def get_one(self, ontology_id: str) -> OperationResult:
        """
        Look up one record by exact id within the accessible set.
        """
        result = await self.search()
        if not result.success:
            return result

        for ontology in result.data or []:
            if ontology.id == ontology_id:
                return self._track(OperationResult.ok(data=ontology, diagnostics=result.diagnostics))

        return self._track(OperationResult.fail(
            NotFoundError(f"Ontology not found: {ontology_id}"),
            diagnostics=result.diagnostics
        ))

    async def list_comments(self, ontology_id: str) -> OperationResult:
        try:
            data = await self._request("GET", "/list_comments", params={"ontology_id": ontology_id})
        except OntologyManagerError as e:
            return self._track(OperationResult.fail(e))

        comments = [Comment.model_validate(item) for item in data.get("comments", [])]
        return self._track(OperationResult.ok(data=comments))

    async def add_comment(self, ontology_id: str, content: str) -> OperationResult:
        content = (content or "").strip()
        if not content:
            return self._track(OperationResult.fail(ValidationError("Comment content is required")))

        try:
            data = await self._request(
                "POST", "/add_comment", json={"ontology_id": ontology_id, "content": content}
            )
        except OntologyManagerError as e:
            return self._track(OperationResult.fail(e))

        return self._track(OperationResult.ok(data=Comment.model_validate(data["comment"])))
