"""
Fallback policy for failed backend calls.

A failure is classified once and answered once: either with substitute data
flagged in the result's diagnostics, or with a hard failure. Nothing here
retries the original request.
"""
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, List, Optional
import logging

import httpx
from pydantic import BaseModel, Field

from ontology_manager import errors
from ontology_manager.models.schemas import Ontology, OntologyCreate, OntologyProperties

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Failure classes the policy distinguishes."""
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    SERVER = "server"
    RATE_LIMIT = "rate_limit"
    UNKNOWN = "unknown"


REASON_NETWORK = "Network/CORS error"
REASON_NETWORK_CREATE = "Network/CORS error (add ontology)"
REASON_AUTHENTICATION = "Authentication error"
REASON_SERVER = "Server error (5xx)"
REASON_RATE_LIMIT = "Rate limiting"
REASON_UNKNOWN = "Unknown error"

_SIGNATURES = [
    (ErrorCategory.NETWORK, ("networkerror", "cors", "failed to fetch", "connection")),
    (ErrorCategory.AUTHENTICATION, ("unauthorized", "401", "authentication")),
    (ErrorCategory.VALIDATION, ("400", "missing required fields", "validation")),
    (ErrorCategory.SERVER, ("500", "502", "503", "internal server error")),
    (ErrorCategory.RATE_LIMIT, ("429", "rate limit", "temporary")),
]

_TYPED = [
    ((errors.TransportError, httpx.TransportError), ErrorCategory.NETWORK),
    ((errors.AuthenticationError,), ErrorCategory.AUTHENTICATION),
    ((errors.ValidationError,), ErrorCategory.VALIDATION),
    ((errors.RateLimitError,), ErrorCategory.RATE_LIMIT),
    ((errors.ServerError,), ErrorCategory.SERVER),
]

_ERROR_CLASSES = {
    cls.error_type: cls
    for cls in (
        errors.AuthenticationError,
        errors.ValidationError,
        errors.ForbiddenError,
        errors.NotFoundError,
        errors.RateLimitError,
        errors.ServerError,
        errors.TransportError,
        errors.UnknownError,
    )
}


class FallbackDiagnostics(BaseModel):
    """Whether substitute handling kicked in, and why."""
    used: bool = False
    reason: str = ""


class OperationResult(BaseModel):
    """Outcome of one façade call."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    diagnostics: FallbackDiagnostics = Field(default_factory=FallbackDiagnostics)

    @classmethod
    def ok(cls, data: Any = None, diagnostics: Optional[FallbackDiagnostics] = None,
           error: Optional[str] = None) -> "OperationResult":
        return cls(success=True, data=data, error=error,
                   diagnostics=diagnostics or FallbackDiagnostics())

    @classmethod
    def fail(cls, exc: errors.OntologyManagerError, data: Any = None,
             diagnostics: Optional[FallbackDiagnostics] = None) -> "OperationResult":
        return cls(success=False, data=data, error=exc.message, error_type=exc.error_type,
                   diagnostics=diagnostics or FallbackDiagnostics())

    def raise_for_error(self) -> "OperationResult":
        """Raise the typed error for a failed result; returns self otherwise."""
        if self.success:
            return self
        error_class = _ERROR_CLASSES.get(self.error_type or "", errors.UnknownError)
        raise error_class(self.error or "Unknown error")


def classify_error(exc: BaseException) -> ErrorCategory:
    """
    Classify a failure, by exception type first and message signature second.
    """
    for types, category in _TYPED:
        if isinstance(exc, types):
            return category

    message = str(exc).lower()
    for category, signatures in _SIGNATURES:
        if any(signature in message for signature in signatures):
            return category
    return ErrorCategory.UNKNOWN


def _as_taxonomy_error(exc: BaseException) -> errors.OntologyManagerError:
    if isinstance(exc, errors.OntologyManagerError):
        return exc
    return errors.UnknownError(str(exc) or "Unknown error")


def development_fallback_data(now: Optional[datetime] = None) -> List[Ontology]:
    """Sample records shown when the backend cannot be reached."""
    now = now or datetime.now(timezone.utc)
    samples = [
        ("dev-1", "Medical Ontology (Dev)", "Sample medical terminology ontology for development",
         "https://example.com/medical.owl", True),
        ("dev-2", "E-commerce Catalog (Dev)", "Sample product categorization ontology",
         "https://example.com/ecommerce.owl", False),
        ("dev-3", "Academic Research (Dev)", "Sample academic research ontology",
         "https://example.com/academic.owl", True),
    ]
    return [
        Ontology(
            id=record_id,
            name=name,
            description=description,
            properties=OntologyProperties(
                source_url=source_url,
                image_url="https://via.placeholder.com/150",
                is_public=is_public,
            ),
            owner_id="dev-user",
            created_at=now,
            updated_at=now,
        )
        for record_id, name, description, source_url, is_public in samples
    ]


def cached_fallback_data(now: Optional[datetime] = None) -> List[Ontology]:
    """A single previously-loaded-looking record, one day old."""
    day_ago = (now or datetime.now(timezone.utc)) - timedelta(days=1)
    return [
        Ontology(
            id="cached-1",
            name="Cached Medical Ontology",
            description="Previously loaded medical ontology (cached)",
            properties=OntologyProperties(
                source_url="https://example.com/cached-medical.owl",
                image_url="https://via.placeholder.com/150",
                is_public=True,
            ),
            owner_id="cached-user",
            created_at=day_ago,
            updated_at=day_ago,
        )
    ]


def minimal_fallback_data(now: Optional[datetime] = None) -> List[Ontology]:
    """Placeholder shown while rate limited."""
    now = now or datetime.now(timezone.utc)
    return [
        Ontology(
            id="minimal-1",
            name="Basic Ontology",
            description="Minimal ontology data available",
            properties=OntologyProperties(is_public=True),
            owner_id="system",
            created_at=now,
            updated_at=now,
        )
    ]


def handle_search_fallback(exc: BaseException) -> OperationResult:
    """Choose the response to a failed search."""
    category = classify_error(exc)
    logger.warning(f"Search failed ({category.value}): {exc}")

    if category == ErrorCategory.NETWORK:
        return OperationResult.ok(
            data=development_fallback_data(),
            diagnostics=FallbackDiagnostics(used=True, reason=REASON_NETWORK),
        )

    if category == ErrorCategory.AUTHENTICATION:
        return OperationResult.fail(
            errors.AuthenticationError("Authentication failed. Please log in again."),
            data=[],
            diagnostics=FallbackDiagnostics(used=True, reason=REASON_AUTHENTICATION),
        )

    if category == ErrorCategory.SERVER:
        return OperationResult.ok(
            data=cached_fallback_data(),
            error="Using cached data due to server issues",
            diagnostics=FallbackDiagnostics(used=True, reason=REASON_SERVER),
        )

    if category == ErrorCategory.RATE_LIMIT:
        return OperationResult.ok(
            data=minimal_fallback_data(),
            error="Rate limited - showing limited data",
            diagnostics=FallbackDiagnostics(used=True, reason=REASON_RATE_LIMIT),
        )

    original = _as_taxonomy_error(exc)
    return OperationResult.fail(
        original,
        data=[],
        diagnostics=FallbackDiagnostics(used=True, reason=REASON_UNKNOWN),
    )


def handle_create_fallback(exc: BaseException, draft: OntologyCreate) -> OperationResult:
    """
    Choose the response to a failed create.

    Only network failures are absorbed, by fabricating a local-only record;
    every other failure surfaces unchanged.
    """
    category = classify_error(exc)
    logger.warning(f"Add ontology failed ({category.value}): {exc}")

    if category == ErrorCategory.NETWORK:
        now = datetime.now(timezone.utc)
        return OperationResult.ok(
            data=Ontology(
                id=f"dev-{int(now.timestamp() * 1000)}",
                name=draft.name,
                description=draft.description,
                properties=draft.properties,
                created_at=now,
                updated_at=now,
            ),
            diagnostics=FallbackDiagnostics(used=True, reason=REASON_NETWORK_CREATE),
        )

    return OperationResult.fail(_as_taxonomy_error(exc))
