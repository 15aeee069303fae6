"""Tests for the fallback policy."""
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from ontology_manager import errors
from ontology_manager.client.fallback import (
    REASON_AUTHENTICATION,
    REASON_NETWORK,
    REASON_NETWORK_CREATE,
    REASON_RATE_LIMIT,
    REASON_SERVER,
    REASON_UNKNOWN,
    ErrorCategory,
    OperationResult,
    classify_error,
    handle_create_fallback,
    handle_search_fallback,
)
from ontology_manager.models.schemas import OntologyCreate, OntologyProperties


@pytest.mark.parametrize("exc, expected", [
    (errors.TransportError("down"), ErrorCategory.NETWORK),
    (httpx.ConnectError("refused"), ErrorCategory.NETWORK),
    (RuntimeError("TypeError: Failed to fetch"), ErrorCategory.NETWORK),
    (RuntimeError("blocked by CORS policy"), ErrorCategory.NETWORK),
    (errors.AuthenticationError("expired"), ErrorCategory.AUTHENTICATION),
    (RuntimeError("HTTP error! status: 401"), ErrorCategory.AUTHENTICATION),
    (errors.ValidationError("bad"), ErrorCategory.VALIDATION),
    (errors.ServerError("boom"), ErrorCategory.SERVER),
    (RuntimeError("Internal server error"), ErrorCategory.SERVER),
    (errors.RateLimitError("slow down"), ErrorCategory.RATE_LIMIT),
    (RuntimeError("HTTP error! status: 429"), ErrorCategory.RATE_LIMIT),
    (RuntimeError("something odd"), ErrorCategory.UNKNOWN),
    (errors.NotFoundError("gone"), ErrorCategory.UNKNOWN),
])
def test_classify_error(exc, expected):
    assert classify_error(exc) == expected


class TestSearchFallback:

    def test_network_returns_three_sample_records(self):
        result = handle_search_fallback(errors.TransportError("Failed to fetch"))
        assert result.success is True
        assert [o.id for o in result.data] == ["dev-1", "dev-2", "dev-3"]
        assert result.diagnostics.used is True
        assert result.diagnostics.reason == REASON_NETWORK

    def test_authentication_is_hard_failure(self):
        result = handle_search_fallback(errors.AuthenticationError("Unauthorized"))
        assert result.success is False
        assert result.data == []
        assert result.error_type == "authentication"
        assert result.diagnostics.reason == REASON_AUTHENTICATION

    def test_server_error_returns_cached_record(self):
        result = handle_search_fallback(errors.ServerError("Internal server error"))
        assert result.success is True
        assert len(result.data) == 1
        assert result.data[0].id == "cached-1"
        assert datetime.now(timezone.utc) - result.data[0].updated_at >= timedelta(hours=23)
        assert result.diagnostics.reason == REASON_SERVER

    def test_rate_limit_returns_placeholder(self):
        result = handle_search_fallback(errors.RateLimitError("Too many requests"))
        assert result.success is True
        assert [o.id for o in result.data] == ["minimal-1"]
        assert result.diagnostics.reason == REASON_RATE_LIMIT

    def test_unknown_keeps_original_message(self):
        result = handle_search_fallback(RuntimeError("the flux capacitor"))
        assert result.success is False
        assert result.error == "the flux capacitor"
        assert result.data == []
        assert result.diagnostics.reason == REASON_UNKNOWN


class TestCreateFallback:

    draft = OntologyCreate(
        name="Draft",
        description="Local only",
        properties=OntologyProperties(is_public=True),
    )

    def test_network_fabricates_local_record(self):
        result = handle_create_fallback(errors.TransportError("Failed to fetch"), self.draft)
        assert result.success is True
        assert result.data.id.startswith("dev-")
        assert result.data.name == "Draft"
        assert result.data.properties.is_public is True
        assert result.data.created_at is not None
        assert result.diagnostics.reason == REASON_NETWORK_CREATE

    @pytest.mark.parametrize("exc", [
        errors.ServerError("Internal server error"),
        errors.AuthenticationError("Unauthorized"),
        errors.ValidationError("Name and description are required"),
        errors.RateLimitError("slow down"),
    ])
    def test_other_failures_surface(self, exc):
        result = handle_create_fallback(exc, self.draft)
        assert result.success is False
        assert result.error == exc.message
        assert result.error_type == exc.error_type
        assert result.diagnostics.used is False


def test_raise_for_error():
    OperationResult.ok(data=[]).raise_for_error()

    failed = OperationResult.fail(errors.ForbiddenError("not yours"))
    with pytest.raises(errors.ForbiddenError, match="not yours"):
        failed.raise_for_error()
