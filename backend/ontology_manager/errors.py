"""
Error taxonomy shared by the API handlers and the client façade.

Every error carries the HTTP status code it maps to, so the server can render
it into the ``{error, details}`` envelope and the client can rebuild it from a
response status.
"""
from typing import Optional


class OntologyManagerError(Exception):
    """Base class for all Ontology Manager errors."""

    status_code: int = 500
    error_type: str = "unknown"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_envelope(self) -> dict:
        envelope = {"error": self.message}
        if self.details:
            envelope["details"] = self.details
        return envelope


class AuthenticationError(OntologyManagerError):
    """No session, or a missing, malformed or expired bearer token."""

    status_code = 401
    error_type = "authentication"


class ValidationError(OntologyManagerError):
    """Malformed input."""

    status_code = 400
    error_type = "validation"


class ForbiddenError(OntologyManagerError):
    """The principal does not own the record."""

    status_code = 403
    error_type = "forbidden"


class NotFoundError(OntologyManagerError):
    status_code = 404
    error_type = "not_found"


class RateLimitError(OntologyManagerError):
    status_code = 429
    error_type = "rate_limit"


class ServerError(OntologyManagerError):
    """5xx class failure reported by the backend."""

    status_code = 500
    error_type = "server"


class TransportError(OntologyManagerError):
    """Network failure, CORS rejection or unreachable backend."""

    status_code = 503
    error_type = "transport"


class UnknownError(OntologyManagerError):
    status_code = 500
    error_type = "unknown"


class GraphConnectionError(OntologyManagerError):
    """The graph database is unreachable or not connected."""

    status_code = 503
    error_type = "graph_connection"


_BY_STATUS = {
    400: ValidationError,
    401: AuthenticationError,
    403: ForbiddenError,
    404: NotFoundError,
    429: RateLimitError,
}


def error_for_status(status_code: int, message: str, details: Optional[str] = None) -> OntologyManagerError:
    """Build the taxonomy error matching an HTTP response status."""
    if status_code in _BY_STATUS:
        return _BY_STATUS[status_code](message, details)
    if status_code >= 500:
        error = ServerError(message, details)
        error.status_code = status_code
        return error
    return UnknownError(message, details)
