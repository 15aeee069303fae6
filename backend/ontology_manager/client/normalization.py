"""
Normalization of ontology payloads returned by the backend.

Older backend revisions emit ``title`` instead of ``name``, a top-level
``file_url`` instead of ``properties.source_url``, and Firestore-style
``{"_seconds": ...}`` timestamps instead of ISO strings. Everything is
resolved here into the canonical :class:`Ontology` shape; alternate field
names never leave this module.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
import logging

from ontology_manager.models.schemas import Ontology, OntologyProperties

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Ontology"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _first_text(*values: Any, default: str = "") -> str:
    for value in values:
        if isinstance(value, str) and value.strip():
            return value
    return default


def _first_present(*values: Any, default: Any = None) -> Any:
    for value in values:
        if value is not None:
            return value
    return default


def _first_bool(*values: Any, default: bool = False) -> bool:
    for value in values:
        if isinstance(value, bool):
            return value
    return default


def parse_timestamp(value: Any) -> datetime:
    """
    Best-effort conversion of a wire timestamp into an aware datetime.

    Accepts Firestore-style ``{"_seconds": n}`` / ``{"seconds": n}`` objects,
    datetimes, epoch milliseconds and ISO-8601 strings. Anything else yields
    the current time and a warning.
    """
    if value is None or value == "":
        return _now()

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, dict):
        seconds = _first_present(value.get("_seconds"), value.get("seconds"))
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        logger.warning(f"Failed to parse date: {value!r}")
        return _now()

    try:
        if isinstance(value, bool):
            raise TypeError("boolean is not a timestamp")
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        if isinstance(value, str):
            text = value.strip()
            try:
                return datetime.fromtimestamp(float(text) / 1000.0, tz=timezone.utc)
            except ValueError:
                pass
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            parsed = datetime.fromisoformat(text)
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        raise TypeError(f"unsupported timestamp type {type(value).__name__}")
    except (TypeError, ValueError, OverflowError, OSError):
        logger.warning(f"Failed to parse date: {value!r}")
        return _now()


def normalize_ontology(raw: Dict[str, Any]) -> Ontology:
    """
    Resolve a raw backend payload into a canonical record.

    Args:
        raw: One ontology object as returned by any backend revision

    Returns:
        Ontology: The normalized record
    """
    properties = raw.get("properties") or {}
    if not isinstance(properties, dict):
        properties = {}

    tags = _first_present(properties.get("tags"), raw.get("tags"), default=[])
    if not isinstance(tags, list):
        tags = []

    created_raw = _first_present(raw.get("createdAt"), raw.get("created_at"), raw.get("created_time"))
    updated_raw = _first_present(raw.get("updatedAt"), raw.get("updated_at"), created_raw)

    raw_id = raw.get("id")

    return Ontology(
        id=str(raw_id) if raw_id is not None else None,
        name=_first_text(raw.get("title"), raw.get("name"), default=UNTITLED),
        description=_first_text(raw.get("description")),
        properties=OntologyProperties(
            source_url=_first_text(raw.get("file_url"), raw.get("source_url"), properties.get("source_url")),
            image_url=_first_text(raw.get("image_url"), properties.get("image_url")),
            is_public=_first_bool(raw.get("is_public"), properties.get("is_public")),
            tags=[str(tag) for tag in tags],
        ),
        owner_id=_first_text(raw.get("ownerId"), raw.get("owner_id"), raw.get("uid")),
        created_at=parse_timestamp(created_raw),
        updated_at=parse_timestamp(updated_raw),
        node_count=_as_int(raw.get("node_count")),
        relationship_count=_as_int(raw.get("relationship_count")),
    )


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


def normalize_ontologies(payload: Any) -> List[Ontology]:
    """Normalize a ``{ontologies: [...]}`` envelope or a bare list."""
    if isinstance(payload, dict):
        items = payload.get("ontologies") or []
    elif isinstance(payload, list):
        items = payload
    else:
        items = []
    return [normalize_ontology(item) for item in items if isinstance(item, dict)]


def dedupe_by_id(records: Iterable[Ontology]) -> List[Ontology]:
    """Keep the first record seen for each id; records without an id are kept."""
    seen = set()
    unique = []
    for record in records:
        if record.id is not None:
            if record.id in seen:
                continue
            seen.add(record.id)
        unique.append(record)
    return unique
