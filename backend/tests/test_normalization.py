"""Tests for payload normalization."""
from datetime import datetime, timedelta, timezone

import pytest

from ontology_manager.client.normalization import (
    UNTITLED,
    dedupe_by_id,
    normalize_ontologies,
    normalize_ontology,
    parse_timestamp,
)


class TestFieldResolution:

    def test_legacy_payload(self):
        record = normalize_ontology({
            "id": "abc",
            "title": "Legacy Title",
            "name": "Ignored Name",
            "description": "Old shape",
            "file_url": "https://example.com/legacy.owl",
            "source_url": "https://example.com/ignored.owl",
            "is_public": True,
            "uid": "legacy-owner",
            "created_time": {"_seconds": 1700000000, "_nanoseconds": 0},
            "node_count": 12,
        })

        assert record.id == "abc"
        assert record.name == "Legacy Title"
        assert record.properties.source_url == "https://example.com/legacy.owl"
        assert record.properties.is_public is True
        assert record.owner_id == "legacy-owner"
        assert record.created_at == datetime.fromtimestamp(1700000000, tz=timezone.utc)
        assert record.updated_at == record.created_at
        assert record.node_count == 12

    def test_current_payload(self):
        record = normalize_ontology({
            "id": "xyz",
            "name": "Current",
            "description": "New shape",
            "properties": {
                "source_url": "https://example.com/a.owl",
                "image_url": "https://example.com/a.png",
                "is_public": False,
                "tags": ["bio"],
            },
            "ownerId": "owner-1",
            "createdAt": "2024-03-01T10:00:00Z",
            "updatedAt": "2024-03-02T10:00:00+00:00",
        })

        assert record.name == "Current"
        assert record.properties.image_url == "https://example.com/a.png"
        assert record.properties.tags == ["bio"]
        assert record.owner_id == "owner-1"
        assert record.created_at == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)
        assert record.updated_at == datetime(2024, 3, 2, 10, tzinfo=timezone.utc)

    def test_defaults(self):
        record = normalize_ontology({"id": "1", "title": "   "})
        assert record.name == UNTITLED
        assert record.description == ""
        assert record.properties.source_url == ""
        assert record.properties.image_url == ""
        assert record.properties.is_public is False
        assert record.owner_id == ""

    def test_explicit_false_wins_over_nested_true(self):
        record = normalize_ontology({"id": "1", "is_public": False, "properties": {"is_public": True}})
        assert record.properties.is_public is False

    @pytest.mark.parametrize("top, nested, expected", [
        ("false", None, False),
        ("true", None, False),
        ("false", True, True),
        (1, False, False),
    ])
    def test_only_real_booleans_count_as_visibility(self, top, nested, expected):
        record = normalize_ontology({"id": "1", "is_public": top, "properties": {"is_public": nested}})
        assert record.properties.is_public is expected

    def test_top_level_image_url_wins(self):
        record = normalize_ontology({
            "id": "1",
            "image_url": "top.png",
            "properties": {"image_url": "nested.png"},
        })
        assert record.properties.image_url == "top.png"

    def test_alternate_names_do_not_leak(self):
        record = normalize_ontology({"id": "1", "title": "T", "file_url": "f", "uid": "u"})
        dumped = record.model_dump(by_alias=True)
        for legacy in ("title", "file_url", "uid", "created_time"):
            assert legacy not in dumped


class TestParseTimestamp:

    def test_seconds_object(self):
        assert parse_timestamp({"seconds": 0}) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_datetime_passthrough(self):
        value = datetime(2020, 5, 5, tzinfo=timezone.utc)
        assert parse_timestamp(value) is value

    def test_naive_datetime_assumed_utc(self):
        assert parse_timestamp(datetime(2020, 5, 5)).tzinfo == timezone.utc

    def test_epoch_milliseconds(self):
        assert parse_timestamp(86_400_000) == datetime(1970, 1, 2, tzinfo=timezone.utc)
        assert parse_timestamp("86400000") == datetime(1970, 1, 2, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "not a date", {"nanos": 5}, [1, 2], True])
    def test_unparseable_becomes_now(self, value):
        before = datetime.now(timezone.utc)
        parsed = parse_timestamp(value)
        assert before - timedelta(seconds=1) <= parsed <= datetime.now(timezone.utc)


class TestCollections:

    def test_envelope_and_bare_list(self):
        items = [{"id": "1", "name": "A"}, {"id": "2", "name": "B"}]
        assert [o.id for o in normalize_ontologies({"ontologies": items})] == ["1", "2"]
        assert [o.id for o in normalize_ontologies(items)] == ["1", "2"]
        assert normalize_ontologies({"success": True}) == []

    def test_dedupe_first_seen_wins(self):
        records = normalize_ontologies([
            {"id": "1", "name": "First"},
            {"id": "2", "name": "Other"},
            {"id": "1", "name": "Second"},
        ])
        unique = dedupe_by_id(records)
        assert [(o.id, o.name) for o in unique] == [("1", "First"), ("2", "Other")]
