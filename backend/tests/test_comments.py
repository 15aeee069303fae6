"""Tests for comment endpoints."""
from conftest import bearer
from ontology_manager.config import settings

API = settings.API_V1_STR


def _create(client, headers, is_public):
    resp = client.post(
        f"{API}/add_ontology",
        json={"name": "Ontology", "description": "With comments", "properties": {"is_public": is_public}},
        headers=headers,
    )
    return resp.json()["ontology"]["id"]


def test_comment_round_trip(client, owner_headers, other_headers):
    ontology_id = _create(client, owner_headers, is_public=True)

    resp = client.post(
        f"{API}/add_comment",
        json={"ontology_id": ontology_id, "content": "  Is this the 2024 release?  "},
        headers=other_headers,
    )
    assert resp.status_code == 201
    comment = resp.json()["comment"]
    assert comment["content"] == "Is this the 2024 release?"
    assert comment["authorId"] == "user-other"
    assert comment["ontologyId"] == ontology_id
    assert comment["createdAt"].endswith(("Z", "+00:00"))

    client.post(
        f"{API}/add_comment",
        json={"ontology_id": ontology_id, "content": "Yes."},
        headers=owner_headers,
    )

    listing = client.get(f"{API}/list_comments", params={"ontology_id": ontology_id}, headers=owner_headers)
    assert listing.status_code == 200
    assert [c["content"] for c in listing.json()["comments"]] == ["Is this the 2024 release?", "Yes."]


def test_private_record_comments_hidden(client, owner_headers, other_headers):
    ontology_id = _create(client, owner_headers, is_public=False)

    listing = client.get(f"{API}/list_comments", params={"ontology_id": ontology_id}, headers=other_headers)
    assert listing.status_code == 404

    resp = client.post(
        f"{API}/add_comment",
        json={"ontology_id": ontology_id, "content": "Let me in"},
        headers=other_headers,
    )
    assert resp.status_code == 404


def test_empty_comment_rejected(client, owner_headers):
    ontology_id = _create(client, owner_headers, is_public=True)
    resp = client.post(
        f"{API}/add_comment",
        json={"ontology_id": ontology_id, "content": "   "},
        headers=owner_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Comment content is required"


def test_delete_removes_comments(client, owner_headers):
    ontology_id = _create(client, owner_headers, is_public=True)
    client.post(
        f"{API}/add_comment",
        json={"ontology_id": ontology_id, "content": "First"},
        headers=owner_headers,
    )

    client.post(f"{API}/delete_ontology", json={"id": ontology_id}, headers=owner_headers)

    listing = client.get(f"{API}/list_comments", params={"ontology_id": ontology_id}, headers=bearer("user-owner"))
    assert listing.status_code == 404
