"""Tests for client-side session handling."""
import pytest

from ontology_manager.client.auth import DEMO_USERS, AuthSession
from ontology_manager.client.ontology_client import OntologyClient
from ontology_manager.config import settings
from ontology_manager.core.security import verify_access_token
from ontology_manager.errors import AuthenticationError


def test_demo_users_available():
    session = AuthSession()
    assert [u.id for u in session.available_users] == [u.id for u in DEMO_USERS]
    assert session.is_authenticated() is False


def test_sign_in_unknown_user():
    session = AuthSession()
    with pytest.raises(AuthenticationError):
        session.sign_in("nobody")
    assert session.current_user is None


def test_listeners_follow_state():
    session = AuthSession()
    seen = []
    unsubscribe = session.on_auth_state_changed(lambda user: seen.append(user.id if user else None))

    session.sign_in("demo-student-1")
    session.sign_out()
    unsubscribe()
    session.sign_in("demo-admin-1")

    assert seen == [None, "demo-student-1", None]


async def test_get_token_requires_sign_in():
    session = AuthSession()
    with pytest.raises(AuthenticationError, match="not authenticated"):
        await session.get_token()


async def test_get_token_carries_identity():
    session = AuthSession()
    user = session.sign_in("demo-researcher-2")

    principal = verify_access_token(await session.get_token())

    assert principal.user_id == user.id
    assert principal.email == user.email
    assert principal.full_name == user.name


async def test_session_drives_client(asgi_transport):
    session = AuthSession()
    session.sign_in("demo-researcher-1")

    async with OntologyClient(
        token_provider=session.get_token,
        base_url=f"http://testserver{settings.API_V1_STR}",
        transport=asgi_transport,
    ) as client:
        created = await client.create("Shared vocabulary", "Terms", is_public=True)
        comment = await client.add_comment(created.data.id, "First!")

        session.sign_out()
        signed_out = await client.search()

    assert created.data.owner_id == "demo-researcher-1"
    assert comment.data.author_name == "Prof. Michael Rodriguez"
    assert signed_out.success is False
    assert signed_out.error_type == "authentication"
