"""Shared test fixtures for the character service."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from realm.models import Profile, Session

MASTER_EMAIL = "mestre@example.com"


@pytest_asyncio.fixture
async def store():
    """A fresh in-memory document store and identity gateway."""
    from server.auth import init_identity
    from server.config import settings
    from server.store import close_store, init_store

    # Use in-memory SQLite and cheap hashing for tests
    settings.db_path = ":memory:"
    settings.argon2_time_cost = 1
    settings.argon2_memory_cost = 1024
    settings.master_emails = [MASTER_EMAIL]
    settings.mission_rewards_on_completion = True

    s = await init_store(":memory:")
    init_identity(s)
    yield s
    await close_store()


@pytest_asyncio.fixture
async def client(store):
    """Create a test client over the in-memory store."""
    from server.app import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def player() -> Session:
    return Session(user_id="player-1", email="player@example.com")


@pytest.fixture
def player2() -> Session:
    return Session(user_id="player-2", email="player2@example.com")


@pytest.fixture
def master() -> Session:
    return Session(user_id="master-1", email=MASTER_EMAIL, is_master=True)


async def make_profile(session: Session, username: str = "Arthur", **fields) -> Profile:
    """Create the session user's profile through the repository."""
    from server.profiles import profiles

    return await profiles.create(
        session, {"username": username, "char_class": "Combatente", **fields},
    )


async def set_gold(profile_id: str, gold: int) -> None:
    from server.store import PROFILES, get_store

    s = await get_store()
    await s.update(PROFILES, profile_id, {"gold": gold})


def auth_header(token: str) -> dict:
    """Bearer auth headers for a session token."""
    return {"Authorization": f"Bearer {token}"}


async def signup(client: AsyncClient, email: str, password: str = "segredo123") -> dict:
    resp = await client.post("/auth/signup", json={"email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest_asyncio.fixture
async def player_account(client: AsyncClient) -> dict:
    """Sign up a regular player and return the auth response."""
    return await signup(client, "jogador@example.com")


@pytest_asyncio.fixture
async def master_account(client: AsyncClient) -> dict:
    """Sign up the configured master account."""
    return await signup(client, MASTER_EMAIL)
