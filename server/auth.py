"""Identity gateway: email/password accounts and bearer-token sessions."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError
from fastapi import Depends, HTTPException, Request

from realm.errors import AuthenticationError, EmailTakenError, InvalidRequestError
from realm.models import Session
from server.config import settings
from server.store import DocumentStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

SessionListener = Callable[["User | None"], None]


@dataclass(frozen=True)
class User:
    id: str
    email: str
    display_name: str | None = None


def hash_token(token: str) -> str:
    """Hash a session token for storage. Uses SHA-256."""
    return hashlib.sha256(token.encode()).hexdigest()


def is_master_email(email: str) -> bool:
    return email.strip().lower() in {e.strip().lower() for e in settings.master_emails}


def session_for(user: User) -> Session:
    return Session(user_id=user.id, email=user.email, is_master=is_master_email(user.email))


class IdentityGateway:
    """Sign-up, sign-in, sign-out and session lookup over the users tables."""

    def __init__(self, store: DocumentStore, hasher: PasswordHasher | None = None):
        self._store = store
        self._hasher = hasher or PasswordHasher(
            type=Type.ID,
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
        )
        self._listeners: list[SessionListener] = []

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        """Call ``callback`` with the user on sign-in, ``None`` on sign-out.

        Returns a function that removes the callback.
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, user: User | None) -> None:
        for callback in list(self._listeners):
            callback(user)

    async def sign_up(
        self, email: str, password: str, display_name: str | None = None,
    ) -> tuple[User, str]:
        email = email.strip().lower()
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidRequestError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        password_hash = await asyncio.to_thread(self._hasher.hash, password)

        user = User(id=uuid.uuid4().hex, email=email, display_name=display_name)
        async with self._store.transaction():
            cursor = await self._store.execute("SELECT id FROM users WHERE email = ?", (email,))
            if await cursor.fetchone():
                raise EmailTakenError("Email already registered")
            await self._store.execute(
                "INSERT INTO users (id, email, password_hash, display_name, created_at) VALUES (?, ?, ?, ?, ?)",
                (user.id, email, password_hash, display_name,
                 datetime.now(timezone.utc).isoformat()),
            )
        logger.info("Registered user %s", user.id)
        return await self._start_session(user)

    async def sign_in(self, email: str, password: str) -> tuple[User, str]:
        email = email.strip().lower()
        async with self._store.transaction():
            cursor = await self._store.execute(
                "SELECT id, email, password_hash, display_name FROM users WHERE email = ?",
                (email,),
            )
            row = await cursor.fetchone()
        if not row:
            raise AuthenticationError("Invalid email or password")
        try:
            await asyncio.to_thread(self._hasher.verify, row["password_hash"], password)
        except (VerificationError, InvalidHashError):
            logger.warning("Failed sign-in for user %s", row["id"])
            raise AuthenticationError("Invalid email or password") from None

        if self._hasher.check_needs_rehash(row["password_hash"]):
            new_hash = await asyncio.to_thread(self._hasher.hash, password)
            async with self._store.transaction():
                await self._store.execute(
                    "UPDATE users SET password_hash = ? WHERE id = ?", (new_hash, row["id"]),
                )

        user = User(id=row["id"], email=row["email"], display_name=row["display_name"])
        return await self._start_session(user)

    async def _start_session(self, user: User) -> tuple[User, str]:
        token = f"ses-{uuid.uuid4().hex}"
        now = datetime.now(timezone.utc)
        expires = now + timedelta(seconds=settings.session_ttl_seconds)
        async with self._store.transaction():
            await self._store.execute(
                "INSERT INTO sessions (token_hash, user_id, created_at, expires_at) VALUES (?, ?, ?, ?)",
                (hash_token(token), user.id, now.isoformat(), expires.isoformat()),
            )
        self._notify(user)
        return user, token

    async def sign_out(self, token: str) -> None:
        async with self._store.transaction():
            await self._store.execute(
                "DELETE FROM sessions WHERE token_hash = ?", (hash_token(token),),
            )
        self._notify(None)

    async def current_user(self, token: str) -> User | None:
        now = datetime.now(timezone.utc).isoformat()
        async with self._store.transaction():
            cursor = await self._store.execute(
                """SELECT u.id, u.email, u.display_name
                   FROM sessions s JOIN users u ON s.user_id = u.id
                   WHERE s.token_hash = ? AND s.expires_at > ?""",
                (hash_token(token), now),
            )
            row = await cursor.fetchone()
        if not row:
            return None
        return User(id=row["id"], email=row["email"], display_name=row["display_name"])


_identity: IdentityGateway | None = None


def init_identity(store: DocumentStore) -> IdentityGateway:
    global _identity
    _identity = IdentityGateway(store)
    return _identity


def get_identity() -> IdentityGateway:
    if _identity is None:
        raise RuntimeError("Identity gateway not initialized")
    return _identity


def bearer_token(request: Request) -> str:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")
    return auth[7:]


async def get_current_session(request: Request) -> Session:
    """Resolve the Authorization header into the acting session."""
    user = await get_identity().current_user(bearer_token(request))
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return session_for(user)


async def require_master(session: Session = Depends(get_current_session)) -> Session:
    if not session.is_master:
        logger.warning("Non-master user %s attempted a master action", session.user_id)
        raise HTTPException(status_code=403, detail="Only the master can perform this action")
    return session
