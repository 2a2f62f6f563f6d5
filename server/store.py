"""Document store gateway: JSON documents in SQLite, using aiosqlite.

Documents live in named collections and are addressed by id. Queries
filter and order on top-level (or dotted) JSON fields through SQLite's
JSON1 functions.

All access goes through one connection guarded by an asyncio lock. A
``transaction()`` block holds the lock for its whole body and commits or
rolls back as a unit, so read-then-write sequences run atomically.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import sqlite3
import uuid
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import aiosqlite

from realm.errors import NotFoundError, TransientStoreError

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    id TEXT NOT NULL,
    data TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    PRIMARY KEY (collection, id)
);

CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    display_name TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS sessions (
    token_hash TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id),
    created_at TEXT NOT NULL,
    expires_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_documents_collection ON documents(collection);
CREATE INDEX IF NOT EXISTS idx_sessions_user ON sessions(user_id);
"""

# Collections used by the service layer
PROFILES = "profiles"
CHARACTERS = "characters"
MISSIONS = "missions"
TEAMS = "teams"
SHOP_ITEMS = "shopItems"
AGENTS = "agents"
RECRUITED_AGENTS = "recruitedAgents"

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")

_COMPARISONS = {"==": "=", "!=": "!=", "<": "<", "<=": "<=", ">": ">", ">=": ">="}

_in_transaction: ContextVar[bool] = ContextVar("in_transaction", default=False)


@dataclass(frozen=True)
class Filter:
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in _COMPARISONS and self.op != "array-contains":
            raise ValueError(f"Unsupported filter operator: {self.op!r}")


def _json_path(field: str) -> str:
    if not _FIELD_RE.match(field):
        raise ValueError(f"Invalid document field name: {field!r}")
    return f"$.{field}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DocumentStore:
    """Collections of JSON documents on a single aiosqlite connection."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn
        self._lock = asyncio.Lock()

    @property
    def connection(self) -> aiosqlite.Connection:
        return self._conn

    async def execute(self, sql: str, params: Iterable[Any] = ()) -> aiosqlite.Cursor:
        """Run raw SQL, translating driver failures into TransientStoreError."""
        try:
            return await self._conn.execute(sql, tuple(params))
        except sqlite3.Error as exc:
            raise TransientStoreError(f"Document store error: {exc}") from exc

    async def _commit(self) -> None:
        try:
            await self._conn.commit()
        except sqlite3.Error as exc:
            raise TransientStoreError(f"Document store commit failed: {exc}") from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[DocumentStore]:
        """Run the body as one atomic unit. Nested blocks join the outer one."""
        if _in_transaction.get():
            yield self
            return
        async with self._lock:
            token = _in_transaction.set(True)
            try:
                yield self
            except BaseException:
                await self._conn.rollback()
                raise
            else:
                await self._commit()
            finally:
                _in_transaction.reset(token)

    # --- CRUD ---

    async def create(self, collection: str, data: dict) -> str:
        """Insert a new document and return its id (minted when absent)."""
        doc_id = data.get("id") or uuid.uuid4().hex
        doc = {**data, "id": doc_id}
        now = _now()
        async with self.transaction():
            await self.execute(
                "INSERT INTO documents (collection, id, data, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (collection, doc_id, json.dumps(doc), now, now),
            )
        return doc_id

    async def set(self, collection: str, doc_id: str, data: dict) -> None:
        """Create or replace the document stored under ``doc_id``."""
        doc = {**data, "id": doc_id}
        now = _now()
        async with self.transaction():
            await self.execute(
                """INSERT INTO documents (collection, id, data, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT(collection, id) DO UPDATE
                   SET data = excluded.data, updated_at = excluded.updated_at""",
                (collection, doc_id, json.dumps(doc), now, now),
            )

    async def get(self, collection: str, doc_id: str) -> dict | None:
        async with self.transaction():
            cursor = await self.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            )
            row = await cursor.fetchone()
        if not row:
            return None
        return json.loads(row["data"])

    async def update(self, collection: str, doc_id: str, fields: dict) -> dict:
        """Shallow-merge ``fields`` into an existing document; returns the result."""
        async with self.transaction():
            current = await self.get(collection, doc_id)
            if current is None:
                raise NotFoundError(f"{collection}/{doc_id} not found")
            merged = {**current, **fields, "id": doc_id}
            await self.execute(
                "UPDATE documents SET data = ?, updated_at = ? WHERE collection = ? AND id = ?",
                (json.dumps(merged), _now(), collection, doc_id),
            )
        return merged

    async def delete(self, collection: str, doc_id: str) -> None:
        async with self.transaction():
            await self.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            )

    async def query(
        self,
        collection: str,
        filters: Iterable[Filter] = (),
        order_by: Iterable[tuple[str, str]] = (),
        limit: int | None = None,
    ) -> list[dict]:
        """Documents matching every filter, ordered, optionally limited.

        Ties in the ordering keep insertion order.
        """
        where = ["collection = ?"]
        params: list[Any] = [collection]
        for f in filters:
            path = _json_path(f.field)
            if f.op == "array-contains":
                where.append(
                    "EXISTS (SELECT 1 FROM json_each(documents.data, ?) AS e WHERE e.value = ?)"
                )
            else:
                where.append(f"json_extract(data, ?) {_COMPARISONS[f.op]} ?")
            params.extend([path, f.value])

        order = []
        for field, direction in order_by:
            direction = direction.lower()
            if direction not in ("asc", "desc"):
                raise ValueError(f"Invalid sort direction: {direction!r}")
            order.append(f"json_extract(data, ?) {direction.upper()}")
            params.append(_json_path(field))
        order.append("rowid ASC")

        sql = "SELECT data FROM documents WHERE " + " AND ".join(where)
        sql += " ORDER BY " + ", ".join(order)
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        async with self.transaction():
            cursor = await self.execute(sql, params)
            rows = await cursor.fetchall()
        return [json.loads(r["data"]) for r in rows]


_store: DocumentStore | None = None


async def init_store(db_path: str = "cronicas.db") -> DocumentStore:
    global _store
    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await conn.executescript(SCHEMA)
    await conn.commit()
    _store = DocumentStore(conn)
    logger.info("Document store ready at %s", db_path)
    return _store


async def get_store() -> DocumentStore:
    if _store is None:
        raise RuntimeError("Document store not initialized")
    return _store


async def close_store() -> None:
    global _store
    if _store:
        await _store.connection.close()
        _store = None
