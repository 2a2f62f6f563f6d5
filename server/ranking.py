"""Leaderboards over the profiles collection.

Rank is the 1-based position in the result set; ties keep store order.
"""

from __future__ import annotations

from realm.models import Profile, RankingEntry
from server.config import settings
from server.store import PROFILES, Filter, get_store


def _limit(limit: int | None) -> int:
    if limit is None:
        return settings.public_ranking_limit
    return max(1, min(limit, settings.max_ranking_limit))


async def _ranked(
    order_field: str,
    limit: int | None,
    filters: list[Filter] | None = None,
) -> list[RankingEntry]:
    store = await get_store()
    docs = await store.query(
        PROFILES,
        filters=filters or [],
        order_by=[(order_field, "desc")],
        limit=_limit(limit),
    )
    return [
        RankingEntry.from_profile(Profile.model_validate(doc), rank)
        for rank, doc in enumerate(docs, start=1)
    ]


async def rank_by_kills(limit: int | None = None) -> list[RankingEntry]:
    return await _ranked("creature_kills", limit)


async def rank_by_deaths(limit: int | None = None) -> list[RankingEntry]:
    return await _ranked("deaths", limit)


async def rank_by_level(limit: int | None = None) -> list[RankingEntry]:
    return await _ranked("level", limit)


async def rank_by_class(char_class: str, limit: int | None = None) -> list[RankingEntry]:
    return await _ranked("creature_kills", limit, [Filter("char_class", "==", char_class)])


async def find_player_rank(username: str) -> RankingEntry | None:
    """Where a player stands in the full kills ordering, past the public cutoff."""
    store = await get_store()
    docs = await store.query(PROFILES, order_by=[("creature_kills", "desc")])
    wanted = username.strip().lower()
    for rank, doc in enumerate(docs, start=1):
        if doc.get("username", "").lower() == wanted:
            return RankingEntry.from_profile(Profile.model_validate(doc), rank)
    return None
