"""Leaderboard routes. Public: no session required."""

from __future__ import annotations

from fastapi import APIRouter, Query

from realm.errors import NotFoundError
from realm.models import RankingEntry
from server import ranking

router = APIRouter()


@router.get("/ranking/kills", response_model=list[RankingEntry])
async def by_kills(limit: int | None = Query(default=None, ge=1)):
    return await ranking.rank_by_kills(limit)


@router.get("/ranking/deaths", response_model=list[RankingEntry])
async def by_deaths(limit: int | None = Query(default=None, ge=1)):
    return await ranking.rank_by_deaths(limit)


@router.get("/ranking/level", response_model=list[RankingEntry])
async def by_level(limit: int | None = Query(default=None, ge=1)):
    return await ranking.rank_by_level(limit)


@router.get("/ranking/class/{char_class}", response_model=list[RankingEntry])
async def by_class(char_class: str, limit: int | None = Query(default=None, ge=1)):
    return await ranking.rank_by_class(char_class, limit)


@router.get("/ranking/search", response_model=RankingEntry)
async def search(username: str = Query(min_length=1, max_length=64)):
    entry = await ranking.find_player_rank(username)
    if entry is None:
        raise NotFoundError(f"No ranked player named {username!r}")
    return entry
