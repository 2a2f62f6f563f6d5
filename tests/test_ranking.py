"""Tests for the leaderboards."""

from __future__ import annotations

import pytest

from realm.models import Session
from server import ranking
from server.config import settings
from server.profiles import profiles


async def _players(master, rows):
    for i, (name, char_class, kills, deaths, experience) in enumerate(rows):
        session = Session(user_id=f"u{i}", email=f"u{i}@example.com")
        await profiles.create(session, {"username": name, "char_class": char_class})
        await profiles.master_update(master, session.user_id, {
            "creature_kills": kills, "deaths": deaths, "experience": experience,
        })


ROWS = [
    ("Ana", "Ocultista", 3, 5, 50),
    ("Bia", "Combatente", 12, 1, 420),
    ("Caio", "Combatente", 7, 2, 180),
    ("Duda", "Especialista", 0, 9, 900),
]


@pytest.mark.asyncio
async def test_rank_by_kills(store, master):
    await _players(master, ROWS)
    entries = await ranking.rank_by_kills()
    assert [e.username for e in entries] == ["Bia", "Caio", "Ana", "Duda"]
    assert [e.rank for e in entries] == [1, 2, 3, 4]
    kills = [e.creature_kills for e in entries]
    assert kills == sorted(kills, reverse=True)


@pytest.mark.asyncio
async def test_rank_limit(store, master):
    await _players(master, ROWS)
    entries = await ranking.rank_by_kills(limit=2)
    assert len(entries) == 2
    assert [e.rank for e in entries] == [1, 2]


@pytest.mark.asyncio
async def test_limit_capped(store, master):
    settings.max_ranking_limit = 3
    try:
        await _players(master, ROWS)
        assert len(await ranking.rank_by_deaths(limit=50)) == 3
    finally:
        settings.max_ranking_limit = 100


@pytest.mark.asyncio
async def test_rank_by_deaths_and_level(store, master):
    await _players(master, ROWS)
    assert [e.username for e in await ranking.rank_by_deaths()] == ["Duda", "Ana", "Caio", "Bia"]
    by_level = await ranking.rank_by_level()
    assert [e.username for e in by_level] == ["Duda", "Bia", "Caio", "Ana"]
    assert by_level[0].level == 10


@pytest.mark.asyncio
async def test_rank_by_class(store, master):
    await _players(master, ROWS)
    entries = await ranking.rank_by_class("Combatente")
    assert [e.username for e in entries] == ["Bia", "Caio"]
    assert [e.rank for e in entries] == [1, 2]


@pytest.mark.asyncio
async def test_ties_rank_by_position(store, master):
    await _players(master, [("X", "Ocultista", 4, 0, 0), ("Y", "Ocultista", 4, 0, 0)])
    entries = await ranking.rank_by_kills()
    assert [e.rank for e in entries] == [1, 2]


@pytest.mark.asyncio
async def test_find_player_rank(store, master):
    await _players(master, ROWS)
    entry = await ranking.find_player_rank("ana")
    assert entry.rank == 3
    assert entry.username == "Ana"
    assert await ranking.find_player_rank("ninguém") is None


@pytest.mark.asyncio
async def test_empty_rankings(store):
    assert await ranking.rank_by_kills() == []
