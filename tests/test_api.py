"""HTTP tests: profile setup, shop, missions, teams, ranking and error mapping."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.conftest import auth_header, signup


async def _setup_profile(client: AsyncClient, account: dict, username: str = "Arthur") -> dict:
    resp = await client.post(
        "/profiles",
        json={"username": username, "char_class": "Combatente"},
        headers=auth_header(account["token"]),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_profile_setup_and_me(client: AsyncClient, player_account: dict):
    profile = await _setup_profile(client, player_account)
    assert profile["id"] == player_account["user_id"]
    assert profile["gold"] == 100

    resp = await client.get("/profiles/me", headers=auth_header(player_account["token"]))
    assert resp.status_code == 200
    assert resp.json()["username"] == "Arthur"

    resp = await client.post(
        "/profiles",
        json={"username": "De novo", "char_class": "Combatente"},
        headers=auth_header(player_account["token"]),
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_profile_validation_error(client: AsyncClient, player_account: dict):
    resp = await client.post(
        "/profiles",
        json={"username": "", "char_class": "Combatente", "strength": 30},
        headers=auth_header(player_account["token"]),
    )
    assert resp.status_code == 422
    fields = [e["field"] for e in resp.json()["detail"]]
    assert any("username" in f for f in fields)
    assert any("strength" in f for f in fields)


@pytest.mark.asyncio
async def test_self_edit_cannot_touch_gold(client: AsyncClient, player_account: dict):
    await _setup_profile(client, player_account)
    resp = await client.patch(
        f"/profiles/{player_account['user_id']}",
        json={"gold": 99999},
        headers=auth_header(player_account["token"]),
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_master_routes_require_master(client: AsyncClient, player_account: dict, master_account: dict):
    await _setup_profile(client, player_account)
    pid = player_account["user_id"]

    resp = await client.patch(f"/master/profiles/{pid}", json={"gold": 500},
                              headers=auth_header(player_account["token"]))
    assert resp.status_code == 403

    resp = await client.patch(f"/master/profiles/{pid}", json={"gold": 500, "experience": 250},
                              headers=auth_header(master_account["token"]))
    assert resp.status_code == 200
    assert resp.json()["gold"] == 500
    assert resp.json()["level"] == 3

    resp = await client.get("/profiles", headers=auth_header(master_account["token"]))
    assert resp.status_code == 200
    assert len(resp.json()) == 1


@pytest.mark.asyncio
async def test_kills_route(client: AsyncClient, player_account: dict):
    await _setup_profile(client, player_account)
    resp = await client.post(
        f"/profiles/{player_account['user_id']}/kills",
        json={"creatures_killed": 1, "experience_gained": 250, "loot_gold": 5},
        headers=auth_header(player_account["token"]),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["level"] == 3
    assert body["creature_kills"] == 1
    assert body["gold"] == 105


@pytest.mark.asyncio
async def test_buy_route_and_insufficient_funds(client: AsyncClient, player_account: dict, master_account: dict):
    await _setup_profile(client, player_account)
    resp = await client.post(
        "/shop/items",
        json={"name": "Armadura de Placas", "type": "armor", "rarity": "rare", "price": 60, "stock": 3},
        headers=auth_header(master_account["token"]),
    )
    assert resp.status_code == 201
    item_id = resp.json()["id"]

    resp = await client.post(f"/shop/items/{item_id}/buy", json={"quantity": 1},
                             headers=auth_header(player_account["token"]))
    assert resp.status_code == 200
    assert resp.json()["gold_remaining"] == 40
    assert resp.json()["stock_remaining"] == 2

    resp = await client.post(f"/shop/items/{item_id}/buy", json={"quantity": 1},
                             headers=auth_header(player_account["token"]))
    assert resp.status_code == 402
    assert resp.json()["shortfall"] == 20


@pytest.mark.asyncio
async def test_shop_create_requires_master(client: AsyncClient, player_account: dict):
    resp = await client.post(
        "/shop/items", json={"name": "Falsa", "price": 1},
        headers=auth_header(player_account["token"]),
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_buy_missing_item(client: AsyncClient, player_account: dict):
    resp = await client.post("/shop/items/nope/buy", json={},
                             headers=auth_header(player_account["token"]))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_recruit_route(client: AsyncClient, player_account: dict, master_account: dict):
    await _setup_profile(client, player_account)
    resp = await client.post("/agents", json={"name": "Rastreador", "price": 30, "rarity": "rare"},
                             headers=auth_header(master_account["token"]))
    assert resp.status_code == 201
    agent_id = resp.json()["id"]

    resp = await client.post(f"/agents/{agent_id}/recruit", json={},
                             headers=auth_header(player_account["token"]))
    assert resp.status_code == 201

    resp = await client.get("/agents/recruited", headers=auth_header(player_account["token"]))
    assert [r["agent_id"] for r in resp.json()] == [agent_id]


@pytest.mark.asyncio
async def test_mission_flow(client: AsyncClient, player_account: dict, master_account: dict):
    await _setup_profile(client, player_account)
    resp = await client.post(
        "/missions",
        json={"title": "Ritual na igreja", "difficulty": "medium",
              "reward": {"experience": 250, "gold": 10}},
        headers=auth_header(master_account["token"]),
    )
    assert resp.status_code == 201
    mission_id = resp.json()["id"]
    player = auth_header(player_account["token"])

    resp = await client.post(f"/missions/{mission_id}/complete", headers=player)
    assert resp.status_code == 400

    resp = await client.post(f"/missions/{mission_id}/accept", headers=player)
    assert resp.status_code == 200
    resp = await client.post(f"/missions/{mission_id}/accept", headers=player)
    assert resp.status_code == 409

    resp = await client.get("/missions/mine", headers=player)
    assert [m["id"] for m in resp.json()] == [mission_id]

    resp = await client.post(f"/missions/{mission_id}/complete", headers=player)
    assert resp.status_code == 200
    body = resp.json()
    assert body["reward_granted"] is True
    assert body["profile"]["level"] == 3
    assert body["profile"]["gold"] == 110

    resp = await client.post(f"/missions/{mission_id}/complete", headers=player)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_team_flow(client: AsyncClient, player_account: dict):
    leader = auth_header(player_account["token"])
    second = auth_header((await signup(client, "segundo@example.com"))["token"])
    third = auth_header((await signup(client, "terceiro@example.com"))["token"])

    resp = await client.post("/teams", json={"name": "Dupla", "username": "Líder", "max_members": 2},
                             headers=leader)
    assert resp.status_code == 201
    team_id = resp.json()["id"]

    resp = await client.post(f"/teams/{team_id}/join", json={"username": "A"}, headers=second)
    assert resp.status_code == 200
    assert len(resp.json()["members"]) == 2

    resp = await client.post(f"/teams/{team_id}/join", json={"username": "B"}, headers=third)
    assert resp.status_code == 400

    resp = await client.post(f"/teams/{team_id}/leave", headers=leader)
    assert resp.status_code == 400

    resp = await client.get("/teams/mine", headers=second)
    assert resp.json()["id"] == team_id

    resp = await client.delete(f"/teams/{team_id}", headers=second)
    assert resp.status_code == 403
    resp = await client.delete(f"/teams/{team_id}", headers=leader)
    assert resp.status_code == 200

    resp = await client.get("/teams/mine", headers=second)
    assert resp.json() is None


@pytest.mark.asyncio
async def test_ranking_routes(client: AsyncClient, player_account: dict):
    await _setup_profile(client, player_account, username="Arthur")
    await client.post(
        f"/profiles/{player_account['user_id']}/kills",
        json={"creatures_killed": 3},
        headers=auth_header(player_account["token"]),
    )
    resp = await client.get("/ranking/kills")
    assert resp.status_code == 200
    assert resp.json()[0]["username"] == "Arthur"
    assert resp.json()[0]["rank"] == 1
    assert resp.json()[0]["creature_kills"] == 3

    resp = await client.get("/ranking/search", params={"username": "arthur"})
    assert resp.status_code == 200
    assert resp.json()["rank"] == 1

    resp = await client.get("/ranking/search", params={"username": "ninguém"})
    assert resp.status_code == 404

    resp = await client.get("/ranking/class/Combatente")
    assert len(resp.json()) == 1
