"""Tests for the shop: catalog management and purchases."""

from __future__ import annotations

import asyncio

import pytest

from realm.errors import (
    InsufficientFundsError,
    InvalidRequestError,
    NotFoundError,
    OutOfStockError,
    PermissionDeniedError,
    TransientStoreError,
)
from realm.tables import DEFAULT_SHOP_ITEMS
from server import shop
from server.profiles import profiles
from server.store import SHOP_ITEMS
from tests.conftest import make_profile, set_gold


async def _item(master, **fields):
    data = {"name": "Poção de Cura", "type": "consumable", "rarity": "common", "price": 50, "stock": 2}
    return await shop.create_shop_item(master, {**data, **fields})


@pytest.mark.asyncio
async def test_buy_end_to_end(store, player, master):
    item = await _item(master)
    await make_profile(player)
    await set_gold(player.user_id, 120)

    purchase = await shop.buy_item(player, item.id, quantity=2)

    assert purchase.total_price == 100
    assert purchase.gold_remaining == 20
    assert purchase.stock_remaining == 0
    p = await profiles.require(player.user_id)
    assert p.gold == 20
    assert len(p.inventory) == 1
    assert p.inventory[0].quantity == 2
    assert p.inventory[0].id != item.id
    assert (await shop.get_shop_item(item.id)).stock == 0


@pytest.mark.asyncio
async def test_buy_stacks_matching_items(store, player, master):
    item = await _item(master, stock=5)
    await make_profile(player)
    first = await shop.buy_item(player, item.id)
    await shop.buy_item(player, item.id)
    p = await profiles.require(player.user_id)
    assert len(p.inventory) == 1
    assert p.inventory[0].quantity == 2
    assert p.inventory[0].id == first.item.id


@pytest.mark.asyncio
async def test_buy_different_rarity_does_not_stack(store, player, master):
    common = await _item(master, price=10)
    rare = await _item(master, price=10, rarity="rare")
    await make_profile(player)
    await shop.buy_item(player, common.id)
    await shop.buy_item(player, rare.id)
    p = await profiles.require(player.user_id)
    assert [i.rarity.value for i in p.inventory] == ["common", "rare"]


@pytest.mark.asyncio
async def test_buy_insufficient_funds_changes_nothing(store, player, master):
    item = await _item(master, price=80)
    await make_profile(player)
    with pytest.raises(InsufficientFundsError) as exc_info:
        await shop.buy_item(player, item.id, quantity=2)
    assert exc_info.value.shortfall == 60
    p = await profiles.require(player.user_id)
    assert p.gold == 100
    assert p.inventory == []
    assert (await shop.get_shop_item(item.id)).stock == 2


@pytest.mark.asyncio
async def test_buy_out_of_stock(store, player, master):
    item = await _item(master, price=1, stock=1)
    await make_profile(player)
    with pytest.raises(OutOfStockError):
        await shop.buy_item(player, item.id, quantity=2)
    p = await profiles.require(player.user_id)
    assert p.gold == 100
    assert p.inventory == []
    assert (await shop.get_shop_item(item.id)).stock == 1


@pytest.mark.asyncio
async def test_buy_bad_quantity(store, player, master):
    item = await _item(master)
    await make_profile(player)
    with pytest.raises(InvalidRequestError):
        await shop.buy_item(player, item.id, quantity=0)


@pytest.mark.asyncio
async def test_buy_missing_item_or_profile(store, player, master):
    with pytest.raises(NotFoundError):
        await shop.buy_item(player, "nope")
    item = await _item(master)
    with pytest.raises(NotFoundError):
        await shop.buy_item(player, item.id)


@pytest.mark.asyncio
async def test_buy_for_another_profile_denied(store, player, player2, master):
    item = await _item(master)
    await make_profile(player)
    with pytest.raises(PermissionDeniedError):
        await shop.buy_item(player2, item.id, profile_id=player.user_id)


@pytest.mark.asyncio
async def test_catalog_management_requires_master(store, player, master):
    with pytest.raises(PermissionDeniedError):
        await _item(player)
    item = await _item(master)
    with pytest.raises(PermissionDeniedError):
        await shop.update_shop_item(player, item.id, {"price": 1})
    with pytest.raises(PermissionDeniedError):
        await shop.delete_shop_item(player, item.id)


@pytest.mark.asyncio
async def test_update_restock_delete(store, master):
    item = await _item(master)
    updated = await shop.update_shop_item(master, item.id, {"price": 75})
    assert updated.price == 75
    restocked = await shop.restock(master, item.id, 3)
    assert restocked.stock == 5
    await shop.delete_shop_item(master, item.id)
    assert await shop.get_shop_item(item.id) is None


@pytest.mark.asyncio
async def test_update_rejects_negative_price(store, master):
    item = await _item(master)
    with pytest.raises(InvalidRequestError):
        await shop.update_shop_item(master, item.id, {"price": -1})


@pytest.mark.asyncio
async def test_seed_catalog_is_idempotent(store):
    created = await shop.seed_shop_catalog(stock=3)
    assert created == len(DEFAULT_SHOP_ITEMS)
    assert await shop.seed_shop_catalog() == 0
    items = await shop.list_shop_items()
    assert len(items) == len(DEFAULT_SHOP_ITEMS)
    assert all(i.stock == 3 for i in items)


@pytest.mark.asyncio
async def test_concurrent_buys_cannot_oversell(store, player, player2, master):
    item = await _item(master, price=10, stock=1)
    await make_profile(player)
    await make_profile(player2, username="Bia")

    results = await asyncio.gather(
        shop.buy_item(player, item.id),
        shop.buy_item(player2, item.id),
        return_exceptions=True,
    )

    assert sum(isinstance(r, shop.Purchase) for r in results) == 1
    assert sum(isinstance(r, OutOfStockError) for r in results) == 1
    assert (await shop.get_shop_item(item.id)).stock == 0


@pytest.mark.asyncio
async def test_failed_stock_write_rolls_back_purchase(store, player, master, monkeypatch):
    item = await _item(master)
    await make_profile(player)
    real_update = store.update

    async def failing_update(collection, doc_id, fields):
        if collection == SHOP_ITEMS:
            raise TransientStoreError("disk I/O error")
        return await real_update(collection, doc_id, fields)

    monkeypatch.setattr(store, "update", failing_update)
    with pytest.raises(TransientStoreError):
        await shop.buy_item(player, item.id)
    monkeypatch.undo()

    p = await profiles.require(player.user_id)
    assert p.gold == 100
    assert p.inventory == []
    assert (await shop.get_shop_item(item.id)).stock == 2


@pytest.mark.asyncio
async def test_catalog_lists_common_and_cheap_first(store, master):
    await _item(master, name="Lendária", rarity="legendary", price=5)
    await _item(master, name="Comum cara", rarity="common", price=90)
    await _item(master, name="Rara", rarity="rare", price=10)
    await _item(master, name="Comum barata", rarity="common", price=20)
    names = [i.name for i in await shop.list_shop_items()]
    assert names == ["Comum barata", "Comum cara", "Rara", "Lendária"]
