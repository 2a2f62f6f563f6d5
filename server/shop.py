"""Shop catalog management and item purchases."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from realm.errors import (
    InsufficientFundsError,
    InvalidRequestError,
    NotFoundError,
    OutOfStockError,
    PermissionDeniedError,
)
from realm.models import ITEM_RARITY_ORDER, Item, Session, ShopItem, utc_now
from realm.tables import DEFAULT_SHOP_ITEMS
from server.config import settings
from server.profiles import profiles
from server.store import PROFILES, SHOP_ITEMS, get_store

logger = logging.getLogger(__name__)


@dataclass
class Purchase:
    item: Item
    quantity: int
    total_price: int
    gold_remaining: int
    stock_remaining: int


def _verify_master(session: Session) -> None:
    if not session.is_master:
        logger.warning("User %s denied shop catalog change", session.user_id)
        raise PermissionDeniedError("Only the master can manage the shop")


def _validated(data: dict) -> ShopItem:
    try:
        return ShopItem.model_validate(data)
    except ValidationError as exc:
        raise InvalidRequestError(str(exc)) from exc


# --- Catalog ---


async def list_shop_items() -> list[ShopItem]:
    """The catalog, most common first, then cheapest first."""
    store = await get_store()
    items = [ShopItem.model_validate(d) for d in await store.query(SHOP_ITEMS)]
    return sorted(items, key=lambda i: (ITEM_RARITY_ORDER[i.rarity], i.price))


async def get_shop_item(item_id: str) -> ShopItem | None:
    store = await get_store()
    doc = await store.get(SHOP_ITEMS, item_id)
    return ShopItem.model_validate(doc) if doc else None


async def _require_item(item_id: str) -> ShopItem:
    item = await get_shop_item(item_id)
    if item is None:
        raise NotFoundError("Shop item not found")
    return item


async def create_shop_item(session: Session, fields: dict) -> ShopItem:
    _verify_master(session)
    item = _validated({k: v for k, v in fields.items() if v is not None})
    store = await get_store()
    await store.create(SHOP_ITEMS, item.model_dump(mode="json"))
    logger.info("Shop item %s (%s) added by %s", item.id, item.name, session.user_id)
    return item


async def update_shop_item(session: Session, item_id: str, fields: dict) -> ShopItem:
    _verify_master(session)
    if "id" in fields:
        raise InvalidRequestError("Cannot change a shop item's id")
    store = await get_store()
    async with store.transaction():
        item = await _require_item(item_id)
        updated = _validated({**item.model_dump(mode="json"), **fields})
        await store.set(SHOP_ITEMS, item_id, updated.model_dump(mode="json"))
    return updated


async def delete_shop_item(session: Session, item_id: str) -> None:
    _verify_master(session)
    store = await get_store()
    async with store.transaction():
        await _require_item(item_id)
        await store.delete(SHOP_ITEMS, item_id)
    logger.info("Shop item %s removed by %s", item_id, session.user_id)


async def restock(session: Session, item_id: str, amount: int) -> ShopItem:
    _verify_master(session)
    if amount < 1:
        raise InvalidRequestError("Restock amount must be at least 1")
    store = await get_store()
    async with store.transaction():
        item = await _require_item(item_id)
        doc = await store.update(SHOP_ITEMS, item_id, {"stock": item.stock + amount})
    return ShopItem.model_validate(doc)


async def seed_shop_catalog(stock: int | None = None) -> int:
    """Add any built-in catalog items that are missing. Returns how many were added."""
    stock = settings.default_shop_stock if stock is None else stock
    store = await get_store()
    created = 0
    async with store.transaction():
        for item in DEFAULT_SHOP_ITEMS:
            if await store.get(SHOP_ITEMS, item.id) is None:
                await store.set(
                    SHOP_ITEMS, item.id,
                    item.model_copy(update={"stock": stock}).model_dump(mode="json"),
                )
                created += 1
    if created:
        logger.info("Seeded %d shop items", created)
    return created


# --- Purchases ---


async def buy_item(
    session: Session,
    shop_item_id: str,
    quantity: int = 1,
    profile_id: str | None = None,
) -> Purchase:
    """Buy ``quantity`` units for a profile (the buyer's own by default).

    Items matching an inventory entry by name, type and rarity stack onto
    it; otherwise a new entry with its own id is appended. Gold, inventory
    and stock change together or not at all.
    """
    if quantity < 1:
        raise InvalidRequestError("Quantity must be at least 1")
    profile_id = profile_id or session.user_id

    store = await get_store()
    async with store.transaction():
        item = await _require_item(shop_item_id)
        if item.stock < quantity:
            raise OutOfStockError(
                f"Only {item.stock} of {item.name!r} left in stock"
            )

        profile = await profiles.require(profile_id)
        if profile.user_id != session.user_id and not session.is_master:
            raise PermissionDeniedError("You can only buy for your own profile")

        total = item.price * quantity
        if profile.gold < total:
            raise InsufficientFundsError(total - profile.gold)

        inventory = list(profile.inventory)
        for entry in inventory:
            if entry.stacks_with(item):
                entry.quantity += quantity
                bought = entry
                break
        else:
            bought = item.to_inventory_item(quantity)
            inventory.append(bought)

        gold_remaining = profile.gold - total
        stock_remaining = item.stock - quantity
        await store.update(PROFILES, profile_id, {
            "gold": gold_remaining,
            "inventory": [i.model_dump(mode="json") for i in inventory],
            "updated_at": utc_now(),
        })
        await store.update(SHOP_ITEMS, shop_item_id, {"stock": stock_remaining})

    logger.info(
        "Profile %s bought %d x %s for %d gold",
        profile_id, quantity, item.name, total,
    )
    return Purchase(
        item=bought,
        quantity=quantity,
        total_price=total,
        gold_remaining=gold_remaining,
        stock_remaining=stock_remaining,
    )
