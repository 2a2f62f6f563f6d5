"""Shop routes: catalog browsing, purchases and master catalog management."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from realm.errors import NotFoundError
from realm.models import Session, ShopItem
from server import shop
from server.auth import get_current_session, require_master
from server.models import (
    BuyRequest,
    PurchaseResponse,
    RestockRequest,
    ShopItemCreateRequest,
    ShopItemUpdateRequest,
)

router = APIRouter()


@router.get("/shop/items", response_model=list[ShopItem])
async def list_items(session: Session = Depends(get_current_session)):
    return await shop.list_shop_items()


@router.get("/shop/items/{item_id}", response_model=ShopItem)
async def get_item(item_id: str, session: Session = Depends(get_current_session)):
    item = await shop.get_shop_item(item_id)
    if item is None:
        raise NotFoundError("Shop item not found")
    return item


@router.post("/shop/items/{item_id}/buy", response_model=PurchaseResponse)
async def buy(item_id: str, req: BuyRequest, session: Session = Depends(get_current_session)):
    purchase = await shop.buy_item(session, item_id, quantity=req.quantity, profile_id=req.profile_id)
    return PurchaseResponse(
        item=purchase.item,
        quantity=purchase.quantity,
        total_price=purchase.total_price,
        gold_remaining=purchase.gold_remaining,
        stock_remaining=purchase.stock_remaining,
    )


@router.post("/shop/items", response_model=ShopItem, status_code=201)
async def create_item(req: ShopItemCreateRequest, session: Session = Depends(require_master)):
    return await shop.create_shop_item(session, req.model_dump())


@router.patch("/shop/items/{item_id}", response_model=ShopItem)
async def update_item(
    item_id: str,
    req: ShopItemUpdateRequest,
    session: Session = Depends(require_master),
):
    return await shop.update_shop_item(session, item_id, req.model_dump(exclude_unset=True))


@router.post("/shop/items/{item_id}/restock", response_model=ShopItem)
async def restock_item(item_id: str, req: RestockRequest, session: Session = Depends(require_master)):
    return await shop.restock(session, item_id, req.amount)


@router.delete("/shop/items/{item_id}")
async def delete_item(item_id: str, session: Session = Depends(require_master)):
    await shop.delete_shop_item(session, item_id)
    return {"status": "deleted", "id": item_id}
