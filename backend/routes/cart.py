"""
Cart endpoints — the authenticated user's persisted shopping cart.

Every mutation answers with the full cart so clients can re-render in one step.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from db_models import CartItem, User
from deps import require_user
from domain.responses import success_response
from models import CartAddRequest, CartQuantityRequest, cart_line_payload
from services import cart_service
from utils.validators import validate_resource_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_payload(items: list[CartItem]) -> dict:
    return {
        "items": [cart_line_payload(i, float(cart_service.line_total(i))) for i in items],
        **cart_service.get_totals(items),
    }


@router.get("")
async def get_cart(user: User = Depends(require_user), db: AsyncSession = Depends(get_db)):
    items = await cart_service.get_items(db, user_id=user.id)
    return success_response(data=_cart_payload(items))


@router.post("/items")
async def add_to_cart(
    request: CartAddRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    items = await cart_service.add_item(
        db, user_id=user.id, product_id=request.product_id, quantity=request.quantity
    )
    await db.commit()
    return success_response(data=_cart_payload(items), message="Item added to cart")


@router.put("/items/{product_id}")
async def update_cart_item(
    product_id: str,
    request: CartQuantityRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    items = await cart_service.update_quantity(
        db,
        user_id=user.id,
        product_id=validate_resource_id(product_id, "product ID"),
        quantity=request.quantity,
    )
    await db.commit()
    return success_response(data=_cart_payload(items), message="Cart updated")


@router.delete("/items/{product_id}")
async def remove_cart_item(
    product_id: str,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    items = await cart_service.remove_item(
        db, user_id=user.id, product_id=validate_resource_id(product_id, "product ID")
    )
    await db.commit()
    return success_response(data=_cart_payload(items), message="Item removed from cart")


@router.delete("")
async def clear_cart(user: User = Depends(require_user), db: AsyncSession = Depends(get_db)):
    await cart_service.clear(db, user_id=user.id)
    await db.commit()
    return success_response(data=_cart_payload([]), message="Cart cleared")
