"""
Cart service — per-user persisted shopping cart.

Cart lines are (product, quantity) pairs. The cart is advisory: prices
are read live from the product and stock is only enforced at checkout.
"""

from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import CartItem, Product
from domain.errors import NotFoundError


async def get_items(db: AsyncSession, *, user_id: int) -> list[CartItem]:
    res = await db.execute(
        select(CartItem)
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.added_at, CartItem.id)
        .execution_options(populate_existing=True)
    )
    return list(res.scalars().all())


async def _get_line(db: AsyncSession, user_id: int, product_id: int) -> CartItem | None:
    res = await db.execute(
        select(CartItem).where(CartItem.user_id == user_id, CartItem.product_id == product_id)
    )
    return res.scalar_one_or_none()


async def add_item(db: AsyncSession, *, user_id: int, product_id: int, quantity: int = 1) -> list[CartItem]:
    """Add a product, or increase its quantity if it is already in the cart."""
    product = await db.get(Product, product_id)
    if not product or not product.is_active:
        raise NotFoundError("Product", str(product_id))

    line = await _get_line(db, user_id, product_id)
    if line:
        line.quantity += quantity
    else:
        db.add(CartItem(user_id=user_id, product_id=product_id, quantity=quantity))
    await db.flush()
    return await get_items(db, user_id=user_id)


async def update_quantity(db: AsyncSession, *, user_id: int, product_id: int, quantity: int) -> list[CartItem]:
    """Set a line's quantity; zero or less removes the line."""
    line = await _get_line(db, user_id, product_id)
    if not line:
        raise NotFoundError("Cart item", str(product_id))

    if quantity <= 0:
        await db.delete(line)
    else:
        line.quantity = quantity
    await db.flush()
    return await get_items(db, user_id=user_id)


async def remove_item(db: AsyncSession, *, user_id: int, product_id: int) -> list[CartItem]:
    line = await _get_line(db, user_id, product_id)
    if line:
        await db.delete(line)
        await db.flush()
    return await get_items(db, user_id=user_id)


async def clear(db: AsyncSession, *, user_id: int, product_ids: list[int] | None = None) -> None:
    """Empty the cart, or only the lines for the given products."""
    stmt = delete(CartItem).where(CartItem.user_id == user_id)
    if product_ids is not None:
        stmt = stmt.where(CartItem.product_id.in_(product_ids))
    await db.execute(stmt)
    await db.flush()


def line_total(item: CartItem) -> Decimal:
    return Decimal(str(item.product.price)) * item.quantity


def get_totals(items: list[CartItem]) -> dict:
    """Total item count (sum of quantities) and total price."""
    total_items = sum(i.quantity for i in items)
    total_price = sum((line_total(i) for i in items), Decimal("0"))
    return {
        "totalItems": total_items,
        "totalPrice": float(total_price.quantize(Decimal("0.01"))),
    }
