"""
Order service — checkout, order history and admin status updates.

Pricing rules:
  - items price = sum(unit price x quantity)
  - shipping is free at or above the threshold, otherwise a flat fee
  - tax is a flat rate on the items price
All amounts are rounded half-up to cents.
"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from db_models import Order, OrderItem, Product
from domain.enums import OrderStatus, UserRole
from domain.errors import NotFoundError, PermissionDeniedError, ValidationError
from services import catalog_service

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_order_totals(lines: list[tuple[float, int]]) -> dict[str, float]:
    """
    Compute order totals from (unit_price, quantity) pairs.

    >>> compute_order_totals([(20.0, 2)])
    {'items_price': 40.0, 'shipping_price': 9.99, 'tax_price': 3.2, 'total_price': 53.19}
    """
    items = sum((Decimal(str(price)) * qty for price, qty in lines), Decimal("0"))
    threshold = Decimal(str(settings.free_shipping_threshold))
    shipping = Decimal("0") if items >= threshold else Decimal(str(settings.flat_shipping_price))
    tax = items * Decimal(str(settings.tax_rate))

    items, shipping, tax = _money(items), _money(shipping), _money(tax)
    return {
        "items_price": float(items),
        "shipping_price": float(shipping),
        "tax_price": float(tax),
        "total_price": float(items + shipping + tax),
    }


async def _load_order(db: AsyncSession, order_id: int) -> Order | None:
    res = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def create_order(
    db: AsyncSession,
    *,
    user_id: int,
    items: list[dict],
    shipping_address: dict[str, Any],
    payment_method: str,
) -> Order:
    """
    Validate stock, snapshot line items, price the order and reserve stock.

    items: [{product:int, quantity:int}]
    Raises ValidationError naming the first unavailable product.
    """
    if not items:
        raise ValidationError("Order must contain at least one item")

    # Repeated lines for one product are merged so stock covers their sum
    requested: dict[int, int] = {}
    for item in items:
        pid = int(item["product"])
        requested[pid] = requested.get(pid, 0) + int(item["quantity"])

    order_lines: list[tuple[Product, int]] = []
    for pid, qty in requested.items():
        product = await db.get(Product, pid)
        if not product or not product.is_active:
            raise ValidationError(f"Product {pid} not found or inactive")
        if product.stock_count < qty:
            raise ValidationError(f"Insufficient stock for {product.name}")
        order_lines.append((product, qty))

    totals = compute_order_totals([(p.price, q) for p, q in order_lines])

    order = Order(
        user_id=user_id,
        shipping_address=shipping_address,
        payment_method=payment_method,
        status=OrderStatus.PENDING.value,
        is_paid=False,
        is_delivered=False,
        items=[
            OrderItem(
                product_id=p.id,
                name=p.name,
                price=p.price,
                quantity=q,
                image=p.images[0] if p.images else None,
            )
            for p, q in order_lines
        ],
        **totals,
    )
    db.add(order)
    await db.flush()

    for product, qty in order_lines:
        await catalog_service.adjust_stock(db, product=product, delta=-qty)

    logger.info(f"Order #{order.id} created for user #{user_id}: total {totals['total_price']}")
    return await _load_order(db, order.id)


async def get_order(db: AsyncSession, *, order_id: int) -> Order:
    order = await _load_order(db, order_id)
    if not order:
        raise NotFoundError("Order", str(order_id))
    return order


async def get_order_for_user(db: AsyncSession, *, order_id: int, user_id: int, role: str) -> Order:
    """Owners and admins may view an order; everyone else gets 403."""
    order = await get_order(db, order_id=order_id)
    if order.user_id != user_id and role != UserRole.ADMIN.value:
        raise PermissionDeniedError("Access denied")
    return order


async def get_owned_order(db: AsyncSession, *, order_id: int, user_id: int) -> Order:
    """Order must exist and belong to the caller (payment endpoints)."""
    order = await _load_order(db, order_id)
    if not order or order.user_id != user_id:
        raise PermissionDeniedError("Order not found or access denied")
    return order


async def list_user_orders(
    db: AsyncSession,
    *,
    user_id: int,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[Order], int]:
    total_res = await db.execute(select(func.count(Order.id)).where(Order.user_id == user_id))
    res = await db.execute(
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(res.scalars().all()), total_res.scalar_one()


async def list_all_orders(
    db: AsyncSession,
    *,
    status: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Order], int]:
    filters = []
    if status:
        filters.append(Order.status == status)
    total_res = await db.execute(select(func.count(Order.id)).where(*filters))
    res = await db.execute(
        select(Order)
        .where(*filters)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(res.scalars().all()), total_res.scalar_one()


async def update_status(
    db: AsyncSession,
    *,
    order_id: int,
    status: str,
    tracking_number: str | None = None,
) -> Order:
    """
    Admin status assignment. Any status may follow any other; delivering
    an order also stamps is_delivered / delivered_at.
    """
    order = await get_order(db, order_id=order_id)

    order.status = status
    if tracking_number:
        order.tracking_number = tracking_number
    if status == OrderStatus.DELIVERED.value:
        order.is_delivered = True
        order.delivered_at = datetime.utcnow()

    order.updated_at = datetime.utcnow()
    await db.flush()
    logger.info(f"Order #{order.id} status -> {status}")
    return await _load_order(db, order.id)


async def mark_paid(
    db: AsyncSession,
    *,
    order: Order,
    payment_result: dict[str, Any] | None = None,
) -> Order:
    """Record a successful payment and move the order to processing."""
    now = datetime.utcnow()
    order.is_paid = True
    order.paid_at = now
    if payment_result is not None:
        order.payment_result = payment_result
    order.status = OrderStatus.PROCESSING.value
    order.updated_at = now
    await db.flush()
    return order


async def order_stats(db: AsyncSession) -> dict[str, Any]:
    """Order count, revenue (cancelled orders excluded) and per-status counts."""
    total_res = await db.execute(select(func.count(Order.id)))
    revenue_res = await db.execute(
        select(func.coalesce(func.sum(Order.total_price), 0.0)).where(
            Order.status != OrderStatus.CANCELLED.value
        )
    )
    by_status_res = await db.execute(select(Order.status, func.count(Order.id)).group_by(Order.status))

    by_status = {s.value: 0 for s in OrderStatus}
    by_status.update({status: n for status, n in by_status_res.all()})

    return {
        "totalOrders": total_res.scalar_one(),
        "totalRevenue": float(_money(Decimal(str(revenue_res.scalar_one())))),
        "ordersByStatus": by_status,
    }
