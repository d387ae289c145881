"""
Order endpoints — checkout, order history and admin fulfilment.

`/orders/admin/all` is declared before `/orders/{id}`.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from db_models import User
from deps import Pagination, page_params, require_admin, require_user
from domain.constants import ADMIN_ORDERS_DEFAULT_LIMIT, ORDERS_DEFAULT_LIMIT
from domain.enums import OrderStatus
from domain.responses import paginated_response, success_response
from models import OrderCreateRequest, OrderStatusUpdateRequest, order_payload
from services import cart_service, email_service, order_service
from utils.validators import validated_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    request: OrderCreateRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    order = await order_service.create_order(
        db,
        user_id=user.id,
        items=[item.model_dump() for item in request.items],
        shipping_address=request.shipping_address.model_dump(by_alias=True, exclude_none=True, mode="json"),
        payment_method=request.payment_method.value,
    )
    await cart_service.clear(
        db, user_id=user.id, product_ids=[item.product for item in request.items]
    )
    await db.commit()

    # Email is best-effort; the order already exists.
    try:
        await email_service.send_order_confirmation_email(order, request.shipping_address.email)
    except Exception as e:
        logger.error(f"Confirmation email for order #{order.id} failed: {e}", exc_info=True)

    return success_response(data={"order": order_payload(order)}, message="Order created successfully")


@router.get("")
async def list_my_orders(
    paging: Pagination = Depends(page_params(ORDERS_DEFAULT_LIMIT)),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    orders, total = await order_service.list_user_orders(
        db, user_id=user.id, limit=paging["limit"], offset=paging["offset"]
    )
    return paginated_response(
        [order_payload(o) for o in orders],
        key="orders",
        page=paging["page"],
        limit=paging["limit"],
        total=total,
        total_key="totalOrders",
    )


@router.get("/admin/all", dependencies=[Depends(require_admin)])
async def list_all_orders(
    paging: Pagination = Depends(page_params(ADMIN_ORDERS_DEFAULT_LIMIT)),
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    orders, total = await order_service.list_all_orders(
        db,
        status=status_filter.value if status_filter else None,
        limit=paging["limit"],
        offset=paging["offset"],
    )
    return paginated_response(
        [order_payload(o) for o in orders],
        key="orders",
        page=paging["page"],
        limit=paging["limit"],
        total=total,
        total_key="totalOrders",
    )


@router.get("/{id}")
async def get_order(
    order_id: int = Depends(validated_id),
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    order = await order_service.get_order_for_user(db, order_id=order_id, user_id=user.id, role=user.role)
    return success_response(data={"order": order_payload(order)})


@router.put("/{id}/status", dependencies=[Depends(require_admin)])
async def update_order_status(
    request: OrderStatusUpdateRequest,
    order_id: int = Depends(validated_id),
    db: AsyncSession = Depends(get_db),
):
    order = await order_service.update_status(
        db,
        order_id=order_id,
        status=request.status.value,
        tracking_number=request.tracking_number,
    )
    await db.commit()
    return success_response(data={"order": order_payload(order)}, message="Order status updated")
