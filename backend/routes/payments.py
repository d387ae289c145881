"""
Payment endpoints — Stripe payment intents and webhook.

Flow:
  1) POST /payments/create-payment-intent -> {clientSecret, paymentIntentId}
  2) Client confirms the card payment with Stripe.js
  3) POST /payments/confirm-payment        -> marks the order paid
  4) Stripe also calls POST /payments/webhook; a succeeded intent carrying
     an orderId in its metadata marks that order paid as well
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from db_models import User
from deps import require_user
from domain.constants import EVENT_PAYMENT_FAILED, EVENT_PAYMENT_SUCCEEDED, STRIPE_SUCCEEDED
from domain.errors import ValidationError
from domain.responses import success_response
from models import (
    ConfirmPaymentRequest,
    PaymentIntentRequest,
    PaymentIntentResponse,
    order_payload,
    to_payload,
)
from services import order_service, payment_service
from services.payment_service import WebhookVerificationError
from utils.validators import validate_resource_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/create-payment-intent")
async def create_payment_intent(
    request: PaymentIntentRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    if request.order_id is not None:
        await order_service.get_owned_order(db, order_id=request.order_id, user_id=user.id)

    intent = await payment_service.create_payment_intent(
        amount=request.amount,
        currency=request.currency.value,
        metadata={
            "userId": str(user.id),
            "orderId": str(request.order_id) if request.order_id is not None else "",
        },
    )
    logger.info(f"Payment intent {intent['id']} created for user #{user.id}")
    return success_response(
        data=to_payload(
            PaymentIntentResponse(
                client_secret=intent["client_secret"],
                payment_intent_id=intent["id"],
            )
        )
    )


@router.post("/confirm-payment")
async def confirm_payment(
    request: ConfirmPaymentRequest,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    intent = await payment_service.retrieve_payment_intent(request.payment_intent_id)
    if intent["status"] != STRIPE_SUCCEEDED:
        raise ValidationError("Payment not completed")

    order = await order_service.get_owned_order(db, order_id=request.order_id, user_id=user.id)
    order = await order_service.mark_paid(
        db,
        order=order,
        payment_result={
            "id": intent["id"],
            "status": intent["status"],
            "updateTime": datetime.now(timezone.utc).isoformat(),
            "emailAddress": intent["receipt_email"] or user.email,
        },
    )
    await db.commit()
    logger.info(f"Order #{order.id} paid via {intent['id']}")
    return success_response(data={"order": order_payload(order)}, message="Payment confirmed")


async def _mark_order_paid_from_event(db: AsyncSession, event: dict) -> None:
    raw_order_id = event["metadata"].get("orderId")
    if not raw_order_id:
        logger.info(f"Payment intent {event['object'].get('id')} succeeded without an orderId")
        return

    try:
        order = await order_service.get_order(
            db, order_id=validate_resource_id(raw_order_id, "order ID")
        )
        await order_service.mark_paid(
            db,
            order=order,
            payment_result={
                "id": event["object"].get("id"),
                "status": event["object"].get("status", STRIPE_SUCCEEDED),
                "updateTime": datetime.now(timezone.utc).isoformat(),
                "emailAddress": event["object"].get("receipt_email"),
            },
        )
        await db.commit()
        logger.info(f"Order #{order.id} marked paid from webhook {event['id']}")
    except Exception as e:
        await db.rollback()
        logger.error(f"Webhook could not update order {raw_order_id}: {e}", exc_info=True)


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None, alias="Stripe-Signature"),
    db: AsyncSession = Depends(get_db),
):
    payload = await request.body()
    try:
        event = payment_service.construct_webhook_event(payload, stripe_signature)
    except WebhookVerificationError as e:
        logger.warning(f"Rejected webhook: {e}")
        raise HTTPException(status_code=400, detail=f"Webhook Error: {e}")

    if event["type"] == EVENT_PAYMENT_SUCCEEDED:
        await _mark_order_paid_from_event(db, event)
    elif event["type"] == EVENT_PAYMENT_FAILED:
        logger.warning(f"Payment failed for intent {event['object'].get('id')}")
    else:
        logger.info(f"Unhandled webhook event type {event['type']}")

    return {"received": True}
