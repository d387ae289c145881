"""
Payment service — Stripe integration.

Handles:
  - payment intent creation (amounts converted to the smallest currency unit)
  - payment intent retrieval for client-side confirmation
  - webhook signature verification

The Stripe SDK is blocking, so every network call goes through run_blocking().
Stripe failures surface as PaymentError (502); an unknown intent id is a
ValidationError (400).
"""

import json
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

import stripe

from config import settings
from domain.errors import PaymentError, ValidationError
from services.async_executor import run_blocking

logger = logging.getLogger(__name__)


class WebhookVerificationError(Exception):
    """Raised when a webhook payload cannot be trusted."""


def _configure() -> None:
    if not settings.stripe_secret_key:
        raise PaymentError("Payments are not configured (Stripe secret key missing)")
    stripe.api_key = settings.stripe_secret_key
    stripe.api_version = settings.stripe_api_version


def to_minor_units(amount: float) -> int:
    """12.345 -> 1235 (round half-up to the nearest cent)."""
    cents = (Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)


async def create_payment_intent(
    *,
    amount: float,
    currency: str = "usd",
    metadata: dict[str, str] | None = None,
) -> dict[str, Any]:
    """
    Create a Stripe payment intent.

    Args:
        amount: Amount in major units (dollars)
        currency: ISO currency code, lower-case
        metadata: Extra data attached to the intent (userId, orderId)

    Returns:
        {id, client_secret, status}
    """
    _configure()
    try:
        intent = await run_blocking(
            stripe.PaymentIntent.create,
            amount=to_minor_units(amount),
            currency=currency.lower(),
            metadata=metadata or {},
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe error creating payment intent: {e}")
        raise PaymentError("Payment provider error while creating payment intent")

    return {
        "id": intent.id,
        "client_secret": intent.client_secret,
        "status": intent.status,
    }


async def retrieve_payment_intent(payment_intent_id: str) -> dict[str, Any]:
    """Get payment intent status and receipt email."""
    _configure()
    try:
        intent = await run_blocking(stripe.PaymentIntent.retrieve, payment_intent_id)
    except stripe.InvalidRequestError as e:
        logger.warning(f"Unknown payment intent {payment_intent_id}: {e}")
        raise ValidationError("Payment intent not found")
    except stripe.StripeError as e:
        logger.error(f"Stripe error retrieving payment intent: {e}")
        raise PaymentError("Payment provider error while retrieving payment intent")

    return {
        "id": intent.id,
        "status": intent.status,
        "amount": intent.amount,
        "currency": intent.currency,
        "receipt_email": getattr(intent, "receipt_email", None),
        "metadata": dict(intent.metadata or {}),
    }


def construct_webhook_event(payload: bytes, signature: str | None) -> dict[str, Any]:
    """
    Verify a Stripe webhook signature and return the event.

    Raises:
        WebhookVerificationError: secret missing, header missing or bad signature
    """
    secret = settings.stripe_webhook_secret
    if not secret:
        raise WebhookVerificationError("Webhook secret not configured")
    if not signature:
        raise WebhookVerificationError("Missing Stripe-Signature header")

    try:
        stripe.Webhook.construct_event(payload, signature, secret)
    except stripe.SignatureVerificationError as e:
        raise WebhookVerificationError(f"Invalid signature: {e}")
    except ValueError as e:
        raise WebhookVerificationError(f"Invalid payload: {e}")

    # Signature checked; work with the plain JSON body from here on
    body = json.loads(payload)
    obj = body.get("data", {}).get("object", {})
    return {
        "id": body.get("id"),
        "type": body.get("type", ""),
        "object": obj,
        "metadata": obj.get("metadata") or {},
    }
