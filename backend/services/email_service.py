"""
Email service — order confirmation emails via a transactional email HTTP API.

The API is Resend-compatible: POST {from, to, subject, html} with a Bearer key.
When no key is configured, sending is skipped (local development).
"""
import html
import logging

import httpx

from config import settings
from db_models import Order

logger = logging.getLogger(__name__)


def render_order_confirmation(order: Order) -> tuple[str, str]:
    """Build (subject, html body) for an order confirmation."""
    address = order.shipping_address or {}
    rows = "".join(
        f"<tr><td>{html.escape(item.name)}</td>"
        f"<td>{item.quantity}</td>"
        f"<td>${item.price * item.quantity:.2f}</td></tr>"
        for item in order.items
    )
    subject = f"Order #{order.id} confirmed"
    body = (
        f"<h1>Thank you for your order, {html.escape(address.get('firstName', ''))}!</h1>"
        f"<p>Order #{order.id} has been received and is {html.escape(order.status)}.</p>"
        f"<table><tr><th>Item</th><th>Qty</th><th>Amount</th></tr>{rows}</table>"
        f"<p>Items: ${order.items_price:.2f}<br>"
        f"Shipping: ${order.shipping_price:.2f}<br>"
        f"Tax: ${order.tax_price:.2f}<br>"
        f"<strong>Total: ${order.total_price:.2f}</strong></p>"
        f"<p>Shipping to: {html.escape(address.get('address', ''))}, "
        f"{html.escape(address.get('city', ''))} {html.escape(address.get('zipCode', ''))}</p>"
    )
    return subject, body


async def send_order_confirmation_email(order: Order, recipient: str) -> bool:
    """
    Send the confirmation for ``order`` to ``recipient``.

    Returns:
        True if the provider accepted the message, False if sending is disabled.

    Raises:
        httpx.HTTPError on transport or provider errors (callers log and continue).
    """
    if not settings.email_api_key:
        logger.info(f"Email disabled; skipping confirmation for order #{order.id}")
        return False

    subject, body = render_order_confirmation(order)
    async with httpx.AsyncClient(timeout=10.0) as client:
        response = await client.post(
            settings.email_api_url,
            headers={"Authorization": f"Bearer {settings.email_api_key}"},
            json={
                "from": settings.email_sender,
                "to": [recipient],
                "subject": subject,
                "html": body,
            },
        )
        response.raise_for_status()

    logger.info(f"Confirmation email sent for order #{order.id}")
    return True
