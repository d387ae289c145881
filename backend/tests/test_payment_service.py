"""
Unit tests for the Stripe payment service.

The Stripe SDK is patched (see mock_stripe in conftest); no network calls.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import json

import pytest
import stripe

from config import settings
from domain.errors import PaymentError, ValidationError
from services import payment_service
from services.payment_service import WebhookVerificationError


class TestMinorUnits:

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "amount, cents",
        [(53.19, 5319), (0.5, 50), (12.345, 1235), (19.99, 1999), (100, 10000)],
    )
    def test_to_minor_units(self, amount, cents):
        assert payment_service.to_minor_units(amount) == cents


class TestPaymentIntents:

    @pytest.mark.unit
    async def test_create_sends_cents_and_metadata(self, mock_stripe):
        result = await payment_service.create_payment_intent(
            amount=53.19, currency="USD", metadata={"userId": "1", "orderId": "2"}
        )
        assert result == {
            "id": "pi_test_123",
            "client_secret": "pi_test_123_secret_abc",
            "status": "requires_payment_method",
        }
        mock_stripe["create"].assert_called_once_with(
            amount=5319, currency="usd", metadata={"userId": "1", "orderId": "2"}
        )
        assert stripe.api_key == settings.stripe_secret_key

    @pytest.mark.unit
    async def test_create_wraps_stripe_errors(self, mock_stripe):
        mock_stripe["create"].side_effect = stripe.StripeError("card network down")
        with pytest.raises(PaymentError) as exc_info:
            await payment_service.create_payment_intent(amount=10.0)
        assert exc_info.value.status_code == 502

    @pytest.mark.unit
    async def test_missing_secret_key(self, mock_stripe, monkeypatch):
        monkeypatch.setattr(settings, "stripe_secret_key", "")
        with pytest.raises(PaymentError):
            await payment_service.create_payment_intent(amount=10.0)
        mock_stripe["create"].assert_not_called()

    @pytest.mark.unit
    async def test_retrieve(self, mock_stripe):
        mock_stripe["intent"].status = "succeeded"
        mock_stripe["intent"].receipt_email = "casey@example.com"
        mock_stripe["intent"].metadata = {"orderId": "3"}

        result = await payment_service.retrieve_payment_intent("pi_test_123")
        assert result["status"] == "succeeded"
        assert result["receipt_email"] == "casey@example.com"
        assert result["metadata"] == {"orderId": "3"}
        mock_stripe["retrieve"].assert_called_once_with("pi_test_123")

    @pytest.mark.unit
    async def test_retrieve_unknown_intent(self, mock_stripe):
        mock_stripe["retrieve"].side_effect = stripe.InvalidRequestError("No such payment_intent", "intent")
        with pytest.raises(ValidationError) as exc_info:
            await payment_service.retrieve_payment_intent("pi_missing")
        assert exc_info.value.message == "Payment intent not found"
        assert exc_info.value.status_code == 400


def _event_body(event_type: str, order_id: str = "1") -> bytes:
    return json.dumps(
        {
            "id": "evt_1",
            "type": event_type,
            "data": {"object": {"id": "pi_1", "status": "succeeded", "metadata": {"orderId": order_id}}},
        }
    ).encode()


class TestWebhookVerification:

    @pytest.mark.unit
    def test_verified_event_is_parsed(self, mock_stripe):
        event = payment_service.construct_webhook_event(_event_body("payment_intent.succeeded"), "t=1,v1=abc")
        assert event["type"] == "payment_intent.succeeded"
        assert event["metadata"] == {"orderId": "1"}
        assert event["object"]["id"] == "pi_1"
        mock_stripe["construct_event"].assert_called_once()

    @pytest.mark.unit
    def test_missing_secret(self, mock_stripe, monkeypatch):
        monkeypatch.setattr(settings, "stripe_webhook_secret", "")
        with pytest.raises(WebhookVerificationError, match="not configured"):
            payment_service.construct_webhook_event(b"{}", "t=1,v1=abc")

    @pytest.mark.unit
    def test_missing_signature_header(self, mock_stripe):
        with pytest.raises(WebhookVerificationError, match="Stripe-Signature"):
            payment_service.construct_webhook_event(b"{}", None)

    @pytest.mark.unit
    def test_bad_signature(self, mock_stripe):
        mock_stripe["construct_event"].side_effect = stripe.SignatureVerificationError(
            "No signatures found matching the expected signature", "t=1,v1=abc"
        )
        with pytest.raises(WebhookVerificationError, match="Invalid signature"):
            payment_service.construct_webhook_event(b"{}", "t=1,v1=abc")
