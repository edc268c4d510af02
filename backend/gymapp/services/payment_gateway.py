"""
External payment gateway (Stripe): create and retrieve payment intents.
Requires STRIPE_SECRET_KEY in env; without it every call raises Internal.
"""
import logging

import stripe

from gymapp.config import settings
from gymapp.core.errors import Internal, InvalidInput

logger = logging.getLogger(__name__)


def _configure() -> None:
    if not settings.stripe_secret_key:
        raise Internal("Payment gateway not configured.")
    stripe.api_key = settings.stripe_secret_key


def _to_cents(amount: float) -> int:
    return int(round(amount * 100))


def create_payment_intent(amount: float, currency: str = "usd", description: str | None = None) -> dict:
    """Create a card payment intent for amount (major units). Returns id and client_secret."""
    if amount is None or amount <= 0:
        raise InvalidInput("Amount must be positive.")
    _configure()
    try:
        intent = stripe.PaymentIntent.create(
            amount=_to_cents(amount),
            currency=(currency or "usd").lower(),
            description=description,
            payment_method_types=["card"],
        )
    except stripe.StripeError as e:
        logger.warning("Stripe create payment intent failed: %s", e)
        raise Internal(f"Payment failed: {e}") from e
    return {"id": intent["id"], "client_secret": intent["client_secret"], "status": intent["status"]}


def retrieve_payment_intent(intent_id: str) -> dict:
    _configure()
    try:
        intent = stripe.PaymentIntent.retrieve(intent_id)
    except stripe.StripeError as e:
        logger.warning("Stripe retrieve payment intent %s failed: %s", intent_id, e)
        raise Internal(f"Payment lookup failed: {e}") from e
    return {
        "id": intent["id"],
        "status": intent["status"],
        "amount": intent["amount"] / 100,
        "currency": intent["currency"],
    }
