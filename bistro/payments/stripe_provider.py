from __future__ import annotations

import logging

import stripe

from bistro.core.config import STRIPE_API_VERSION
from bistro.errors import PaymentProviderError
from bistro.payments.base import PaymentIntentResult

logger = logging.getLogger(__name__)


def _to_result(intent) -> PaymentIntentResult:
    return PaymentIntentResult(
        id=intent.id,
        client_secret=getattr(intent, "client_secret", None),
        status=intent.status,
        amount=int(intent.amount),
        currency=getattr(intent, "currency", None) or "usd",
    )


def _error_message(exc: Exception) -> str:
    return getattr(exc, "user_message", None) or str(exc) or "Payment processor error"


class StripePaymentProvider:
    name = "stripe"

    def __init__(self, secret_key: str, *, api_version: str = STRIPE_API_VERSION) -> None:
        self._secret_key = secret_key
        self._api_version = api_version

    def create_intent(self, *, amount_minor: int, currency: str) -> PaymentIntentResult:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor,
                currency=currency,
                automatic_payment_methods={"enabled": True},
                api_key=self._secret_key,
                stripe_version=self._api_version,
            )
        except stripe.StripeError as exc:
            message = _error_message(exc)
            logger.warning("stripe create_intent failed: %s", message)
            raise PaymentProviderError(message) from exc
        logger.info("payment intent created amount=%s currency=%s", amount_minor, currency)
        return _to_result(intent)

    def retrieve_intent(self, intent_id: str) -> PaymentIntentResult:
        try:
            intent = stripe.PaymentIntent.retrieve(
                intent_id,
                api_key=self._secret_key,
                stripe_version=self._api_version,
            )
        except stripe.StripeError as exc:
            message = _error_message(exc)
            logger.warning("stripe retrieve_intent failed: %s", message)
            raise PaymentProviderError(message) from exc
        return _to_result(intent)
