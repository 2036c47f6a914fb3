from __future__ import annotations

import logging
from typing import Any

from bistro.core import config
from bistro.core.money import parse_amount, to_cents
from bistro.errors import PaymentConfigurationError, ValidationError
from bistro.payments.base import MINIMUM_CHARGE_CENTS, PaymentIntentResult, PaymentProvider
from bistro.payments.mock_provider import MockPaymentProvider
from bistro.payments.stripe_provider import StripePaymentProvider

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "Stripe configuration error: Secret key is missing on the server."
INVALID_AMOUNT_MESSAGE = "Invalid or missing amount"
MINIMUM_AMOUNT_MESSAGE = "Amount must be at least $0.50"
INVALID_CURRENCY_MESSAGE = "Invalid currency"


def to_minor_units(amount: Any) -> int:
    """Decimal currency units to integer cents, rounded half-up, at least the processor minimum."""
    if parse_amount(amount) is None:
        raise ValidationError(INVALID_AMOUNT_MESSAGE)
    cents = to_cents(amount)
    if cents < MINIMUM_CHARGE_CENTS:
        raise ValidationError(MINIMUM_AMOUNT_MESSAGE)
    return cents


def normalize_currency(currency: Any, default: str) -> str:
    """Lower-case ISO 4217 code; missing or blank falls back to the default."""
    if currency is None:
        return default
    if not isinstance(currency, str):
        raise ValidationError(INVALID_CURRENCY_MESSAGE)
    code = currency.strip().lower()
    if not code:
        return default
    if len(code) != 3 or not code.isalpha():
        raise ValidationError(INVALID_CURRENCY_MESSAGE)
    return code


class PaymentService:
    def __init__(
        self,
        *,
        provider_name: str | None = None,
        secret_key: str | None = None,
        default_currency: str | None = None,
    ) -> None:
        self.provider_name = (provider_name if provider_name is not None else config.PAYMENT_PROVIDER) or "stripe"
        self.secret_key = secret_key if secret_key is not None else config.STRIPE_SECRET_KEY
        self.default_currency = default_currency or config.DEFAULT_CURRENCY
        self._mock_provider = MockPaymentProvider()

    @property
    def is_configured(self) -> bool:
        return self.provider_name == "mock" or bool(self.secret_key)

    def _select_provider(self) -> PaymentProvider:
        if self.provider_name == "mock":
            return self._mock_provider
        if not self.secret_key:
            logger.error("payment requested but STRIPE_SECRET_KEY is not set")
            raise PaymentConfigurationError(MISSING_KEY_MESSAGE)
        return StripePaymentProvider(self.secret_key)

    def ensure_configured(self) -> None:
        self._select_provider()

    def create_intent(self, amount: Any, currency: Any = None) -> PaymentIntentResult:
        provider = self._select_provider()
        amount_minor = to_minor_units(amount)
        currency = normalize_currency(currency, self.default_currency)
        return provider.create_intent(amount_minor=amount_minor, currency=currency)

    def retrieve_intent(self, intent_id: str) -> PaymentIntentResult:
        return self._select_provider().retrieve_intent(intent_id)


payment_service = PaymentService()


def get_payment_service() -> PaymentService:
    return payment_service
