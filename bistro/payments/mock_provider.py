from __future__ import annotations

import uuid
from threading import Lock

from bistro.errors import PaymentProviderError
from bistro.payments.base import SUCCEEDED, PaymentIntentResult


class MockPaymentProvider:
    """Local stand-in: every intent is created already succeeded."""

    name = "mock"

    def __init__(self) -> None:
        self._intents: dict[str, PaymentIntentResult] = {}
        self._lock = Lock()

    def create_intent(self, *, amount_minor: int, currency: str) -> PaymentIntentResult:
        intent_id = f"pi_mock_{uuid.uuid4().hex[:16]}"
        result = PaymentIntentResult(
            id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid.uuid4().hex[:8]}",
            status=SUCCEEDED,
            amount=amount_minor,
            currency=currency,
        )
        with self._lock:
            self._intents[intent_id] = result
        return result

    def retrieve_intent(self, intent_id: str) -> PaymentIntentResult:
        with self._lock:
            result = self._intents.get(intent_id)
        if result is None:
            raise PaymentProviderError(f"No such payment intent: {intent_id}")
        return result
