from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

MINIMUM_CHARGE_CENTS = 50

SUCCEEDED = "succeeded"


@dataclass
class PaymentIntentResult:
    id: str
    client_secret: str | None
    status: str
    amount: int
    currency: str = "usd"

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCEEDED


class PaymentProvider(Protocol):
    name: str

    def create_intent(self, *, amount_minor: int, currency: str) -> PaymentIntentResult:
        ...

    def retrieve_intent(self, intent_id: str) -> PaymentIntentResult:
        ...
