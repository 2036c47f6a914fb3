from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe

from bistro.errors import PaymentConfigurationError, PaymentProviderError, ValidationError
from bistro.payments.service import PaymentService, get_payment_service, normalize_currency, to_minor_units
from bistro.payments.stripe_provider import StripePaymentProvider
from tests.fixtures_data import INVALID_AMOUNTS, MISSING_STRIPE_KEY


@pytest.mark.parametrize(
    "amount, expected",
    [(22, 2200), ("9.50", 950), (0.5, 50), (0.505, 51), (12.344, 1234), ("1e1", 1000)],
)
def test_to_minor_units_rounds_half_up(amount, expected):
    assert to_minor_units(amount) == expected


@pytest.mark.parametrize("amount", INVALID_AMOUNTS)
def test_to_minor_units_rejects_non_numeric(amount):
    with pytest.raises(ValidationError) as exc:
        to_minor_units(amount)

    assert exc.value.message == "Invalid or missing amount"


@pytest.mark.parametrize("amount", [0, 0.2, 0.494, -5])
def test_to_minor_units_enforces_minimum(amount):
    with pytest.raises(ValidationError) as exc:
        to_minor_units(amount)

    assert exc.value.message == "Amount must be at least $0.50"


def test_missing_secret_key_is_reported_before_amount_validation(client):
    from bistro import main

    main.app.dependency_overrides[get_payment_service] = lambda: PaymentService(provider_name="stripe", secret_key="")

    post = client.post("/api/create-payment-intent", json={"amount": "not a number"})
    get = client.get("/api/create-payment-intent")

    assert post.status_code == MISSING_STRIPE_KEY["expected_status_code"]
    assert post.json() == {"error": MISSING_STRIPE_KEY["expected_error"]}
    assert get.status_code == MISSING_STRIPE_KEY["expected_status_code"]


def test_get_reports_active_api(client):
    from bistro import main

    main.app.dependency_overrides[get_payment_service] = lambda: PaymentService(
        provider_name="stripe", secret_key="sk_test_123"
    )

    response = client.get("/api/create-payment-intent")

    assert response.status_code == 200
    assert response.json()["message"] == "Payment API is active. Use POST to create a payment intent."
    assert response.json()["env_check"]["has_secret_key"] is True


def test_other_methods_are_not_allowed(client):
    response = client.put("/api/create-payment-intent", json={"amount": 10})

    assert response.status_code == 405
    assert response.json() == {"error": "Method Not Allowed"}


def test_create_intent_validation_errors(client):
    missing = client.post("/api/create-payment-intent", json={})
    nan = client.post("/api/create-payment-intent", json={"amount": "NaN"})
    too_small = client.post("/api/create-payment-intent", json={"amount": 0.2})
    not_json = client.post(
        "/api/create-payment-intent", content=b"amount=10", headers={"Content-Type": "text/plain"}
    )

    assert missing.status_code == 400
    assert missing.json() == {"error": "Invalid or missing amount"}
    assert nan.json() == {"error": "Invalid or missing amount"}
    assert too_small.status_code == 400
    assert too_small.json() == {"error": "Amount must be at least $0.50"}
    assert not_json.status_code == 400


def test_create_intent_returns_client_secret(client, payments):
    response = client.post("/api/create-payment-intent", json={"amount": 22.0, "currency": "usd"})

    assert response.status_code == 200
    secret = response.json()["clientSecret"]
    intent_id = secret.split("_secret_")[0]
    assert payments.retrieve_intent(intent_id).amount == 2200


@pytest.mark.parametrize("currency", [5, ["usd"], "euro", "u$d"])
def test_create_intent_rejects_malformed_currency(client, currency):
    response = client.post("/api/create-payment-intent", json={"amount": 5, "currency": currency})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid currency"}


def test_normalize_currency_lowercases_and_defaults():
    assert normalize_currency(None, "usd") == "usd"
    assert normalize_currency("   ", "usd") == "usd"
    assert normalize_currency(" EUR ", "usd") == "eur"
    with pytest.raises(ValidationError):
        normalize_currency("dollars", "usd")


def test_stripe_provider_passes_cents_and_automatic_methods():
    fake_intent = SimpleNamespace(id="pi_1", client_secret="pi_1_secret_x", status="requires_payment_method", amount=950)

    with patch("bistro.payments.stripe_provider.stripe.PaymentIntent.create", return_value=fake_intent) as create:
        result = PaymentService(provider_name="stripe", secret_key="sk_test_abc").create_intent("9.50")

    assert result.client_secret == "pi_1_secret_x"
    kwargs = create.call_args.kwargs
    assert kwargs["amount"] == 950
    assert kwargs["currency"] == "usd"
    assert kwargs["automatic_payment_methods"] == {"enabled": True}
    assert kwargs["api_key"] == "sk_test_abc"


def test_stripe_errors_become_provider_errors(client):
    from bistro import main

    main.app.dependency_overrides[get_payment_service] = lambda: PaymentService(
        provider_name="stripe", secret_key="sk_test_abc"
    )

    with patch(
        "bistro.payments.stripe_provider.stripe.PaymentIntent.create",
        side_effect=stripe.StripeError("Your card was declined."),
    ):
        response = client.post("/api/create-payment-intent", json={"amount": 10})

    assert response.status_code == 502
    assert "declined" in response.json()["error"]


def test_stripe_retrieve_failure_raises_provider_error():
    provider = StripePaymentProvider("sk_test_abc")

    with patch(
        "bistro.payments.stripe_provider.stripe.PaymentIntent.retrieve",
        side_effect=stripe.StripeError("No such payment_intent"),
    ):
        with pytest.raises(PaymentProviderError):
            provider.retrieve_intent("pi_missing")


def test_service_without_key_raises_configuration_error():
    with pytest.raises(PaymentConfigurationError):
        PaymentService(provider_name="stripe", secret_key="").retrieve_intent("pi_1")


def test_public_config_exposes_publishable_key(client, monkeypatch):
    from bistro.core import config

    monkeypatch.setattr(config, "STRIPE_PUBLISHABLE_KEY", "pk_test_abc")

    body = client.get("/api/config/public").json()

    assert body["publishable_key"] == "pk_test_abc"
    assert body["payments_enabled"] is True
