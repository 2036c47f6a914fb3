from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from bistro.core import config
from bistro.errors import BistroError, PaymentConfigurationError
from bistro.payments.service import PaymentService, get_payment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["payments"])

ACTIVE_MESSAGE = "Payment API is active. Use POST to create a payment intent."


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("/create-payment-intent")
def payment_api_status(payments: PaymentService = Depends(get_payment_service)):
    try:
        payments.ensure_configured()
    except PaymentConfigurationError as exc:
        return _error(exc.status_code, exc.message)
    return {
        "message": ACTIVE_MESSAGE,
        "env_check": {"has_secret_key": bool(payments.secret_key), "env": config.ENV},
    }


@router.post("/create-payment-intent")
async def create_payment_intent(request: Request, payments: PaymentService = Depends(get_payment_service)):
    try:
        payments.ensure_configured()
    except PaymentConfigurationError as exc:
        return _error(exc.status_code, exc.message)

    try:
        body = await request.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    try:
        intent = await run_in_threadpool(payments.create_intent, body.get("amount"), body.get("currency"))
    except BistroError as exc:
        return _error(exc.status_code, exc.message)

    if not intent.client_secret:
        logger.error("payment intent %s came back without a client secret", intent.id)
        return _error(502, "Stripe failed to generate a client secret")
    return {"clientSecret": intent.client_secret}


@router.api_route("/create-payment-intent", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False)
def payment_method_not_allowed(payments: PaymentService = Depends(get_payment_service)):
    try:
        payments.ensure_configured()
    except PaymentConfigurationError as exc:
        return _error(exc.status_code, exc.message)
    return JSONResponse(status_code=405, content={"error": "Method Not Allowed"}, headers={"Allow": "GET, POST"})


@router.get("/config/public")
def public_payment_config(payments: PaymentService = Depends(get_payment_service)):
    return {
        "publishable_key": config.STRIPE_PUBLISHABLE_KEY or None,
        "provider": payments.provider_name,
        "currency": payments.default_currency,
        "payments_enabled": payments.is_configured,
        "require_payment": config.REQUIRE_PAYMENT,
    }
