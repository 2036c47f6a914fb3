from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

SAVE_AFTER_PAYMENT_FAILED = "Payment succeeded but failed to save order. Please contact staff."
SUBMIT_FAILED = "Failed to submit order. Please try again."


class BistroError(Exception):
    status_code = 500
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(BistroError):
    status_code = 400


class NotFoundError(BistroError):
    status_code = 404


class OrderTransitionError(BistroError):
    status_code = 409


class StoreClosedError(BistroError):
    status_code = 409

    def __init__(self, message: str = "The restaurant is currently closed.") -> None:
        super().__init__(message)


class PaymentConfigurationError(BistroError):
    status_code = 500


class PaymentProviderError(BistroError):
    status_code = 502


class LedgerUnavailableError(BistroError):
    status_code = 503
    retryable = True

    def __init__(self, payment_ref: str | None = None) -> None:
        super().__init__(SAVE_AFTER_PAYMENT_FAILED if payment_ref else SUBMIT_FAILED)
        self.payment_ref = payment_ref


async def _handle_bistro_error(_request: Request, exc: BistroError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("request failed: %s", exc.message)
    body = {"detail": exc.message}
    if exc.retryable:
        body["retryable"] = True
    if isinstance(exc, LedgerUnavailableError) and exc.payment_ref:
        body["payment_ref"] = exc.payment_ref
    return JSONResponse(status_code=exc.status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BistroError, _handle_bistro_error)
