from __future__ import annotations

from contextvars import ContextVar


_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
# staff name, "customer", "kitchen"...
_actor: ContextVar[str | None] = ContextVar("actor", default=None)


def set_request_context(*, request_id: str | None = None, actor: str | None = None) -> None:
    if request_id is not None:
        _request_id.set(request_id)
    if actor is not None:
        _actor.set(actor)


def get_request_id() -> str | None:
    return _request_id.get()


def get_actor() -> str:
    return _actor.get() or "anonymous"


def clear_request_context() -> None:
    for var in (_request_id, _actor):
        var.set(None)
