"""Live collection feeds.

A feed pushes the full, freshly loaded collection to every subscriber on
subscribe and again after each change. Subscribers never receive diffs.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from threading import Lock, RLock
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from bistro.core.metrics import service_metrics

logger = logging.getLogger(__name__)

Item = dict[str, Any]
Loader = Callable[[Session], list[Item]]
SessionFactory = Callable[[], Session]
Predicate = Callable[[Item], bool]


@dataclass(frozen=True)
class FeedSnapshot:
    feed: str
    items: list[Item] = field(default_factory=list)
    # True on the first delivery to a subscription: its initial load is done
    initial: bool = False

    def as_message(self) -> dict[str, Any]:
        return {"feed": self.feed, "initial": self.initial, "items": self.items}


class Subscription:
    _ids = itertools.count(1)

    def __init__(
        self,
        feed: "LiveFeed",
        callback: Callable[[FeedSnapshot], None],
        predicate: Optional[Predicate] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        self.id = next(self._ids)
        self.loading = True
        self.cancelled = False
        self._feed = feed
        self._callback = callback
        self._predicate = predicate
        self._on_error = on_error
        self._last_version = 0
        self._lock = RLock()

    def deliver(self, items: list[Item], version: int) -> bool:
        with self._lock:
            # Drop stale loads that finished after a newer one
            if self.cancelled or version <= self._last_version:
                return False
            initial = self._last_version == 0
            self._last_version = version
            visible = [item for item in items if self._predicate(item)] if self._predicate else list(items)
            self.loading = False
            self._callback(FeedSnapshot(self._feed.name, visible, initial))
            return True

    def fail(self, exc: Exception) -> None:
        with self._lock:
            if self.cancelled:
                return
            self.loading = False
        if self._on_error is not None:
            self._on_error(exc)

    def cancel(self) -> bool:
        with self._lock:
            if self.cancelled:
                logger.debug("subscription %s on %s already cancelled", self.id, self._feed.name)
                return False
            self.cancelled = True
        self._feed._discard(self)
        return True


class LiveFeed:
    def __init__(self, name: str, loader: Loader, session_factory: Optional[SessionFactory] = None) -> None:
        self.name = name
        self._loader = loader
        self._session_factory = session_factory
        self._subscribers: list[Subscription] = []
        self._version = itertools.count(1)
        self._lock = Lock()

    def bind(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def _load(self) -> tuple[list[Item], int]:
        if self._session_factory is None:
            raise RuntimeError(f"feed {self.name} has no session factory")
        with self._lock:
            version = next(self._version)
        db = self._session_factory()
        try:
            return self._loader(db), version
        finally:
            db.close()

    def _discard(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscribers:
                self._subscribers.remove(subscription)

    def _deliver(self, subscription: Subscription, items: list[Item], version: int) -> bool:
        try:
            return subscription.deliver(items, version)
        except Exception:
            logger.exception("subscriber %s on %s failed", subscription.id, self.name, extra={"feed": self.name})
            return False

    def _fail(self, subscription: Subscription, exc: Exception) -> None:
        try:
            subscription.fail(exc)
        except Exception:
            logger.exception("error hook for subscriber %s on %s failed", subscription.id, self.name)

    def subscribe(
        self,
        callback: Callable[[FeedSnapshot], None],
        predicate: Optional[Predicate] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Subscription:
        """Register and immediately deliver the current collection (initial=True).

        The caller must cancel() the returned subscription when done.
        """
        subscription = Subscription(self, callback, predicate, on_error)
        with self._lock:
            self._subscribers.append(subscription)
        try:
            items, version = self._load()
        except Exception as exc:
            logger.exception("initial load of %s failed", self.name, extra={"feed": self.name})
            self._fail(subscription, exc)
            return subscription
        self._deliver(subscription, items, version)
        return subscription

    def publish(self) -> int:
        """Reload the collection and push it to every live subscriber. Returns deliveries made."""
        with self._lock:
            subscribers = list(self._subscribers)
        if not subscribers:
            return 0
        try:
            items, version = self._load()
        except Exception as exc:
            logger.exception("reload of %s failed", self.name, extra={"feed": self.name})
            for subscription in subscribers:
                self._fail(subscription, exc)
            return 0
        delivered = sum(1 for subscription in subscribers if self._deliver(subscription, items, version))
        service_metrics.count_feed_push(self.name)
        return delivered
