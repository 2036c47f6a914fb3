from __future__ import annotations

from fastapi import APIRouter

from bistro.core.metrics import service_metrics
from bistro.realtime.feeds import FEEDS

router = APIRouter(prefix="/api/internal", tags=["internal-metrics"])


@router.get("/metrics")
def read_metrics():
    return {
        **service_metrics.snapshot(),
        "feed_subscribers": {name: feed.subscriber_count for name, feed in FEEDS.items()},
    }
