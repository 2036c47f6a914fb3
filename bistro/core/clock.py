from __future__ import annotations

import time
from datetime import datetime

MS_PER_MINUTE = 60_000
MS_PER_HOUR = 60 * MS_PER_MINUTE


def now_ms() -> int:
    return int(time.time() * 1000)


def ms_to_local(epoch_ms: int) -> datetime:
    """Epoch milliseconds to a naive local datetime (calendar-day math runs in server local time)."""
    return datetime.fromtimestamp(epoch_ms / 1000)
