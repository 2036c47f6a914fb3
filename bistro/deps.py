# bistro/deps.py
from __future__ import annotations

from typing import Optional

from fastapi import Header


def current_actor(x_actor: Optional[str] = Header(default=None)) -> Optional[str]:
    """Free-text name of whoever is acting (no authentication; audit only)."""
    if not x_actor:
        return None
    return x_actor.strip()[:64] or None
