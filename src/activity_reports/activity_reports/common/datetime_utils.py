from __future__ import annotations

from datetime import datetime
from typing import Callable

Clock = Callable[[], datetime]


def now_local() -> datetime:
    """Current local time, truncated to whole seconds like MySQL DATETIME.

    Note: Services take a ``clock`` argument defaulting to this so tests can
    pin time.
    """
    return datetime.now().replace(microsecond=0)
