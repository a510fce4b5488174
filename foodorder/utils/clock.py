# foodorder/utils/clock.py
import time
from datetime import datetime
from typing import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    """Wall clock in epoch milliseconds."""
    return int(time.time() * 1000)


def display_date(ms: int) -> str:
    # local time, same shape the mobile client shows
    return datetime.fromtimestamp(ms / 1000).strftime("%d.%m.%Y %H:%M:%S")
