"""Wall-clock helpers; stored timestamps are integer epoch milliseconds."""

from __future__ import annotations

import time


def now_ms() -> int:
    return int(time.time() * 1000)
