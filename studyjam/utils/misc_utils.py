# studyjam/utils/misc_utils.py
import math
import re
import time
from typing import Any

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_count(value: Any) -> int:
    """Parses a completion counter the lenient way: leading digits win, junk is 0.

    "12" -> 12, " 7 badges" -> 7, "3.9" -> 3, "" / None / "x" -> 0, "-4" -> 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return max(int(value), 0)
    match = _LEADING_INT.match(str(value))
    if not match:
        return 0
    return max(int(match.group(1)), 0)


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positives, like a spreadsheet would."""
    if not math.isfinite(value):
        return 0
    return int(math.floor(value + 0.5))


def cache_bust_token() -> str:
    """Current time in epoch milliseconds, used to bypass HTTP caches."""
    return str(int(time.time() * 1000))
