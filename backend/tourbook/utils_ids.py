from __future__ import annotations

import secrets
import string
import threading
import time
from typing import Optional

from tourbook import config

_ALPHABET = string.digits + string.ascii_uppercase
_COUNTER_WIDTH = 4
_RANDOM_WIDTH = 5

_counter_lock = threading.Lock()
# Start at a random offset so restarted processes do not replay the sequence.
_counter = secrets.randbelow(len(_ALPHABET) ** _COUNTER_WIDTH)


def _base36(value: int, width: int = 0) -> str:
    if value == 0:
        out = "0"
    else:
        digits = []
        while value:
            value, rem = divmod(value, 36)
            digits.append(_ALPHABET[rem])
        out = "".join(reversed(digits))
    return out.rjust(width, "0")


def _next_sequence() -> int:
    global _counter
    with _counter_lock:
        _counter = (_counter + 1) % (len(_ALPHABET) ** _COUNTER_WIDTH)
        return _counter


def generate_booking_reference(prefix: Optional[str] = None, *, now_ms: Optional[int] = None) -> str:
    """Build a human-readable booking reference.

    Format: ``<PREFIX>-<epoch ms, base36>-<sequence><random>``, e.g.
    ``TRV-LZ3K9Q1A-00F7K2M9X``.

    The sequence is per process and lock-protected, so references minted in
    the same millisecond never collide locally; the random tail separates
    concurrent processes. The unique index on ``bookingReference`` is the
    last line of defence.
    """

    prefix = prefix or config.BOOKING_REFERENCE_PREFIX
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    seq = _base36(_next_sequence(), _COUNTER_WIDTH)
    rand = "".join(secrets.choice(_ALPHABET) for _ in range(_RANDOM_WIDTH))
    return f"{prefix}-{_base36(now_ms)}-{seq}{rand}"
