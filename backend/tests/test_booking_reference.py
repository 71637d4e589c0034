from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor

from tourbook.utils_ids import generate_booking_reference

REFERENCE_RE = re.compile(r"^TRV-[0-9A-Z]+-[0-9A-Z]{9}$")


def test_reference_is_human_readable() -> None:
    ref = generate_booking_reference()
    assert REFERENCE_RE.match(ref), ref


def test_custom_prefix() -> None:
    assert generate_booking_reference("TOUR").startswith("TOUR-")


def test_same_millisecond_references_differ() -> None:
    refs = {generate_booking_reference(now_ms=1_767_225_600_000) for _ in range(5_000)}
    assert len(refs) == 5_000


def test_ten_thousand_concurrent_references_never_collide() -> None:
    with ThreadPoolExecutor(max_workers=32) as pool:
        refs = list(pool.map(lambda _: generate_booking_reference(), range(10_000)))

    assert len(refs) == 10_000
    assert len(set(refs)) == 10_000
