from __future__ import annotations

from typing import List

from .models import PortRange

FIRST_PORT = 1
END_PORT = 65536
TOTAL_PORTS = END_PORT - FIRST_PORT

REMAINDER_DROP = "drop"
REMAINDER_EXTEND = "extend"
REMAINDER_POLICIES = (REMAINDER_DROP, REMAINDER_EXTEND)


def partition_ports(worker_count: int, remainder: str = REMAINDER_DROP) -> List[PortRange]:
    """
    Splits [1, 65536) into `worker_count` consecutive segments of equal width.

    The width is TOTAL_PORTS // worker_count, so up to worker_count - 1
    trailing ports are left out of every segment. With remainder="extend"
    the last segment is stretched to END_PORT instead.

    worker_count must be >= 1; callers validate it.
    """
    if remainder not in REMAINDER_POLICIES:
        raise ValueError(f"Unknown remainder policy: {remainder!r}")

    step = TOTAL_PORTS // worker_count

    segments: List[PortRange] = []
    start = FIRST_PORT
    finish = FIRST_PORT + step
    for _ in range(worker_count):
        segments.append(PortRange(start, finish))
        start = finish
        finish += step

    if remainder == REMAINDER_EXTEND:
        last = segments[-1]
        segments[-1] = PortRange(last.start, END_PORT)

    return segments


def uncovered_ports(worker_count: int) -> int:
    """Number of ports the default policy drops for this worker count."""
    return TOTAL_PORTS - worker_count * (TOTAL_PORTS // worker_count)
