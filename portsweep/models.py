from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class Target:
    host: str


@dataclass(frozen=True)
class PortRange:
    """Half-open port interval [start, finish)."""

    start: int
    finish: int

    def __post_init__(self) -> None:
        if self.start > self.finish:
            raise ValueError(f"Invalid port range: [{self.start}, {self.finish})")

    def __len__(self) -> int:
        return self.finish - self.start

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.finish))

    def __contains__(self, port: object) -> bool:
        return isinstance(port, int) and self.start <= port < self.finish

    def __str__(self) -> str:
        return f"[{self.start}, {self.finish})"


class WorkerState(enum.Enum):
    """
    RUNNING -> DONE -> JOINED for a worker that scanned its whole segment,
    RUNNING -> FAILED for one whose scan loop raised.
    """

    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"
    JOINED = "joined"


@dataclass(frozen=True)
class WorkerOutcome:
    segment: PortRange
    state: WorkerState
    open_ports: Tuple[int, ...] = ()
    error: Optional[BaseException] = None
    history: Tuple[WorkerState, ...] = ()


@dataclass(frozen=True)
class ScanReport:
    target: Target
    segments: List[PortRange]
    open_ports: List[int]
    outcomes: List[WorkerOutcome] = field(default_factory=list)
    elapsed_s: float = 0.0

    @property
    def failed_segments(self) -> List[PortRange]:
        # Segments whose worker faulted are reported, never retried.
        return [o.segment for o in self.outcomes if o.error is not None]

    @property
    def ports_covered(self) -> int:
        return sum(len(s) for s in self.segments)
