from __future__ import annotations

import logging
import socket
import threading
import time
from typing import Callable, Iterable, List, Optional

from .models import PortRange, ScanReport, Target, WorkerOutcome, WorkerState
from .ports import REMAINDER_DROP, partition_ports

log = logging.getLogger(__name__)

# (host, port, timeout_s) -> open?
Probe = Callable[[str, int, Optional[float]], bool]


class ScanError(Exception):
    """Raised in strict mode when a worker's scan loop faults."""

    def __init__(self, segment: PortRange, cause: BaseException):
        super().__init__(f"worker for ports {segment} failed: {cause!r}")
        self.segment = segment
        self.cause = cause


def probe_port(host: str, port: int, timeout_s: Optional[float] = None) -> bool:
    """
    One blocking TCP connect. A completed handshake means open; the
    connection is closed straight away. Every OSError counts as closed.
    """
    try:
        with socket.create_connection((host, port), timeout=timeout_s):
            return True
    except OSError:
        return False


class OpenPortSet:
    """Append-only port collection shared by all workers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ports: set[int] = set()

    def add(self, port: int) -> None:
        with self._lock:
            self._ports.add(port)

    def update(self, ports: Iterable[int]) -> None:
        with self._lock:
            self._ports.update(ports)

    def sorted(self) -> List[int]:
        with self._lock:
            return sorted(self._ports)

    def __len__(self) -> int:
        with self._lock:
            return len(self._ports)


def scan_segment(
    host: str,
    segment: PortRange,
    probe: Probe,
    timeout_s: Optional[float] = None,
) -> List[int]:
    found: List[int] = []
    for port in segment:
        if probe(host, port, timeout_s):
            found.append(port)
    return found


class ScanWorker:
    """
    One thread scanning one segment. The thread is never reused; its
    findings or its exception stay on the worker until join().
    """

    def __init__(
        self,
        target: Target,
        segment: PortRange,
        probe: Probe,
        timeout_s: Optional[float],
        open_ports: OpenPortSet,
    ):
        self.target = target
        self.segment = segment
        self.probe = probe
        self.timeout_s = timeout_s
        self.open_ports = open_ports
        self.found: List[int] = []
        self.error: Optional[Exception] = None
        self.history: List[WorkerState] = []
        self._thread = threading.Thread(
            target=self._run, name=f"portsweep-{segment.start}-{segment.finish}"
        )

    @property
    def state(self) -> Optional[WorkerState]:
        return self.history[-1] if self.history else None

    def start(self) -> None:
        self.history.append(WorkerState.RUNNING)
        self._thread.start()

    def _run(self) -> None:
        log.debug("worker %s: running", self.segment)
        try:
            # No lock is held while probing; only the merge is serialized.
            found = scan_segment(self.target.host, self.segment, self.probe, self.timeout_s)
        except Exception as e:
            self.error = e
            self.history.append(WorkerState.FAILED)
            return
        self.open_ports.update(found)
        self.found = found
        self.history.append(WorkerState.DONE)
        log.debug("worker %s: done (%d open)", self.segment, len(found))

    def join(self) -> WorkerOutcome:
        self._thread.join()
        if self.error is not None:
            return WorkerOutcome(
                self.segment, WorkerState.FAILED, error=self.error, history=tuple(self.history)
            )
        self.history.append(WorkerState.JOINED)
        return WorkerOutcome(
            self.segment, WorkerState.JOINED, tuple(self.found), history=tuple(self.history)
        )


def run_scan(
    host: str,
    worker_count: int,
    timeout_s: Optional[float] = None,
    probe: Optional[Probe] = None,
    strict: bool = False,
    remainder: str = REMAINDER_DROP,
) -> ScanReport:
    """
    Scans every segment of the port space on its own worker thread and
    returns the merged, sorted result.

    worker_count must be >= 1 (validated by the caller). A worker that
    raises contributes no ports: by default the fault is logged and its
    segment shows up in ScanReport.failed_segments; with strict=True a
    ScanError is raised once all workers have been joined.
    """
    if probe is None:
        probe = probe_port

    target = Target(host)
    segments = partition_ports(worker_count, remainder=remainder)
    open_ports = OpenPortSet()

    log.info(
        "Scanning %s: %d workers, %d ports each, timeout=%s",
        host, len(segments), len(segments[0]), timeout_s,
    )
    start_all = time.perf_counter()

    workers = [ScanWorker(target, segment, probe, timeout_s, open_ports) for segment in segments]
    for worker in workers:
        worker.start()

    # Join barrier: the shared set is not read before every worker is done.
    outcomes = [worker.join() for worker in workers]

    first_fault: Optional[WorkerOutcome] = None
    for outcome in outcomes:
        if outcome.error is None:
            continue
        if first_fault is None:
            first_fault = outcome
        log.warning(
            "Worker for ports %s failed, segment not scanned: %r", outcome.segment, outcome.error
        )

    if strict and first_fault is not None:
        raise ScanError(first_fault.segment, first_fault.error) from first_fault.error

    elapsed = time.perf_counter() - start_all
    result = open_ports.sorted()
    log.info("Scan of %s finished in %.2fs: %d open", host, elapsed, len(result))

    return ScanReport(
        target=target,
        segments=segments,
        open_ports=result,
        outcomes=outcomes,
        elapsed_s=round(elapsed, 4),
    )


def scan(
    host: str,
    worker_count: int,
    timeout_s: Optional[float] = None,
    probe: Optional[Probe] = None,
    strict: bool = False,
    remainder: str = REMAINDER_DROP,
) -> List[int]:
    """Returns the open ports of `host` in ascending order."""
    report = run_scan(
        host,
        worker_count,
        timeout_s=timeout_s,
        probe=probe,
        strict=strict,
        remainder=remainder,
    )
    return report.open_ports
