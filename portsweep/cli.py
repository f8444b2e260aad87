from __future__ import annotations

import argparse
import logging
import math
from typing import NoReturn, Optional

from .output import print_results
from .ports import REMAINDER_DROP, REMAINDER_POLICIES
from .scanner import ScanError, run_scan
from .services import SERVICES_PATH, ServiceTable

DEFAULT_TIMEOUT = 1.0
# Longest per-port timeout the CLI accepts.
MAX_TIMEOUT = 86400.0

log = logging.getLogger(__name__)


class _Parser(argparse.ArgumentParser):
    # Usage problems: one line on stdout, exit code 1.
    def error(self, message: str) -> NoReturn:
        print(f"{self.format_usage().strip()} ({message})")
        raise SystemExit(1)


def parse_timeout(value: str) -> Optional[float]:
    """Seconds as a float; <= 0 means the OS default (None)."""
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid timeout: {value!r}") from None
    if not math.isfinite(seconds):
        raise argparse.ArgumentTypeError(f"timeout must be a finite number, got {value!r}")
    if seconds > MAX_TIMEOUT:
        raise argparse.ArgumentTypeError(f"timeout must be <= {MAX_TIMEOUT:g}s, got {value!r}")
    if seconds <= 0:
        return None
    return seconds


def build_parser() -> argparse.ArgumentParser:
    p = _Parser(
        prog="portsweep",
        usage="%(prog)s HOST THREADS [options]",
        description="Concurrent TCP connect port scanner",
    )
    p.add_argument("host", metavar="HOST", help="Hostname or IP to scan")
    p.add_argument("threads", metavar="THREADS", type=int, help="Number of worker threads (>= 1)")
    p.add_argument(
        "--timeout",
        type=parse_timeout,
        default=DEFAULT_TIMEOUT,
        help=f"Per-port connect timeout in seconds, <= 0 for the OS default (default: {DEFAULT_TIMEOUT})",
    )
    p.add_argument("--services", default=SERVICES_PATH, help=f"Services file (default: {SERVICES_PATH})")
    p.add_argument(
        "--remainder",
        choices=REMAINDER_POLICIES,
        default=REMAINDER_DROP,
        help="Ports left over by the even split: drop them or give them to the last worker",
    )
    p.add_argument("--strict", action="store_true", help="Fail the scan if any worker fails")
    p.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug)")
    return p


def setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.threads <= 0:
        print(f"Invalid thread count '{args.threads}', must be >= 1.")
        return 1

    setup_logging(args.verbose)

    services = ServiceTable(args.services)

    try:
        report = run_scan(
            args.host,
            args.threads,
            timeout_s=args.timeout,
            strict=args.strict,
            remainder=args.remainder,
        )
    except ScanError as e:
        log.error("Scan aborted: %s", e)
        return 1

    print_results(report.open_ports, services)
    return 0
