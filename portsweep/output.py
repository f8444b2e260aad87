from __future__ import annotations

from typing import List, Sequence

from .services import ServiceTable

NO_OPEN_PORTS = "No open ports"
DIVIDER = "-" * 39


def format_row(port: int, services: ServiceTable) -> str:
    return f"{port} \t| {services.lookup(port)}"


def format_table(ports: Sequence[int], services: ServiceTable) -> str:
    if not ports:
        return NO_OPEN_PORTS

    lines: List[str] = ["", "NUMBER \t| SERVICE", DIVIDER]
    for port in ports:
        lines.append(format_row(port, services))
        lines.append(DIVIDER)
    return "\n".join(lines)


def print_results(ports: Sequence[int], services: ServiceTable) -> None:
    print(format_table(ports, services))
