from __future__ import annotations

import logging
import re
import threading
from typing import Dict, Mapping, Optional

log = logging.getLogger(__name__)

SERVICES_PATH = "/etc/services"

# "<name> <port>", e.g. "ssh  22/tcp"
_SERVICE_LINE = re.compile(r"(\w+)\s+(\d+)")


def load_services(path: str = SERVICES_PATH) -> Dict[str, str]:
    """
    Parses a services(5) style file into {port: name}, ports kept as strings.
    Lines without a "<name> <port>" pair are skipped; a port seen again
    later in the file overwrites the earlier name.
    """
    services: Dict[str, str] = {}
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            m = _SERVICE_LINE.search(line)
            if not m:
                continue
            name, port = m.group(1), m.group(2)
            if not name or not port:
                continue
            services[port] = name
    return services


class ServiceTable:
    """
    Port -> service name lookup, loaded from `path` on first use.

    The file is read at most once, even when several threads look up at
    the same time. A missing or unreadable file leaves the table empty.
    """

    def __init__(self, path: str = SERVICES_PATH):
        self.path = path
        self._lock = threading.Lock()
        self._services: Optional[Dict[str, str]] = None

    @classmethod
    def from_mapping(cls, services: Mapping[str, str]) -> "ServiceTable":
        table = cls(path="")
        table._services = dict(services)
        return table

    def _load(self) -> Dict[str, str]:
        services = self._services
        if services is not None:
            return services

        with self._lock:
            if self._services is None:
                try:
                    self._services = load_services(self.path)
                except OSError as e:
                    log.debug("Could not read services file %s: %s", self.path, e)
                    self._services = {}
                else:
                    log.debug("Loaded %d services from %s", len(self._services), self.path)
            return self._services

    def lookup(self, port: int) -> str:
        return self._load().get(str(port), "")

    def __len__(self) -> int:
        return len(self._load())
