import threading

import pytest


class FakeProbe:
    """Reports a fixed set of ports as open, whatever the host."""

    def __init__(self, open_ports=()):
        self.open_ports = set(open_ports)
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, host, port, timeout_s=None):
        with self._lock:
            self.calls += 1
        return port in self.open_ports


@pytest.fixture
def fake_probe():
    return FakeProbe


@pytest.fixture
def services_file(tmp_path):
    path = tmp_path / "services"
    path.write_text(
        "# Network services, Internet style\n"
        "echo            7/tcp\n"
        "echo            7/udp\n"
        "ssh             22/tcp                          # SSH Remote Login Protocol\n"
        "http            80/tcp          www             # WorldWideWeb HTTP\n"
        "\n"
        "brokenline      /tcp\n"
        "https           443/tcp\n",
        encoding="utf-8",
    )
    return str(path)
