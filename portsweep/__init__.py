from .models import PortRange, ScanReport, Target, WorkerOutcome, WorkerState
from .ports import partition_ports
from .scanner import OpenPortSet, ScanError, ScanWorker, probe_port, run_scan, scan
from .services import ServiceTable, load_services

__version__ = "0.1.0"

__all__ = [
    "OpenPortSet",
    "PortRange",
    "ScanError",
    "ScanReport",
    "ScanWorker",
    "ServiceTable",
    "Target",
    "WorkerOutcome",
    "WorkerState",
    "load_services",
    "partition_ports",
    "probe_port",
    "run_scan",
    "scan",
]
