"""TCP-connect range scanning engine."""

from .chunk import iter_targets, scan_chunk
from .models import (
    ProbeFailure,
    ProgressUpdate,
    ScanConfig,
    ScanReport,
    ScanResult,
    ScanState,
)
from .prober import Dialer, Prober, TCPDialer, probe
from .range_scanner import CompletionFrontier, ProgressCallback, RangeScanner

__all__ = [
    "CompletionFrontier",
    "Dialer",
    "ProbeFailure",
    "Prober",
    "ProgressCallback",
    "ProgressUpdate",
    "RangeScanner",
    "ScanConfig",
    "ScanReport",
    "ScanResult",
    "ScanState",
    "TCPDialer",
    "iter_targets",
    "probe",
    "scan_chunk",
]
