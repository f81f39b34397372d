"""Core data structures for dbmonitor."""

from dbmonitor.models.config import MonitorConfig
from dbmonitor.models.resources import (
    FAILED_PHASE,
    TERMINAL_PHASES,
    ManagedDatabase,
    QuotaStatus,
    ReportRow,
)

__all__ = [
    "FAILED_PHASE",
    "TERMINAL_PHASES",
    "ManagedDatabase",
    "MonitorConfig",
    "QuotaStatus",
    "ReportRow",
]
