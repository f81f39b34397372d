"""Managed database resource data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

# Phases that mean the cluster is healthy or intentionally idle.
TERMINAL_PHASES = frozenset({"Running", "Stopped"})

FAILED_PHASE = "Failed"


class QuotaStatus(StrEnum):
    """Outcome of a debt-limit ResourceQuota lookup."""

    HAS_MARKER = "has_marker"
    NO_MARKER = "no_marker"
    LOOKUP_FAILED = "lookup_failed"


@dataclass(frozen=True)
class ManagedDatabase:
    """One KubeBlocks cluster as observed in a single poll cycle.

    ``phase`` is None when ``status.phase`` was absent or not a string.
    """

    name: str
    namespace: str
    phase: str | None

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES


@dataclass(frozen=True)
class ReportRow:
    """A single row of the aggregated notification table."""

    name: str
    phase: str
    namespace: str
