"""Exception hierarchy for dbmonitor."""

from __future__ import annotations


class DBMonitorError(Exception):
    """Base class for all dbmonitor errors."""


class ClusterConnectionError(DBMonitorError):
    """Raised when the Kubernetes client cannot be configured."""


class ResourceListError(DBMonitorError):
    """Raised when the managed database resources cannot be listed."""

    def __init__(self, gvr: str, cause: Exception) -> None:
        super().__init__(f"Failed to list {gvr}: {cause}")
        self.gvr = gvr
        self.cause = cause
