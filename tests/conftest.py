"""Shared fixtures for dbmonitor tests.

Provides in-memory stand-ins for the cluster and the notification endpoint
so the reconciler and poll loop can be exercised without a real cluster.
"""

from __future__ import annotations

import pytest

from dbmonitor.exceptions import ResourceListError
from dbmonitor.models.resources import ManagedDatabase, QuotaStatus
from dbmonitor.notifications.manager import NotificationChannel, NotificationDispatcher

# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def make_db(name: str = "db1", phase: str | None = "Running", namespace: str = "ns1") -> ManagedDatabase:
    """Create a ManagedDatabase with sensible defaults for testing."""
    return ManagedDatabase(name=name, namespace=namespace, phase=phase)


class FakeQuotaChecker:
    """Answers quota lookups from a namespace -> QuotaStatus map."""

    def __init__(self, statuses: dict[str, QuotaStatus] | None = None) -> None:
        self.statuses = statuses or {}
        self.calls: list[str] = []

    async def check(self, namespace: str) -> QuotaStatus:
        self.calls.append(namespace)
        return self.statuses.get(namespace, QuotaStatus.NO_MARKER)


class FakeLister:
    """Returns one scripted observation list per call; raises when scripted an exception."""

    def __init__(self, cycles: list[list[ManagedDatabase] | Exception]) -> None:
        self._cycles = list(cycles)
        self.calls = 0

    async def list(self) -> list[ManagedDatabase]:
        item = self._cycles[min(self.calls, len(self._cycles) - 1)]
        self.calls += 1
        if isinstance(item, Exception):
            raise ResourceListError("apps.kubeblocks.io/v1alpha1/clusters", item)
        return item


class RecordingChannel(NotificationChannel):
    """Keeps every message it is asked to send."""

    def __init__(self, succeed: bool = True) -> None:
        self.messages: list[str] = []
        self._succeed = succeed

    @property
    def channel_name(self) -> str:
        return "recording"

    async def send(self, text: str) -> bool:
        self.messages.append(text)
        return self._succeed


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quota_checker() -> FakeQuotaChecker:
    return FakeQuotaChecker()


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def dispatcher(channel: RecordingChannel) -> NotificationDispatcher:
    return NotificationDispatcher(channels=[channel])
