"""Integration tests for the poll loop.

Runs full list -> reconcile -> format -> notify cycles against scripted
listers, a fake quota checker and a recording notification channel.
"""

from __future__ import annotations

import asyncio

import pytest
from structlog.testing import capture_logs

from dbmonitor.exceptions import ResourceListError
from dbmonitor.models.resources import QuotaStatus
from dbmonitor.notifications.manager import NotificationDispatcher
from dbmonitor.poller import PollLoop
from dbmonitor.reconciler import StatusReconciler
from dbmonitor.report import format_report

from ..conftest import FakeLister, FakeQuotaChecker, RecordingChannel, make_db

_HEADER_ONLY = format_report([])


def _loop(
    lister: FakeLister,
    channel: RecordingChannel,
    checker: FakeQuotaChecker | None = None,
    **kwargs: object,
) -> PollLoop:
    return PollLoop(
        lister=lister,
        reconciler=StatusReconciler(checker or FakeQuotaChecker()),
        dispatcher=NotificationDispatcher(channels=[channel]),
        **kwargs,  # type: ignore[arg-type]
    )


# ---------------------------------------------------------------------------
# Single cycles
# ---------------------------------------------------------------------------


class TestRunOnce:
    async def test_header_only_message_sent_when_nothing_qualifies(self, channel: RecordingChannel) -> None:
        loop = _loop(FakeLister([[make_db("db1", "Running")]]), channel)
        summary = await loop.run_once()
        assert channel.messages == [_HEADER_ONLY]
        assert summary.reported == 0
        assert summary.notified is True

    async def test_header_only_message_sent_for_empty_cluster(self, channel: RecordingChannel) -> None:
        await _loop(FakeLister([[]]), channel).run_once()
        assert channel.messages == [_HEADER_ONLY]

    async def test_empty_reports_can_be_disabled(self, channel: RecordingChannel) -> None:
        loop = _loop(FakeLister([[make_db("db1", "Running")]]), channel, send_empty_reports=False)
        summary = await loop.run_once()
        assert channel.messages == []
        assert summary.notified is None

    async def test_persistent_abnormality_reported_on_second_cycle(self, channel: RecordingChannel) -> None:
        observations = [make_db("db1", "Abnormal", "ns1"), make_db("db2", "Running", "ns1")]
        loop = _loop(FakeLister([observations, observations]), channel)

        await loop.run_once()
        await loop.run_once()

        assert channel.messages[0] == _HEADER_ONLY
        lines = channel.messages[1].splitlines()
        assert len(lines) == 2
        assert lines[1].split() == ["db1", "Abnormal", "ns1"]

    async def test_notification_failure_does_not_stop_cycle(self) -> None:
        channel = RecordingChannel(succeed=False)
        loop = _loop(FakeLister([[make_db("db1", "Abnormal")]] * 2), channel)
        first = await loop.run_once()
        second = await loop.run_once()
        assert first.notified is False
        assert second.notified is False
        assert len(channel.messages) == 2
        assert loop.last_cycle == second


# ---------------------------------------------------------------------------
# Listing failures
# ---------------------------------------------------------------------------


class TestListFailure:
    async def test_list_error_skips_cycle_by_default(self, channel: RecordingChannel) -> None:
        abnormal = [make_db("db1", "Abnormal")]
        lister = FakeLister([abnormal, ConnectionError("apiserver down"), abnormal])
        loop = _loop(lister, channel)

        await loop.run_once()
        failed = await loop.run_once()
        recovered = await loop.run_once()

        assert "apiserver down" in failed.error
        assert failed.notified is None
        assert loop.reconciler.state.last_status == {"db1": "Abnormal"}
        assert len(channel.messages) == 2
        assert recovered.reported == 1

    async def test_list_error_raises_when_configured(self, channel: RecordingChannel) -> None:
        loop = _loop(FakeLister([ConnectionError("apiserver down")]), channel, exit_on_list_error=True)
        with pytest.raises(ResourceListError):
            await loop.run_once()
        assert channel.messages == []


# ---------------------------------------------------------------------------
# Debt scenario end to end
# ---------------------------------------------------------------------------


class TestDebtScenario:
    async def test_debt_suppresses_the_transition_into_failed(self, channel: RecordingChannel) -> None:
        checker = FakeQuotaChecker({"ns1": QuotaStatus.HAS_MARKER})
        lister = FakeLister(
            [
                [make_db("db1", "Degraded", "ns1")],
                [make_db("db1", "Degraded", "ns1")],
                [make_db("db1", "Failed", "ns1")],
                [make_db("db1", "Failed", "ns1")],
                [make_db("db1", "Failed", "ns1")],
            ]
        )
        loop = _loop(lister, channel, checker)

        reported = [(await loop.run_once()).reported for _ in range(5)]

        assert reported == [0, 1, 0, 0, 1]
        assert checker.calls == ["ns1"]
        assert loop.reconciler.state.debt_record == {"ns1": True}
        assert all(message.startswith("DatabaseName") for message in channel.messages)

    async def test_cycle_log_names_newly_flagged_namespaces(self, channel: RecordingChannel) -> None:
        checker = FakeQuotaChecker({"ns1": QuotaStatus.HAS_MARKER})
        failed = [make_db("db1", "Failed", "ns1")]
        loop = _loop(FakeLister([failed, failed]), channel, checker)

        with capture_logs() as logs:
            await loop.run_once()
            await loop.run_once()

        completed = [entry for entry in logs if entry["event"] == "poll_cycle_completed"]
        assert [entry["debt_namespaces_flagged"] for entry in completed] == [[], ["ns1"]]


# ---------------------------------------------------------------------------
# run_forever / stop
# ---------------------------------------------------------------------------


class TestRunForever:
    async def test_stop_wakes_interval_sleep(self, channel: RecordingChannel) -> None:
        loop = _loop(FakeLister([[]]), channel, interval_seconds=3600)
        task = asyncio.create_task(loop.run_forever())

        while not channel.messages:
            await asyncio.sleep(0.01)
        loop.stop()
        await asyncio.wait_for(task, timeout=2.0)

        assert len(channel.messages) == 1

    async def test_cycles_repeat_on_interval(self, channel: RecordingChannel) -> None:
        loop = _loop(FakeLister([[]]), channel, interval_seconds=0.01)
        task = asyncio.create_task(loop.run_forever())

        while len(channel.messages) < 3:
            await asyncio.sleep(0.01)
        loop.stop()
        await asyncio.wait_for(task, timeout=2.0)

        assert loop.last_cycle is not None
        assert loop.last_cycle.cycle >= 3

    async def test_fatal_list_error_ends_loop(self, channel: RecordingChannel) -> None:
        loop = _loop(FakeLister([RuntimeError("gone")]), channel, exit_on_list_error=True)
        with pytest.raises(ResourceListError):
            await asyncio.wait_for(loop.run_forever(), timeout=2.0)
