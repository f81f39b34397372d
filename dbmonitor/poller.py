"""Fixed-interval poll loop.

Each cycle runs list -> reconcile -> format -> notify to completion before
the interval sleep starts, so cycles never overlap.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from dbmonitor.exceptions import ResourceListError
from dbmonitor.models.resources import ManagedDatabase
from dbmonitor.notifications.manager import NotificationDispatcher
from dbmonitor.observability.logging import bind_cycle, get_logger
from dbmonitor.observability.metrics import (
    debt_namespaces,
    poll_cycles_total,
    reported_resources,
    tracked_abnormal_resources,
)
from dbmonitor.reconciler import StatusReconciler
from dbmonitor.report import format_report

_log = get_logger("poller")


class Lister(Protocol):
    async def list(self) -> list[ManagedDatabase]: ...


@dataclass(frozen=True)
class PollCycleSummary:
    """What happened in one poll cycle; the latest is served by the status API."""

    cycle: int
    started_at: datetime
    finished_at: datetime
    observed: int = 0
    reported: int = 0
    notified: bool | None = None
    error: str = ""


class PollLoop:
    """Drives the reconciler once every ``interval_seconds`` until stopped.

    Args:
        lister:             Source of the current managed databases.
        reconciler:         Owner of the cross-cycle state.
        dispatcher:         Receives the rendered report.
        interval_seconds:   Sleep between the end of one cycle and the next.
        exit_on_list_error: Re-raise ResourceListError instead of skipping the cycle.
        send_empty_reports: Send the header-only report when nothing qualifies.
    """

    def __init__(
        self,
        lister: Lister,
        reconciler: StatusReconciler,
        dispatcher: NotificationDispatcher,
        interval_seconds: float = 300,
        exit_on_list_error: bool = False,
        send_empty_reports: bool = True,
    ) -> None:
        self._lister = lister
        self._reconciler = reconciler
        self._dispatcher = dispatcher
        self._interval = interval_seconds
        self._exit_on_list_error = exit_on_list_error
        self._send_empty = send_empty_reports
        self._stop_event = asyncio.Event()
        self._cycle = 0
        self.last_cycle: PollCycleSummary | None = None

    @property
    def reconciler(self) -> StatusReconciler:
        return self._reconciler

    async def run_once(self) -> PollCycleSummary:
        """Run a single cycle and return its summary.

        Raises:
            ResourceListError: only when ``exit_on_list_error`` is set.
        """
        self._cycle += 1
        bind_cycle(self._cycle)
        started = datetime.now(tz=UTC)

        try:
            databases = await self._lister.list()
        except ResourceListError as exc:
            poll_cycles_total.labels(outcome="list_error").inc()
            _log.error("resource_list_failed", gvr=exc.gvr, error=str(exc.cause))
            if self._exit_on_list_error:
                raise
            summary = PollCycleSummary(
                cycle=self._cycle,
                started_at=started,
                finished_at=datetime.now(tz=UTC),
                error=str(exc),
            )
            self.last_cycle = summary
            return summary

        result = await self._reconciler.reconcile(databases)

        notified: bool | None = None
        if result.rows or self._send_empty:
            notified = await self._dispatcher.send(format_report(result.rows))

        state = self._reconciler.state
        reported_resources.set(len(result.rows))
        tracked_abnormal_resources.set(len(state.last_status))
        debt_namespaces.set(sum(1 for flagged in state.debt_record.values() if flagged))
        poll_cycles_total.labels(outcome="ok").inc()

        summary = PollCycleSummary(
            cycle=self._cycle,
            started_at=started,
            finished_at=datetime.now(tz=UTC),
            observed=result.observed,
            reported=len(result.rows),
            notified=notified,
        )
        self.last_cycle = summary
        _log.info(
            "poll_cycle_completed",
            observed=result.observed,
            reported=len(result.rows),
            skipped=result.skipped,
            suppressed_debt=result.suppressed_debt,
            debt_namespaces_flagged=result.debt_namespaces_flagged,
            notified=notified,
        )
        return summary

    async def run_forever(self) -> None:
        """Loop until ``stop()`` is called."""
        _log.info("poll_loop_started", interval_seconds=self._interval)
        while not self._stop_event.is_set():
            await self.run_once()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            except TimeoutError:
                pass
        _log.info("poll_loop_stopped", cycles=self._cycle)

    def stop(self) -> None:
        """Wake the interval sleep and end the loop after the current cycle."""
        self._stop_event.set()
