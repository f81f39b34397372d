"""Status reconciliation for managed database clusters.

Decides, per poll cycle, which observed clusters belong in the outgoing
report and how the process-lifetime state changes:

* ``last_status``  -- cluster name -> last abnormal phase seen.  A name is
  present only after the cluster was abnormal for at least one full cycle.
* ``debt_record``  -- namespace -> True once its debt-limit quota has been
  found.  Never cleared.

Decision order for each cluster (first match wins):

1. no phase              -> skip, state untouched
2. Running / Stopped     -> forget the name, no report
3. name not yet tracked  -> track the phase, no report (grace cycle)
4. Failed, namespace not flagged -> consult the quota checker
     no marker           -> report, ``last_status`` left as is
     marker              -> flag namespace, forget the name, no report
     lookup failed       -> per ``quota_lookup_failure`` policy
5. anything else         -> report and refresh ``last_status``

Step 4 is gated on the debt flag only, so a namespace already flagged falls
through to step 5 and is reported again.  ``strict_debt_suppression``
closes that gap by suppressing step 5 for flagged namespaces.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from dbmonitor.models.resources import (
    FAILED_PHASE,
    ManagedDatabase,
    QuotaStatus,
    ReportRow,
)
from dbmonitor.observability.logging import get_logger

_log = get_logger("reconciler")

LOOKUP_FAILURE_REPORT = "report"
LOOKUP_FAILURE_SUPPRESS = "suppress"


class QuotaChecker(Protocol):
    """Anything that can tell whether a namespace carries the debt marker."""

    async def check(self, namespace: str) -> QuotaStatus: ...


@dataclass
class ReconcilerState:
    """State carried between poll cycles."""

    last_status: dict[str, str] = field(default_factory=dict)
    debt_record: dict[str, bool] = field(default_factory=dict)

    def in_debt(self, namespace: str) -> bool:
        return self.debt_record.get(namespace, False)

    def snapshot(self) -> dict[str, object]:
        """Return a copy safe to hand to readers outside the poll loop."""
        return {
            "last_status": dict(self.last_status),
            "debt_namespaces": sorted(ns for ns, flagged in self.debt_record.items() if flagged),
        }


@dataclass
class CycleResult:
    """Outcome of reconciling one poll cycle's observations."""

    rows: list[ReportRow] = field(default_factory=list)
    observed: int = 0
    skipped: int = 0
    suppressed_debt: int = 0
    debt_namespaces_flagged: list[str] = field(default_factory=list)


async def reconcile(
    observations: Iterable[ManagedDatabase],
    state: ReconcilerState,
    quota_checker: QuotaChecker,
    *,
    strict_debt_suppression: bool = False,
    quota_lookup_failure: str = LOOKUP_FAILURE_REPORT,
) -> CycleResult:
    """Apply the decision policy to *observations*, mutating *state* in place.

    The quota checker is consulted at most once per namespace per call.
    """
    result = CycleResult()
    quota_cache: dict[str, QuotaStatus] = {}

    for db in observations:
        result.observed += 1
        name, namespace, phase = db.name, db.namespace, db.phase

        if phase is None:
            _log.warning("status_unavailable", name=name, namespace=namespace)
            result.skipped += 1
            continue

        if db.is_terminal:
            if state.last_status.pop(name, None) is not None:
                _log.info("database_recovered", name=name, namespace=namespace, phase=phase)
            continue

        if name not in state.last_status:
            state.last_status[name] = phase
            _log.debug("abnormal_first_seen", name=name, namespace=namespace, phase=phase)
            continue

        if phase == FAILED_PHASE and not state.in_debt(namespace):
            if namespace not in quota_cache:
                quota_cache[namespace] = await quota_checker.check(namespace)
            quota = quota_cache[namespace]

            if quota is QuotaStatus.HAS_MARKER:
                state.debt_record[namespace] = True
                state.last_status.pop(name, None)
                result.suppressed_debt += 1
                result.debt_namespaces_flagged.append(namespace)
                _log.info("namespace_in_debt", name=name, namespace=namespace)
                continue

            if quota is QuotaStatus.LOOKUP_FAILED and quota_lookup_failure == LOOKUP_FAILURE_SUPPRESS:
                _log.warning("failed_report_deferred", name=name, namespace=namespace)
                continue

            result.rows.append(ReportRow(name=name, phase=phase, namespace=namespace))
            continue

        if strict_debt_suppression and state.in_debt(namespace):
            result.suppressed_debt += 1
            _log.debug("report_suppressed_by_debt", name=name, namespace=namespace, phase=phase)
            continue

        result.rows.append(ReportRow(name=name, phase=phase, namespace=namespace))
        state.last_status[name] = phase

    return result


class StatusReconciler:
    """Owns the reconciler state and the policy knobs applied to it.

    Not safe for concurrent use; the poll loop is its only caller.
    """

    def __init__(
        self,
        quota_checker: QuotaChecker,
        *,
        strict_debt_suppression: bool = False,
        quota_lookup_failure: str = LOOKUP_FAILURE_REPORT,
        state: ReconcilerState | None = None,
    ) -> None:
        if quota_lookup_failure not in (LOOKUP_FAILURE_REPORT, LOOKUP_FAILURE_SUPPRESS):
            raise ValueError(f"Unknown quota lookup failure policy: {quota_lookup_failure!r}")
        self._quota_checker = quota_checker
        self._strict = strict_debt_suppression
        self._lookup_failure = quota_lookup_failure
        self.state = state or ReconcilerState()

    async def reconcile(self, observations: Iterable[ManagedDatabase]) -> CycleResult:
        return await reconcile(
            observations,
            self.state,
            self._quota_checker,
            strict_debt_suppression=self._strict,
            quota_lookup_failure=self._lookup_failure,
        )
