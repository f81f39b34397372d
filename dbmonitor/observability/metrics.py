"""Prometheus metrics for dbmonitor.

All collectors live on the default registry and are exposed by the status
API under ``/metrics``.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

poll_cycles_total = Counter(
    "dbmonitor_poll_cycles_total",
    "Poll cycles run, labelled by outcome.",
    ["outcome"],
)

reported_resources = Gauge(
    "dbmonitor_reported_resources",
    "Resources included in the most recent report.",
)

tracked_abnormal_resources = Gauge(
    "dbmonitor_tracked_abnormal_resources",
    "Resources currently recorded with an abnormal phase.",
)

debt_namespaces = Gauge(
    "dbmonitor_debt_namespaces",
    "Namespaces flagged as in debt since process start.",
)

quota_checks_total = Counter(
    "dbmonitor_quota_checks_total",
    "Debt-limit quota lookups, labelled by outcome.",
    ["outcome"],
)

notifications_total = Counter(
    "dbmonitor_notifications_total",
    "Notification delivery attempts.",
    ["channel", "success"],
)
