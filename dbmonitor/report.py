"""Plain-text report table sent once per poll cycle."""

from __future__ import annotations

from collections.abc import Iterable

from dbmonitor.models.resources import ReportRow

COLUMN_WIDTH = 50

_HEADER = ("DatabaseName", "Status", "Namespace")


def _line(name: str, phase: str, namespace: str) -> str:
    return f"{name:<{COLUMN_WIDTH}} {phase:<{COLUMN_WIDTH}} {namespace:<{COLUMN_WIDTH}}\n"


def format_report(rows: Iterable[ReportRow]) -> str:
    """Render *rows* under a fixed header; header-only when *rows* is empty.

    Values longer than the column width are not truncated.
    """
    parts = [_line(*_HEADER)]
    parts.extend(_line(row.name, row.phase, row.namespace) for row in rows)
    return "".join(parts)
