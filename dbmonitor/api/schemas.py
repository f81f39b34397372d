"""Pydantic response models for the status API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    error: str
    detail: str = ""


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str


class CycleSummaryResponse(BaseModel):
    cycle: int
    started_at: datetime
    finished_at: datetime
    observed: int
    reported: int
    notified: bool | None = None
    error: str = ""


class StatusResponse(BaseModel):
    """Current reconciler state plus the latest poll cycle."""

    gvr: str
    poll_interval_seconds: int
    tracked_abnormal: dict[str, str] = Field(default_factory=dict)
    debt_namespaces: list[str] = Field(default_factory=list)
    last_cycle: CycleSummaryResponse | None = None
