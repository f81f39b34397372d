"""Read-only status routes."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Request

from dbmonitor.api.schemas import CycleSummaryResponse, HealthResponse, StatusResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    from dbmonitor import __version__

    return HealthResponse(version=__version__)


@router.get("/status", response_model=StatusResponse)
async def status(request: Request) -> StatusResponse:
    poll_loop = request.app.state.poll_loop
    config = request.app.state.config

    snapshot = poll_loop.reconciler.state.snapshot()
    last = poll_loop.last_cycle
    return StatusResponse(
        gvr=config.cluster.gvr,
        poll_interval_seconds=config.poll.interval_seconds,
        tracked_abnormal=snapshot["last_status"],
        debt_namespaces=snapshot["debt_namespaces"],
        last_cycle=CycleSummaryResponse(**asdict(last)) if last is not None else None,
    )
