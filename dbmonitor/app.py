"""Application bootstrap for dbmonitor.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config → logging → K8s client → lister/quota checker
              → reconciler → notifications → poll loop → REST

Shutdown stops the poll loop first, then the REST server, then closes the
Kubernetes connection pool.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

from dbmonitor.config import load_config
from dbmonitor.exceptions import ResourceListError
from dbmonitor.models.config import MonitorConfig
from dbmonitor.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

    from dbmonitor.poller import PollLoop


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class MonitorApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    ``stop()`` is safe to call on an app that was never started or is
    already stopped.
    """

    def __init__(self, config: MonitorConfig | None = None) -> None:
        self.config = config

        self._api_client: object | None = None
        self._lister: object | None = None
        self._quota_checker: object | None = None
        self._reconciler: object | None = None
        self._dispatcher: object | None = None
        self._rest_server: object | None = None
        self.poll_loop: PollLoop | None = None

        self._background_tasks: list[asyncio.Task[None]] = []

        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        """
        if self.config is None:
            try:
                self.config = load_config()
            except ValueError as exc:
                raise _ComponentError("config", exc) from exc

        setup_logging(self.config.log.level)
        self._log = get_logger("app")
        self._log.info("dbmonitor starting", version=_dbmonitor_version(), gvr=self.config.cluster.gvr)

        await self._start_k8s_client()
        self._start_cluster_adapters()
        self._start_reconciler()
        self._start_notifications()
        self._start_poll_loop()
        await self._start_rest()

        self._running = True
        self._log.info("dbmonitor started", interval_seconds=self.config.poll.interval_seconds)

    async def _start_k8s_client(self) -> None:
        assert self._log is not None
        assert self.config is not None
        self._log.debug("starting k8s client")
        try:
            from dbmonitor.cluster.client import connect

            self._api_client = await connect(self.config.cluster.kubeconfig)
        except Exception as exc:
            raise _ComponentError("k8s_client", exc) from exc

    def _start_cluster_adapters(self) -> None:
        assert self._log is not None
        assert self.config is not None
        try:
            from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

            from dbmonitor.cluster.lister import ResourceLister
            from dbmonitor.cluster.quota import ResourceQuotaChecker

            cluster = self.config.cluster
            self._lister = ResourceLister(k8s_client.CustomObjectsApi(self._api_client), cluster)
            self._quota_checker = ResourceQuotaChecker(
                k8s_client.CoreV1Api(self._api_client),
                quota_name=cluster.quota_name,
                request_timeout=cluster.request_timeout,
            )
            self._log.info("cluster adapters started", quota=cluster.quota_name)
        except Exception as exc:
            raise _ComponentError("cluster_adapters", exc) from exc

    def _start_reconciler(self) -> None:
        assert self._log is not None
        assert self.config is not None
        from dbmonitor.reconciler import StatusReconciler

        policy = self.config.reconciler
        self._reconciler = StatusReconciler(
            self._quota_checker,  # type: ignore[arg-type]
            strict_debt_suppression=policy.strict_debt_suppression,
            quota_lookup_failure=policy.quota_lookup_failure,
        )
        self._log.info(
            "reconciler started",
            strict_debt_suppression=policy.strict_debt_suppression,
            quota_lookup_failure=policy.quota_lookup_failure,
        )

    def _start_notifications(self) -> None:
        assert self._log is not None
        assert self.config is not None
        from dbmonitor.notifications import build_notification_dispatcher

        self._dispatcher = build_notification_dispatcher(self.config.notifications)
        self._log.info("notifications started")

    def _start_poll_loop(self) -> None:
        assert self.config is not None
        from dbmonitor.poller import PollLoop

        poll = self.config.poll
        self.poll_loop = PollLoop(
            lister=self._lister,  # type: ignore[arg-type]
            reconciler=self._reconciler,  # type: ignore[arg-type]
            dispatcher=self._dispatcher,  # type: ignore[arg-type]
            interval_seconds=poll.interval_seconds,
            exit_on_list_error=poll.exit_on_list_error,
            send_empty_reports=poll.send_empty_reports,
        )

    async def _start_rest(self) -> None:
        """Start the uvicorn status server, unless disabled."""
        assert self._log is not None
        assert self.config is not None
        if not self.config.api.enabled:
            self._log.info("rest api disabled")
            return
        try:
            import uvicorn  # type: ignore[import-untyped]

            from dbmonitor.api import create_app

            uv_config = uvicorn.Config(
                app=create_app(poll_loop=self.poll_loop, config=self.config),
                host="0.0.0.0",
                port=self.config.api.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            task = asyncio.create_task(self._serve_rest(server), name="rest-server")
            self._background_tasks.append(task)
            self._rest_server = server
            self._log.info("rest api started", port=self.config.api.port)
        except Exception as exc:
            # The status API is optional; polling continues without it
            self._log.warning("rest api failed to start", error=str(exc))
            self._rest_server = None

    async def _serve_rest(self, server: object) -> None:
        """Run uvicorn until cancelled; a bind failure only disables the API.

        uvicorn reports startup failures by calling ``sys.exit``, so the
        SystemExit is contained here instead of ending the event loop.
        """
        assert self._log is not None
        try:
            await server.serve()  # type: ignore[attr-defined]
        except (SystemExit, OSError) as exc:
            self._log.warning("rest api failed to start", error=repr(exc))
            self._rest_server = None

    # ------------------------------------------------------------------
    # Run / shutdown
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Block in the poll loop until ``stop()`` is requested.

        Raises:
            ResourceListError: when the loop is configured to exit on list errors.
        """
        assert self.poll_loop is not None
        await self.poll_loop.run_forever()

    def request_stop(self) -> None:
        if self.poll_loop is not None:
            self.poll_loop.stop()

    async def stop(self) -> None:
        """Stop the poll loop and background tasks, then close the K8s client."""
        if not self._running and self._log is None:
            return

        log = self._log or get_logger("app")
        log.info("dbmonitor shutting down")
        self._running = False
        self.request_stop()

        for task in reversed(self._background_tasks):
            if not task.done():
                task.cancel()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()
        self._rest_server = None

        if self._api_client is not None:
            try:
                await self._api_client.close()  # type: ignore[attr-defined]
            except Exception as exc:
                log.debug("k8s client close raised (non-fatal)", error=str(exc))
            self._api_client = None

        log.info("dbmonitor stopped")


def _dbmonitor_version() -> str:
    from dbmonitor import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main() -> None:
    """Create the app, register OS signals, poll until shutdown is requested."""
    app = MonitorApp()
    loop = asyncio.get_running_loop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, app.request_stop)

    try:
        await app.start()
        await app.run()
    except _ComponentError as exc:
        get_logger("app").critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        raise SystemExit(1) from exc
    except ResourceListError as exc:
        get_logger("app").critical("fatal resource list error", gvr=exc.gvr, error=str(exc.cause))
        raise SystemExit(1) from exc
    finally:
        await app.stop()


def run() -> None:
    """Console-script entry point (``dbmonitor``)."""
    asyncio.run(main())
