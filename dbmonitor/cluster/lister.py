"""Cluster-wide listing of managed database custom resources."""

from __future__ import annotations

from typing import Any

from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

from dbmonitor.exceptions import ResourceListError
from dbmonitor.models.config import ClusterConfig
from dbmonitor.models.resources import ManagedDatabase
from dbmonitor.observability.logging import get_logger

_log = get_logger("cluster.lister")


def _nested_str(obj: dict[str, Any], *path: str) -> str | None:
    """Return the string at *path* inside *obj*, or None if missing or not a string."""
    current: Any = obj
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current if isinstance(current, str) else None


def parse_item(item: dict[str, Any]) -> ManagedDatabase:
    """Map one raw custom object to a ManagedDatabase."""
    return ManagedDatabase(
        name=_nested_str(item, "metadata", "name") or "",
        namespace=_nested_str(item, "metadata", "namespace") or "",
        phase=_nested_str(item, "status", "phase"),
    )


class ResourceLister:
    """Lists every instance of one custom resource kind across all namespaces."""

    def __init__(self, api: k8s_client.CustomObjectsApi, config: ClusterConfig) -> None:
        self._api = api
        self._config = config

    async def list(self) -> list[ManagedDatabase]:
        """Return the current set of managed databases.

        Raises:
            ResourceListError: on any API or transport failure.
        """
        cfg = self._config
        try:
            response = await self._api.list_cluster_custom_object(
                cfg.group,
                cfg.version,
                cfg.plural,
                _request_timeout=cfg.request_timeout,
            )
        except Exception as exc:
            raise ResourceListError(cfg.gvr, exc) from exc

        items = response.get("items", []) if isinstance(response, dict) else []
        databases = [parse_item(item) for item in items if isinstance(item, dict)]
        _log.debug("resources_listed", gvr=cfg.gvr, count=len(databases))
        return databases
