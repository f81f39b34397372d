"""Debt-limit ResourceQuota lookup.

A namespace whose billing is suspended carries a ResourceQuota with a fixed
name.  Only its existence matters; its content is ignored.
"""

from __future__ import annotations

from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from dbmonitor.models.resources import QuotaStatus
from dbmonitor.observability.logging import get_logger
from dbmonitor.observability.metrics import quota_checks_total

_log = get_logger("cluster.quota")


class ResourceQuotaChecker:
    """Reports whether the debt-limit ResourceQuota exists in a namespace."""

    def __init__(
        self,
        api: k8s_client.CoreV1Api,
        quota_name: str = "debt-limit0",
        request_timeout: float = 30.0,
    ) -> None:
        self._api = api
        self._quota_name = quota_name
        self._timeout = request_timeout

    async def check(self, namespace: str) -> QuotaStatus:
        status = await self._lookup(namespace)
        quota_checks_total.labels(outcome=status.value).inc()
        return status

    async def _lookup(self, namespace: str) -> QuotaStatus:
        try:
            await self._api.read_namespaced_resource_quota(
                self._quota_name,
                namespace,
                _request_timeout=self._timeout,
            )
        except ApiException as exc:
            if exc.status == 404:
                return QuotaStatus.NO_MARKER
            _log.warning(
                "quota_lookup_failed",
                namespace=namespace,
                quota=self._quota_name,
                status_code=exc.status,
                error=str(exc.reason),
            )
            return QuotaStatus.LOOKUP_FAILED
        except Exception as exc:  # noqa: BLE001
            _log.warning(
                "quota_lookup_failed",
                namespace=namespace,
                quota=self._quota_name,
                error=str(exc),
            )
            return QuotaStatus.LOOKUP_FAILED

        _log.info("debt_quota_found", namespace=namespace, quota=self._quota_name)
        return QuotaStatus.HAS_MARKER
