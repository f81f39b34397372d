"""Kubernetes client bootstrap."""

from __future__ import annotations

import os

from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio import config as k8s_config  # type: ignore[import-untyped]

from dbmonitor.exceptions import ClusterConnectionError
from dbmonitor.observability.logging import get_logger

_log = get_logger("cluster.client")


async def connect(kubeconfig: str = "") -> k8s_client.ApiClient:
    """Return an ApiClient configured from *kubeconfig*, else in-cluster config.

    The kubeconfig file wins when it exists; otherwise the pod service
    account is used.

    Raises:
        ClusterConnectionError: if neither source yields a usable configuration.
    """
    configuration = k8s_client.Configuration()
    try:
        if kubeconfig and os.path.isfile(kubeconfig):
            # load_kube_config() is async in kubernetes-asyncio
            await k8s_config.load_kube_config(config_file=kubeconfig, client_configuration=configuration)
            _log.info("k8s client configured from kubeconfig", path=kubeconfig)
        else:
            # load_incluster_config() is synchronous in kubernetes-asyncio
            k8s_config.load_incluster_config(client_configuration=configuration)
            _log.info("k8s client configured from in-cluster service account")
    except Exception as exc:
        raise ClusterConnectionError(f"Cannot configure Kubernetes client: {exc}") from exc

    return k8s_client.ApiClient(configuration=configuration)
