"""Cluster access for dbmonitor.

Submodules
----------
client -- kubernetes-asyncio ApiClient bootstrap from kubeconfig or service account.
lister -- ResourceLister: lists every managed database custom resource.
quota  -- ResourceQuotaChecker: debt-limit ResourceQuota lookup per namespace.
"""

from dbmonitor.cluster.client import connect
from dbmonitor.cluster.lister import ResourceLister
from dbmonitor.cluster.quota import ResourceQuotaChecker

__all__ = ["ResourceLister", "ResourceQuotaChecker", "connect"]
