"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ClusterConfig:
    """Kubernetes connection and polled resource configuration."""

    kubeconfig: str = "config/kubeconfig"
    group: str = "apps.kubeblocks.io"
    version: str = "v1alpha1"
    plural: str = "clusters"
    quota_name: str = "debt-limit0"
    request_timeout: float = 30.0

    @property
    def gvr(self) -> str:
        return f"{self.group}/{self.version}/{self.plural}"


@dataclass
class PollConfig:
    """Poll loop configuration."""

    interval_seconds: int = 300
    exit_on_list_error: bool = False
    send_empty_reports: bool = True


@dataclass
class ReconcilerConfig:
    """Status reconciliation policy."""

    strict_debt_suppression: bool = False
    quota_lookup_failure: str = "report"


@dataclass
class NotificationConfig:
    """Notification channel configuration."""

    feishu_webhook_url: str = ""
    timeout_seconds: float = 10.0


@dataclass
class APIConfig:
    """Status API configuration."""

    enabled: bool = True
    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class MonitorConfig:
    """Top-level dbmonitor configuration."""

    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    poll: PollConfig = field(default_factory=PollConfig)
    reconciler: ReconcilerConfig = field(default_factory=ReconcilerConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
