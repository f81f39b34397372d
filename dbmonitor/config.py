"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from dbmonitor.models.config import (
    APIConfig,
    ClusterConfig,
    LogConfig,
    MonitorConfig,
    NotificationConfig,
    PollConfig,
    ReconcilerConfig,
)

_QUOTA_LOOKUP_FAILURE_POLICIES = {"report", "suppress"}


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"DBMON_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_float(key: str, default: float, min_val: float | None = None) -> float:
    val = float(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_quota_lookup_failure(value: str) -> str:
    if value.lower() not in _QUOTA_LOOKUP_FAILURE_POLICIES:
        raise ValueError(
            f"Invalid quota lookup failure policy: {value}. Must be one of {_QUOTA_LOOKUP_FAILURE_POLICIES}"
        )
    return value.lower()


def _validate_webhook_url(value: str) -> str:
    if value and not value.startswith("https://"):
        raise ValueError(f"Invalid webhook URL: {value!r}")
    return value


def load_config() -> MonitorConfig:
    """Load configuration from DBMON_* environment variables."""
    return MonitorConfig(
        cluster=ClusterConfig(
            kubeconfig=_env("KUBECONFIG", "config/kubeconfig"),
            group=_env("RESOURCE_GROUP", "apps.kubeblocks.io"),
            version=_env("RESOURCE_VERSION", "v1alpha1"),
            plural=_env("RESOURCE_PLURAL", "clusters"),
            quota_name=_env("QUOTA_NAME", "debt-limit0"),
            request_timeout=_env_float("K8S_TIMEOUT", 30.0, min_val=1.0),
        ),
        poll=PollConfig(
            interval_seconds=_env_int("POLL_INTERVAL", 300, min_val=10),
            exit_on_list_error=_env_bool("EXIT_ON_LIST_ERROR", False),
            send_empty_reports=_env_bool("SEND_EMPTY_REPORTS", True),
        ),
        reconciler=ReconcilerConfig(
            strict_debt_suppression=_env_bool("STRICT_DEBT_SUPPRESSION", False),
            quota_lookup_failure=_validate_quota_lookup_failure(_env("QUOTA_LOOKUP_FAILURE", "report")),
        ),
        notifications=NotificationConfig(
            feishu_webhook_url=_validate_webhook_url(_env("FEISHU_WEBHOOK_URL", "")),
            timeout_seconds=_env_float("NOTIFY_TIMEOUT", 10.0, min_val=1.0),
        ),
        api=APIConfig(
            enabled=_env_bool("API_ENABLED", True),
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
