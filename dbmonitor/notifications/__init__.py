"""Notification system for dbmonitor.

Delivers the per-cycle report text to the configured channels.

Exports:
    NotificationChannel       -- Abstract base for all channel implementations.
    NotificationDispatcher    -- Sends a report to every registered channel.
    FeishuNotificationChannel -- Feishu bot webhook channel.
    build_notification_dispatcher -- Factory used by the application bootstrap.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from dbmonitor.notifications.feishu import FeishuNotificationChannel
from dbmonitor.notifications.manager import NotificationChannel, NotificationDispatcher

if TYPE_CHECKING:
    from dbmonitor.models.config import NotificationConfig

_log = structlog.get_logger(component="notifications")

__all__ = [
    "FeishuNotificationChannel",
    "NotificationChannel",
    "NotificationDispatcher",
    "build_notification_dispatcher",
]


def build_notification_dispatcher(config: NotificationConfig) -> NotificationDispatcher:
    """Build a NotificationDispatcher from *config*.

    The Feishu channel is enabled only when a webhook URL is configured
    (``DBMON_FEISHU_WEBHOOK_URL``).
    """
    channels: list[NotificationChannel] = []

    if config.feishu_webhook_url:
        channels.append(
            FeishuNotificationChannel(
                webhook_url=config.feishu_webhook_url,
                timeout=config.timeout_seconds,
            )
        )
        _log.info("feishu_channel_enabled")
    else:
        _log.warning("no_notification_channels_configured")

    return NotificationDispatcher(channels=channels)
