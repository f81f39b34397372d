"""Notification channel contract and dispatcher.

NotificationChannel    -- ABC every channel must implement.
NotificationDispatcher -- Delivers one report to every registered channel in
                          turn; a failing channel never stops the others or
                          the poll loop.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

from dbmonitor.observability.metrics import notifications_total

_log = structlog.get_logger(component="notifications.manager")


class NotificationChannel(ABC):
    """Abstract base class for all notification channels.

    ``send`` must not raise; it returns ``False`` instead.
    """

    @property
    @abstractmethod
    def channel_name(self) -> str:
        """Human-readable channel identifier used in metrics and logs."""

    @abstractmethod
    async def send(self, text: str) -> bool:
        """Deliver *text* via this channel.

        Returns:
            True  -- message accepted by the remote endpoint.
            False -- delivery failed (already logged inside implementation).
        """


class NotificationDispatcher:
    """Sends a report to every registered channel, sequentially.

    No retries and no backlog: a report that fails to deliver is dropped and
    the next cycle's report is independent of it.
    """

    def __init__(self, channels: list[NotificationChannel]) -> None:
        self._channels = channels

    @property
    def channels(self) -> list[NotificationChannel]:
        return list(self._channels)

    async def send(self, text: str) -> bool:
        """Deliver *text*; True when at least one channel accepted it."""
        if not self._channels:
            _log.info("notification_not_sent", reason="no channels configured", text=text)
            return False

        delivered = False
        for channel in self._channels:
            delivered = await self._send_one(channel, text) or delivered
        return delivered

    async def _send_one(self, channel: NotificationChannel, text: str) -> bool:
        try:
            success = await channel.send(text)
        except Exception as exc:  # noqa: BLE001
            _log.error(
                "notification_channel_unexpected_error",
                channel=channel.channel_name,
                error=str(exc),
            )
            success = False

        label = "true" if success else "false"
        notifications_total.labels(channel=channel.channel_name, success=label).inc()

        if success:
            _log.info("notification_sent", channel=channel.channel_name)
        else:
            _log.warning("notification_failed", channel=channel.channel_name)
        return success
