"""Feishu (Lark) custom bot notification channel.

Posts the report as a plain text message:

    {"msg_type": "text", "content": {"text": "<report>"}}
"""

from __future__ import annotations

import httpx
import structlog

from dbmonitor.notifications.manager import NotificationChannel

_log = structlog.get_logger(component="notifications.feishu")


class FeishuNotificationChannel(NotificationChannel):
    """Delivers reports to a Feishu bot webhook.

    Args:
        webhook_url: Full bot hook URL.
        timeout:     HTTP request timeout in seconds. Defaults to 10.
        transport:   Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not webhook_url:
            raise ValueError("Feishu webhook_url must not be empty")
        self._url = webhook_url
        self._timeout = timeout
        self._transport = transport

    @property
    def channel_name(self) -> str:
        return "feishu"

    async def send(self, text: str) -> bool:
        """POST *text* to the bot; True only on HTTP 200."""
        payload = build_payload(text)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._url, json=payload)
        except httpx.TimeoutException:
            _log.warning("feishu_request_timeout")
            return False
        except httpx.HTTPError as exc:
            _log.warning("feishu_http_error", error=str(exc))
            return False

        if response.status_code != httpx.codes.OK:
            _log.warning(
                "feishu_non_200_response",
                status_code=response.status_code,
                body=response.text[:200],
            )
            return False
        return True


def build_payload(text: str) -> dict[str, object]:
    return {"msg_type": "text", "content": {"text": text}}
