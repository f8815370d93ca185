"""
Slack Handler

Posts formatted nominations to a Slack incoming webhook. This is the
mandatory channel: any transport error or non-2xx response raises.
"""

import logging
from typing import Optional, Dict, Any

import httpx

from .base import BaseHandler, DispatchError

logger = logging.getLogger("nominations.intake.handlers.slack")


class NotificationError(DispatchError):
    """Slack webhook returned a non-success status."""


class SlackNotifier(BaseHandler):
    """
    Sender for Slack incoming webhooks.

    The webhook URL is itself a credential, so diagnostics only report
    whether it is set.
    """

    def __init__(
        self,
        webhook_url: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Slack notifier.

        Args:
            webhook_url: Slack incoming webhook URL
            transport: Optional httpx transport (tests inject MockTransport)
        """
        super().__init__("slack")
        self._webhook_url = webhook_url
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._webhook_url)

    def config_status(self) -> Dict[str, Any]:
        return {"webhookUrl": self.is_configured}

    async def send(self, message: Dict[str, Any]) -> None:
        """
        Post a Block Kit message.

        Raises:
            NotificationError: webhook not configured or non-2xx response
            httpx.HTTPError: transport failure
        """
        if not self.is_configured:
            raise NotificationError("Slack webhook URL is not configured")

        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(self._webhook_url, json=message)

        if not response.is_success:
            logger.error("Slack webhook error: %s %s", response.status_code, response.text)
            raise NotificationError(
                f"Slack webhook returned {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
