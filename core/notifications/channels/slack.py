"""Slack incoming-webhook delivery channel."""

import logging
from typing import Protocol

import httpx

from core import config
from core.notifications.types import SendResult

logger = logging.getLogger(__name__)


class MessageSender(Protocol):
    async def send(self, text: str) -> SendResult: ...


class SlackWebhookSender:
    """
    Posts text messages to a single Slack channel through an incoming webhook.

    Every call is bounded by `timeout` seconds. Failures never raise: they are
    returned as SendResult.failed(reason) so callers can record them.
    """

    def __init__(
        self,
        webhook_url: str,
        username: str = "SWAB Bot",
        icon_emoji: str = ":clock1:",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not webhook_url:
            raise ValueError("SLACK_WEBHOOK_URL is required")
        self.webhook_url = webhook_url
        self.username = username
        self.icon_emoji = icon_emoji
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_env(cls) -> "SlackWebhookSender":
        """Build a sender from SLACK_* environment variables."""
        sender = cls(
            webhook_url=config.get_slack_webhook_url(),
            username=config.get_slack_username(),
            icon_emoji=config.get_slack_icon_emoji(),
            timeout=config.get_slack_timeout(),
        )
        logger.info(f"Slack webhook configured: {sender.webhook_url[:50]}...")
        return sender

    def build_payload(self, text: str, icon_emoji: str | None = None) -> dict:
        return {
            "text": text,
            "username": self.username,
            "icon_emoji": icon_emoji or self.icon_emoji,
        }

    async def send(self, text: str, icon_emoji: str | None = None) -> SendResult:
        """
        Post one message.

        Args:
            text: Message body, delivered verbatim
            icon_emoji: Optional override for the bot icon

        Returns:
            SendResult.ok() on a 2xx response, SendResult.failed(reason) otherwise
        """
        payload = self.build_payload(text, icon_emoji)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.webhook_url, json=payload)
                response.raise_for_status()
        except httpx.TimeoutException:
            logger.error(f"Slack webhook timed out after {self.timeout}s")
            return SendResult.failed(f"Timed out after {self.timeout}s")
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Slack API error {status}: {e.response.text}")
            if status == 404:
                logger.error(
                    "Webhook URL not found (404). Check that the URL is correct, "
                    "the Slack app is still installed and the webhook hasn't been revoked."
                )
            return SendResult.failed(f"Slack returned HTTP {status}: {e.response.text}")
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach Slack webhook: {e}")
            return SendResult.failed(str(e) or type(e).__name__)

        logger.debug(f"Slack message sent ({response.status_code})")
        return SendResult.ok()
