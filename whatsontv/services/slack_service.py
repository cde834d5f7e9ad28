"""
Slack delivery

Posts rendered messages through the Slack Web API (chat.postMessage).
Delivery failures are never swallowed: the end user would receive nothing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
import logging

import httpx

from whatsontv.services.config_service import SlackOptions


logger = logging.getLogger(__name__)

SLACK_POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"


class DeliveryError(RuntimeError):
    """Raised when Slack rejects or cannot receive a message"""
    pass


@dataclass(slots=True)
class SlackMessage:
    """Structured message: target channel, plain-text fallback, blocks"""
    channel: str
    text: str
    blocks: list[dict[str, Any]] = field(default_factory=list)
    username: str | None = None
    icon_emoji: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"channel": self.channel, "text": self.text}
        if self.blocks:
            payload["blocks"] = self.blocks
        if self.username:
            payload["username"] = self.username
        if self.icon_emoji:
            payload["icon_emoji"] = self.icon_emoji
        return payload


class SlackClient:
    """Sends SlackMessage payloads using a bot token"""

    def __init__(
        self,
        options: SlackOptions,
        *,
        api_url: str = SLACK_POST_MESSAGE_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.options = options
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport

    async def send_message(self, message: SlackMessage) -> None:
        """
        Post a message, filling in channel / username / icon defaults

        Raises:
            DeliveryError: On HTTP failure or an 'ok: false' Slack response
        """
        if not message.channel:
            message.channel = self.options.channel_id
        if not message.username:
            message.username = self.options.username
        if not message.icon_emoji:
            message.icon_emoji = self.options.icon_emoji

        headers = {
            "Authorization": f"Bearer {self.options.token}",
            "Content-Type": "application/json; charset=utf-8",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, json=message.to_payload(), headers=headers)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as e:
            logger.error("Error sending Slack message to %s: %s", message.channel, e)
            raise DeliveryError(f"Failed to send Slack message: {e}") from e
        except ValueError as e:
            raise DeliveryError("Slack returned a non-JSON response") from e

        if not isinstance(body, dict) or not body.get("ok"):
            error = body.get("error", "unknown_error") if isinstance(body, dict) else "unknown_error"
            logger.error("Slack rejected message to %s: %s", message.channel, error)
            raise DeliveryError(f"Slack rejected message: {error}")

        logger.info("Sent Slack message to %s (%s blocks)", message.channel, len(message.blocks))
