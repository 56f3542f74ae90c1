# notifications/discord_client.py
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..utils.logger import get_logger
from ..utils.models import NotificationResult
from config.settings import discord_config


class DiscordMessage(BaseModel):
    """Webhook payload accepted by Discord."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    content: str = Field(..., min_length=1, max_length=2000, description="Message text")
    username: Optional[str] = Field(None, description="Overrides the webhook display name")
    avatar_url: Optional[str] = Field(None, description="Overrides the webhook avatar")


class DiscordClient:
    def __init__(self, webhook_url: Optional[str] = None,
                 http_client: Optional[httpx.AsyncClient] = None,
                 timeout: Optional[float] = None):
        self.logger = get_logger("discord_client")
        self.webhook_url = webhook_url if webhook_url is not None else discord_config.webhook_url
        self.http_client = http_client
        self.timeout = timeout or discord_config.timeout_seconds

    async def send(self, message: DiscordMessage) -> NotificationResult:
        if not self.webhook_url:
            self.logger.error("discord_webhook_not_configured")
            return NotificationResult(success=False,
                                      message="Discord webhook URL is not configured on the server.")

        payload = message.model_dump(exclude_none=True)
        try:
            if self.http_client is not None:
                response = await self.http_client.post(self.webhook_url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(self.webhook_url, json=payload, timeout=self.timeout)
        except httpx.HTTPError as e:
            self.logger.error("discord_send_failed", error=str(e), error_type=type(e).__name__)
            return NotificationResult(success=False, message=f"An unexpected error occurred: {e}")

        if response.is_error:
            self.logger.error("discord_send_rejected", status=response.status_code, body=response.text[:500])
            return NotificationResult(
                success=False,
                message=f"Failed to send message. Discord API responded with: {response.status_code}",
            )

        self.logger.info("discord_message_sent", status=response.status_code)
        return NotificationResult(success=True, message="Notification sent to Discord successfully.")
