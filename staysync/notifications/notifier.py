# notifications/notifier.py
from typing import Optional

from pydantic import ValidationError

from .discord_client import DiscordClient, DiscordMessage
from ..utils.logger import get_logger
from ..utils.models import BookingData, Unit, NotificationResult
from config.settings import discord_config


class Notifier:
    """Admin-facing booking notifications. Delivery is best effort and never raises."""

    def __init__(self, discord: Optional[DiscordClient] = None):
        self.discord = discord or DiscordClient()
        self.logger = get_logger("notifier")

    async def send(self, content: str, username: Optional[str] = None,
                   avatar_url: Optional[str] = None) -> NotificationResult:
        try:
            message = DiscordMessage(
                content=content,
                username=username or discord_config.username,
                avatar_url=avatar_url or discord_config.avatar_url,
            )
        except ValidationError as e:
            self.logger.error("notification_invalid", error=str(e))
            return NotificationResult(success=False, message="Invalid notification payload")

        try:
            return await self.discord.send(message)
        except Exception as e:
            self.logger.error("notification_failed", error=str(e), error_type=type(e).__name__)
            return NotificationResult(success=False, message=f"An unexpected error occurred: {e}")

    async def notify_new_booking(self, booking: BookingData, unit: Optional[Unit]) -> NotificationResult:
        """Announce a directly entered booking."""
        unit_name = unit.name if unit else "Unknown unit"
        content = (
            f"📅 New booking confirmed!\n"
            f"Unit: {unit_name}\n"
            f"Guest: {booking.guest_name or 'Guest'}\n"
            f"From: {booking.check_in_date.date().isoformat()} "
            f"To: {booking.check_out_date.date().isoformat()}"
        )
        result = await self.send(content)
        self._log_result("new_booking", result, booking)
        return result

    async def notify_synced_booking(self, booking: BookingData, unit: Unit,
                                    platform: str) -> NotificationResult:
        """Announce a booking imported from an external calendar feed."""
        content = (
            f"🔄 New booking synced from {platform}!\n"
            f"Unit: {unit.name}\n"
            f"Guest: {booking.guest_name or 'Guest'}\n"
            f"From: {booking.check_in_date.date().isoformat()} "
            f"To: {booking.check_out_date.date().isoformat()}"
        )
        result = await self.send(content)
        self._log_result("synced_booking", result, booking)
        return result

    def _log_result(self, kind: str, result: NotificationResult, booking: BookingData):
        if result.success:
            self.logger.info(f"{kind}_notification_sent", booking_id=booking.id, uid=booking.uid)
        else:
            self.logger.warning(f"{kind}_notification_failed", booking_id=booking.id,
                                uid=booking.uid, reason=result.message)
