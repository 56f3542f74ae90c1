from .discord_client import DiscordClient, DiscordMessage
from .notifier import Notifier

__all__ = ['DiscordClient', 'DiscordMessage', 'Notifier']
