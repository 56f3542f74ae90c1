"""
Configuration settings for the Staysync booking and calendar sync system.
"""
import os
import json
from typing import Dict, Any, Optional
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass
class FirebaseConfig:
    """Firebase Admin / Firestore configuration settings."""
    service_account_key: str = os.getenv("SERVICE_ACCOUNT_KEY", "")
    credentials_file: str = os.getenv("FIREBASE_CREDENTIALS_FILE", "")
    project_id: str = os.getenv("FIREBASE_PROJECT_ID", "")

    def get_credentials_dict(self) -> Dict[str, Any]:
        """
        Build the service account dictionary used by firebase_admin.

        The inline JSON key wins over the credentials file.
        """
        if self.service_account_key:
            creds = json.loads(self.service_account_key)
        elif self.credentials_file:
            with open(self.credentials_file, "r", encoding="utf-8") as fh:
                creds = json.load(fh)
        else:
            creds = {}

        if self.project_id and not creds.get("project_id"):
            creds["project_id"] = self.project_id
        return creds


@dataclass
class DiscordConfig:
    """Discord webhook settings for admin notifications."""
    webhook_url: str = os.getenv("DISCORD_WEBHOOK_URL", "")
    username: str = os.getenv("DISCORD_BOT_USERNAME", "Booking Bot")
    avatar_url: Optional[str] = os.getenv("DISCORD_AVATAR_URL") or None
    timeout_seconds: float = float(os.getenv("DISCORD_TIMEOUT_SECONDS", "10"))


@dataclass
class SyncConfig:
    """External calendar reconciliation settings."""
    feed_fetch_timeout_seconds: float = float(os.getenv("FEED_FETCH_TIMEOUT_SECONDS", "15"))
    # Firestore rejects 'in' filters with more than 30 values
    membership_query_chunk_size: int = int(os.getenv("MEMBERSHIP_QUERY_CHUNK_SIZE", "30"))
    feed_user_agent: str = os.getenv("FEED_USER_AGENT", "Staysync-Calendar-Sync/1.0")
    summary_placeholder: str = "No Title"


@dataclass
class AppConfig:
    """Application configuration settings."""

    # Firestore collection names
    units_collection: str = "units"
    bookings_collection: str = "bookings"


@dataclass
class APIConfig:
    """API and URL configuration settings."""
    base_url: str = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")


firebase_config = FirebaseConfig()
discord_config = DiscordConfig()
sync_config = SyncConfig()
app_config = AppConfig()
api_config = APIConfig()
