import sys
from pathlib import Path

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from staysync.api.app import create_app

# Serverless entry; the platform scheduler calls /api/v1/cron/sync-all-calendars
app = create_app()
