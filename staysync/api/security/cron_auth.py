import hmac
from typing import Optional

from fastapi import Header, HTTPException

from ..config import settings


def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """Reject scheduler calls that do not carry ``Bearer <CRON_SECRET>``."""
    secret = settings.cron_secret
    if not secret:
        raise HTTPException(
            status_code=401,
            detail={"message": "Cron secret is not configured", "error_code": "UNAUTHORIZED"},
        )

    scheme, _, token = (authorization or "").partition(" ")
    if scheme != "Bearer" or not hmac.compare_digest(token.encode(), secret.encode()):
        raise HTTPException(
            status_code=401,
            detail={"message": "Unauthorized", "error_code": "UNAUTHORIZED"},
        )
