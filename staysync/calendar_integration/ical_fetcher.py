"""
iCal feed fetcher for external booking calendars (Airbnb, Booking.com, direct).
"""
import asyncio
from datetime import datetime, date
from typing import List, Optional

import httpx
from icalendar import Calendar

from ..utils.errors import FeedFetchError
from ..utils.logger import get_logger
from ..utils.models import Platform, SourceFetchResult, SyncedEvent, to_utc_datetime
from config.settings import sync_config

WEBCAL_SCHEME = "webcal://"

logger = get_logger("ical_fetcher")


def normalize_feed_url(url: str) -> str:
    """Rewrite the ``webcal://`` subscription alias to ``https://``."""
    url = url.strip()
    if url[:len(WEBCAL_SCHEME)].lower() == WEBCAL_SCHEME:
        return "https://" + url[len(WEBCAL_SCHEME):]
    return url


def _component_dt(component, name: str) -> Optional[datetime]:
    prop = component.get(name)
    if prop is None:
        return None
    value = getattr(prop, "dt", None)
    if not isinstance(value, (datetime, date)):
        return None
    return to_utc_datetime(value)


def _event_from_component(component, require_summary: bool,
                          summary_placeholder: str) -> Optional[SyncedEvent]:
    uid = str(component.get("uid") or "").strip()
    summary = str(component.get("summary") or "").strip()
    start = _component_dt(component, "dtstart")
    end = _component_dt(component, "dtend")

    if end is None and start is not None and component.get("duration") is not None:
        end = start + component.get("duration").dt

    if not uid or start is None or end is None or end <= start:
        return None
    if not summary:
        if require_summary:
            return None
        summary = summary_placeholder

    return SyncedEvent(uid=uid, summary=summary, start=start, end=end)


def parse_feed(
    ical_text: str,
    require_summary: bool = True,
    summary_placeholder: str = "No Title",
) -> List[SyncedEvent]:
    """
    Parse iCal text into normalized events without a platform tag.

    Only VEVENTs with a uid, a start and an end (explicit or via DURATION)
    are kept, and the end must be after the start. With ``require_summary``
    events lacking a summary are dropped; otherwise the placeholder is used.
    An entry whose properties cannot be decoded is dropped on its own.

    Raises:
        ValueError: if the text is not a parseable calendar
    """
    cal = Calendar.from_ical(ical_text)
    events: List[SyncedEvent] = []

    for component in cal.walk("VEVENT"):
        try:
            event = _event_from_component(component, require_summary, summary_placeholder)
        except (ValueError, TypeError) as e:
            logger.debug("Dropping malformed calendar entry",
                         uid=str(component.get("uid") or ""), error=str(e))
            continue
        if event is not None:
            events.append(event)

    return events


class ICalFeedFetcher:
    """Retrieve and normalize events from calendar subscription feeds."""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
    ):
        self.logger = logger
        self.http_client = http_client
        self.timeout = timeout if timeout is not None else sync_config.feed_fetch_timeout_seconds
        self.user_agent = user_agent or sync_config.feed_user_agent

    async def fetch_source(self, platform: Platform, url: str,
                           require_summary: bool = True) -> SourceFetchResult:
        """
        Fetch one configured feed and tag its events with the platform.

        A feed that is unreachable, slow, or malformed is logged and yields
        a result with no events and an error message, so that other feeds
        in the same run still sync.
        """
        try:
            events = await self.load_events(url, require_summary=require_summary)
        except FeedFetchError as e:
            self.logger.error("Failed to fetch calendar feed", url=url,
                              platform=platform.value, error=str(e))
            return SourceFetchResult(platform=platform, url=url, error_message=str(e))

        return SourceFetchResult(
            platform=platform,
            url=url,
            events=[event.with_platform(platform) for event in events],
        )

    async def load_events(self, url: str, require_summary: bool = True) -> List[SyncedEvent]:
        """
        Fetch and parse one feed.

        Raises:
            FeedFetchError: if the feed cannot be retrieved or parsed
        """
        text = await self.fetch_feed(url)
        try:
            events = parse_feed(
                text,
                require_summary=require_summary,
                summary_placeholder=sync_config.summary_placeholder,
            )
        except ValueError as e:
            raise FeedFetchError(url, f"unparseable calendar: {e}") from e

        self.logger.info("Parsed calendar feed", url=url, events=len(events))
        return events

    async def fetch_feed(self, url: str) -> str:
        """
        Download raw iCal text, one attempt bounded by the fetch timeout.

        Raises:
            FeedFetchError: on timeout, transport error or non-2xx status
        """
        fetch_url = normalize_feed_url(url)
        if not fetch_url.lower().startswith(("http://", "https://")):
            raise FeedFetchError(url, "unsupported URL scheme")

        try:
            if self.http_client is not None:
                return await asyncio.wait_for(self._get(self.http_client, fetch_url), self.timeout)
            async with httpx.AsyncClient() as client:
                return await asyncio.wait_for(self._get(client, fetch_url), self.timeout)
        except asyncio.TimeoutError:
            raise FeedFetchError(url, f"timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            raise FeedFetchError(url, str(e) or type(e).__name__) from e

    async def _get(self, client: httpx.AsyncClient, url: str) -> str:
        response = await client.get(
            url,
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
        )
        response.raise_for_status()
        return response.text
