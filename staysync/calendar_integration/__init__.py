from .ical_fetcher import ICalFeedFetcher, normalize_feed_url, parse_feed

__all__ = ['ICalFeedFetcher', 'normalize_feed_url', 'parse_feed']
