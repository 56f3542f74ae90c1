"""
Logging utility for the Staysync booking and calendar sync system.
"""
import logging
import sys
from typing import Optional
from colorama import Fore, Style, init
import structlog

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class ColorizedFormatter(logging.Formatter):
    """Custom formatter with colorized output."""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.MAGENTA + Style.BRIGHT,
    }

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{Style.RESET_ALL}"
        return super().format(record)


def setup_logger(
    name: str = "staysync",
    level: str = "INFO",
    log_file: Optional[str] = None
) -> structlog.BoundLogger:
    """
    Set up structured logging with colorized console output.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging to file

    Returns:
        Configured structured logger
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if log_file else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger(name)

    # Child loggers created through get_logger() propagate to the root
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    if not any(getattr(h, "_staysync", False) for h in root_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColorizedFormatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        console_handler._staysync = True
        root_logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            file_handler._staysync = True
            root_logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "staysync") -> structlog.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name

    Returns:
        Configured structured logger
    """
    return structlog.get_logger(name)


class SyncLogger:
    """Specialized logger for reconciliation runs with summary tracking."""

    def __init__(self, logger: structlog.BoundLogger):
        self.logger = logger
        self.reset_stats()

    def log_feed_fetched(self, platform: str, unit_id: str, event_count: int):
        """Log a feed that was fetched and parsed."""
        self.stats['feeds_fetched'] += 1
        self.stats['events_fetched'] += event_count
        self.stats['platforms'][platform] = self.stats['platforms'].get(platform, 0) + event_count
        self.logger.info("Calendar feed fetched", platform=platform, unit_id=unit_id,
                         events=event_count)

    def log_feed_failed(self, platform: str, unit_id: str, error: str):
        """Log a feed that failed and was skipped for this run."""
        self.stats['feeds_failed'] += 1
        self.logger.warning("Calendar feed skipped", platform=platform, unit_id=unit_id,
                            error=error)

    def log_new_booking(self, booking_data: dict):
        """Log when a booking was imported from a feed."""
        self.stats['new_bookings'] += 1
        self.logger.info(
            "New booking imported from calendar feed",
            uid=booking_data.get('uid'),
            unit_id=booking_data.get('unit_id')
        )

    def log_duplicate_event(self, uid: str, unit_id: str):
        """Log when a fetched event is already represented by a booking."""
        self.stats['duplicate_events'] += 1
        self.logger.debug("Event already imported", uid=uid, unit_id=unit_id)

    def log_notification(self, success: bool, uid: Optional[str]):
        """Log the outcome of a new-booking notification."""
        key = 'notifications_sent' if success else 'notifications_failed'
        self.stats[key] += 1
        if not success:
            self.logger.warning("Booking notification not delivered", uid=uid)

    def log_error(self, error: Exception, context: str = ""):
        """Log an error."""
        self.stats['errors'] += 1
        self.logger.error(
            "Error occurred",
            error=str(error),
            error_type=type(error).__name__,
            context=context
        )

    def print_summary(self):
        """Print a summary of the run."""
        self.logger.info("Sync summary", **self.stats)

        print(f"\n{Fore.CYAN}{'='*50}")
        print(f"{Fore.WHITE}CALENDAR SYNC SUMMARY")
        print(f"{Fore.CYAN}{'='*50}")
        print(f"{Fore.GREEN}✓ Feeds fetched: {self.stats['feeds_fetched']}")
        print(f"{Fore.GREEN}✓ Events fetched: {self.stats['events_fetched']}")
        print(f"{Fore.BLUE}✓ New bookings: {self.stats['new_bookings']}")
        print(f"{Fore.YELLOW}⚠ Already imported: {self.stats['duplicate_events']}")
        print(f"{Fore.YELLOW}⚠ Feeds skipped: {self.stats['feeds_failed']}")
        print(f"{Fore.RED}✗ Notifications failed: {self.stats['notifications_failed']}")
        print(f"{Fore.RED}✗ Errors: {self.stats['errors']}")

        if self.stats['platforms']:
            print(f"\n{Fore.WHITE}Events by platform:")
            for platform, count in self.stats['platforms'].items():
                print(f"  {Fore.CYAN}{platform}: {count}")

        print(f"{Fore.CYAN}{'='*50}\n")

    def reset_stats(self):
        """Reset statistics."""
        self.stats = {
            'feeds_fetched': 0,
            'feeds_failed': 0,
            'events_fetched': 0,
            'new_bookings': 0,
            'duplicate_events': 0,
            'notifications_sent': 0,
            'notifications_failed': 0,
            'errors': 0,
            'platforms': {}
        }
