"""
Data models for the Staysync booking and calendar sync system.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, date, time, timezone
from typing import Optional, Dict, Any, List, Tuple, Union
from enum import Enum


class Platform(Enum):
    """External calendar platforms a unit can be connected to."""
    AIRBNB = "Airbnb"
    BOOKINGCOM = "Booking.com"
    DIRECT = "Direct"

    @property
    def calendar_key(self) -> str:
        """Key of this platform's feed URL inside a unit's ``calendars`` map."""
        return _CALENDAR_KEYS[self]

    @classmethod
    def from_calendar_key(cls, key: str) -> "Platform":
        for platform, calendar_key in _CALENDAR_KEYS.items():
            if calendar_key == key.lower():
                return platform
        return cls(key)


_CALENDAR_KEYS = {
    Platform.AIRBNB: "airbnb",
    Platform.BOOKINGCOM: "bookingcom",
    Platform.DIRECT: "direct",
}


class PaymentStatus(Enum):
    """Payment state of a booking."""
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class UnitStatus(Enum):
    """Operational state of a unit."""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


def to_utc_datetime(value: Union[datetime, date, str]) -> datetime:
    """
    Normalize a stay boundary to a timezone-aware UTC datetime.

    Plain dates (and ``YYYY-MM-DD`` strings) become midnight UTC so that
    day-granular direct bookings and timed feed events compare on one axis.
    Naive datetimes are assumed to be UTC.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    raise TypeError(f"Unsupported date value: {value!r}")


@dataclass
class Unit:
    """A rentable property and its external calendar feeds."""
    id: str
    name: str
    rate: float = 0.0
    base_occupancy: int = 1
    max_occupancy: int = 1
    extra_guest_fee: float = 0.0
    type: str = ""
    status: UnitStatus = UnitStatus.AVAILABLE
    description: str = ""
    calendars: Dict[Platform, str] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.status, str):
            self.status = UnitStatus(self.status.lower())
        self.calendars = {
            (Platform.from_calendar_key(k) if isinstance(k, str) else k): v
            for k, v in self.calendars.items()
        }
        if self.rate < 0:
            raise ValueError(f"Unit {self.id} has a negative rate")
        if self.extra_guest_fee < 0:
            raise ValueError(f"Unit {self.id} has a negative extra guest fee")
        if self.base_occupancy > self.max_occupancy:
            raise ValueError(
                f"Unit {self.id} base occupancy {self.base_occupancy} exceeds "
                f"max occupancy {self.max_occupancy}"
            )

    def configured_calendars(self) -> List[Tuple[Platform, str]]:
        """Feed URLs that are actually set, in platform order."""
        return [
            (platform, self.calendars[platform].strip())
            for platform in Platform
            if (self.calendars.get(platform) or "").strip()
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert unit to dictionary for Firestore storage."""
        return {
            'name': self.name,
            'type': self.type,
            'rate': self.rate,
            'base_occupancy': self.base_occupancy,
            'max_occupancy': self.max_occupancy,
            'extra_guest_fee': self.extra_guest_fee,
            'status': self.status.value,
            'description': self.description,
            'calendars': {p.calendar_key: url for p, url in self.calendars.items()},
        }

    @classmethod
    def from_dict(cls, unit_id: str, data: Dict[str, Any]) -> 'Unit':
        """Create a Unit from a Firestore document."""
        return cls(
            id=unit_id,
            name=data.get('name', ''),
            rate=float(data.get('rate') or 0),
            base_occupancy=int(data.get('base_occupancy') or 1),
            max_occupancy=int(data.get('max_occupancy') or data.get('base_occupancy') or 1),
            extra_guest_fee=float(data.get('extra_guest_fee') or 0),
            type=data.get('type', ''),
            status=data.get('status') or UnitStatus.AVAILABLE.value,
            description=data.get('description', ''),
            calendars={k: v for k, v in (data.get('calendars') or {}).items() if v},
        )


@dataclass
class BookingData:
    """A reserved stay ``[check_in_date, check_out_date)`` for a unit."""
    unit_id: str
    check_in_date: datetime
    check_out_date: datetime
    guest_first_name: str = ""
    guest_last_name: str = ""
    guest_phone: str = ""
    guest_email: str = ""
    adults: int = 1
    children: int = 0
    nightly_rate: float = 0.0
    total_amount: float = 0.0
    payment_status: PaymentStatus = PaymentStatus.PENDING
    special_requests: str = ""
    uid: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        self.check_in_date = to_utc_datetime(self.check_in_date)
        self.check_out_date = to_utc_datetime(self.check_out_date)
        if not isinstance(self.payment_status, PaymentStatus):
            self.payment_status = PaymentStatus(str(self.payment_status).lower())
        if isinstance(self.created_at, str):
            self.created_at = to_utc_datetime(self.created_at)

    @property
    def guest_name(self) -> str:
        return f"{self.guest_first_name} {self.guest_last_name}".strip()

    @property
    def nights(self) -> int:
        return (self.check_out_date.date() - self.check_in_date.date()).days

    def has_valid_interval(self) -> bool:
        return self.check_in_date < self.check_out_date

    def to_dict(self) -> Dict[str, Any]:
        """Convert booking data to dictionary for Firestore storage."""
        created_at = self.created_at or datetime.now(timezone.utc)
        return {
            'unit_id': self.unit_id,
            'uid': self.uid,
            'guest_first_name': self.guest_first_name,
            'guest_last_name': self.guest_last_name,
            'guest_phone': self.guest_phone,
            'guest_email': self.guest_email,
            'check_in_date': self.check_in_date.isoformat(),
            'check_out_date': self.check_out_date.isoformat(),
            'adults': self.adults,
            'children': self.children,
            'nightly_rate': self.nightly_rate,
            'total_amount': self.total_amount,
            'payment_status': self.payment_status.value,
            'special_requests': self.special_requests,
            'created_at': created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], booking_id: Optional[str] = None) -> 'BookingData':
        """
        Create BookingData from a Firestore document.

        Null fields fall back to their defaults.

        Raises:
            ValueError: if the unit or stay dates are missing or unreadable
        """
        known = {f for f in cls.__dataclass_fields__}
        values = {k: v for k, v in data.items() if k in known and v is not None}
        if booking_id is not None:
            values['id'] = booking_id

        missing = [k for k in ('unit_id', 'check_in_date', 'check_out_date') if not values.get(k)]
        if missing:
            raise ValueError(f"Booking {booking_id} is missing {', '.join(missing)}")
        try:
            return cls(**values)
        except TypeError as e:
            raise ValueError(f"Booking {booking_id} has invalid data: {e}") from e

    def __str__(self) -> str:
        return (f"Booking(id='{self.id}', unit='{self.unit_id}', "
                f"guest='{self.guest_name}', "
                f"check_in='{self.check_in_date.date()}', "
                f"check_out='{self.check_out_date.date()}')")


@dataclass
class SyncedEvent:
    """A normalized external calendar event; never persisted as-is."""
    uid: str
    summary: str
    start: datetime
    end: datetime
    platform: Optional[Platform] = None

    def __post_init__(self):
        self.start = to_utc_datetime(self.start)
        self.end = to_utc_datetime(self.end)
        if isinstance(self.platform, str):
            self.platform = Platform(self.platform)

    def with_platform(self, platform: Platform) -> 'SyncedEvent':
        return replace(self, platform=platform)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'uid': self.uid,
            'summary': self.summary,
            'start': self.start.isoformat(),
            'end': self.end.isoformat(),
            'platform': self.platform.value if self.platform else None,
        }


@dataclass
class ImportPolicy:
    """Defaults applied when an external event is turned into a booking."""
    name: str
    payment_status: PaymentStatus
    adults: int
    guest_first_name: str
    guest_last_name: str
    special_requests: str
    require_summary: bool = True

    def render(self, template: str, event: SyncedEvent) -> str:
        platform = event.platform.value if event.platform else "Unknown"
        return template.format(summary=event.summary, platform=platform)


@dataclass
class SyncResult:
    """Result of a uniqueness-safe insert of an externally sourced booking."""
    success: bool
    is_new: bool = False
    booking_data: Optional[BookingData] = None
    error_message: Optional[str] = None
    uid: Optional[str] = None


@dataclass
class NotificationResult:
    """Outcome of a best-effort outbound notification."""
    success: bool
    message: str


@dataclass
class SourceFetchResult:
    """Events fetched from one configured feed of a unit."""
    platform: Platform
    url: str
    events: List[SyncedEvent] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error_message is None


@dataclass
class ReconciliationResult:
    """Summary of one reconciliation run for a unit or for every unit."""
    unit_id: Optional[str] = None
    events: List[SyncedEvent] = field(default_factory=list)
    created_bookings: List[BookingData] = field(default_factory=list)
    duplicate_events: int = 0
    failed_sources: List[str] = field(default_factory=list)
    import_errors: List[str] = field(default_factory=list)
    notifications_sent: int = 0
    notifications_failed: int = 0
    dry_run: bool = False

    @property
    def new_bookings(self) -> int:
        return len(self.created_bookings)

    def merge(self, other: 'ReconciliationResult') -> None:
        """Fold another run's counters and events into this one."""
        self.events.extend(other.events)
        self.created_bookings.extend(other.created_bookings)
        self.duplicate_events += other.duplicate_events
        self.failed_sources.extend(other.failed_sources)
        self.import_errors.extend(other.import_errors)
        self.notifications_sent += other.notifications_sent
        self.notifications_failed += other.notifications_failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            'unit_id': self.unit_id,
            'events': [e.to_dict() for e in self.events],
            'new_bookings': self.new_bookings,
            'duplicate_events': self.duplicate_events,
            'failed_sources': list(self.failed_sources),
            'import_errors': list(self.import_errors),
            'notifications_sent': self.notifications_sent,
            'notifications_failed': self.notifications_failed,
            'dry_run': self.dry_run,
        }
