from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Iterator, Optional, Tuple

from .enums import AvailabilityStatus, EventOrigin, RehearsalKind
from .identity import make_logical_id, strip_date_token, weekday_index


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Unsupported datetime value: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Unsupported date value: {value!r}")


def _parse_time(value: Any) -> Optional[time]:
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        return time.fromisoformat(value)
    raise ValueError(f"Unsupported time value: {value!r}")


def _lenient(parser, value: Any):
    try:
        return parser(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def _iso(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value else None


@dataclass(frozen=True, slots=True)
class DateRange:
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Date range ends before it starts: {self.start} > {self.end}")

    @classmethod
    def from_strings(cls, start: str, end: str) -> "DateRange":
        return cls(_parse_date(start), _parse_date(end))

    @classmethod
    def around(cls, anchor: date, *, before: timedelta, after: timedelta) -> "DateRange":
        return cls(anchor - before, anchor + after)

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start <= day <= self.end

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def days(self) -> Iterator[date]:
        for index in range(len(self)):
            yield self.start + timedelta(days=index)


@dataclass(frozen=True, slots=True)
class RehearsalRule:
    kind: RehearsalKind = RehearsalKind.NONE
    day: Optional[int] = None
    time: Optional[time] = None
    days_before: Optional[int] = None

    def rehearsal_date_for(self, service_date: date) -> Optional[date]:
        if self.kind is RehearsalKind.SAME_DAY:
            return service_date
        if self.kind is RehearsalKind.DIFFERENT_DAY and self.day is not None:
            offset = (weekday_index(service_date) - self.day) % 7 or 7
            return service_date - timedelta(days=offset)
        if self.kind is RehearsalKind.DAYS_BEFORE and self.days_before is not None:
            return service_date - timedelta(days=self.days_before)
        return None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "RehearsalRule":
        return cls(
            kind=RehearsalKind(record.get("rehearsal_type") or RehearsalKind.NONE),
            day=record.get("rehearsal_day"),
            time=_parse_time(record.get("rehearsal_time")),
            days_before=record.get("rehearsal_days_before"),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "rehearsal_type": self.kind.value,
            "rehearsal_day": self.day,
            "rehearsal_time": _iso(self.time),
            "rehearsal_days_before": self.days_before,
        }


@dataclass(frozen=True, slots=True)
class EventPattern:
    id: str
    name: str
    weekday: int
    default_time: Optional[time] = None
    rehearsal: RehearsalRule = field(default_factory=RehearsalRule)
    order: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.weekday <= 6:
            raise ValueError(f"Pattern {self.name!r} has weekday {self.weekday}; expected 0 (Sunday) to 6.")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "EventPattern":
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            weekday=int(record["default_day"]),
            default_time=_parse_time(record.get("service_time")),
            rehearsal=RehearsalRule.from_record(record),
            order=int(record.get("display_order") or 0),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "default_day": self.weekday,
            "service_time": _iso(self.default_time),
            "display_order": self.order,
            **self.rehearsal.to_record(),
        }


@dataclass(frozen=True, slots=True)
class EventInstance:
    logical_id: str
    event_date: date
    display_name: str
    start_time: Optional[time]
    origin: EventOrigin
    source_pattern_id: Optional[str] = None
    remote_id: Optional[str] = None
    remote_updated_at: Optional[datetime] = None
    rehearsal_date: Optional[date] = None
    rehearsal_time: Optional[time] = None


@dataclass(frozen=True, slots=True)
class AvailabilityRecord:
    member_id: str
    event_logical_id: str
    status: AvailabilityStatus
    updated_at: datetime
    note: Optional[str] = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.member_id, self.event_logical_id)

    @property
    def is_available(self) -> bool:
        return self.status.is_available


@dataclass(frozen=True, slots=True)
class Assignment:
    event_logical_id: str
    member_id: str
    role: str
    event_date: Optional[date] = None
    display_name: str = ""
    member_name: Optional[str] = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.member_id, self.event_logical_id)


@dataclass(slots=True)
class Conflict:
    id: str
    member_id: str
    event_logical_id: str
    service_date: Optional[date]
    role_name: str
    event_name: str
    source_updated_at: datetime
    created_at: datetime
    member_name: Optional[str] = None
    resolved: bool = False
    resolved_at: Optional[datetime] = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.member_id, self.event_logical_id)


@dataclass(frozen=True, slots=True)
class InstanceFilters:
    statuses: Tuple[str, ...] = ()
    include_past: bool = True


@dataclass(frozen=True, slots=True)
class RawInstance:
    """Remote event row as fetched; fields that fail to parse are left empty."""

    id: Optional[str]
    event_date: Optional[date]
    name: Optional[str]
    start_time: Optional[time] = None
    status: Optional[str] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "RawInstance":
        name = record.get("name")
        return cls(
            id=str(record["id"]) if record.get("id") is not None else None,
            event_date=_lenient(_parse_date, record.get("service_date") or record.get("date")),
            name=str(name) if isinstance(name, str) and name.strip() else None,
            start_time=_lenient(_parse_time, record.get("start_time") or record.get("time")),
            status=record.get("status"),
            updated_at=_lenient(_parse_datetime, record.get("updated_at") or record.get("created_at")),
        )


@dataclass(frozen=True, slots=True)
class RawAvailability:
    member_id: str
    event_date: date
    is_available: bool
    updated_at: Optional[datetime]
    event_logical_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "RawAvailability":
        return cls(
            member_id=str(record["user_id"]),
            event_date=_parse_date(record["date"]),
            is_available=bool(record["is_available"]),
            updated_at=_parse_datetime(record["updated_at"]) if record.get("updated_at") else None,
            event_logical_id=record.get("event_key"),
        )


@dataclass(frozen=True, slots=True)
class RawAssignment:
    event_date: date
    event_name: str
    member_id: str
    role: str
    member_name: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "RawAssignment":
        service = record.get("service") or {}
        member = record.get("member") or {}
        role = record.get("role") or {}
        return cls(
            event_date=_parse_date(service["service_date"]),
            event_name=str(service["name"]),
            member_id=str(member["user_id"]),
            role=str(role.get("name") or "") if isinstance(role, dict) else str(role),
            member_name=member.get("full_name"),
        )

    def to_assignment(self) -> Assignment:
        return Assignment(
            event_logical_id=make_logical_id(self.event_date, self.event_name),
            member_id=self.member_id,
            role=self.role,
            event_date=self.event_date,
            display_name=strip_date_token(self.event_name),
            member_name=self.member_name,
        )
