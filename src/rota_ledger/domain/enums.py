from __future__ import annotations

from enum import Enum


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"

    @classmethod
    def from_bool(cls, is_available: bool) -> "AvailabilityStatus":
        return cls.AVAILABLE if is_available else cls.UNAVAILABLE

    @property
    def is_available(self) -> bool:
        return self is AvailabilityStatus.AVAILABLE


class EventOrigin(str, Enum):
    PATTERN = "pattern"
    ADHOC = "adhoc"


class RehearsalKind(str, Enum):
    SAME_DAY = "same_day"
    DIFFERENT_DAY = "different_day"
    DAYS_BEFORE = "days_before"
    NONE = "none"


class CompletionPhase(str, Enum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"

    @property
    def rank(self) -> int:
        return _PHASE_ORDER.index(self)


_PHASE_ORDER = [
    CompletionPhase.NOT_STARTED,
    CompletionPhase.PENDING,
    CompletionPhase.IN_PROGRESS,
    CompletionPhase.COMPLETE,
]


class PairState(str, Enum):
    UNASSIGNED = "unassigned"
    ASSIGNED = "assigned"
    CONFIRMED = "confirmed"
    CONFLICTED = "conflicted"
    RESOLVED = "resolved"


class SyncState(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"


class DropReason(str, Enum):
    MALFORMED = "malformed"
    OUT_OF_RANGE = "out_of_range"
    DUPLICATE = "duplicate"
    MISCONFIGURED = "misconfigured"
