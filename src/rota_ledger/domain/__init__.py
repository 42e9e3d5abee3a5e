"""Domain models for event scheduling and availability."""

from __future__ import annotations

from .enums import (
    AvailabilityStatus,
    CompletionPhase,
    DropReason,
    EventOrigin,
    PairState,
    RehearsalKind,
    SyncState,
)
from .identity import date_from_logical_id, make_logical_id, name_key, strip_date_token, weekday_index
from .models import (
    Assignment,
    AvailabilityRecord,
    Conflict,
    DateRange,
    EventInstance,
    EventPattern,
    InstanceFilters,
    RawAssignment,
    RawAvailability,
    RawInstance,
    RehearsalRule,
)

__all__ = [
    "Assignment",
    "AvailabilityRecord",
    "AvailabilityStatus",
    "CompletionPhase",
    "Conflict",
    "DateRange",
    "DropReason",
    "EventInstance",
    "EventOrigin",
    "EventPattern",
    "InstanceFilters",
    "PairState",
    "RawAssignment",
    "RawAvailability",
    "RawInstance",
    "RehearsalKind",
    "RehearsalRule",
    "SyncState",
    "date_from_logical_id",
    "make_logical_id",
    "name_key",
    "strip_date_token",
    "weekday_index",
]
