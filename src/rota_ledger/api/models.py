from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, Field

from ..core import DateStatus, DroppedInstance
from ..domain import AvailabilityRecord, Conflict, EventInstance


class EventInstancePayload(BaseModel):
    logical_id: str
    date: str
    display_name: str
    time: Optional[str] = Field(default=None)
    origin: str
    source_pattern_id: Optional[str] = Field(default=None)
    remote_id: Optional[str] = Field(default=None)
    rehearsal_date: Optional[str] = Field(default=None)
    rehearsal_time: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, instance: EventInstance) -> "EventInstancePayload":
        return cls(
            logical_id=instance.logical_id,
            date=instance.event_date.isoformat(),
            display_name=instance.display_name,
            time=_hhmm(instance.start_time),
            origin=instance.origin.value,
            source_pattern_id=instance.source_pattern_id,
            remote_id=instance.remote_id,
            rehearsal_date=_iso(instance.rehearsal_date),
            rehearsal_time=_hhmm(instance.rehearsal_time),
        )


class DateStatusPayload(BaseModel):
    date: str
    phase: str
    not_started: bool
    pending: bool
    in_progress: bool
    complete: bool
    available: bool
    unavailable: bool
    total: int
    responded: int
    available_count: int
    unavailable_count: int

    @classmethod
    def from_domain(cls, status: DateStatus) -> "DateStatusPayload":
        return cls(
            date=status.day.isoformat(),
            phase=status.phase.value,
            not_started=status.not_started,
            pending=status.pending,
            in_progress=status.in_progress,
            complete=status.complete,
            available=status.available,
            unavailable=status.unavailable,
            total=status.total,
            responded=status.responded,
            available_count=status.available_count,
            unavailable_count=status.unavailable_count,
        )


class AvailabilityRecordPayload(BaseModel):
    member_id: str
    event_logical_id: str
    status: str
    updated_at: str
    note: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, record: AvailabilityRecord) -> "AvailabilityRecordPayload":
        return cls(
            member_id=record.member_id,
            event_logical_id=record.event_logical_id,
            status=record.status.value,
            updated_at=record.updated_at.isoformat(),
            note=record.note,
        )


class ConflictPayload(BaseModel):
    id: str
    member_id: str
    member_name: Optional[str] = Field(default=None)
    event_logical_id: str
    event_name: str
    service_date: Optional[str] = Field(default=None)
    role_name: str
    resolved: bool
    created_at: str
    resolved_at: Optional[str] = Field(default=None)

    @classmethod
    def from_domain(cls, conflict: Conflict) -> "ConflictPayload":
        return cls(
            id=conflict.id,
            member_id=conflict.member_id,
            member_name=conflict.member_name,
            event_logical_id=conflict.event_logical_id,
            event_name=conflict.event_name,
            service_date=_iso(conflict.service_date),
            role_name=conflict.role_name,
            resolved=conflict.resolved,
            created_at=conflict.created_at.isoformat(),
            resolved_at=_iso(conflict.resolved_at),
        )


class DataQualityWarningPayload(BaseModel):
    remote_id: Optional[str] = Field(default=None)
    date: Optional[str] = Field(default=None)
    name: Optional[str] = Field(default=None)
    reason: str
    detail: str = Field(default="")

    @classmethod
    def from_domain(cls, dropped: DroppedInstance) -> "DataQualityWarningPayload":
        return cls(
            remote_id=dropped.raw.id,
            date=_iso(dropped.raw.event_date),
            name=dropped.raw.name,
            reason=dropped.reason.value,
            detail=dropped.detail,
        )


def _iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _hhmm(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value else None
