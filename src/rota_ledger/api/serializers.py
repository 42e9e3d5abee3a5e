from __future__ import annotations

from typing import Any, Dict

from ..core import DateStatus, DroppedInstance
from ..domain import AvailabilityRecord, Conflict, EventInstance
from .models import (
    AvailabilityRecordPayload,
    ConflictPayload,
    DataQualityWarningPayload,
    DateStatusPayload,
    EventInstancePayload,
)


def serialize_instance(instance: EventInstance) -> Dict[str, Any]:
    return EventInstancePayload.from_domain(instance).model_dump()


def serialize_status(status: DateStatus) -> Dict[str, Any]:
    return DateStatusPayload.from_domain(status).model_dump()


def serialize_record(record: AvailabilityRecord) -> Dict[str, Any]:
    return AvailabilityRecordPayload.from_domain(record).model_dump()


def serialize_conflict(conflict: Conflict) -> Dict[str, Any]:
    return ConflictPayload.from_domain(conflict).model_dump()


def serialize_warning(dropped: DroppedInstance) -> Dict[str, Any]:
    return DataQualityWarningPayload.from_domain(dropped).model_dump()
