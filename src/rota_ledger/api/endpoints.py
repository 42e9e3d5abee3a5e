from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from ..core import ANY_MEMBER, StatusScope
from ..domain import AvailabilityStatus, DateRange
from .registry import register_api
from .serializers import (
    serialize_conflict,
    serialize_instance,
    serialize_record,
    serialize_status,
    serialize_warning,
)
from .state import api_state


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:  # noqa: TRY003
        raise ValueError(f"Invalid ISO date: {value}") from exc


def _range(start: Optional[str], end: Optional[str]) -> DateRange:
    if start is None and end is None:
        return api_state.default_range()
    if start is None or end is None:
        raise ValueError("Provide both start and end, or neither.")
    return DateRange(_parse_date(start), _parse_date(end))


def _scope(member_id: Optional[str], all_members: bool) -> Optional[StatusScope]:
    if all_members:
        return ANY_MEMBER
    return StatusScope.member(member_id) if member_id else None


@register_api(
    "refresh_schedule",
    description="Load patterns, events, availability and assignments for a date window.",
    category="schedule",
    tags=("supabase", "sync"),
)
async def refresh_schedule(start: Optional[str] = None, end: Optional[str] = None, force: bool = False) -> Dict[str, Any]:
    session = api_state.require_session()
    date_range = _range(start, end)
    await session.refresh(date_range, force=force)
    instances = session.index.instances_between(date_range.start, date_range.end)
    return {
        "start": date_range.start.isoformat(),
        "end": date_range.end.isoformat(),
        "instance_count": len(instances),
        "pattern_count": len(session.catalog),
        "warnings": [serialize_warning(item) for item in session.data_quality_warnings(date_range)],
    }


@register_api(
    "instances_for_day",
    description="Return the resolved events for a single day.",
    category="schedule",
    tags=("read",),
)
def instances_for_day(day: str) -> Dict[str, Any]:
    session = api_state.require_session()
    target = _parse_date(day)
    return {
        "day": target.isoformat(),
        "instances": [serialize_instance(item) for item in session.resolved_instances(target)],
    }


@register_api(
    "status_for_day",
    description="Return the completion status of a day for a member, or for anyone when all_members is set.",
    category="status",
    tags=("read",),
)
def status_for_day(day: str, member_id: Optional[str] = None, all_members: bool = False) -> Dict[str, Any]:
    session = api_state.require_session()
    status = session.status_for_date(_parse_date(day), scope=_scope(member_id, all_members))
    return serialize_status(status)


@register_api(
    "statuses_between",
    description="Return the completion status of every day in an inclusive range.",
    category="status",
    tags=("read",),
)
def statuses_between(
    start: str,
    end: str,
    member_id: Optional[str] = None,
    all_members: bool = False,
) -> Dict[str, Any]:
    session = api_state.require_session()
    date_range = DateRange(_parse_date(start), _parse_date(end))
    statuses = session.statuses_between(date_range, scope=_scope(member_id, all_members))
    return {"statuses": [serialize_status(item) for item in statuses]}


@register_api(
    "submit_availability",
    description="Record the current member's answer for an event and persist it in the background.",
    category="availability",
    tags=("write",),
)
def submit_availability(event_id: str, status: str, note: Optional[str] = None) -> Dict[str, Any]:
    session = api_state.require_session()
    try:
        parsed = AvailabilityStatus(status)
    except ValueError as exc:  # noqa: TRY003
        raise ValueError(f"Unknown availability status: {status}") from exc
    if session.instance(event_id) is None:
        raise ValueError(f"Unknown event: {event_id}")
    record = session.submit(event_id, parsed, note=note)
    return serialize_record(record)


@register_api(
    "sync_availability",
    description="Merge fresher server-side availability into the local ledger.",
    category="availability",
    tags=("supabase", "sync"),
)
async def sync_availability(start: Optional[str] = None, end: Optional[str] = None, force: bool = False) -> Dict[str, Any]:
    session = api_state.require_session()
    records = await session.sync_availability(_range(start, end), force=force)
    return {"records": [serialize_record(item) for item in records]}


@register_api(
    "retry_failed_writes",
    description="Resend availability writes that failed to reach the server.",
    category="availability",
    tags=("supabase", "write"),
)
async def retry_failed_writes() -> Dict[str, Any]:
    session = api_state.require_session()
    sent = await session.retry_failed_writes()
    return {"sent": sent, "still_failed": len(session.ledger.failed_writes)}


@register_api(
    "refresh_assignments",
    description="Reload role assignments and rescan for conflicts.",
    category="conflicts",
    tags=("supabase",),
)
async def refresh_assignments(start: Optional[str] = None, end: Optional[str] = None) -> Dict[str, Any]:
    session = api_state.require_session()
    assignments = await session.refresh_assignments(_range(start, end))
    return {
        "assignment_count": len(assignments),
        "pending_conflicts": [serialize_conflict(item) for item in session.pending_conflicts()],
    }


@register_api(
    "pending_conflicts",
    description="List unresolved assignment conflicts, newest first.",
    category="conflicts",
    tags=("read",),
)
def pending_conflicts(day: Optional[str] = None) -> Dict[str, Any]:
    session = api_state.require_session()
    if day is None:
        conflicts = session.pending_conflicts()
    else:
        conflicts = [item for item in session.conflicts_for_date(_parse_date(day)) if not item.resolved]
    return {"conflicts": [serialize_conflict(item) for item in conflicts]}


@register_api(
    "resolve_conflict",
    description="Mark a conflict as resolved.",
    category="conflicts",
    tags=("write",),
)
def resolve_conflict(conflict_id: str) -> Dict[str, Any]:
    session = api_state.require_session()
    return serialize_conflict(session.resolve_conflict(conflict_id))


@register_api(
    "data_quality_warnings",
    description="List event rows that were dropped while resolving the schedule.",
    category="schedule",
    tags=("read",),
)
def data_quality_warnings(start: Optional[str] = None, end: Optional[str] = None) -> List[Dict[str, Any]]:
    session = api_state.require_session()
    return [serialize_warning(item) for item in session.data_quality_warnings(_range(start, end))]
