"""Expand the pattern catalog over a date range and merge remote ad-hoc events.

Instances are keyed by ``(date, normalized name)``. A remote row whose name
matches a pattern scheduled for that weekday is the same event as the pattern
instance and only lends it its remote id and timestamp. A remote row whose name
matches a pattern configured for a *different* weekday is excluded and reported
as a data-quality warning. Everything else is a genuine ad-hoc event.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..domain import (
    DateRange,
    DropReason,
    EventInstance,
    EventOrigin,
    EventPattern,
    RawInstance,
    make_logical_id,
    name_key,
    strip_date_token,
    weekday_index,
)
from .catalog import PatternCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DroppedInstance:
    raw: RawInstance
    reason: DropReason
    detail: str = ""


@dataclass(frozen=True)
class ResolvedSchedule:
    date_range: DateRange
    by_date: Mapping[date, Tuple[EventInstance, ...]] = field(default_factory=dict)
    dropped: Tuple[DroppedInstance, ...] = ()

    def instances_for(self, day: date) -> List[EventInstance]:
        return list(self.by_date.get(day, ()))

    def dates(self) -> List[date]:
        return sorted(self.by_date)

    def all_instances(self) -> List[EventInstance]:
        return [instance for day in self.dates() for instance in self.by_date[day]]

    def find(self, logical_id: str) -> Optional[EventInstance]:
        return next((item for item in self.all_instances() if item.logical_id == logical_id), None)

    def data_quality_warnings(self) -> List[DroppedInstance]:
        return [item for item in self.dropped if item.reason is DropReason.MISCONFIGURED]


def _coerce(raw: Any) -> Optional[RawInstance]:
    if isinstance(raw, RawInstance):
        return raw
    if isinstance(raw, Mapping):
        try:
            return RawInstance.from_record(dict(raw))
        except (KeyError, TypeError, ValueError):
            return None
    return None


def _sort_key(instance: EventInstance) -> tuple[bool, time]:
    return (instance.start_time is None, instance.start_time or time.min)


def _pattern_instance(day: date, pattern: EventPattern, remote: Optional[RawInstance]) -> EventInstance:
    return EventInstance(
        logical_id=make_logical_id(day, pattern.name),
        event_date=day,
        display_name=pattern.name,
        start_time=pattern.default_time or (remote.start_time if remote else None),
        origin=EventOrigin.PATTERN,
        source_pattern_id=pattern.id,
        remote_id=remote.id if remote else None,
        remote_updated_at=remote.updated_at if remote else None,
        rehearsal_date=pattern.rehearsal.rehearsal_date_for(day),
        rehearsal_time=pattern.rehearsal.time,
    )


def _adhoc_instance(day: date, raw: RawInstance) -> EventInstance:
    assert raw.name is not None
    return EventInstance(
        logical_id=make_logical_id(day, raw.name),
        event_date=day,
        display_name=strip_date_token(raw.name),
        start_time=raw.start_time,
        origin=EventOrigin.ADHOC,
        remote_id=raw.id,
        remote_updated_at=raw.updated_at,
    )


def _resolve_day(
    day: date,
    catalog: PatternCatalog,
    rows: List[RawInstance],
    dropped: List[DroppedInstance],
) -> List[EventInstance]:
    weekday = weekday_index(day)
    slots: Dict[str, list] = {}
    for pattern in catalog.for_weekday(weekday):
        key = name_key(pattern.name)
        if key in slots:
            logger.debug("Pattern %s duplicates %r on weekday %d; skipping", pattern.id, pattern.name, weekday)
            continue
        slots[key] = [pattern, None]

    every_pattern = catalog.name_keys()
    adhoc: Dict[str, RawInstance] = {}
    for raw in rows:
        key = name_key(raw.name or "")
        if key in slots:
            if slots[key][1] is None:
                slots[key][1] = raw
            else:
                dropped.append(DroppedInstance(raw, DropReason.DUPLICATE, f"duplicate of pattern {key!r}"))
            continue
        if key in every_pattern:
            logger.warning(
                "Remote event %r on %s matches a pattern configured for another weekday; excluding it",
                raw.name,
                day.isoformat(),
            )
            dropped.append(DroppedInstance(raw, DropReason.MISCONFIGURED, f"pattern {key!r} is not scheduled on this weekday"))
            continue
        if key in adhoc:
            dropped.append(DroppedInstance(raw, DropReason.DUPLICATE, f"duplicate of ad-hoc event {key!r}"))
            continue
        adhoc[key] = raw

    instances = [_pattern_instance(day, pattern, remote) for pattern, remote in slots.values()]
    instances.extend(_adhoc_instance(day, raw) for raw in adhoc.values())
    return sorted(instances, key=_sort_key)


def resolve_instances(
    date_range: DateRange,
    catalog: PatternCatalog,
    raw_adhoc: Iterable[Any] = (),
) -> ResolvedSchedule:
    """Build the canonical, deduplicated event instances for every day in ``date_range``."""

    dropped: list[DroppedInstance] = []
    rows_by_date: Dict[date, List[RawInstance]] = {}
    for candidate in raw_adhoc:
        raw = _coerce(candidate)
        if raw is None:
            logger.debug("Dropping unreadable remote event %r", candidate)
            continue
        if raw.name is None or raw.event_date is None:
            logger.debug("Dropping remote event %s without name or date", raw.id)
            dropped.append(DroppedInstance(raw, DropReason.MALFORMED, "missing name or date"))
            continue
        if raw.event_date not in date_range:
            dropped.append(DroppedInstance(raw, DropReason.OUT_OF_RANGE))
            continue
        rows_by_date.setdefault(raw.event_date, []).append(raw)

    by_date: Dict[date, Tuple[EventInstance, ...]] = {}
    for day in date_range.days():
        instances = _resolve_day(day, catalog, rows_by_date.get(day, []), dropped)
        if instances:
            by_date[day] = tuple(instances)

    logger.debug(
        "Resolved %d instances across %d days (%d remote rows dropped)",
        sum(len(items) for items in by_date.values()),
        len(by_date),
        len(dropped),
    )
    return ResolvedSchedule(date_range=date_range, by_date=by_date, dropped=tuple(dropped))


__all__ = ["DroppedInstance", "ResolvedSchedule", "resolve_instances"]
