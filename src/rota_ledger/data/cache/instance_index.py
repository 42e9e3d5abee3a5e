from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from ...core.resolver import DroppedInstance, ResolvedSchedule
from ...domain import DateRange, EventInstance


@dataclass
class InstanceIndex:
    """In-memory resolved event instances for a team's scheduling window."""

    instances_by_id: Dict[str, EventInstance] = field(default_factory=dict)
    days_index: Dict[date, List[str]] = field(default_factory=dict)
    resolved_ranges: List[DateRange] = field(default_factory=list)
    warnings: Dict[date, List[DroppedInstance]] = field(default_factory=dict)
    version: int = 0

    def hydrate(self, schedule: ResolvedSchedule) -> None:
        """Replace every day covered by ``schedule``; days outside it are kept."""

        for day in schedule.date_range.days():
            self._remove_day(day)
        for day in schedule.dates():
            for instance in schedule.by_date[day]:
                self._index_instance(instance)
        for dropped in schedule.data_quality_warnings():
            if dropped.raw.event_date is not None:
                self.warnings.setdefault(dropped.raw.event_date, []).append(dropped)
        if schedule.date_range not in self.resolved_ranges:
            self.resolved_ranges.append(schedule.date_range)
        self.version += 1

    def _index_instance(self, instance: EventInstance) -> None:
        self.instances_by_id[instance.logical_id] = instance
        self.days_index.setdefault(instance.event_date, []).append(instance.logical_id)

    def _remove_day(self, day: date) -> None:
        for logical_id in self.days_index.pop(day, []):
            self.instances_by_id.pop(logical_id, None)
        self.warnings.pop(day, None)

    def covers(self, day: date) -> bool:
        return any(day in window for window in self.resolved_ranges)

    def get(self, logical_id: str) -> Optional[EventInstance]:
        return self.instances_by_id.get(logical_id)

    def instances_for_day(self, target_day: date) -> List[EventInstance]:
        identifiers = self.days_index.get(target_day, [])
        return [self.instances_by_id[logical_id] for logical_id in identifiers]

    def instances_between(self, start: date, end: date) -> List[EventInstance]:
        collected: list[EventInstance] = []
        for day in DateRange(start, end).days():
            collected.extend(self.instances_for_day(day))
        return collected

    def warnings_between(self, start: date, end: date) -> List[DroppedInstance]:
        return [item for day in DateRange(start, end).days() for item in self.warnings.get(day, [])]

    def clear(self) -> None:
        self.instances_by_id.clear()
        self.days_index.clear()
        self.resolved_ranges.clear()
        self.warnings.clear()
        self.version += 1
