from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from ..domain import AvailabilityRecord, CompletionPhase, DateRange, EventInstance


class InstanceSource(Protocol):
    version: int

    def instances_for_day(self, target_day: date) -> List[EventInstance]: ...


class RecordSource(Protocol):
    version: int

    def records(self) -> List[AvailabilityRecord]: ...


@dataclass(frozen=True, slots=True)
class StatusScope:
    """Whose responses count: one member, a leader's roster, or anyone."""

    member_id: Optional[str] = None
    roster: Tuple[str, ...] = ()

    @classmethod
    def member(cls, member_id: str) -> "StatusScope":
        return cls(member_id=member_id)

    @classmethod
    def team(cls, member_ids: Iterable[str]) -> "StatusScope":
        return cls(roster=tuple(sorted(set(member_ids))))

    def includes(self, member_id: str) -> bool:
        if self.member_id is not None:
            return member_id == self.member_id
        if self.roster:
            return member_id in self.roster
        return True


ANY_MEMBER = StatusScope()


@dataclass(frozen=True, slots=True)
class DateStatus:
    day: date
    phase: CompletionPhase
    total: int
    responded: int
    available_count: int
    unavailable_count: int

    @property
    def has_service(self) -> bool:
        return self.phase is not CompletionPhase.NOT_STARTED

    @property
    def not_started(self) -> bool:
        return self.phase is CompletionPhase.NOT_STARTED

    @property
    def pending(self) -> bool:
        return self.phase is CompletionPhase.PENDING

    @property
    def in_progress(self) -> bool:
        return self.phase is CompletionPhase.IN_PROGRESS

    @property
    def complete(self) -> bool:
        return self.phase is CompletionPhase.COMPLETE

    @property
    def available(self) -> bool:
        return self.available_count > 0

    @property
    def unavailable(self) -> bool:
        return self.unavailable_count > 0


def compute_date_status(
    day: date,
    instances: Sequence[EventInstance],
    records: Iterable[AvailabilityRecord],
    scope: StatusScope = ANY_MEMBER,
) -> DateStatus:
    """Completion of ``day``; records for events outside ``instances`` are ignored."""

    instance_ids = {instance.logical_id for instance in instances}
    relevant = [
        record
        for record in records
        if record.event_logical_id in instance_ids and scope.includes(record.member_id)
    ]

    if scope.member_id is None and scope.roster:
        total = len(instance_ids) * len(scope.roster)
        responded = len(relevant)
    elif scope.member_id is None:
        total = len(instance_ids)
        responded = len({record.event_logical_id for record in relevant})
    else:
        total = len(instance_ids)
        responded = len(relevant)

    if not instance_ids:
        phase = CompletionPhase.NOT_STARTED
    elif responded == 0:
        phase = CompletionPhase.PENDING
    elif responded < total:
        phase = CompletionPhase.IN_PROGRESS
    else:
        phase = CompletionPhase.COMPLETE

    return DateStatus(
        day=day,
        phase=phase,
        total=total if instance_ids else 0,
        responded=responded if instance_ids else 0,
        available_count=sum(1 for record in relevant if record.is_available),
        unavailable_count=sum(1 for record in relevant if not record.is_available),
    )


class StatusEngine:
    """Memoized ``compute_date_status`` keyed on the versions of its two inputs."""

    def __init__(self, instances: InstanceSource, records: RecordSource) -> None:
        self._instances = instances
        self._records = records
        self._versions: Tuple[int, int] = (-1, -1)
        self._memo: Dict[Tuple[date, StatusScope], DateStatus] = {}

    def status_for_date(self, day: date, scope: StatusScope = ANY_MEMBER) -> DateStatus:
        versions = (self._instances.version, self._records.version)
        if versions != self._versions:
            self._memo.clear()
            self._versions = versions
        key = (day, scope)
        cached = self._memo.get(key)
        if cached is None:
            cached = compute_date_status(
                day,
                self._instances.instances_for_day(day),
                self._records.records(),
                scope,
            )
            self._memo[key] = cached
        return cached

    def statuses_between(self, date_range: DateRange, scope: StatusScope = ANY_MEMBER) -> List[DateStatus]:
        return [self.status_for_date(day, scope) for day in date_range.days()]


__all__ = [
    "ANY_MEMBER",
    "DateStatus",
    "InstanceSource",
    "RecordSource",
    "StatusEngine",
    "StatusScope",
    "compute_date_status",
]
