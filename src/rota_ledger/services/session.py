"""Per-team scheduling session.

The session owns the only mutable scheduling state (the resolved instance index,
the availability ledger, the current assignments and the raised conflicts) and
changes it exclusively through the methods below. Callers pull fresh status after
each change; nothing is pushed.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional

from ..core import (
    AvailabilityLedger,
    ConflictDetector,
    DateStatus,
    DroppedInstance,
    PatternCatalog,
    ResolvedSchedule,
    StatusEngine,
    StatusScope,
    resolve_instances,
    utc_now,
)
from ..core.ledger import Clock
from ..data import InstanceIndex
from ..domain import (
    Assignment,
    AvailabilityRecord,
    AvailabilityStatus,
    Conflict,
    DateRange,
    EventInstance,
    EventPattern,
    InstanceFilters,
    PairState,
    RawAvailability,
    RawInstance,
)
from .remote import RemoteStore

logger = logging.getLogger(__name__)


class SchedulingSession:
    def __init__(
        self,
        team_id: str,
        member_id: str,
        remote: RemoteStore,
        *,
        catalog: Optional[PatternCatalog] = None,
        clock: Clock = utc_now,
    ) -> None:
        self.team_id = team_id
        self.member_id = member_id
        self.remote = remote
        self.catalog = catalog or PatternCatalog()
        self.index = InstanceIndex()
        self.ledger = AvailabilityLedger(
            fetch=remote.fetch_availability,
            persist=remote.persist_availability,
            clock=clock,
        )
        self.status = StatusEngine(self.index, self.ledger)
        self.conflicts = ConflictDetector(clock=clock)
        self.assignments: List[Assignment] = []
        self.assignments_version = 0
        self._raw_instances: Dict[DateRange, List[RawInstance]] = {}

    # -- patterns and instances ------------------------------------------

    async def load_patterns(self) -> PatternCatalog:
        try:
            patterns = await self.remote.fetch_patterns(self.team_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to load patterns for team %s: %s", self.team_id, exc, exc_info=True)
            return self.catalog
        self.replace_patterns(patterns)
        return self.catalog

    def replace_patterns(self, patterns: Iterable[EventPattern]) -> None:
        """Swap the catalog and re-resolve every window already fetched, without refetching."""

        self.catalog.replace(patterns)
        for date_range in list(self._raw_instances):
            self._resolve(date_range)

    async def refresh_instances(
        self,
        date_range: DateRange,
        filters: Optional[InstanceFilters] = None,
    ) -> Optional[ResolvedSchedule]:
        try:
            raw = await self.remote.fetch_event_instances(self.team_id, date_range, filters)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to fetch events for team %s: %s", self.team_id, exc, exc_info=True)
            return None
        self._raw_instances[date_range] = list(raw)
        return self._resolve(date_range)

    def _resolve(self, date_range: DateRange) -> ResolvedSchedule:
        schedule = resolve_instances(date_range, self.catalog, self._raw_instances.get(date_range, ()))
        self.index.hydrate(schedule)
        return schedule

    def resolved_instances(self, day: date) -> List[EventInstance]:
        return self.index.instances_for_day(day)

    def instance(self, logical_id: str) -> Optional[EventInstance]:
        return self.index.get(logical_id)

    def data_quality_warnings(self, date_range: DateRange) -> List[DroppedInstance]:
        return self.index.warnings_between(date_range.start, date_range.end)

    # -- availability ----------------------------------------------------

    def submit(
        self,
        event_logical_id: str,
        status: AvailabilityStatus | str,
        *,
        member_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> AvailabilityRecord:
        record = self.ledger.submit(
            member_id or self.member_id,
            event_logical_id,
            status,
            team_id=self.team_id,
            note=note,
        )
        self._rescan()
        return record

    async def sync_availability(self, date_range: DateRange, *, force: bool = False) -> List[AvailabilityRecord]:
        records = await self.ledger.sync(self.team_id, date_range, target_for=self._target_for, force=force)
        self._rescan()
        return records

    def _target_for(self, raw: RawAvailability) -> Optional[EventInstance]:
        if raw.event_logical_id:
            return self.index.get(raw.event_logical_id)
        # A row without an event key is only unambiguous on a single-event day.
        instances = self.index.instances_for_day(raw.event_date)
        if len(instances) == 1:
            return instances[0]
        if instances:
            logger.debug(
                "Availability for %s on %s names no event and the day has %d events; skipping",
                raw.member_id,
                raw.event_date,
                len(instances),
            )
        return None

    async def retry_failed_writes(self) -> int:
        return await self.ledger.retry_failed()

    # -- assignments and conflicts ---------------------------------------

    async def refresh_assignments(self, date_range: DateRange) -> List[Assignment]:
        try:
            raw = await self.remote.fetch_assignments(self.team_id, date_range)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to fetch assignments for team %s: %s", self.team_id, exc, exc_info=True)
            return list(self.assignments)
        self.set_assignments(item.to_assignment() for item in raw)
        return list(self.assignments)

    def set_assignments(self, assignments: Iterable[Assignment]) -> None:
        self.assignments = list(assignments)
        self.assignments_version += 1
        self._rescan()

    def _rescan(self) -> None:
        self.conflicts.scan(
            self.assignments,
            self.ledger.records(),
            versions=(self.assignments_version, self.ledger.version),
        )

    def pending_conflicts(self) -> List[Conflict]:
        return self.conflicts.pending()

    def conflicts_for_date(self, day: date) -> List[Conflict]:
        return self.conflicts.conflicts_for_date(day)

    def resolve_conflict(self, conflict_id: str) -> Conflict:
        return self.conflicts.resolve(conflict_id)

    def pair_state(self, event_logical_id: str, member_id: Optional[str] = None) -> PairState:
        member = member_id or self.member_id
        assigned = any(item.key == (member, event_logical_id) for item in self.assignments)
        return self.conflicts.state_for(
            member,
            event_logical_id,
            assigned=assigned,
            record=self.ledger.record_for(member, event_logical_id),
        )

    # -- status ----------------------------------------------------------

    def status_for_date(self, day: date, *, scope: Optional[StatusScope] = None) -> DateStatus:
        return self.status.status_for_date(day, scope or StatusScope.member(self.member_id))

    def team_status_for_date(self, day: date, member_ids: Iterable[str]) -> DateStatus:
        return self.status.status_for_date(day, StatusScope.team(member_ids))

    def statuses_between(self, date_range: DateRange, *, scope: Optional[StatusScope] = None) -> List[DateStatus]:
        return self.status.statuses_between(date_range, scope or StatusScope.member(self.member_id))

    # -- lifecycle -------------------------------------------------------

    async def refresh(self, date_range: DateRange, *, force: bool = False) -> None:
        """Load patterns, events, availability and assignments for ``date_range``."""

        await self.load_patterns()
        await self.refresh_instances(date_range)
        await self.sync_availability(date_range, force=force)
        await self.refresh_assignments(date_range)

    async def close(self) -> None:
        await self.ledger.drain()
