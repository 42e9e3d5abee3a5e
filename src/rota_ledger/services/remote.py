from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Protocol

from ..domain import DateRange, EventPattern, InstanceFilters, RawAssignment, RawAvailability, RawInstance
from .context import ServiceContext


class RemoteStore(Protocol):
    """The narrow read/write surface the scheduling session needs from storage."""

    async def fetch_event_instances(
        self, team_id: str, date_range: DateRange, filters: Optional[InstanceFilters] = None
    ) -> List[RawInstance]: ...

    async def fetch_availability(self, team_id: str, date_range: DateRange) -> List[RawAvailability]: ...

    async def persist_availability(
        self,
        team_id: str,
        event_date: date,
        is_available: bool,
        *,
        member_id: Optional[str] = None,
        event_logical_id: Optional[str] = None,
    ) -> None: ...

    async def fetch_assignments(self, team_id: str, date_range: DateRange) -> List[RawAssignment]: ...

    async def fetch_patterns(self, team_id: str) -> List[EventPattern]: ...


@dataclass(slots=True)
class SupabaseRemoteStore:
    """``RemoteStore`` backed by the Supabase repositories; writes default to ``member_id``."""

    context: ServiceContext
    member_id: str

    async def fetch_event_instances(
        self, team_id: str, date_range: DateRange, filters: Optional[InstanceFilters] = None
    ) -> List[RawInstance]:
        return await self.context.events.fetch_window(team_id, date_range, filters)

    async def fetch_availability(self, team_id: str, date_range: DateRange) -> List[RawAvailability]:
        return await self.context.availability.fetch_window(team_id, date_range)

    async def persist_availability(
        self,
        team_id: str,
        event_date: date,
        is_available: bool,
        *,
        member_id: Optional[str] = None,
        event_logical_id: Optional[str] = None,
    ) -> None:
        await self.context.availability.upsert(
            team_id,
            member_id or self.member_id,
            event_date,
            is_available,
            event_key=event_logical_id,
        )

    async def fetch_assignments(self, team_id: str, date_range: DateRange) -> List[RawAssignment]:
        return await self.context.assignments.fetch_window(team_id, date_range)

    async def fetch_patterns(self, team_id: str) -> List[EventPattern]:
        return await self.context.patterns.list_for_team(team_id)
