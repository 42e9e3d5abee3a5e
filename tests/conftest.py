from __future__ import annotations

import asyncio
from datetime import date, datetime, time, timedelta, timezone
from types import SimpleNamespace
from typing import Any, List, Optional

import pytest

from rota_ledger.core import PatternCatalog
from rota_ledger.domain import (
    DateRange,
    EventPattern,
    InstanceFilters,
    RawAssignment,
    RawAvailability,
    RawInstance,
)

TEAM_ID = "team-1"
MEMBER_ID = "member-1"
SUNDAY = date(2024, 1, 14)


class FakeClock:
    """Deterministic clock that moves forward one second per reading."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.current = start or datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


class FakeRemoteStore:
    def __init__(self) -> None:
        self.patterns: List[EventPattern] = []
        self.instances: List[RawInstance] = []
        self.availability: List[RawAvailability] = []
        self.assignments: List[RawAssignment] = []
        self.persisted: list[tuple[str, Optional[str], date, bool, Optional[str]]] = []
        self.fetch_counts = {"patterns": 0, "instances": 0, "availability": 0, "assignments": 0}
        self.fail_fetch = False
        self.fail_persist = False
        self.hold_availability: Optional[asyncio.Event] = None

    async def fetch_patterns(self, team_id: str) -> List[EventPattern]:
        self.fetch_counts["patterns"] += 1
        return list(self.patterns)

    async def fetch_event_instances(
        self, team_id: str, date_range: DateRange, filters: Optional[InstanceFilters] = None
    ) -> List[RawInstance]:
        self.fetch_counts["instances"] += 1
        if self.fail_fetch:
            raise ConnectionError("network down")
        return list(self.instances)

    async def fetch_availability(self, team_id: str, date_range: DateRange) -> List[RawAvailability]:
        self.fetch_counts["availability"] += 1
        if self.hold_availability is not None:
            await self.hold_availability.wait()
        if self.fail_fetch:
            raise ConnectionError("network down")
        return list(self.availability)

    async def persist_availability(
        self,
        team_id: str,
        event_date: date,
        is_available: bool,
        *,
        member_id: Optional[str] = None,
        event_logical_id: Optional[str] = None,
    ) -> None:
        if self.fail_persist:
            raise ConnectionError("write rejected")
        self.persisted.append((team_id, member_id, event_date, is_available, event_logical_id))

    async def fetch_assignments(self, team_id: str, date_range: DateRange) -> List[RawAssignment]:
        self.fetch_counts["assignments"] += 1
        return list(self.assignments)


class FakeQuery:
    """Records the PostgREST builder chain and returns canned rows."""

    def __init__(self, rows: List[dict]) -> None:
        self.rows = rows
        self.calls: list[tuple[str, tuple, dict]] = []

    def __getattr__(self, name: str):
        def method(*args: Any, **kwargs: Any) -> "FakeQuery":
            self.calls.append((name, args, kwargs))
            return self

        return method

    async def execute(self) -> SimpleNamespace:
        return SimpleNamespace(data=self.rows)


class FakeGateway:
    def __init__(self, rows: List[dict]) -> None:
        self.query = FakeQuery(rows)
        self.tables: list[str] = []

    async def table(self, name: str) -> FakeQuery:
        self.tables.append(name)
        return self.query


def at(hour: int, minute: int = 0, *, day: int = 10) -> datetime:
    return datetime(2024, 1, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def sunday_patterns() -> List[EventPattern]:
    return [
        EventPattern(id="p-first", name="First Service", weekday=0, default_time=time(9, 0), order=1),
        EventPattern(id="p-second", name="Second Service", weekday=0, default_time=time(11, 0), order=2),
        EventPattern(id="p-midweek", name="Midweek Prayer", weekday=3, default_time=time(19, 30), order=3),
    ]


@pytest.fixture
def catalog(sunday_patterns: List[EventPattern]) -> PatternCatalog:
    return PatternCatalog(list(sunday_patterns))


@pytest.fixture
def january() -> DateRange:
    return DateRange(date(2024, 1, 1), date(2024, 1, 31))
