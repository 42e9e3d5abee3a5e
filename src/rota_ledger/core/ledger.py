from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from ..domain import (
    AvailabilityRecord,
    AvailabilityStatus,
    DateRange,
    EventInstance,
    RawAvailability,
    SyncState,
    date_from_logical_id,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
FetchAvailability = Callable[[str, DateRange], Awaitable[List[RawAvailability]]]
# Called as persist(team_id, event_date, is_available, member_id=..., event_logical_id=...).
PersistAvailability = Callable[..., Awaitable[None]]
TargetResolver = Callable[[RawAvailability], Optional[EventInstance]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class SyncScope:
    team_id: str
    date_range: DateRange


@dataclass
class SyncGate:
    """``IDLE -> SYNCING -> IDLE``; at most one sync runs, finished scopes are remembered."""

    state: SyncState = SyncState.IDLE
    active_scope: Optional[SyncScope] = None
    completed: set[SyncScope] = field(default_factory=set)

    def try_begin(self, scope: SyncScope, *, force: bool = False) -> bool:
        if self.state is SyncState.SYNCING:
            logger.debug("Sync for %s requested while %s is in flight", scope, self.active_scope)
            return False
        if not force and scope in self.completed:
            logger.debug("Sync for %s already completed; skipping", scope)
            return False
        self.state = SyncState.SYNCING
        self.active_scope = scope
        return True

    def finish(self, *, succeeded: bool) -> None:
        if succeeded and self.active_scope is not None:
            self.completed.add(self.active_scope)
        self.state = SyncState.IDLE
        self.active_scope = None

    def invalidate(self, team_id: Optional[str] = None) -> None:
        if team_id is None:
            self.completed.clear()
            return
        self.completed = {scope for scope in self.completed if scope.team_id != team_id}


@dataclass(frozen=True, slots=True)
class PendingWrite:
    team_id: str
    member_id: str
    event_logical_id: str
    event_date: date
    is_available: bool

    @property
    def key(self) -> Tuple[str, str]:
        return (self.member_id, self.event_logical_id)


class AvailabilityLedger:
    """Authoritative local set of availability responses, one per (member, event)."""

    def __init__(
        self,
        *,
        fetch: Optional[FetchAvailability] = None,
        persist: Optional[PersistAvailability] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._fetch = fetch
        self._persist = persist
        self._clock = clock
        self._records: Dict[Tuple[str, str], AvailabilityRecord] = {}
        self._tasks: set[asyncio.Task] = set()
        self.gate = SyncGate()
        self.queued_writes: List[PendingWrite] = []
        self.failed_writes: List[PendingWrite] = []
        self.version = 0

    # -- local state -----------------------------------------------------

    def submit(
        self,
        member_id: str,
        event_logical_id: str,
        status: AvailabilityStatus | str,
        *,
        team_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> AvailabilityRecord:
        """Record a response locally and, when ``team_id`` is given, persist it in the background."""

        record = AvailabilityRecord(
            member_id=member_id,
            event_logical_id=event_logical_id,
            status=AvailabilityStatus(status),
            updated_at=self._clock(),
            note=note,
        )
        self._records[record.key] = record
        self.version += 1

        if team_id is not None and self._persist is not None:
            event_date = date_from_logical_id(event_logical_id)
            if event_date is None:
                logger.warning("Not persisting response for %s: no date in event id", event_logical_id)
            else:
                self._schedule(
                    PendingWrite(
                        team_id=team_id,
                        member_id=member_id,
                        event_logical_id=event_logical_id,
                        event_date=event_date,
                        is_available=record.is_available,
                    )
                )
        return record

    def record_for(self, member_id: str, event_logical_id: str) -> Optional[AvailabilityRecord]:
        return self._records.get((member_id, event_logical_id))

    def records(self) -> List[AvailabilityRecord]:
        return list(self._records.values())

    snapshot = records

    def records_for_member(self, member_id: str) -> List[AvailabilityRecord]:
        return [record for record in self._records.values() if record.member_id == member_id]

    def records_for_event(self, event_logical_id: str) -> List[AvailabilityRecord]:
        return [record for record in self._records.values() if record.event_logical_id == event_logical_id]

    def __len__(self) -> int:
        return len(self._records)

    # -- remote merge ----------------------------------------------------

    def merge_remote(self, raw_records: Iterable[RawAvailability], target_for: TargetResolver) -> int:
        """Apply server rows that are strictly fresher than both the local answer and their event."""

        applied = 0
        for raw in raw_records:
            if raw.updated_at is None:
                logger.debug("Ignoring remote availability for %s on %s without timestamp", raw.member_id, raw.event_date)
                continue
            instance = target_for(raw)
            if instance is None:
                logger.debug("Remote availability for %s on %s has no matching event", raw.member_id, raw.event_date)
                continue
            local = self._records.get((raw.member_id, instance.logical_id))
            if local is not None and raw.updated_at <= local.updated_at:
                continue
            if instance.remote_updated_at is not None and raw.updated_at <= instance.remote_updated_at:
                continue
            self._records[(raw.member_id, instance.logical_id)] = AvailabilityRecord(
                member_id=raw.member_id,
                event_logical_id=instance.logical_id,
                status=AvailabilityStatus.from_bool(raw.is_available),
                updated_at=raw.updated_at,
                note=local.note if local else None,
            )
            applied += 1
        if applied:
            self.version += 1
        return applied

    async def sync(
        self,
        team_id: str,
        date_range: DateRange,
        *,
        target_for: TargetResolver,
        force: bool = False,
    ) -> List[AvailabilityRecord]:
        if self._fetch is None:
            raise RuntimeError("AvailabilityLedger was built without a fetch collaborator.")
        if not self.gate.try_begin(SyncScope(team_id, date_range), force=force):
            return self.snapshot()

        succeeded = False
        try:
            raw_records = await self._fetch(team_id, date_range)
            applied = self.merge_remote(raw_records, target_for)
            succeeded = True
            logger.info(
                "Synced availability for team %s (%s..%s): %d fetched, %d applied",
                team_id,
                date_range.start,
                date_range.end,
                len(raw_records),
                applied,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Availability sync for team %s failed: %s", team_id, exc, exc_info=True)
        finally:
            self.gate.finish(succeeded=succeeded)
        return self.snapshot()

    # -- remote persistence ----------------------------------------------

    def _schedule(self, write: PendingWrite) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; queueing write for %s", write.event_logical_id)
            self.queued_writes.append(write)
            return
        task = loop.create_task(self._send(write))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _send(self, write: PendingWrite) -> bool:
        assert self._persist is not None
        try:
            await self._persist(
                write.team_id,
                write.event_date,
                write.is_available,
                member_id=write.member_id,
                event_logical_id=write.event_logical_id,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Failed to persist availability for %s on %s: %s",
                write.member_id,
                write.event_date,
                exc,
                exc_info=True,
            )
            self.failed_writes.append(write)
            return False
        logger.debug("Persisted availability for %s on %s", write.member_id, write.event_date)
        return True

    def _current(self, writes: Iterable[PendingWrite]) -> List[PendingWrite]:
        latest: Dict[Tuple[str, str], PendingWrite] = {}
        for write in writes:
            record = self._records.get(write.key)
            if record is None:
                continue
            latest[write.key] = replace(write, is_available=record.is_available)
        return list(latest.values())

    async def _resend(self, writes: List[PendingWrite]) -> int:
        if self._persist is None:
            return 0
        results = [await self._send(write) for write in self._current(writes)]
        return sum(1 for ok in results if ok)

    async def retry_failed(self) -> int:
        """Resend failed writes with the current local answer; returns how many succeeded."""

        writes, self.failed_writes = self.failed_writes, []
        return await self._resend(writes)

    async def flush(self) -> int:
        writes, self.queued_writes = self.queued_writes, []
        return await self._resend(writes)

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks))

    @property
    def writes_in_flight(self) -> int:
        return len(self._tasks)


__all__ = [
    "AvailabilityLedger",
    "PendingWrite",
    "SyncGate",
    "SyncScope",
    "utc_now",
]
