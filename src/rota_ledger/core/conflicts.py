"""Detect members who are assigned to an event they have said they cannot attend.

Each (member, event) pair moves through ``UNASSIGNED -> ASSIGNED ->
{CONFIRMED, CONFLICTED} -> RESOLVED``. Resolving a conflict is an
acknowledgement only: the assignment and the response are left as they are.
A later unavailable response for the same pair raises a fresh conflict.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from ..domain import Assignment, AvailabilityRecord, Conflict, PairState, date_from_logical_id
from .ledger import Clock, utc_now

logger = logging.getLogger(__name__)


class ConflictDetector:
    def __init__(self, *, clock: Clock = utc_now, id_factory: Callable[[], str] = lambda: uuid4().hex) -> None:
        self._clock = clock
        self._new_id = id_factory
        self._conflicts: List[Conflict] = []
        self._last_versions: Optional[Tuple[int, int]] = None

    def scan(
        self,
        assignments: Iterable[Assignment],
        records: Iterable[AvailabilityRecord],
        *,
        versions: Optional[Tuple[int, int]] = None,
    ) -> List[Conflict]:
        """Raise conflicts for assigned members with an unavailable response.

        ``versions`` is ``(assignments_version, ledger_version)``; a scan with the
        same versions as the previous one does nothing.
        """

        if versions is not None and versions == self._last_versions:
            return []
        self._last_versions = versions

        responses = {record.key: record for record in records}
        grouped: Dict[Tuple[str, str], List[Assignment]] = {}
        for assignment in assignments:
            grouped.setdefault(assignment.key, []).append(assignment)

        created: list[Conflict] = []
        for key, pair_assignments in grouped.items():
            record = responses.get(key)
            if record is None or record.is_available or not self._needs_new(key, record):
                continue
            conflict = self._build(pair_assignments, record)
            self._conflicts.append(conflict)
            created.append(conflict)
            logger.info(
                "Conflict %s: %s is assigned to %s but unavailable",
                conflict.id,
                conflict.member_name or conflict.member_id,
                conflict.event_logical_id,
            )
        return created

    def _needs_new(self, key: Tuple[str, str], record: AvailabilityRecord) -> bool:
        history = self._history(key)
        if any(not conflict.resolved for conflict in history):
            return False
        return self._newer_than_history(history, record)

    def _build(self, assignments: List[Assignment], record: AvailabilityRecord) -> Conflict:
        first = assignments[0]
        roles = []
        for assignment in assignments:
            if assignment.role and assignment.role not in roles:
                roles.append(assignment.role)
        return Conflict(
            id=self._new_id(),
            member_id=first.member_id,
            event_logical_id=first.event_logical_id,
            service_date=first.event_date or date_from_logical_id(first.event_logical_id),
            role_name=", ".join(roles),
            event_name=first.display_name,
            source_updated_at=record.updated_at,
            created_at=self._clock(),
            member_name=first.member_name,
        )

    def _history(self, key: Tuple[str, str]) -> List[Conflict]:
        return [conflict for conflict in self._conflicts if conflict.key == key]

    @staticmethod
    def _newer_than_history(history: List[Conflict], record: AvailabilityRecord) -> bool:
        latest = max((conflict.source_updated_at for conflict in history), default=None)
        return latest is None or record.updated_at > latest

    def resolve(self, conflict_id: str) -> Conflict:
        conflict = next((item for item in self._conflicts if item.id == conflict_id), None)
        if conflict is None:
            raise KeyError(f"Conflict '{conflict_id}' does not exist.")
        if not conflict.resolved:
            conflict.resolved = True
            conflict.resolved_at = self._clock()
            logger.info("Conflict %s resolved", conflict_id)
        return conflict

    def pending(self) -> List[Conflict]:
        unresolved = [conflict for conflict in self._conflicts if not conflict.resolved]
        return sorted(unresolved, key=lambda item: (item.service_date or date.max, item.created_at))

    def conflicts_for_date(self, day: date) -> List[Conflict]:
        return [conflict for conflict in self._conflicts if conflict.service_date == day]

    def all(self) -> List[Conflict]:
        return list(self._conflicts)

    def state_for(
        self,
        member_id: str,
        event_logical_id: str,
        *,
        assigned: bool,
        record: Optional[AvailabilityRecord],
    ) -> PairState:
        if not assigned:
            return PairState.UNASSIGNED
        history = self._history((member_id, event_logical_id))
        if any(not conflict.resolved for conflict in history):
            return PairState.CONFLICTED
        if record is None:
            return PairState.ASSIGNED
        if record.is_available:
            return PairState.CONFIRMED
        # An unavailable answer newer than the last acknowledged one is a fresh conflict.
        return PairState.CONFLICTED if self._newer_than_history(history, record) else PairState.RESOLVED


__all__ = ["ConflictDetector"]
