from __future__ import annotations

import itertools

import pytest

from rota_ledger.core import AvailabilityLedger, ConflictDetector
from rota_ledger.domain import Assignment, AvailabilityStatus, PairState

from .conftest import MEMBER_ID, SUNDAY, FakeClock

EVENT_ID = "2024-01-14:first service"


def _assignment(role: str = "Vocals", member: str = MEMBER_ID) -> Assignment:
    return Assignment(
        event_logical_id=EVENT_ID,
        member_id=member,
        role=role,
        event_date=SUNDAY,
        display_name="First Service",
        member_name="Sam Lee",
    )


@pytest.fixture
def detector(clock: FakeClock) -> ConflictDetector:
    counter = itertools.count(1)
    return ConflictDetector(clock=clock, id_factory=lambda: f"c{next(counter)}")


@pytest.fixture
def ledger(clock: FakeClock) -> AvailabilityLedger:
    return AvailabilityLedger(clock=clock)


def test_unavailable_assigned_member_raises_one_conflict(detector: ConflictDetector, ledger: AvailabilityLedger) -> None:
    ledger.submit(MEMBER_ID, EVENT_ID, AvailabilityStatus.UNAVAILABLE)

    created = detector.scan([_assignment()], ledger.records())

    assert len(created) == 1
    assert detector.pending() == created
    conflict = created[0]
    assert conflict.resolved is False
    assert conflict.service_date == SUNDAY
    assert conflict.role_name == "Vocals"
    assert conflict.member_name == "Sam Lee"


def test_rescan_does_not_duplicate(detector: ConflictDetector, ledger: AvailabilityLedger) -> None:
    ledger.submit(MEMBER_ID, EVENT_ID, AvailabilityStatus.UNAVAILABLE)
    detector.scan([_assignment()], ledger.records(), versions=(1, 1))
    assert detector.scan([_assignment()], ledger.records(), versions=(1, 1)) == []
    assert detector.scan([_assignment()], ledger.records(), versions=(2, 1)) == []
    assert len(detector.all()) == 1


def test_multiple_roles_share_one_conflict(detector: ConflictDetector, ledger: AvailabilityLedger) -> None:
    ledger.submit(MEMBER_ID, EVENT_ID, AvailabilityStatus.UNAVAILABLE)
    created = detector.scan([_assignment("Vocals"), _assignment("Guitar"), _assignment("Vocals")], ledger.records())
    assert [conflict.role_name for conflict in created] == ["Vocals, Guitar"]


def test_available_or_unassigned_members_have_no_conflict(detector: ConflictDetector, ledger: AvailabilityLedger) -> None:
    ledger.submit(MEMBER_ID, EVENT_ID, AvailabilityStatus.AVAILABLE)
    ledger.submit("other", EVENT_ID, AvailabilityStatus.UNAVAILABLE)
    assert detector.scan([_assignment()], ledger.records()) == []


def test_resolution_then_new_unavailable_answer_creates_new_conflict(
    detector: ConflictDetector, ledger: AvailabilityLedger
) -> None:
    ledger.submit(MEMBER_ID, EVENT_ID, AvailabilityStatus.UNAVAILABLE)
    first = detector.scan([_assignment()], ledger.records())[0]
    resolved = detector.resolve(first.id)
    assert resolved.resolved and resolved.resolved_at is not None

    # Same record after resolution: acknowledged, nothing new.
    assert detector.scan([_assignment()], ledger.records()) == []

    ledger.submit(MEMBER_ID, EVENT_ID, AvailabilityStatus.AVAILABLE)
    detector.scan([_assignment()], ledger.records())
    ledger.submit(MEMBER_ID, EVENT_ID, AvailabilityStatus.UNAVAILABLE)
    created = detector.scan([_assignment()], ledger.records())

    assert len(created) == 1
    assert created[0].id != first.id
    assert created[0].resolved is False
    assert [conflict.id for conflict in detector.pending()] == [created[0].id]
    assert len(detector.conflicts_for_date(SUNDAY)) == 2


def test_resolving_unknown_conflict_raises(detector: ConflictDetector) -> None:
    with pytest.raises(KeyError):
        detector.resolve("missing")


def test_pair_states(detector: ConflictDetector, ledger: AvailabilityLedger) -> None:
    def state(assigned: bool = True) -> PairState:
        return detector.state_for(
            MEMBER_ID, EVENT_ID, assigned=assigned, record=ledger.record_for(MEMBER_ID, EVENT_ID)
        )

    assert state(assigned=False) is PairState.UNASSIGNED
    assert state() is PairState.ASSIGNED

    ledger.submit(MEMBER_ID, EVENT_ID, AvailabilityStatus.AVAILABLE)
    assert state() is PairState.CONFIRMED

    ledger.submit(MEMBER_ID, EVENT_ID, AvailabilityStatus.UNAVAILABLE)
    conflict = detector.scan([_assignment()], ledger.records())[0]
    assert state() is PairState.CONFLICTED

    detector.resolve(conflict.id)
    assert state() is PairState.RESOLVED


def test_newer_unavailable_after_resolution_is_conflicted_before_rescan(
    detector: ConflictDetector, ledger: AvailabilityLedger
) -> None:
    ledger.submit(MEMBER_ID, EVENT_ID, AvailabilityStatus.UNAVAILABLE)
    conflict = detector.scan([_assignment()], ledger.records())[0]
    detector.resolve(conflict.id)

    ledger.submit(MEMBER_ID, EVENT_ID, AvailabilityStatus.UNAVAILABLE)
    state = detector.state_for(MEMBER_ID, EVENT_ID, assigned=True, record=ledger.record_for(MEMBER_ID, EVENT_ID))

    assert state is PairState.CONFLICTED
    assert detector.pending() == []
