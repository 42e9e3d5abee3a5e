from __future__ import annotations

from datetime import date

from rota_ledger.core import (
    ANY_MEMBER,
    AvailabilityLedger,
    PatternCatalog,
    StatusEngine,
    StatusScope,
    compute_date_status,
    resolve_instances,
)
from rota_ledger.data import InstanceIndex
from rota_ledger.domain import AvailabilityRecord, AvailabilityStatus, CompletionPhase, DateRange

from .conftest import MEMBER_ID, SUNDAY, FakeClock, at


def _record(event_id: str, *, member: str = MEMBER_ID, available: bool = True) -> AvailabilityRecord:
    return AvailabilityRecord(
        member_id=member,
        event_logical_id=event_id,
        status=AvailabilityStatus.from_bool(available),
        updated_at=at(10),
    )


def _sunday(catalog: PatternCatalog):
    return resolve_instances(DateRange(SUNDAY, SUNDAY), catalog).instances_for(SUNDAY)


def test_one_of_two_answered_is_in_progress(catalog: PatternCatalog) -> None:
    instances = _sunday(catalog)
    assert len(instances) == 2

    status = compute_date_status(SUNDAY, instances, [_record(instances[0].logical_id)], StatusScope.member(MEMBER_ID))

    assert status.in_progress is True
    assert status.complete is False
    assert (status.responded, status.total) == (1, 2)


def test_day_without_events_is_not_started_despite_stray_records() -> None:
    stray = [_record("2024-01-15:old event")]
    status = compute_date_status(date(2024, 1, 15), [], stray)

    assert status.not_started
    assert not status.has_service
    assert status.total == 0 and status.responded == 0


def test_orphaned_records_do_not_count(catalog: PatternCatalog) -> None:
    instances = _sunday(catalog)
    records = [_record("2024-01-14:removed service"), _record(instances[0].logical_id)]

    status = compute_date_status(SUNDAY, instances, records, StatusScope.member(MEMBER_ID))
    assert status.responded == 1
    assert status.phase is CompletionPhase.IN_PROGRESS


def test_adding_records_only_moves_status_forward(catalog: PatternCatalog) -> None:
    instances = _sunday(catalog)
    scope = StatusScope.member(MEMBER_ID)
    records: list[AvailabilityRecord] = []
    phases = [compute_date_status(SUNDAY, instances, records, scope).phase]
    for instance in instances:
        records.append(_record(instance.logical_id, available=False))
        phases.append(compute_date_status(SUNDAY, instances, records, scope).phase)
    # Another member's answer must not move this member's status.
    records.append(_record(instances[0].logical_id, member="someone-else"))
    phases.append(compute_date_status(SUNDAY, instances, records, scope).phase)

    ranks = [phase.rank for phase in phases]
    assert ranks == sorted(ranks)
    assert phases[0] is CompletionPhase.PENDING
    assert phases[-1] is CompletionPhase.COMPLETE


def test_available_and_unavailable_flags(catalog: PatternCatalog) -> None:
    instances = _sunday(catalog)
    records = [_record(instances[0].logical_id, available=True), _record(instances[1].logical_id, available=False)]
    status = compute_date_status(SUNDAY, instances, records, StatusScope.member(MEMBER_ID))
    assert status.available and status.unavailable
    assert status.available_count == 1 and status.unavailable_count == 1


def test_roster_scope_counts_every_member(catalog: PatternCatalog) -> None:
    instances = _sunday(catalog)
    scope = StatusScope.team(["a", "b", "a"])
    records = [_record(item.logical_id, member="a") for item in instances]

    status = compute_date_status(SUNDAY, instances, records, scope)
    assert (status.responded, status.total) == (2, 4)
    assert status.in_progress


def test_any_member_scope_counts_answered_events(catalog: PatternCatalog) -> None:
    instances = _sunday(catalog)
    records = [_record(instances[0].logical_id, member="a"), _record(instances[0].logical_id, member="b")]

    status = compute_date_status(SUNDAY, instances, records, ANY_MEMBER)
    assert (status.responded, status.total) == (1, 2)


def test_engine_recomputes_when_either_input_changes(catalog: PatternCatalog) -> None:
    index = InstanceIndex()
    ledger = AvailabilityLedger(clock=FakeClock())
    engine = StatusEngine(index, ledger)
    scope = StatusScope.member(MEMBER_ID)

    assert engine.status_for_date(SUNDAY, scope).not_started

    index.hydrate(resolve_instances(DateRange(SUNDAY, SUNDAY), catalog))
    assert engine.status_for_date(SUNDAY, scope).pending

    for instance in index.instances_for_day(SUNDAY):
        ledger.submit(MEMBER_ID, instance.logical_id, AvailabilityStatus.AVAILABLE)
    assert engine.status_for_date(SUNDAY, scope).complete

    statuses = engine.statuses_between(DateRange(date(2024, 1, 13), SUNDAY), scope)
    assert [item.phase for item in statuses] == [CompletionPhase.NOT_STARTED, CompletionPhase.COMPLETE]
