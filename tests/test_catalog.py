from __future__ import annotations

from datetime import date, time

import pytest

from rota_ledger.core import PatternCatalog
from rota_ledger.domain import EventPattern, RehearsalKind, RehearsalRule


def test_catalog_orders_and_dedupes_by_id() -> None:
    catalog = PatternCatalog(
        [
            EventPattern(id="b", name="Evening", weekday=0, order=2),
            EventPattern(id="a", name="Morning", weekday=0, order=1),
            EventPattern(id="a", name="Morning copy", weekday=0, order=5),
        ]
    )
    assert [pattern.id for pattern in catalog.patterns] == ["a", "b"]
    assert len(catalog) == 2


def test_add_rejects_duplicate_names(catalog: PatternCatalog) -> None:
    version = catalog.version
    assert catalog.add(EventPattern(id="x", name="first service", weekday=6)) is False
    assert catalog.version == version
    assert catalog.add(EventPattern(id="y", name="Youth Night", weekday=5)) is True
    assert catalog.version == version + 1
    assert catalog.find_by_name("YOUTH NIGHT").id == "y"


def test_weekday_lookup(catalog: PatternCatalog) -> None:
    assert {pattern.id for pattern in catalog.for_weekday(0)} == {"p-first", "p-second"}
    assert catalog.name_keys_for_weekday(3) == {"midweek prayer"}
    assert "midweek prayer" in catalog.name_keys()


def test_pattern_rejects_bad_weekday() -> None:
    with pytest.raises(ValueError):
        EventPattern(id="bad", name="Bad", weekday=7)


def test_pattern_from_record_reads_rehearsal_columns() -> None:
    pattern = EventPattern.from_record(
        {
            "id": 4,
            "name": "Sunday Service",
            "default_day": 0,
            "service_time": "10:30",
            "display_order": 2,
            "rehearsal_type": "different_day",
            "rehearsal_day": 4,
            "rehearsal_time": "19:00",
        }
    )
    assert pattern.id == "4"
    assert pattern.default_time == time(10, 30)
    assert pattern.rehearsal.kind is RehearsalKind.DIFFERENT_DAY
    assert pattern.to_record()["rehearsal_time"] == "19:00"


def test_rehearsal_dates() -> None:
    sunday = date(2024, 1, 14)
    assert RehearsalRule(kind=RehearsalKind.SAME_DAY).rehearsal_date_for(sunday) == sunday
    assert RehearsalRule(kind=RehearsalKind.DIFFERENT_DAY, day=4).rehearsal_date_for(sunday) == date(2024, 1, 11)
    assert RehearsalRule(kind=RehearsalKind.DIFFERENT_DAY, day=0).rehearsal_date_for(sunday) == date(2024, 1, 7)
    assert RehearsalRule(kind=RehearsalKind.DAYS_BEFORE, days_before=2).rehearsal_date_for(sunday) == date(2024, 1, 12)
    assert RehearsalRule().rehearsal_date_for(sunday) is None
