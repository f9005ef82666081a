"""Testy životního cyklu (vyřazování kusů)."""
from datetime import date

import pytest
from sqlalchemy import select

from lendtrack.exceptions import InsufficientQuantityError, NotFoundError, ValidationError
from lendtrack.models.item import ItemStatus
from lendtrack.models.lifecycle import LifecycleEvent, LifecycleStatus, QuantityAction, RetirementSource
from lendtrack.schemas.lifecycle import LifecycleRequest
from lendtrack.services import ledger_service as ledger
from lendtrack.services import lifecycle_service


def _request(**kwargs):
    data = {
        "statuses": [LifecycleStatus.decommissioned],
        "event_date": date(2026, 3, 1),
        "reason": "Zastaralé",
        "quantity": 1,
    }
    data.update(kwargs)
    return LifecycleRequest(**data)


def test_record_lifecycle_event_debits_available(make_item, db, user):
    item = make_item(quantity=10)
    event = lifecycle_service.record_lifecycle_event(db, item.id, _request(quantity=3), user_id=user.id)

    assert event.quantity == 3
    assert event.statuses == ["Decommissioned"]
    assert event.source == RetirementSource.available
    assert event.created_by == user.id
    db.refresh(item)
    assert (item.quantity, item.quantity_available, item.quantity_retired) == (7, 7, 3)
    assert item.status == ItemStatus.available


def test_record_lifecycle_event_from_damaged_pool(make_item, db):
    item = make_item(quantity=5)
    ledger.mark_damaged(db, item.id, 2, "Prasklé")
    lifecycle_service.record_lifecycle_event(
        db, item.id,
        _request(statuses=[LifecycleStatus.beyond_repair], quantity=2, source=RetirementSource.damaged),
    )
    db.refresh(item)
    assert (item.quantity, item.quantity_available, item.quantity_damaged) == (3, 3, 0)
    assert item.status == ItemStatus.available


def test_lifecycle_multiple_statuses_deduplicated(make_item, db):
    item = make_item(quantity=2)
    event = lifecycle_service.record_lifecycle_event(
        db, item.id,
        _request(statuses=[LifecycleStatus.lost, LifecycleStatus.written_off, LifecycleStatus.lost]),
    )
    assert event.statuses == ["Lost Items", "Written-off"]


def test_lifecycle_retiring_everything_keeps_item(make_item, db):
    item = make_item(quantity=2)
    lifecycle_service.record_lifecycle_event(db, item.id, _request(quantity=2))
    item = ledger.get_item(db, item.id)
    assert item.quantity == 0
    assert item.status == ItemStatus.maintenance
    assert len(lifecycle_service.list_history(db, item.id)) == 1


@pytest.mark.parametrize("overrides", [
    {"statuses": []},
    {"reason": "   "},
    {"event_date": None},
    {"quantity": 0},
    {"quantity": -2},
])
def test_lifecycle_validation(make_item, db, overrides):
    item = make_item(quantity=5)
    with pytest.raises(ValidationError):
        lifecycle_service.record_lifecycle_event(db, item.id, _request(**overrides))
    assert db.scalars(select(LifecycleEvent)).all() == []
    db.refresh(item)
    assert item.quantity == 5


def test_lifecycle_insufficient_pool(make_item, db):
    item = make_item(quantity=3)
    ledger.loan_units(db, item.id, 2)
    with pytest.raises(InsufficientQuantityError):
        lifecycle_service.record_lifecycle_event(db, item.id, _request(quantity=2))
    with pytest.raises(InsufficientQuantityError):
        lifecycle_service.record_lifecycle_event(db, item.id, _request(source=RetirementSource.damaged))
    assert db.scalars(select(LifecycleEvent)).all() == []


def test_lifecycle_unknown_item(db):
    with pytest.raises(NotFoundError):
        lifecycle_service.record_lifecycle_event(db, 123, _request())


def test_lifecycle_records_retire_transaction(make_item, db):
    item = make_item(quantity=4)
    lifecycle_service.record_lifecycle_event(db, item.id, _request(reason="Ztraceno na akci", quantity=1))
    latest = ledger.get_item_transactions(db, item.id)[0]
    assert latest.action == QuantityAction.retire
    assert "Ztraceno na akci" in latest.reason


def test_list_history_newest_first(make_item, db):
    item = make_item(quantity=10)
    for day in (5, 20, 12):
        lifecycle_service.record_lifecycle_event(db, item.id, _request(event_date=date(2026, 4, day)))
    history = lifecycle_service.list_history(db, item.id)
    assert [e.event_date.day for e in history] == [20, 12, 5]


def test_list_all_history_date_range(make_item, db):
    a = make_item(quantity=5)
    b = make_item(quantity=5)
    lifecycle_service.record_lifecycle_event(db, a.id, _request(event_date=date(2026, 1, 10)))
    lifecycle_service.record_lifecycle_event(db, b.id, _request(event_date=date(2026, 2, 10)))
    lifecycle_service.record_lifecycle_event(db, b.id, _request(event_date=date(2026, 3, 10)))

    assert lifecycle_service.list_all_history(db).total == 3
    page = lifecycle_service.list_all_history(db, date_from=date(2026, 2, 1), date_to=date(2026, 2, 28))
    assert [e.item_code for e in page.items] == [b.code]
