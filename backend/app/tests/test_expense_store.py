"""
Tests for expense persistence.
"""
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError
from app.core.exceptions import ValidationError
from app.core.money import Money
from app.models import Expense, ExpenseCategory, ExpenseKind, ExpenseSplit
from app.services.expense_store import ExpenseStore
from app.services.split_allocator import AllocatedSplit


@pytest.fixture
def store(db):
    return ExpenseStore(db)


def _expense_data(trip, **overrides):
    data = {
        "trip_id": trip.id,
        "payer_id": trip.alice,
        "amount": Money(60),
        "currency": "USD",
        "kind": ExpenseKind.SPEND,
        "category": ExpenseCategory.FOOD,
        "expense_date": date(2024, 5, 10),
    }
    data.update(overrides)
    return data


def test_create_loads_payer_and_splits(store, trip):
    expense = store.create(_expense_data(trip), [
        AllocatedSplit(user_id=trip.alice, amount=Money(30)),
        AllocatedSplit(user_id=trip.bob, amount=Money(30)),
    ])

    assert expense.id is not None
    assert expense.payer.display_name == "Alice Adams"
    assert [s.user_id for s in expense.splits] == [trip.alice, trip.bob]
    assert all(not s.settled for s in expense.splits)
    assert expense.amount == Money(60)


def test_failed_split_insert_leaves_nothing_behind(store, db, trip):
    with pytest.raises(IntegrityError):
        store.create(_expense_data(trip), [
            AllocatedSplit(user_id=trip.bob, amount=Money(30)),
            AllocatedSplit(user_id=trip.bob, amount=Money(30)),
        ])

    assert db.query(Expense).count() == 0
    assert db.query(ExpenseSplit).count() == 0


def test_list_is_newest_first(store, trip):
    older = store.create(_expense_data(trip, expense_date=date(2024, 5, 1)), [])
    first = store.create(_expense_data(trip), [])
    second = store.create(_expense_data(trip), [])

    expenses = store.find_by_trip_id(trip.id)

    assert [e.id for e in expenses] == [second.id, first.id, older.id]


def test_list_filters(store, trip):
    food = store.create(_expense_data(trip, expense_date=date(2024, 5, 2)), [])
    taxi = store.create(
        _expense_data(trip, category=ExpenseCategory.TRANSPORTATION, expense_date=date(2024, 5, 5)),
        []
    )
    repayment = store.create(
        _expense_data(trip, kind=ExpenseKind.SETTLEMENT, category=None, expense_date=date(2024, 5, 8)),
        [AllocatedSplit(user_id=trip.bob, amount=Money(60))]
    )

    assert [e.id for e in store.find_by_trip_id(trip.id, category="food")] == [food.id]
    assert [e.id for e in store.find_by_trip_id(trip.id, category="Settlement")] == [repayment.id]
    assert [e.id for e in store.find_by_trip_id(
        trip.id, start_date=date(2024, 5, 3), end_date=date(2024, 5, 6)
    )] == [taxi.id]
    assert store.find_by_trip_id(trip.id + 1) == []

    with pytest.raises(ValidationError):
        store.find_by_trip_id(trip.id, category="souvenirs")


def test_update_requires_a_change(store, trip):
    expense = store.create(_expense_data(trip), [])

    with pytest.raises(ValidationError, match="No fields to update"):
        store.update(expense.id, {})
    with pytest.raises(ValidationError):
        store.update(expense.id, {"payer_id": trip.bob})

    assert store.find_by_id(expense.id).payer_id == trip.alice


def test_update_fields(store, trip):
    expense = store.create(_expense_data(trip), [])

    updated = store.update(expense.id, {"description": "Dinner", "currency": "eur", "category": "settlement"})

    assert updated.description == "Dinner"
    assert updated.currency == "EUR"
    assert updated.kind == ExpenseKind.SETTLEMENT
    assert updated.category is None
    assert updated.category_label == "settlement"


def test_update_replaces_splits(store, db, trip):
    expense = store.create(_expense_data(trip), [
        AllocatedSplit(user_id=trip.alice, amount=Money(30)),
        AllocatedSplit(user_id=trip.bob, amount=Money(30)),
    ])

    updated = store.update(expense.id, {}, splits=[AllocatedSplit(user_id=trip.carol, amount=Money(60))])

    assert [(s.user_id, s.amount) for s in updated.splits] == [(trip.carol, Money(60))]
    assert db.query(ExpenseSplit).count() == 1


def test_update_missing_expense(store):
    assert store.update(404, {"description": "gone"}) is None


def test_delete_removes_splits(store, db, trip):
    expense = store.create(_expense_data(trip), [AllocatedSplit(user_id=trip.bob, amount=Money(60))])

    assert store.delete_expense(expense.id) is True
    assert store.find_by_id(expense.id) is None
    assert db.query(ExpenseSplit).count() == 0
    assert store.delete_expense(expense.id) is False


def test_settle_and_unsettle(store, trip):
    expense = store.create(_expense_data(trip), [AllocatedSplit(user_id=trip.bob, amount=Money(60))])
    split_id = expense.splits[0].id

    settled = store.set_split_settled(split_id, True)
    assert settled.settled is True
    assert settled.settled_at is not None

    unsettled = store.set_split_settled(split_id, False)
    assert unsettled.settled is False
    assert unsettled.settled_at is None

    assert store.set_split_settled(404, True) is None


def test_unsettled_splits_exclude_own_and_settled(store, trip):
    dinner = store.create(_expense_data(trip), [
        AllocatedSplit(user_id=trip.alice, amount=Money(30)),
        AllocatedSplit(user_id=trip.bob, amount=Money(30)),
    ])
    store.create(_expense_data(trip, payer_id=trip.bob, amount=Money(20)), [
        AllocatedSplit(user_id=trip.bob, amount=Money(20)),
    ])

    open_splits = store.find_unsettled_splits(trip.id, trip.bob)
    assert [(s.expense_id, s.amount) for s in open_splits] == [(dinner.id, Money(30))]
    assert open_splits[0].expense.payer.display_name == "Alice Adams"

    store.set_split_settled(open_splits[0].id, True)
    assert store.find_unsettled_splits(trip.id, trip.bob) == []
    assert store.find_unsettled_splits(trip.id, trip.alice) == []
