"""
Tests for split validation and allocation.
"""
from decimal import Decimal

import pytest
from app.core.exceptions import ValidationError
from app.core.money import Money
from app.schemas.expense import SplitInput
from app.services.split_allocator import SplitAllocator


class FakeTripDirectory:
    def __init__(self, participants):
        self.participants = participants

    def get_trip(self, trip_id):
        return None

    def resolve_participants(self, trip_id):
        return list(self.participants)


@pytest.fixture
def allocator():
    return SplitAllocator(FakeTripDirectory([1, 2, 3]), epsilon=Decimal("0.01"), enforce_total=True)


def test_explicit_amounts_are_kept(allocator):
    splits = allocator.allocate(1, Money(90), [
        SplitInput(user_id=1, amount=Decimal("30")),
        SplitInput(user_id=2, amount=Decimal("30")),
        SplitInput(user_id=3, amount=Decimal("30")),
    ])

    assert [(s.user_id, s.amount) for s in splits] == [(1, Money(30)), (2, Money(30)), (3, Money(30))]
    assert all(s.percentage is None for s in splits)


def test_percentage_only_split_is_converted_to_amount(allocator):
    splits = allocator.allocate(1, Money(200), [
        SplitInput(user_id=1, percentage=Decimal("25")),
        SplitInput(user_id=2, percentage=Decimal("75")),
    ])

    assert [s.amount for s in splits] == [Money(50), Money(150)]
    assert splits[0].percentage == Decimal("25")


def test_amount_wins_over_percentage(allocator):
    splits = allocator.allocate(1, Money(100), [
        SplitInput(user_id=1, amount=Decimal("60"), percentage=Decimal("10")),
        SplitInput(user_id=2, amount=Decimal("40")),
    ])

    assert splits[0].amount == Money(60)


def test_rounding_allowance_scales_with_split_count(allocator):
    # Three thirds rounded down to the cent miss the total by one cent
    splits = allocator.allocate(1, Money(100), [
        SplitInput(user_id=1, percentage=Decimal("33.33")),
        SplitInput(user_id=2, percentage=Decimal("33.33")),
        SplitInput(user_id=3, percentage=Decimal("33.33")),
    ])

    assert sum(s.amount for s in splits) == Money("99.99")


def test_splits_must_add_up_to_total(allocator):
    with pytest.raises(ValidationError, match="must equal expense amount"):
        allocator.allocate(1, Money(100), [
            SplitInput(user_id=1, amount=Decimal("30")),
            SplitInput(user_id=2, amount=Decimal("30")),
        ])


def test_total_check_can_be_disabled():
    allocator = SplitAllocator(FakeTripDirectory([1, 2]), epsilon=Decimal("0.01"), enforce_total=False)

    splits = allocator.allocate(1, Money(100), [SplitInput(user_id=1, amount=Decimal("30"))])

    assert splits[0].amount == Money(30)


def test_duplicate_users_are_rejected(allocator):
    with pytest.raises(ValidationError, match="more than once"):
        allocator.allocate(1, Money(60), [
            SplitInput(user_id=1, amount=Decimal("30")),
            SplitInput(user_id=1, amount=Decimal("30")),
        ])


def test_non_participants_are_rejected(allocator):
    with pytest.raises(ValidationError, match="not a participant"):
        allocator.allocate(1, Money(30), [SplitInput(user_id=99, amount=Decimal("30"))])


def test_split_needs_amount_or_percentage(allocator):
    with pytest.raises(ValidationError, match="amount or a percentage"):
        allocator.allocate(1, Money(30), [SplitInput(user_id=1)])


def test_equal_splits_cover_every_participant(allocator):
    splits = allocator.equal_splits(1, Money(100))

    assert [s.user_id for s in splits] == [1, 2, 3]
    assert [s.amount for s in splits] == [Money("33.34"), Money("33.33"), Money("33.33")]
    assert all(s.percentage == Decimal("33.33") for s in splits)


def test_equal_splits_without_participants():
    allocator = SplitAllocator(FakeTripDirectory([]))

    with pytest.raises(ValidationError):
        allocator.equal_splits(1, Money(100))


def test_payer_only(allocator):
    [split] = allocator.payer_only(2, Money(45))

    assert split.user_id == 2
    assert split.amount == Money(45)
    assert split.percentage == Decimal(100)


def test_explicit_amounts_get_no_rounding_allowance():
    allocator = SplitAllocator(FakeTripDirectory([1, 2, 3, 4]), epsilon=Decimal("0.01"), enforce_total=True)

    with pytest.raises(ValidationError, match="must equal expense amount"):
        allocator.allocate(1, Money(100), [
            SplitInput(user_id=1, amount=Decimal("25.01")),
            SplitInput(user_id=2, amount=Decimal("25.01")),
            SplitInput(user_id=3, amount=Decimal("25.00")),
            SplitInput(user_id=4, amount=Decimal("25.00")),
        ])

    # A one cent difference is still within epsilon
    splits = allocator.allocate(1, Money(100), [
        SplitInput(user_id=1, amount=Decimal("25.01")),
        SplitInput(user_id=2, amount=Decimal("25.00")),
        SplitInput(user_id=3, amount=Decimal("25.00")),
        SplitInput(user_id=4, amount=Decimal("25.00")),
    ])
    assert not any(s.from_percentage for s in splits)


def test_allowance_counts_only_percentage_splits():
    allocator = SplitAllocator(FakeTripDirectory([1, 2, 3, 4]), epsilon=Decimal("0.01"), enforce_total=True)

    # Two rounded shares give one cent of allowance, not two
    with pytest.raises(ValidationError):
        allocator.allocate(1, Money(100), [
            SplitInput(user_id=1, percentage=Decimal("25")),
            SplitInput(user_id=2, percentage=Decimal("25")),
            SplitInput(user_id=3, amount=Decimal("25.01")),
            SplitInput(user_id=4, amount=Decimal("25.01")),
        ])
