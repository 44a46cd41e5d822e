"""
Validation and normalization of expense splits before storage.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence
from app.core.config import settings
from app.core.exceptions import ValidationError
from app.core.money import HALF_CENT, Money, round_cents
from app.services.directory import TripDirectory


@dataclass(frozen=True)
class AllocatedSplit:
    """A split ready to be stored."""
    user_id: int
    amount: Money
    percentage: Optional[Decimal] = None
    from_percentage: bool = False  # amount was rounded from the percentage


class SplitAllocator:
    """
    Turns caller-supplied {user_id, amount?, percentage?} items into
    AllocatedSplit values for one expense.

    An explicit amount is kept as given. A percentage-only item is converted
    once, here, to a cent-rounded amount; the stored percentage is advisory
    and never used to recompute the amount later.
    """

    def __init__(
        self,
        trip_directory: TripDirectory,
        epsilon: Decimal = None,
        enforce_total: bool = None,
    ):
        self.trip_directory = trip_directory
        self.epsilon = epsilon if epsilon is not None else settings.LEDGER_EPSILON
        self.enforce_total = enforce_total if enforce_total is not None else settings.ENFORCE_SPLIT_TOTAL

    def allocate(self, trip_id: int, total: Money, splits: Sequence) -> List[AllocatedSplit]:
        """Validate explicit splits against the trip's participants and the total."""
        participants = set(self.trip_directory.resolve_participants(trip_id))
        allocated = []
        seen = set()

        for split in splits:
            if split.user_id in seen:
                raise ValidationError(f"User {split.user_id} appears more than once in splits")
            seen.add(split.user_id)

            if split.user_id not in participants:
                raise ValidationError(f"User {split.user_id} is not a participant of this trip")

            from_percentage = split.amount is None and split.percentage is not None
            if split.amount is not None:
                amount = Money(split.amount)
            elif from_percentage:
                amount = (total * split.percentage * Decimal("0.01")).rounded()
            else:
                raise ValidationError("Each split must have an amount or a percentage")

            if amount < Money.zero():
                raise ValidationError("Split amounts cannot be negative")

            allocated.append(AllocatedSplit(
                user_id=split.user_id,
                amount=amount,
                percentage=split.percentage,
                from_percentage=from_percentage,
            ))

        if self.enforce_total:
            self.check_total(total, allocated)

        return allocated

    def check_total(self, total: Money, splits: Sequence[AllocatedSplit]) -> None:
        """
        Reject splits whose sum differs from the expense amount by more than
        epsilon. Amounts rounded from a percentage each add half a cent of
        allowance; explicit amounts add none.
        """
        split_total = sum((s.amount for s in splits), Money.zero())
        rounded = sum(1 for s in splits if getattr(s, "from_percentage", False))
        tolerance = max(self.epsilon, HALF_CENT * rounded)
        if not split_total.is_close(total, tolerance):
            raise ValidationError(
                f"Split amounts ({split_total}) must equal expense amount ({total.rounded()})"
            )

    def equal_splits(self, trip_id: int, total: Money) -> List[AllocatedSplit]:
        """Divide the total over every participant; the parts sum exactly."""
        participants = self.trip_directory.resolve_participants(trip_id)
        if not participants:
            raise ValidationError("Trip has no participants to split between")

        percentage = round_cents(Decimal(100) / len(participants))
        return [
            AllocatedSplit(user_id=user_id, amount=share, percentage=percentage)
            for user_id, share in zip(participants, total.distribute(len(participants)))
        ]

    def payer_only(self, payer_id: int, total: Money) -> List[AllocatedSplit]:
        """Without an explicit allocation, the payer carries the whole amount."""
        return [AllocatedSplit(user_id=payer_id, amount=total, percentage=Decimal(100))]
