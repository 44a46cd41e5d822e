"""
Expense service for expense-related business logic.
"""
import logging
from datetime import date
from typing import List, Optional
from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.core.money import Money
from app.models.expense import Expense, ExpenseKind, ExpenseSplit, parse_category
from app.schemas.expense import ExpenseCreate, ExpensePatch
from app.services.directory import TripDirectory
from app.services.expense_store import ExpenseStore
from app.services.split_allocator import SplitAllocator

logger = logging.getLogger(__name__)


class ExpenseService:
    """Creates and maintains expenses; validation happens before any write."""

    def __init__(self, store: ExpenseStore, allocator: SplitAllocator, trip_directory: TripDirectory):
        self.store = store
        self.allocator = allocator
        self.trip_directory = trip_directory

    def create_expense(self, trip_id: int, data: ExpenseCreate) -> Expense:
        """Create an expense with its splits in one atomic write."""
        trip = self.trip_directory.get_trip(trip_id)
        if not trip:
            raise NotFoundError("Trip")

        if data.payer_id not in self.trip_directory.resolve_participants(trip_id):
            raise ValidationError("Payer is not a participant of this trip")

        kind, category = parse_category(data.category)
        amount = Money(data.amount)
        currency = (data.currency or trip.currency or settings.DEFAULT_CURRENCY).upper()

        if data.split_evenly:
            splits = self.allocator.equal_splits(trip_id, amount)
        elif data.splits:
            splits = self.allocator.allocate(trip_id, amount, data.splits)
        elif kind == ExpenseKind.SETTLEMENT:
            raise ValidationError("A settlement must name at least one recipient in its splits")
        else:
            # If no splits specified, payer pays all
            splits = self.allocator.payer_only(data.payer_id, amount)

        expense = self.store.create(
            {
                "trip_id": trip_id,
                "payer_id": data.payer_id,
                "activity_id": data.activity_id,
                "amount": amount,
                "currency": currency,
                "kind": kind,
                "category": category,
                "description": data.description.strip() if data.description and data.description.strip() else None,
                "expense_date": data.expense_date,
            },
            splits
        )
        logger.info(f"Created {kind.value} expense {expense.id} on trip {trip_id} with {len(splits)} splits")
        return expense

    def get_expense(self, expense_id: int) -> Optional[Expense]:
        return self.store.find_by_id(expense_id)

    def list_expenses(
        self,
        trip_id: int,
        category: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Expense]:
        return self.store.find_by_trip_id(trip_id, category=category, start_date=start_date, end_date=end_date)

    def update_expense(self, expense_id: int, patch: ExpensePatch) -> Optional[Expense]:
        """
        Apply a partial update. Returns None if the expense does not exist.

        Replacement splits are checked against the new amount (or the current
        one). An empty split list charges a spend expense to its payer and is
        rejected for a settlement. When only the amount changes, the existing
        splits must still add up to it.
        """
        fields = patch.model_dump(exclude_unset=True, exclude={"splits"})
        if not fields and patch.splits is None:
            raise ValidationError("No fields to update")

        expense = self.store.find_by_id(expense_id)
        if not expense:
            return None

        kind = parse_category(fields["category"])[0] if "category" in fields else expense.kind
        amount = Money(fields["amount"]) if "amount" in fields else expense.amount
        splits = None
        if patch.splits:
            splits = self.allocator.allocate(expense.trip_id, amount, patch.splits)
        elif patch.splits is not None:
            # An emptied split list falls back to the same rule as creation
            if kind == ExpenseKind.SETTLEMENT:
                raise ValidationError("A settlement must name at least one recipient in its splits")
            splits = self.allocator.payer_only(expense.payer_id, amount)
        elif "amount" in fields and self.allocator.enforce_total and expense.splits:
            self.allocator.check_total(amount, expense.splits)

        updated = self.store.update(expense_id, fields, splits=splits)
        logger.info(f"Updated expense {expense_id}: fields={sorted(fields)} splits_replaced={splits is not None}")
        return updated

    def delete_expense(self, expense_id: int) -> bool:
        deleted = self.store.delete_expense(expense_id)
        if deleted:
            logger.info(f"Deleted expense {expense_id}")
        return deleted

    def settle_split(self, split_id: int) -> Optional[ExpenseSplit]:
        split = self.store.set_split_settled(split_id, True)
        if split:
            logger.info(f"Marked split {split_id} settled")
        return split

    def unsettle_split(self, split_id: int) -> Optional[ExpenseSplit]:
        split = self.store.set_split_settled(split_id, False)
        if split:
            logger.info(f"Marked split {split_id} unsettled")
        return split

    def list_unsettled_splits(self, trip_id: int, user_id: int) -> List[ExpenseSplit]:
        return self.store.find_unsettled_splits(trip_id, user_id)
