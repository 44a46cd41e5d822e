"""
Persistence for expenses and their splits.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy.orm import Session, joinedload, selectinload
from app.core.exceptions import ValidationError
from app.db.base import utcnow
from app.models.expense import Expense, ExpenseSplit, parse_category

logger = logging.getLogger(__name__)

# Columns a patch may touch
UPDATABLE_FIELDS = ("amount", "currency", "category", "description", "expense_date", "activity_id")


class ExpenseStore:
    """
    Reads and writes Expense rows together with their ExpenseSplit rows.

    Every write runs inside one session transaction: either all rows of the
    call are committed or the session is rolled back and the error re-raised.
    """

    def __init__(self, db: Session):
        self.db = db

    def _with_identities(self, query):
        return query.options(
            joinedload(Expense.payer),
            selectinload(Expense.splits).joinedload(ExpenseSplit.user),
        )

    def create(self, expense_data: Dict[str, Any], splits: Sequence[Any]) -> Expense:
        """
        Insert an expense and all of its splits atomically.

        `splits` items need `user_id`, `amount` and `percentage` attributes.
        """
        try:
            expense = Expense(**expense_data)
            self.db.add(expense)
            self.db.flush()

            for split in splits:
                self.db.add(ExpenseSplit(
                    expense_id=expense.id,
                    user_id=split.user_id,
                    amount=split.amount,
                    percentage=split.percentage,
                ))
                self.db.flush()

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.warning(f"Rolled back expense creation for trip {expense_data.get('trip_id')}: {e}")
            raise

        return self.find_by_id(expense.id)

    def find_by_id(self, expense_id: int) -> Optional[Expense]:
        """Expense with payer identity and splits, or None."""
        return self._with_identities(self.db.query(Expense)).filter(
            Expense.id == expense_id
        ).first()

    def find_by_trip_id(
        self,
        trip_id: int,
        category: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Expense]:
        """Trip expenses with splits, newest expense date first."""
        query = self._with_identities(self.db.query(Expense)).filter(Expense.trip_id == trip_id)

        if category:
            kind, spend_category = parse_category(category)
            query = query.filter(Expense.kind == kind)
            if spend_category is not None:
                query = query.filter(Expense.category == spend_category)
        if start_date:
            query = query.filter(Expense.expense_date >= start_date)
        if end_date:
            query = query.filter(Expense.expense_date <= end_date)

        return query.order_by(
            Expense.expense_date.desc(),
            Expense.created_at.desc(),
            Expense.id.desc()
        ).all()

    def update(
        self,
        expense_id: int,
        fields: Dict[str, Any],
        splits: Optional[Sequence[Any]] = None,
    ) -> Optional[Expense]:
        """
        Apply whitelisted field changes and, when given, replace the splits.

        Raises ValidationError when there is nothing to change. Returns None
        if the expense does not exist.
        """
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if not changes and splits is None:
            raise ValidationError("No fields to update")

        if "category" in changes:
            changes["kind"], changes["category"] = parse_category(changes["category"])
        if changes.get("currency"):
            changes["currency"] = changes["currency"].upper()

        expense = self.db.query(Expense).filter(Expense.id == expense_id).first()
        if not expense:
            return None

        try:
            for key, value in changes.items():
                setattr(expense, key, value)

            if splits is not None:
                expense.splits.clear()
                self.db.flush()
                for split in splits:
                    expense.splits.append(ExpenseSplit(
                        user_id=split.user_id,
                        amount=split.amount,
                        percentage=split.percentage,
                    ))
            # Split-only changes still count as an update of the expense
            expense.updated_at = utcnow()

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.warning(f"Rolled back update of expense {expense_id}: {e}")
            raise

        return self.find_by_id(expense_id)

    def delete_expense(self, expense_id: int) -> bool:
        """Delete an expense and its splits. False if it did not exist."""
        expense = self.db.query(Expense).filter(Expense.id == expense_id).first()
        if not expense:
            return False

        self.db.delete(expense)
        self.db.commit()
        return True

    def set_split_settled(self, split_id: int, settled: bool) -> Optional[ExpenseSplit]:
        """Mark a split settled (stamping settled_at) or unsettled."""
        split = self.db.query(ExpenseSplit).options(
            joinedload(ExpenseSplit.user)
        ).filter(ExpenseSplit.id == split_id).first()
        if not split:
            return None

        split.settled = settled
        split.settled_at = utcnow() if settled else None
        self.db.commit()
        self.db.refresh(split)
        return split

    def find_unsettled_splits(self, trip_id: int, user_id: int) -> List[ExpenseSplit]:
        """A user's open splits on expenses someone else paid, newest first."""
        return self.db.query(ExpenseSplit).join(
            Expense, ExpenseSplit.expense_id == Expense.id
        ).options(
            joinedload(ExpenseSplit.expense).joinedload(Expense.payer)
        ).filter(
            Expense.trip_id == trip_id,
            ExpenseSplit.user_id == user_id,
            ExpenseSplit.settled.is_(False),
            Expense.payer_id != user_id
        ).order_by(Expense.expense_date.desc(), Expense.id.desc()).all()
