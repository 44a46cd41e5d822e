"""
Budget summary service: trip spending against its budget.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.money import Money, round_cents
from app.models.expense import Expense, ExpenseKind
from app.services.directory import TripDirectory


@dataclass(frozen=True)
class Summary:
    budget: Optional[Money]
    currency: str
    total_spent: Money
    remaining: Optional[Money]
    percent_used: Optional[float]
    expense_count: int
    by_category: List[Tuple[str, Money]] = field(default_factory=list)
    budget_status: Optional[str] = None
    budget_warning: Optional[str] = None


def budget_status(percent_used: Optional[float], warning_percent: int) -> Tuple[Optional[str], Optional[str]]:
    """Status and user-facing warning for a percent-used figure."""
    if percent_used is None:
        return None, None
    if percent_used >= 100:
        return "exceeded", "You have exceeded your trip budget!"
    if percent_used >= warning_percent:
        return "warning", f"You have used over {warning_percent}% of your trip budget."
    return "ok", None


class SummaryAggregator:
    """Totals are recomputed from stored expenses; settlements are never spend."""

    def __init__(self, db: Session, trip_directory: TripDirectory):
        self.db = db
        self.trip_directory = trip_directory

    def get_summary(self, trip_id: int) -> Summary:
        trip = self.trip_directory.get_trip(trip_id)
        if not trip:
            return Summary(
                budget=None,
                currency=settings.DEFAULT_CURRENCY,
                total_spent=Money.zero(),
                remaining=None,
                percent_used=None,
                expense_count=0,
            )

        expense_count = self.db.query(func.count(Expense.id)).filter(
            Expense.trip_id == trip_id
        ).scalar() or 0

        rows = self.db.query(
            Expense.category,
            func.sum(Expense.amount).label("total")
        ).filter(
            Expense.trip_id == trip_id,
            Expense.kind == ExpenseKind.SPEND
        ).group_by(Expense.category).all()

        # Sort by total spent (descending), then by category name
        by_category = sorted(
            [(category.value, Money(total or 0)) for category, total in rows],
            key=lambda item: (-item[1].amount, item[0])
        )
        total_spent = sum((total for _, total in by_category), Money.zero())

        budget = trip.budget
        remaining = budget - total_spent if budget is not None else None
        percent_used = None
        if budget is not None and budget > Money.zero():
            percent_used = float(round_cents(total_spent.amount / budget.amount * Decimal(100)))

        status, warning = budget_status(percent_used, settings.BUDGET_WARNING_PERCENT)

        return Summary(
            budget=budget,
            currency=trip.currency or settings.DEFAULT_CURRENCY,
            total_spent=total_spent,
            remaining=remaining,
            percent_used=percent_used,
            expense_count=expense_count,
            by_category=by_category,
            budget_status=status,
            budget_warning=warning,
        )
