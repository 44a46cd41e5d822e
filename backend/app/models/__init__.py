"""Models package - Import all models for SQLAlchemy registration."""
from app.models.user import User
from app.models.trip import Trip, TripCollaborator
from app.models.expense import Expense, ExpenseSplit, ExpenseKind, ExpenseCategory

__all__ = [
    "User",
    "Trip",
    "TripCollaborator",
    "Expense",
    "ExpenseSplit",
    "ExpenseKind",
    "ExpenseCategory",
]
