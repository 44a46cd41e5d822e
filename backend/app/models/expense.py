"""
Expense and split models for the shared-expense ledger.
"""
import enum
from typing import Optional, Tuple
from sqlalchemy import (
    Column, String, Numeric, Date, DateTime, ForeignKey, Integer, Text, Boolean,
    Enum as SQLEnum, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from app.core.exceptions import ValidationError
from app.db.base import BaseModel
from app.db.columns import MoneyType

SETTLEMENT_LABEL = "settlement"


class ExpenseKind(str, enum.Enum):
    """Whether a row is trip spending or a repayment between participants."""
    SPEND = "spend"
    SETTLEMENT = "settlement"


class ExpenseCategory(str, enum.Enum):
    """Spending categories. Settlements carry no category."""
    ACCOMMODATION = "accommodation"
    TRANSPORTATION = "transportation"
    FOOD = "food"
    ACTIVITIES = "activities"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    OTHER = "other"


def parse_category(label: str) -> Tuple[ExpenseKind, Optional[ExpenseCategory]]:
    """
    Map the wire-level category string to (kind, category).

    "settlement" selects the settlement kind; every other value must be a
    spending category.
    """
    normalized = (label or "").strip().lower()
    if normalized == SETTLEMENT_LABEL:
        return ExpenseKind.SETTLEMENT, None
    try:
        return ExpenseKind.SPEND, ExpenseCategory(normalized)
    except ValueError:
        allowed = ", ".join([c.value for c in ExpenseCategory] + [SETTLEMENT_LABEL])
        raise ValidationError(f"Invalid category '{label}'. Must be one of: {allowed}")


class Expense(BaseModel):
    """One outlay (or repayment) recorded against a trip."""
    __tablename__ = "expenses"

    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    payer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    activity_id = Column(Integer, nullable=True)  # Activities live outside the ledger
    amount = Column(MoneyType, nullable=False)
    currency = Column(String(3), nullable=False)
    kind = Column(SQLEnum(ExpenseKind), nullable=False, default=ExpenseKind.SPEND, index=True)
    category = Column(SQLEnum(ExpenseCategory), nullable=True)
    description = Column(Text, nullable=True)
    expense_date = Column(Date, nullable=False, index=True)

    # Relationships
    trip = relationship("Trip", back_populates="expenses")
    payer = relationship("User", foreign_keys=[payer_id], back_populates="expenses_paid")
    splits = relationship(
        "ExpenseSplit",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseSplit.id",
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_expense_amount"),
        CheckConstraint(
            "(kind = 'SETTLEMENT' AND category IS NULL) OR (kind = 'SPEND' AND category IS NOT NULL)",
            name="ck_expense_kind_category",
        ),
    )

    @property
    def is_settlement(self) -> bool:
        return self.kind == ExpenseKind.SETTLEMENT

    @property
    def category_label(self) -> str:
        """Wire-level category: the spending category, or "settlement"."""
        if self.is_settlement:
            return SETTLEMENT_LABEL
        return self.category.value


class ExpenseSplit(BaseModel):
    """One participant's share of an expense."""
    __tablename__ = "expense_splits"

    expense_id = Column(Integer, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(MoneyType, nullable=False)
    percentage = Column(Numeric(5, 2), nullable=True)  # Informational; never used to derive amount
    settled = Column(Boolean, default=False, nullable=False)
    settled_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    expense = relationship("Expense", back_populates="splits")
    user = relationship("User", back_populates="expense_splits")

    __table_args__ = (
        UniqueConstraint("expense_id", "user_id", name="uq_expense_split_user"),
        CheckConstraint("amount >= 0", name="ck_split_amount"),
        CheckConstraint("percentage IS NULL OR (percentage >= 0 AND percentage <= 100)", name="ck_split_percentage"),
    )
