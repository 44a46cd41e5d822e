"""
Pydantic schemas for Expense entity.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from app.core.money import MoneyAmount


class SplitInput(BaseModel):
    """One proposed share of an expense. Amount wins over percentage."""
    user_id: int
    amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    percentage: Optional[Decimal] = Field(default=None, ge=0, le=100, max_digits=5, decimal_places=2)


class ExpenseCreate(BaseModel):
    """Schema for expense creation."""
    payer_id: int
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)  # Defaults to the trip's currency
    category: str  # Spending category or "settlement"
    description: Optional[str] = Field(default=None, max_length=500)
    expense_date: date
    activity_id: Optional[int] = None
    splits: List[SplitInput] = []
    split_evenly: bool = False  # Divide the amount equally over all trip participants


class ExpensePatch(BaseModel):
    """
    Partial update of an expense.

    Only fields the caller sets are applied; an unset field is left alone.
    `splits`, when given, replaces every existing split.
    """
    amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    category: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=500)
    expense_date: Optional[date] = None
    activity_id: Optional[int] = None
    splits: Optional[List[SplitInput]] = None

    @field_validator("amount", "currency", "category", "expense_date")
    @classmethod
    def reject_null(cls, v, info):
        """These columns are NOT NULL; an explicit null is a mistake."""
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class ExpenseSplitResponse(BaseModel):
    """Schema for expense split response."""
    id: int
    user_id: int
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    amount: MoneyAmount
    percentage: Optional[float] = None
    settled: bool
    settled_at: Optional[datetime] = None


class ExpenseResponse(BaseModel):
    """Schema for expense response."""
    id: int
    trip_id: int
    payer_id: int
    payer_name: Optional[str] = None
    payer_email: Optional[str] = None
    activity_id: Optional[int] = None
    amount: MoneyAmount
    currency: str
    category: str
    description: Optional[str] = None
    expense_date: date
    splits: List[ExpenseSplitResponse] = []
    created_at: datetime
    updated_at: datetime


class UnsettledSplitResponse(BaseModel):
    """A split the user still owes to another participant."""
    split_id: int
    expense_id: int
    amount: MoneyAmount
    expense_amount: MoneyAmount
    expense_description: Optional[str] = None
    expense_date: date
    payer_id: int
    payer_name: Optional[str] = None
