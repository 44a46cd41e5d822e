"""
Pydantic schemas for trip budget summary.
"""
from pydantic import BaseModel
from typing import List, Optional
from app.core.money import MoneyAmount


class CategoryTotal(BaseModel):
    """Spend within one category."""
    category: str
    total: MoneyAmount


class BudgetSummary(BaseModel):
    """Trip spend against its budget, settlements excluded."""
    budget: Optional[MoneyAmount] = None
    currency: str
    total_spent: MoneyAmount
    remaining: Optional[MoneyAmount] = None
    percent_used: Optional[float] = None
    expense_count: int = 0
    by_category: List[CategoryTotal] = []
    budget_status: Optional[str] = None  # "ok", "warning" or "exceeded"
    budget_warning: Optional[str] = None
