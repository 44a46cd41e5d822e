"""
Pydantic schemas for balances and simplified debts.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from app.core.money import MoneyAmount


class ParticipantRef(BaseModel):
    """Identity of one side of a debt."""
    id: int
    full_name: Optional[str] = None
    email: Optional[str] = None


class ParticipantBalance(BaseModel):
    """A participant's ledger totals and net position."""
    id: int
    full_name: Optional[str] = None
    email: Optional[str] = None
    total_paid: MoneyAmount
    total_owed: MoneyAmount
    settlements_paid: MoneyAmount
    settlements_received: MoneyAmount
    net_balance: MoneyAmount  # positive = owed money, negative = owes money


class DebtResponse(BaseModel):
    """One settling transaction."""
    from_user: ParticipantRef = Field(alias="from")
    to_user: ParticipantRef = Field(alias="to")
    amount: MoneyAmount

    class Config:
        populate_by_name = True


class BalanceSheet(BaseModel):
    """Per-participant balances and the minimal set of settling transactions."""
    trip_id: int
    currency: str
    participants: List[ParticipantBalance] = []
    debts: List[DebtResponse] = []
