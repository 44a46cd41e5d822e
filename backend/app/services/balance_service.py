"""
Balance service: replay a trip's expenses into per-participant positions.
"""
import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from functools import reduce
from typing import Dict, List, Mapping, Optional
from app.core.config import settings
from app.core.money import Money
from app.models.expense import Expense
from app.services.directory import IdentityDirectory, TripDirectory
from app.services.expense_store import ExpenseStore
from app.services.settlement_service import Debt, simplify_debts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipantLedger:
    """A participant's accumulated ledger totals."""
    user_id: int
    display_name: Optional[str] = None
    email: Optional[str] = None
    total_paid: Money = Money.zero()
    total_owed: Money = Money.zero()
    settlements_paid: Money = Money.zero()
    settlements_received: Money = Money.zero()

    @property
    def net_balance(self) -> Money:
        """Positive: this participant is owed money. Negative: owes money."""
        return (self.total_paid - self.total_owed) + (self.settlements_paid - self.settlements_received)

    def credit(self, field: str, amount: Money) -> "ParticipantLedger":
        return replace(self, **{field: getattr(self, field) + amount})


@dataclass(frozen=True)
class Balances:
    """Result of a balance computation."""
    trip_id: int
    currency: str
    participants: List[ParticipantLedger]
    debts: List[Debt]

    def participant(self, user_id: int) -> Optional[ParticipantLedger]:
        return next((p for p in self.participants if p.user_id == user_id), None)


def _credit(
    ledgers: Mapping[int, ParticipantLedger],
    user_id: int,
    field: str,
    amount: Money,
    expense_id: int,
) -> Mapping[int, ParticipantLedger]:
    ledger = ledgers.get(user_id)
    if ledger is None:
        logger.debug(f"Skipping {field} of {amount} for user {user_id} on expense {expense_id}: not a trip participant")
        return ledgers
    return {**ledgers, user_id: ledger.credit(field, amount)}


def apply_expense(ledgers: Mapping[int, ParticipantLedger], expense: Expense) -> Mapping[int, ParticipantLedger]:
    """
    Return the ledgers with one expense applied.

    Spending credits the payer's total_paid and each split holder's
    total_owed. A settlement credits the payer's settlements_paid and each
    recipient's settlements_received.
    """
    if expense.is_settlement:
        paid_field, owed_field = "settlements_paid", "settlements_received"
    else:
        paid_field, owed_field = "total_paid", "total_owed"

    ledgers = _credit(ledgers, expense.payer_id, paid_field, expense.amount, expense.id)
    for split in expense.splits:
        ledgers = _credit(ledgers, split.user_id, owed_field, split.amount, expense.id)
    return ledgers


class BalanceCalculator:
    """Recomputes balances from stored state on every call; nothing is cached."""

    def __init__(
        self,
        store: ExpenseStore,
        trip_directory: TripDirectory,
        identity_directory: IdentityDirectory,
        epsilon: Decimal = None,
    ):
        self.store = store
        self.trip_directory = trip_directory
        self.identity_directory = identity_directory
        self.epsilon = epsilon if epsilon is not None else settings.LEDGER_EPSILON

    def seed(self, trip_id: int) -> Dict[int, ParticipantLedger]:
        participant_ids = self.trip_directory.resolve_participants(trip_id)
        identities = self.identity_directory.resolve(participant_ids)

        seeded = {}
        for user_id in participant_ids:
            identity = identities.get(user_id)
            seeded[user_id] = ParticipantLedger(
                user_id=user_id,
                display_name=identity.display_name if identity else None,
                email=identity.email if identity else None,
            )
        return seeded

    def calculate_balances(self, trip_id: int) -> Balances:
        """Per-participant totals, net balances and simplified debts for a trip."""
        trip = self.trip_directory.get_trip(trip_id)
        currency = (trip.currency if trip else None) or settings.DEFAULT_CURRENCY

        seeded = self.seed(trip_id)
        expenses = self.store.find_by_trip_id(trip_id)
        ledgers = reduce(apply_expense, expenses, seeded)

        # Keep participant order as resolved by the trip directory
        participants = [ledgers[user_id] for user_id in seeded]
        debts = simplify_debts(
            [(p.user_id, p.net_balance) for p in participants],
            epsilon=self.epsilon
        )

        return Balances(trip_id=trip_id, currency=currency, participants=participants, debts=debts)
