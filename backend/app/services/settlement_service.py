"""
Settlement service: reduce net balances to a minimal set of transfers.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Hashable, Iterable, List, Tuple
from app.core.config import settings
from app.core.money import Money


@dataclass(frozen=True)
class Debt:
    """Represents a single transfer between participants."""
    from_user_id: Hashable
    to_user_id: Hashable
    amount: Money


def simplify_debts(
    balances: Iterable[Tuple[Hashable, Money]],
    epsilon: Decimal = None
) -> List[Debt]:
    """
    Minimize the number of transfers needed to settle debts.

    `balances` are (participant, net balance) pairs where positive means the
    participant is owed money. Uses a greedy two-pointer match of the largest
    creditor against the largest debtor, producing at most n - 1 transfers.
    Balances within epsilon of zero are treated as settled.
    """
    eps = epsilon if epsilon is not None else settings.LEDGER_EPSILON
    balances = list(balances)

    # Separate creditors (positive balance) and debtors (negative balance)
    creditors = [[uid, bal] for uid, bal in balances if bal.exceeds(eps)]
    debtors = [[uid, -bal] for uid, bal in balances if (-bal).exceeds(eps)]  # Store as positive for easier calculation

    # Largest first; sort is stable so equal balances keep input order
    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    transfers = []
    cred_idx = 0
    debt_idx = 0

    while cred_idx < len(creditors) and debt_idx < len(debtors):
        creditor_id, cred_amount = creditors[cred_idx]
        debtor_id, debt_amount = debtors[debt_idx]

        # Transfer the minimum of what's owed and what's needed
        transfer_amount = min(cred_amount, debt_amount)
        if transfer_amount.exceeds(eps):
            transfers.append(Debt(debtor_id, creditor_id, transfer_amount.rounded()))

        creditors[cred_idx][1] = cred_amount - transfer_amount
        debtors[debt_idx][1] = debt_amount - transfer_amount

        if creditors[cred_idx][1].is_negligible(eps):
            cred_idx += 1
        if debtors[debt_idx][1].is_negligible(eps):
            debt_idx += 1

    return transfers
