"""
Settlement routes: balances and the transfers that settle them.
"""
import logging
from fastapi import APIRouter, Depends
from app.schemas.settlement import BalanceSheet, DebtResponse, ParticipantBalance, ParticipantRef
from app.api.dependencies import get_balance_calculator
from app.services.balance_service import BalanceCalculator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settlement", tags=["settlement"])


@router.get("/{trip_id}/balances", response_model=BalanceSheet)
async def get_balances(
    trip_id: int,
    calculator: BalanceCalculator = Depends(get_balance_calculator)
):
    """
    Calculate per-participant balances for a trip and the minimal set of
    transfers that settles them.
    """
    balances = calculator.calculate_balances(trip_id)

    refs = {
        p.user_id: ParticipantRef(id=p.user_id, full_name=p.display_name, email=p.email)
        for p in balances.participants
    }

    participants = [
        ParticipantBalance(
            id=p.user_id,
            full_name=p.display_name,
            email=p.email,
            total_paid=p.total_paid,
            total_owed=p.total_owed,
            settlements_paid=p.settlements_paid,
            settlements_received=p.settlements_received,
            net_balance=p.net_balance
        )
        for p in balances.participants
    ]

    debts = [
        DebtResponse(
            from_user=refs[d.from_user_id],
            to_user=refs[d.to_user_id],
            amount=d.amount
        )
        for d in balances.debts
    ]

    logger.info(f"Trip {trip_id}: {len(participants)} participants, {len(debts)} settling transfers")

    return BalanceSheet(
        trip_id=trip_id,
        currency=balances.currency,
        participants=participants,
        debts=debts
    )
