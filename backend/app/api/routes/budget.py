"""
Budget summary routes.
"""
from fastapi import APIRouter, Depends
from app.schemas.budget import BudgetSummary, CategoryTotal
from app.api.dependencies import get_summary_aggregator
from app.services.summary_service import SummaryAggregator

router = APIRouter(prefix="/budget", tags=["budget"])


@router.get("/{trip_id}/summary", response_model=BudgetSummary)
async def get_budget_summary(
    trip_id: int,
    aggregator: SummaryAggregator = Depends(get_summary_aggregator)
):
    """Get trip spending against its budget. Settlements do not count as spend."""
    summary = aggregator.get_summary(trip_id)

    return BudgetSummary(
        budget=summary.budget,
        currency=summary.currency,
        total_spent=summary.total_spent,
        remaining=summary.remaining,
        percent_used=summary.percent_used,
        expense_count=summary.expense_count,
        by_category=[
            CategoryTotal(category=category, total=total)
            for category, total in summary.by_category
        ],
        budget_status=summary.budget_status,
        budget_warning=summary.budget_warning
    )
