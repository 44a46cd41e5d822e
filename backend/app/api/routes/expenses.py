"""
Expense management routes.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional
from datetime import date

logger = logging.getLogger(__name__)
from app.core.utils import format_response
from app.models.expense import Expense, ExpenseSplit
from app.schemas.expense import (
    ExpenseCreate, ExpensePatch, ExpenseResponse, ExpenseSplitResponse, UnsettledSplitResponse
)
from app.api.dependencies import get_expense_service
from app.services.expense_service import ExpenseService

router = APIRouter(prefix="/expenses", tags=["expenses"])


def build_split_response(split: ExpenseSplit) -> ExpenseSplitResponse:
    """Split with its holder's display identity."""
    return ExpenseSplitResponse(
        id=split.id,
        user_id=split.user_id,
        user_name=split.user.display_name if split.user else None,
        user_email=split.user.email if split.user else None,
        amount=split.amount,
        percentage=float(split.percentage) if split.percentage is not None else None,
        settled=split.settled,
        settled_at=split.settled_at
    )


def build_expense_response(expense: Expense) -> ExpenseResponse:
    """Expense with payer identity and splits."""
    return ExpenseResponse(
        id=expense.id,
        trip_id=expense.trip_id,
        payer_id=expense.payer_id,
        payer_name=expense.payer.display_name if expense.payer else None,
        payer_email=expense.payer.email if expense.payer else None,
        activity_id=expense.activity_id,
        amount=expense.amount,
        currency=expense.currency,
        category=expense.category_label,
        description=expense.description,
        expense_date=expense.expense_date,
        splits=[build_split_response(s) for s in expense.splits],
        created_at=expense.created_at,
        updated_at=expense.updated_at
    )


@router.post("/{trip_id}", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    trip_id: int,
    expense_data: ExpenseCreate,
    service: ExpenseService = Depends(get_expense_service)
):
    """Create an expense together with its splits."""
    expense = service.create_expense(trip_id, expense_data)
    return build_expense_response(expense)


@router.get("/{trip_id}", response_model=List[ExpenseResponse])
async def list_expenses(
    trip_id: int,
    category: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    service: ExpenseService = Depends(get_expense_service)
):
    """List a trip's expenses, newest first, optionally filtered."""
    expenses = service.list_expenses(trip_id, category=category, start_date=start_date, end_date=end_date)
    return [build_expense_response(e) for e in expenses]


@router.get("/detail/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: int,
    service: ExpenseService = Depends(get_expense_service)
):
    """Get a single expense."""
    expense = service.get_expense(expense_id)
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense not found"
        )
    return build_expense_response(expense)


@router.put("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: int,
    patch: ExpensePatch,
    service: ExpenseService = Depends(get_expense_service)
):
    """Update an expense. Only the fields present in the body change."""
    expense = service.update_expense(expense_id, patch)
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense not found"
        )
    return build_expense_response(expense)


@router.delete("/{expense_id}")
async def delete_expense(
    expense_id: int,
    service: ExpenseService = Depends(get_expense_service)
):
    """Delete an expense and its splits. Deleting a missing expense is a no-op."""
    deleted = service.delete_expense(expense_id)
    if not deleted:
        logger.info(f"Delete of expense {expense_id} ignored: no such expense")
    message = "Expense deleted successfully" if deleted else "Expense not found"
    return format_response({"deleted": deleted}, message=message)


@router.post("/splits/{split_id}/settle", response_model=ExpenseSplitResponse)
async def settle_split(
    split_id: int,
    service: ExpenseService = Depends(get_expense_service)
):
    """Mark a split as settled."""
    split = service.settle_split(split_id)
    if not split:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense split not found"
        )
    return build_split_response(split)


@router.delete("/splits/{split_id}/settle", response_model=ExpenseSplitResponse)
async def unsettle_split(
    split_id: int,
    service: ExpenseService = Depends(get_expense_service)
):
    """Mark a split as unsettled."""
    split = service.unsettle_split(split_id)
    if not split:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense split not found"
        )
    return build_split_response(split)


@router.get("/{trip_id}/unsettled/{user_id}", response_model=List[UnsettledSplitResponse])
async def list_unsettled_splits(
    trip_id: int,
    user_id: int,
    service: ExpenseService = Depends(get_expense_service)
):
    """Splits a user still owes on expenses paid by someone else."""
    splits = service.list_unsettled_splits(trip_id, user_id)
    return [
        UnsettledSplitResponse(
            split_id=s.id,
            expense_id=s.expense_id,
            amount=s.amount,
            expense_amount=s.expense.amount,
            expense_description=s.expense.description,
            expense_date=s.expense.expense_date,
            payer_id=s.expense.payer_id,
            payer_name=s.expense.payer.display_name if s.expense.payer else None
        )
        for s in splits
    ]
