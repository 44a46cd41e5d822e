"""
FastAPI dependencies wiring the ledger services to a request's session.
"""
from fastapi import Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.services.balance_service import BalanceCalculator
from app.services.directory import SqlIdentityDirectory, SqlTripDirectory
from app.services.expense_service import ExpenseService
from app.services.expense_store import ExpenseStore
from app.services.split_allocator import SplitAllocator
from app.services.summary_service import SummaryAggregator


def get_expense_service(db: Session = Depends(get_db)) -> ExpenseService:
    """Expense service bound to the request's database session."""
    trip_directory = SqlTripDirectory(db)
    return ExpenseService(
        store=ExpenseStore(db),
        allocator=SplitAllocator(trip_directory),
        trip_directory=trip_directory
    )


def get_summary_aggregator(db: Session = Depends(get_db)) -> SummaryAggregator:
    return SummaryAggregator(db, SqlTripDirectory(db))


def get_balance_calculator(db: Session = Depends(get_db)) -> BalanceCalculator:
    return BalanceCalculator(
        store=ExpenseStore(db),
        trip_directory=SqlTripDirectory(db),
        identity_directory=SqlIdentityDirectory(db)
    )
