"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from app.api.routes import expenses, budget, settlements

api_router = APIRouter()

api_router.include_router(expenses.router)
api_router.include_router(budget.router)
api_router.include_router(settlements.router)
