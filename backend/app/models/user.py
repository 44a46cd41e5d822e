"""
User model backing the identity directory.
"""
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class User(BaseModel):
    """User model with immutable username."""
    __tablename__ = "users"
    
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    
    # Relationships
    owned_trips = relationship("Trip", back_populates="owner")
    collaborations = relationship("TripCollaborator", back_populates="user", cascade="all, delete-orphan")
    expenses_paid = relationship("Expense", foreign_keys="Expense.payer_id", back_populates="payer")
    expense_splits = relationship("ExpenseSplit", back_populates="user")
    
    @property
    def display_name(self) -> str:
        return self.full_name or self.username
