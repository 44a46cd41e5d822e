"""
Trip and collaborator models backing the trip directory.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
from app.db.columns import MoneyType


class Trip(BaseModel):
    """Trip with an optional budget in its reporting currency."""
    __tablename__ = "trips"
    
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    budget = Column(MoneyType, nullable=True)
    currency = Column(String(3), nullable=True, default="USD")
    
    # Relationships
    owner = relationship("User", back_populates="owned_trips")
    collaborators = relationship("TripCollaborator", back_populates="trip", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="trip", cascade="all, delete-orphan")


class TripCollaborator(BaseModel):
    """Invitation of a user to a trip; a participant once accepted_at is set."""
    __tablename__ = "trip_collaborators"
    
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default="viewer")
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    
    # Relationships
    trip = relationship("Trip", back_populates="collaborators")
    user = relationship("User", back_populates="collaborations")
    
    __table_args__ = (
        UniqueConstraint("trip_id", "user_id", name="uq_trip_collaborator"),
    )
