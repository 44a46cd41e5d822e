"""
Trip and identity lookups consumed by the ledger.

The ledger only needs to know a trip's budget, currency and participant
set, and how to label a participant. How participantship is decided lives
behind these interfaces.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol
from sqlalchemy.orm import Session
from app.core.money import Money
from app.models.trip import Trip, TripCollaborator
from app.models.user import User


@dataclass(frozen=True)
class TripInfo:
    id: int
    owner_id: int
    budget: Optional[Money]
    currency: Optional[str]


@dataclass(frozen=True)
class Identity:
    id: int
    display_name: Optional[str]
    email: Optional[str]


class TripDirectory(Protocol):
    def get_trip(self, trip_id: int) -> Optional[TripInfo]:
        ...

    def resolve_participants(self, trip_id: int) -> List[int]:
        """Owner first, then collaborators who accepted, in acceptance order."""
        ...


class IdentityDirectory(Protocol):
    def resolve(self, user_ids: Iterable[int]) -> Dict[int, Identity]:
        ...


class SqlTripDirectory:
    """Trip directory over the trips and trip_collaborators tables."""

    def __init__(self, db: Session):
        self.db = db

    def get_trip(self, trip_id: int) -> Optional[TripInfo]:
        trip = self.db.query(Trip).filter(Trip.id == trip_id).first()
        if not trip:
            return None
        return TripInfo(
            id=trip.id,
            owner_id=trip.owner_id,
            budget=trip.budget,
            currency=trip.currency.upper() if trip.currency else None,
        )

    def resolve_participants(self, trip_id: int) -> List[int]:
        owner_id = self.db.query(Trip.owner_id).filter(Trip.id == trip_id).scalar()
        if owner_id is None:
            return []
        accepted = self.db.query(TripCollaborator.user_id).filter(
            TripCollaborator.trip_id == trip_id,
            TripCollaborator.accepted_at.isnot(None)
        ).order_by(TripCollaborator.accepted_at, TripCollaborator.id).all()

        participants = [owner_id]
        for (user_id,) in accepted:
            if user_id not in participants:
                participants.append(user_id)
        return participants


class SqlIdentityDirectory:
    """Identity directory over the users table."""

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, user_ids: Iterable[int]) -> Dict[int, Identity]:
        ids = set(user_ids)
        if not ids:
            return {}
        users = self.db.query(User).filter(User.id.in_(ids)).all()
        return {
            user.id: Identity(id=user.id, display_name=user.display_name, email=user.email)
            for user in users
        }
