"""
Bookings: book a session, list the client's bookings, cancel and confirm.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.orm import Session

from gymapp.api.deps import get_current_identity, require
from gymapp.core.security import Identity, Role
from gymapp.db.session import get_db
from gymapp.services import booking_service

router = APIRouter()
logger = logging.getLogger(__name__)


class BookSessionRequest(BaseModel):
    trainer_id: int = Field(..., validation_alias=AliasChoices("trainerId", "trainer_id"))
    # Parsed by the booking service; malformed values raise InvalidInput
    session_time: str = Field(..., validation_alias=AliasChoices("sessionTime", "session_time"))
    session_cost: float | None = Field(
        None, ge=0, validation_alias=AliasChoices("sessionCost", "cost", "session_cost")
    )


@router.post("/book-session", status_code=201)
def book_session(
    body: BookSessionRequest,
    identity: Identity = Depends(require(Role.CLIENT)),
    db: Session = Depends(get_db),
):
    """Book a session with a trainer at one of their declared slots. The caller is the client."""
    booking = booking_service.book_session(
        db, identity.id, body.trainer_id, body.session_time, declared_cost=body.session_cost
    )
    return {"message": "Session booked successfully!", "booking": booking}


@router.get("/bookings")
def list_bookings(
    identity: Identity = Depends(require(Role.CLIENT)),
    db: Session = Depends(get_db),
):
    """The caller's bookings by session time, with trainer name and specialties."""
    return booking_service.list_bookings(db, identity.id)


@router.delete("/bookings/{booking_id}")
def cancel_booking(
    booking_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Soft-cancel (status cancelled). Repeating the call returns the cancelled booking."""
    booking = booking_service.cancel_booking(db, booking_id, identity)
    return {"message": "Booking canceled successfully.", "booking": booking}


@router.patch("/bookings/{booking_id}/confirm")
def confirm_booking(
    booking_id: int,
    identity: Identity = Depends(require(Role.TRAINER, Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    booking = booking_service.confirm_booking(db, booking_id, identity)
    return {"message": "Booking confirmed.", "booking": booking}
