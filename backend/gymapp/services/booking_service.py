"""
Booking engine: reconcile a session request against the trainer's availability, gate it on the
client's subscription and balance, and persist it without double-booking.

Duplicate prevention does not rely on the read-then-write check alone: the partial unique index
on bookings (trainer, client, session_time, status <> cancelled) rejects a racing insert, and the
IntegrityError is reported as DuplicateBooking. The booking row and the balance increment are
committed together, with the client row locked for the duration.
"""
import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gymapp.config import settings
from gymapp.core.constants import (
    ALLOWED_TRANSITIONS,
    BOOKING_CANCELLED,
    BOOKING_CONFIRMED,
    BOOKING_PENDING,
)
from gymapp.core.errors import (
    BalanceExceeded,
    BookingLimitReached,
    DuplicateBooking,
    Forbidden,
    InvalidTransition,
    NotAvailable,
    NotFound,
    SubscriptionRequired,
)
from gymapp.core.security import Identity, Role
from gymapp.core.timeutils import isoformat, parse_instant, utcnow
from gymapp.models.booking import Booking
from gymapp.models.user import User
from gymapp.services.auth_service import get_user
from gymapp.services.availability_service import has_availability, is_slot_available
from gymapp.services.subscription_service import get_active_subscription

logger = logging.getLogger(__name__)


def serialize_booking(row: Booking) -> dict:
    return {
        "id": row.id,
        "trainer_id": row.trainer_id,
        "client_id": row.client_id,
        "session_time": isoformat(row.session_time),
        "status": row.status,
        "session_cost": row.session_cost,
        "created_at": isoformat(row.created_at),
        "cancelled_at": isoformat(row.cancelled_at),
    }


def discounted_cost(declared_cost: float, session_discount: float) -> float:
    """declared_cost less session_discount percent, rounded to cents."""
    return round(declared_cost * (1 - (session_discount or 0) / 100), 2)


def _month_bounds(instant: datetime) -> tuple[datetime, datetime]:
    start = instant.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def _active_bookings_in_month(db: Session, client_id: int, instant: datetime) -> int:
    start, end = _month_bounds(instant)
    return (
        db.query(Booking)
        .filter(
            Booking.client_id == client_id,
            Booking.status != BOOKING_CANCELLED,
            Booking.session_time >= start,
            Booking.session_time < end,
        )
        .count()
    )


def _find_active_duplicate(db: Session, trainer_id: int, client_id: int, session_time: datetime) -> Booking | None:
    return (
        db.query(Booking)
        .filter(
            Booking.trainer_id == trainer_id,
            Booking.client_id == client_id,
            Booking.session_time == session_time,
            Booking.status != BOOKING_CANCELLED,
        )
        .first()
    )


def book_session(
    db: Session,
    client_id: int,
    trainer_id: int,
    session_time: str | datetime,
    declared_cost: float | None = None,
) -> dict:
    """
    Book a session for client_id with trainer_id at session_time.

    Raises InvalidInput (bad time), NotFound (client/trainer), NotAvailable (no availability or no
    matching slot), SubscriptionRequired, BookingLimitReached, BalanceExceeded, DuplicateBooking.
    Returns the created booking.
    """
    when = parse_instant(session_time, field="session time")
    client = (
        db.query(User)
        .filter(User.id == client_id, User.role == Role.CLIENT.value)
        .with_for_update()
        .first()
    )
    if client is None:
        raise NotFound("Client not found.")
    get_user(db, trainer_id, Role.TRAINER)

    if not has_availability(db, trainer_id):
        raise NotAvailable("Trainer has not set availability.")
    if not is_slot_available(db, trainer_id, when):
        raise NotAvailable()

    cost = settings.default_session_cost if declared_cost is None else declared_cost
    status = BOOKING_CONFIRMED
    final_cost = None
    if settings.require_subscription:
        subscription = get_active_subscription(db, client.id)
        if subscription is None:
            raise SubscriptionRequired()
        if _active_bookings_in_month(db, client.id, when) >= subscription.max_bookings_per_month:
            raise BookingLimitReached()
        final_cost = discounted_cost(cost, subscription.session_discount)
        if (client.balance_due or 0) + final_cost > (client.balance_limit or 0):
            raise BalanceExceeded()
        status = BOOKING_PENDING

    if _find_active_duplicate(db, trainer_id, client.id, when):
        raise DuplicateBooking()

    booking = Booking(
        trainer_id=trainer_id,
        client_id=client.id,
        session_time=when,
        status=status,
        session_cost=final_cost if final_cost is not None else cost,
    )
    db.add(booking)
    if final_cost is not None:
        client.balance_due = round((client.balance_due or 0) + final_cost, 2)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Duplicate booking rejected by constraint: trainer=%s client=%s time=%s", trainer_id, client_id, when)
        raise DuplicateBooking() from exc
    except Exception:
        db.rollback()
        raise
    db.refresh(booking)
    logger.info(
        "Booking %s created: trainer=%s client=%s time=%s status=%s cost=%s",
        booking.id, trainer_id, client.id, when.isoformat(), status, booking.session_cost,
    )
    return serialize_booking(booking)


def list_bookings(db: Session, client_id: int) -> list[dict]:
    """Client's bookings by ascending session time, with trainer identity and specialties."""
    rows = (
        db.query(Booking, User)
        .join(User, User.id == Booking.trainer_id)
        .filter(Booking.client_id == client_id)
        .order_by(Booking.session_time.asc(), Booking.id.asc())
        .all()
    )
    return [
        {
            **serialize_booking(b),
            "trainer": {"id": t.id, "username": t.username, "specialties": list(t.specialties or [])},
        }
        for b, t in rows
    ]


def list_trainer_bookings(db: Session, trainer_id: int) -> list[dict]:
    """Trainer's schedule by ascending session time, with client identity."""
    rows = (
        db.query(Booking, User)
        .join(User, User.id == Booking.client_id)
        .filter(Booking.trainer_id == trainer_id)
        .order_by(Booking.session_time.asc(), Booking.id.asc())
        .all()
    )
    return [{**serialize_booking(b), "client": {"id": c.id, "username": c.username}} for b, c in rows]


def _get_booking(db: Session, booking_id: int) -> Booking:
    row = db.get(Booking, booking_id)
    if not row:
        raise NotFound("Booking not found.")
    return row


def _transition(row: Booking, new_status: str) -> None:
    if new_status not in ALLOWED_TRANSITIONS.get(row.status, frozenset()):
        raise InvalidTransition(f"Cannot change booking from {row.status} to {new_status}.")
    row.status = new_status


def cancel_booking(db: Session, booking_id: int, requester: Identity) -> dict:
    """
    Soft-cancel: status becomes cancelled and the row is kept. Cancelling an already cancelled
    booking returns it unchanged. The balance charged at booking time is not reversed.
    """
    row = _get_booking(db, booking_id)
    if not (
        requester.is_gym_owner
        or (requester.is_client and row.client_id == requester.id)
        or (requester.is_trainer and row.trainer_id == requester.id)
    ):
        raise Forbidden("You cannot cancel this booking.")
    if row.status == BOOKING_CANCELLED:
        return serialize_booking(row)
    _transition(row, BOOKING_CANCELLED)
    row.cancelled_at = utcnow()
    db.commit()
    db.refresh(row)
    # TODO: refund policy for cancelled sessions; balance_due keeps the charge made at booking time
    logger.info(
        "Booking %s cancelled by %s %s (charge %s not reversed)",
        row.id, requester.role.value, requester.id, row.session_cost,
    )
    return serialize_booking(row)


def confirm_booking(db: Session, booking_id: int, requester: Identity) -> dict:
    """pending -> confirmed by the booking's trainer or a gym owner. Confirming twice is a no-op."""
    row = _get_booking(db, booking_id)
    if not (requester.is_gym_owner or (requester.is_trainer and row.trainer_id == requester.id)):
        raise Forbidden("Only the trainer or a gym owner can confirm this booking.")
    if row.status == BOOKING_CONFIRMED:
        return serialize_booking(row)
    _transition(row, BOOKING_CONFIRMED)
    db.commit()
    db.refresh(row)
    logger.info("Booking %s confirmed by %s %s", row.id, requester.role.value, requester.id)
    return serialize_booking(row)
