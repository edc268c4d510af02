"""
Client rosters: the clients a trainer works with, and the clients a gym owner manages.
"""
import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from gymapp.core.constants import BOOKING_CANCELLED
from gymapp.core.errors import InvalidInput
from gymapp.core.security import Role
from gymapp.models.booking import Booking
from gymapp.models.user import User
from gymapp.models.workout_plan import WorkoutPlan, WorkoutPlanClient
from gymapp.services.auth_service import get_user, serialize_user

logger = logging.getLogger(__name__)


def list_trainer_clients(db: Session, trainer_id: int) -> list[dict]:
    """Clients with a non-cancelled booking with the trainer or one of the trainer's plans, by username."""
    get_user(db, trainer_id, Role.TRAINER)
    booked = select(Booking.client_id).where(
        Booking.trainer_id == trainer_id, Booking.status != BOOKING_CANCELLED
    )
    planned = (
        select(WorkoutPlanClient.client_id)
        .join(WorkoutPlan, WorkoutPlan.id == WorkoutPlanClient.plan_id)
        .where(WorkoutPlan.trainer_id == trainer_id)
    )
    rows = (
        db.query(User)
        .filter(or_(User.id.in_(booked), User.id.in_(planned)))
        .order_by(User.username.asc())
        .all()
    )
    return [serialize_user(r, private=True) for r in rows]


def list_clients(db: Session, owner_id: int, managed_only: bool = False) -> list[dict]:
    """Every client (or only those managed by owner_id), each flagged with managed_by_me."""
    q = db.query(User).filter(User.role == Role.CLIENT.value)
    if managed_only:
        q = q.filter(User.gym_owner_id == owner_id)
    out = []
    for row in q.order_by(User.username.asc()).all():
        item = serialize_user(row, private=True)
        item["managed_by_me"] = row.gym_owner_id == owner_id
        out.append(item)
    return out


def add_managed_client(db: Session, owner_id: int, client_id: int) -> dict:
    """Put a client under owner_id's management. Raises NotFound, InvalidInput if already managed."""
    client = get_user(db, client_id, Role.CLIENT)
    if client.gym_owner_id == owner_id:
        raise InvalidInput("Client is already being managed.")
    if client.gym_owner_id is not None:
        raise InvalidInput("Client is managed by another gym owner.")
    client.gym_owner_id = owner_id
    db.commit()
    db.refresh(client)
    logger.info("Gym owner %s now manages client %s", owner_id, client_id)
    return serialize_user(client, private=True)


def remove_managed_client(db: Session, owner_id: int, client_id: int) -> dict:
    """Release a client from owner_id's management. Raises NotFound, InvalidInput if not managed by them."""
    client = get_user(db, client_id, Role.CLIENT)
    if client.gym_owner_id != owner_id:
        raise InvalidInput("Client is not managed by you.")
    client.gym_owner_id = None
    db.commit()
    db.refresh(client)
    logger.info("Gym owner %s released client %s", owner_id, client_id)
    return serialize_user(client, private=True)
