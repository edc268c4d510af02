"""
Workout plans: trainers write titled exercise lists and assign them to clients.

Only the trainer who created a plan may change or delete it. Titles are unique across all
plans; the unique constraint backs the pre-check so a racing insert is still rejected.
"""
import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gymapp.core.errors import Forbidden, InvalidInput, NotFound
from gymapp.core.security import Identity, Role
from gymapp.core.timeutils import isoformat
from gymapp.models.user import User
from gymapp.models.workout_plan import WorkoutPlan, WorkoutPlanClient
from gymapp.services.auth_service import get_user

logger = logging.getLogger(__name__)

MSG_DUPLICATE_TITLE = "A workout plan with this title already exists."


def serialize_plan(row: WorkoutPlan) -> dict:
    return {
        "id": row.id,
        "title": row.title,
        "description": row.description,
        "exercises": list(row.exercises or []),
        "trainer_id": row.trainer_id,
        "assigned_clients": [a.client_id for a in row.assignments],
        "created_at": isoformat(row.created_at),
        "updated_at": isoformat(row.updated_at),
    }


def _is_count(value: Any, minimum: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= minimum


def _is_amount(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0


def _normalize_exercises(exercises: Any) -> list[dict]:
    """Validate raw [{name, sets, reps, duration?, rest?, notes?}, ...]. Raises InvalidInput."""
    if not isinstance(exercises, list) or not exercises:
        raise InvalidInput("A workout plan needs at least one exercise.")
    out = []
    for i, exercise in enumerate(exercises, start=1):
        if not isinstance(exercise, dict):
            raise InvalidInput(f"Exercise {i} must be an object.")
        name = exercise.get("name")
        if not isinstance(name, str) or not name.strip():
            raise InvalidInput(f"Exercise {i} needs a name.")
        for field in ("sets", "reps"):
            if not _is_count(exercise.get(field), 1):
                raise InvalidInput(f"Exercise {name.strip()!r}: {field} must be a whole number of at least 1.")
        for field in ("duration", "rest"):
            if exercise.get(field) is not None and not _is_amount(exercise[field]):
                raise InvalidInput(f"Exercise {name.strip()!r}: {field} must be a non-negative number.")
        notes = exercise.get("notes")
        if notes is not None and not isinstance(notes, str):
            raise InvalidInput(f"Exercise {name.strip()!r}: notes must be text.")
        out.append(
            {
                "name": name.strip(),
                "sets": exercise["sets"],
                "reps": exercise["reps"],
                "duration": exercise.get("duration"),
                "rest": exercise.get("rest"),
                "notes": (notes or "").strip() or None,
            }
        )
    return out


def _resolve_clients(db: Session, client_ids: Any) -> list[int]:
    """Distinct client ids in request order. Raises InvalidInput, or NotFound for a non-client id."""
    if client_ids is None:
        return []
    if not isinstance(client_ids, list) or not all(_is_count(c, 1) for c in client_ids):
        raise InvalidInput("Assigned clients must be a list of client ids.")
    ids = list(dict.fromkeys(client_ids))
    if ids:
        found = {
            row.id
            for row in db.query(User.id).filter(User.id.in_(ids), User.role == Role.CLIENT.value).all()
        }
        missing = [c for c in ids if c not in found]
        if missing:
            raise NotFound(f"Client {missing[0]} not found.")
    return ids


def _clean_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"Workout plan {field} is required.")
    return value.strip()


def _title_taken(db: Session, title: str, exclude_id: int | None = None) -> bool:
    q = db.query(WorkoutPlan.id).filter(WorkoutPlan.title == title)
    if exclude_id is not None:
        q = q.filter(WorkoutPlan.id != exclude_id)
    return q.first() is not None


def _commit(db: Session, row: WorkoutPlan) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise InvalidInput(MSG_DUPLICATE_TITLE) from exc
    except Exception:
        db.rollback()
        raise
    db.refresh(row)


def _own_plan(db: Session, trainer_id: int, plan_id: int) -> WorkoutPlan:
    row = db.get(WorkoutPlan, plan_id)
    if row is None:
        raise NotFound("Workout plan not found.")
    if row.trainer_id != trainer_id:
        raise Forbidden("You can only change your own workout plans.")
    return row


def create_plan(
    db: Session,
    trainer_id: int,
    *,
    title: Any,
    description: Any,
    exercises: Any,
    assigned_clients: Any = None,
) -> dict:
    """Create a plan owned by trainer_id. Raises InvalidInput, or NotFound for unknown trainer/clients."""
    title = _clean_text(title, "title")
    description = _clean_text(description, "description")
    normalized = _normalize_exercises(exercises)
    get_user(db, trainer_id, Role.TRAINER)
    client_ids = _resolve_clients(db, assigned_clients)
    if _title_taken(db, title):
        raise InvalidInput(MSG_DUPLICATE_TITLE)

    row = WorkoutPlan(trainer_id=trainer_id, title=title, description=description, exercises=normalized)
    row.assignments = [WorkoutPlanClient(client_id=c) for c in client_ids]
    db.add(row)
    _commit(db, row)
    logger.info("Workout plan %s created by trainer %s (%s clients)", row.id, trainer_id, len(client_ids))
    return serialize_plan(row)


def list_plans(db: Session, identity: Identity) -> list[dict]:
    """Trainers see the plans they wrote, clients the plans assigned to them, gym owners every plan."""
    q = db.query(WorkoutPlan)
    if identity.is_trainer:
        q = q.filter(WorkoutPlan.trainer_id == identity.id)
    elif not identity.is_gym_owner:
        q = q.join(WorkoutPlanClient).filter(WorkoutPlanClient.client_id == identity.id)
    return [serialize_plan(r) for r in q.order_by(WorkoutPlan.created_at.desc(), WorkoutPlan.id.desc()).all()]


def get_plan(db: Session, identity: Identity, plan_id: int) -> dict:
    row = db.get(WorkoutPlan, plan_id)
    if row is None:
        raise NotFound("Workout plan not found.")
    visible = (
        identity.is_gym_owner
        or row.trainer_id == identity.id
        or any(a.client_id == identity.id for a in row.assignments)
    )
    if not visible:
        raise Forbidden("You do not have access to this workout plan.")
    return serialize_plan(row)


def update_plan(db: Session, trainer_id: int, plan_id: int, changes: dict) -> dict:
    """
    Apply the given fields (title, description, exercises, assigned_clients) to one of the
    trainer's plans; fields not present are left alone. Raises NotFound, Forbidden, InvalidInput.
    """
    row = _own_plan(db, trainer_id, plan_id)
    if "title" in changes:
        title = _clean_text(changes["title"], "title")
        if _title_taken(db, title, exclude_id=row.id):
            raise InvalidInput(MSG_DUPLICATE_TITLE)
        row.title = title
    if "description" in changes:
        row.description = _clean_text(changes["description"], "description")
    if "exercises" in changes:
        row.exercises = _normalize_exercises(changes["exercises"])
    if "assigned_clients" in changes:
        client_ids = _resolve_clients(db, changes["assigned_clients"])
        current = {a.client_id: a for a in row.assignments}
        row.assignments = [current.get(c) or WorkoutPlanClient(client_id=c) for c in client_ids]
    _commit(db, row)
    logger.info("Workout plan %s updated: %s", row.id, sorted(changes))
    return serialize_plan(row)


def delete_plan(db: Session, trainer_id: int, plan_id: int) -> None:
    row = _own_plan(db, trainer_id, plan_id)
    db.delete(row)
    db.commit()
    logger.info("Workout plan %s deleted by trainer %s", plan_id, trainer_id)
