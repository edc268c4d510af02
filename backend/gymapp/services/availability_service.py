"""
Trainer availability: full-overwrite set, read, per-day removal and slot matching.

Slots are (day label, instant) pairs. set_availability validates the whole payload before
writing anything, so a malformed entry never leaves a half-applied document.
"""
import logging
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from gymapp.core.errors import InvalidInput, NotFound
from gymapp.core.security import Role
from gymapp.core.timeutils import as_utc, isoformat, parse_instant
from gymapp.models.trainer_availability import AvailabilitySlot, TrainerAvailability
from gymapp.services.auth_service import get_user

logger = logging.getLogger(__name__)


def _normalize_slots(slots: Any) -> list[tuple[str, list[datetime]]]:
    """Validate raw [{day, time: [...]}, ...] and return [(day, [instants])]. Raises InvalidInput."""
    if not isinstance(slots, list) or not slots:
        raise InvalidInput("TrainerId and available slots are required.")
    out: list[tuple[str, list[datetime]]] = []
    seen: set[tuple[str, datetime]] = set()
    for slot in slots:
        if not isinstance(slot, dict):
            raise InvalidInput("Invalid slot format.")
        day = slot.get("day")
        times = slot.get("time")
        if not isinstance(day, str) or not day.strip():
            raise InvalidInput("Each slot needs a non-empty day.")
        if not isinstance(times, list) or not times:
            raise InvalidInput(f"Slot {day!r} needs a non-empty list of times.")
        day = day.strip()
        instants = []
        for raw in times:
            instant = parse_instant(raw, field="time")
            key = (day, instant)
            if key in seen:
                raise InvalidInput(f"Duplicate slot: {day} {instant.isoformat()}")
            seen.add(key)
            instants.append(instant)
        out.append((day, instants))
    return out


def serialize_availability(row: TrainerAvailability) -> dict:
    days: dict[str, list[str]] = {}
    for s in row.slots:
        days.setdefault(s.day, []).append(isoformat(s.slot_time))
    return {
        "trainer_id": row.trainer_id,
        "available_slots": [{"day": d, "time": t} for d, t in days.items()],
        "updated_at": isoformat(row.updated_at),
    }


def _get_row(db: Session, trainer_id: int) -> TrainerAvailability | None:
    return db.query(TrainerAvailability).filter(TrainerAvailability.trainer_id == trainer_id).first()


def set_availability(db: Session, trainer_id: int, slots: Any) -> dict:
    """
    Replace the trainer's entire availability (upsert; not a merge).
    Raises NotFound for an unknown trainer, InvalidInput for any malformed slot.
    """
    normalized = _normalize_slots(slots)
    get_user(db, trainer_id, Role.TRAINER)

    row = _get_row(db, trainer_id)
    if row is None:
        row = TrainerAvailability(trainer_id=trainer_id)
        db.add(row)
    else:
        row.slots.clear()
        # Old slot rows must be gone before the replacements hit the unique constraint
        db.flush()
    position = 0
    for day, instants in normalized:
        for instant in instants:
            row.slots.append(
                AvailabilitySlot(trainer_id=trainer_id, day=day, slot_time=instant, position=position)
            )
            position += 1
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(row)
    logger.info("Availability replaced for trainer %s: %s slots", trainer_id, position)
    return serialize_availability(row)


def get_availability(db: Session, trainer_id: int) -> dict:
    """Return the trainer's availability. Raises NotFound when none has been set."""
    row = _get_row(db, trainer_id)
    if row is None:
        raise NotFound("No availability found for this trainer.")
    return serialize_availability(row)


def remove_availability_day(db: Session, trainer_id: int, day: str) -> dict:
    """Drop every slot declared for day. Raises NotFound when the trainer has no availability."""
    row = _get_row(db, trainer_id)
    if row is None:
        raise NotFound("Trainer availability not found.")
    for s in [s for s in row.slots if s.day == day]:
        row.slots.remove(s)
    db.commit()
    db.refresh(row)
    logger.info("Availability day %r removed for trainer %s", day, trainer_id)
    return serialize_availability(row)


def has_availability(db: Session, trainer_id: int) -> bool:
    return _get_row(db, trainer_id) is not None


def is_slot_available(db: Session, trainer_id: int, session_time: datetime) -> bool:
    """Exact instant match against the trainer's declared slots."""
    target = as_utc(session_time)
    times = db.query(AvailabilitySlot.slot_time).filter(AvailabilitySlot.trainer_id == trainer_id).all()
    return any(as_utc(t) == target for (t,) in times)
