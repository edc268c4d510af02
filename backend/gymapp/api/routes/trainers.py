"""
Trainers: listing, the trainer's own profile, schedule and clients, and availability
(set / replace / read / remove a day).

Trainers manage only their own availability; gym owners may manage any trainer's.
"""
import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.orm import Session

from gymapp.api.deps import get_current_identity, require
from gymapp.core.errors import Forbidden, InvalidInput
from gymapp.core.security import Identity, Role
from gymapp.db.session import get_db
from gymapp.services import auth_service, availability_service, booking_service, client_service

router = APIRouter()
logger = logging.getLogger(__name__)


class SetAvailabilityRequest(BaseModel):
    trainer_id: int | None = Field(None, validation_alias=AliasChoices("trainerId", "trainer_id"))
    available_slots: list[Any] = Field(
        default_factory=list, validation_alias=AliasChoices("availableSlots", "available_slots")
    )


class TrainerProfileRequest(BaseModel):
    specialties: list[str] | None = None
    certifications: list[str] | None = None
    experience_years: int | None = Field(
        None, ge=0, validation_alias=AliasChoices("experience", "experienceYears", "experience_years")
    )
    phone_number: str | None = Field(
        None, max_length=32, validation_alias=AliasChoices("phoneNumber", "phone_number")
    )
    date_of_birth: date | None = Field(None, validation_alias=AliasChoices("dateOfBirth", "date_of_birth"))
    sex: str | None = Field(None, max_length=16)
    height_cm: float | None = Field(None, ge=0, validation_alias=AliasChoices("height", "height_cm"))
    weight_kg: float | None = Field(None, ge=0, validation_alias=AliasChoices("weight", "weight_kg"))


def _target_trainer(identity: Identity, trainer_id: int | None) -> int:
    """Trainer whose availability the caller may manage."""
    if trainer_id is None:
        if identity.is_trainer:
            return identity.id
        raise InvalidInput("TrainerId and available slots are required.")
    if identity.is_gym_owner or (identity.is_trainer and identity.id == trainer_id):
        return trainer_id
    raise Forbidden("Trainers can only manage their own availability.")


@router.get("/trainers")
def list_trainers(
    _identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return auth_service.list_trainers(db)


@router.get("/trainer/bookings")
def trainer_bookings(
    identity: Identity = Depends(require(Role.TRAINER)),
    db: Session = Depends(get_db),
):
    """The calling trainer's sessions, oldest first."""
    return booking_service.list_trainer_bookings(db, identity.id)


@router.put("/trainer/profile")
def update_trainer_profile(
    body: TrainerProfileRequest,
    identity: Identity = Depends(require(Role.TRAINER)),
    db: Session = Depends(get_db),
):
    trainer = auth_service.update_profile(db, identity.id, body.model_dump(exclude_none=True), role=Role.TRAINER)
    return {"message": "Profile updated successfully", "trainer": auth_service.serialize_user(trainer, private=True)}


@router.get("/trainer/clients")
def trainer_clients(
    identity: Identity = Depends(require(Role.TRAINER)),
    db: Session = Depends(get_db),
):
    """Clients who booked the calling trainer or follow one of their workout plans."""
    return {"clients": client_service.list_trainer_clients(db, identity.id)}


@router.post("/availability", status_code=201)
def set_availability(
    body: SetAvailabilityRequest,
    identity: Identity = Depends(require(Role.TRAINER, Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    """Replace the trainer's whole availability document with available_slots."""
    trainer_id = _target_trainer(identity, body.trainer_id)
    availability = availability_service.set_availability(db, trainer_id, body.available_slots)
    return {"message": "Availability updated successfully!", "availability": availability}


@router.put("/availability")
def replace_availability(
    body: SetAvailabilityRequest,
    identity: Identity = Depends(require(Role.TRAINER, Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    """Same full overwrite as POST; 200 instead of 201."""
    trainer_id = _target_trainer(identity, body.trainer_id)
    availability = availability_service.set_availability(db, trainer_id, body.available_slots)
    return {"message": "Availability updated successfully!", "availability": availability}


@router.get("/availability/{trainer_id}")
def get_availability(trainer_id: int, db: Session = Depends(get_db)):
    """Public: the trainer's declared slots as [{day, time: [iso, ...]}]."""
    return availability_service.get_availability(db, trainer_id)["available_slots"]


@router.delete("/availability/{trainer_id}/{day}")
def remove_availability_day(
    trainer_id: int,
    day: str,
    identity: Identity = Depends(require(Role.TRAINER, Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    trainer_id = _target_trainer(identity, trainer_id)
    availability = availability_service.remove_availability_day(db, trainer_id, day)
    return {"message": "Availability removed successfully!", "availability": availability}
