"""
Workout plans: trainers create, edit and delete their own plans; clients read the plans
assigned to them; gym owners read every plan.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.orm import Session

from gymapp.api.deps import get_current_identity, require
from gymapp.core.security import Identity, Role
from gymapp.db.session import get_db
from gymapp.services import workout_service

router = APIRouter()
logger = logging.getLogger(__name__)


class CreateWorkoutPlanRequest(BaseModel):
    title: str
    description: str
    exercises: list[Any]
    assigned_clients: list[Any] = Field(
        default_factory=list, validation_alias=AliasChoices("assignedClients", "assigned_clients")
    )


class UpdateWorkoutPlanRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    exercises: list[Any] | None = None
    assigned_clients: list[Any] | None = Field(
        None, validation_alias=AliasChoices("assignedClients", "assigned_clients")
    )


@router.post("", status_code=201)
def create_workout_plan(
    body: CreateWorkoutPlanRequest,
    identity: Identity = Depends(require(Role.TRAINER)),
    db: Session = Depends(get_db),
):
    return workout_service.create_plan(db, identity.id, **body.model_dump())


@router.get("")
def list_workout_plans(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return workout_service.list_plans(db, identity)


@router.get("/{plan_id}")
def get_workout_plan(
    plan_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return workout_service.get_plan(db, identity, plan_id)


@router.put("/{plan_id}")
def update_workout_plan(
    plan_id: int,
    body: UpdateWorkoutPlanRequest,
    identity: Identity = Depends(require(Role.TRAINER)),
    db: Session = Depends(get_db),
):
    """Partial update: only fields present in the body change."""
    return workout_service.update_plan(db, identity.id, plan_id, body.model_dump(exclude_none=True))


@router.delete("/{plan_id}")
def delete_workout_plan(
    plan_id: int,
    identity: Identity = Depends(require(Role.TRAINER)),
    db: Session = Depends(get_db),
):
    workout_service.delete_plan(db, identity.id, plan_id)
    return {"message": "Workout plan deleted successfully"}
