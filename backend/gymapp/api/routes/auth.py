"""
Auth: signup, login and the caller's own profile (read and partial update).
"""
import logging
from datetime import date

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from gymapp.api.deps import get_current_identity
from gymapp.core.security import Identity, Role
from gymapp.db.session import get_db
from gymapp.services import auth_service

router = APIRouter()
logger = logging.getLogger(__name__)


class SignupRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    email: EmailStr
    password: str
    role: Role = Role.CLIENT
    phone_number: str | None = None
    specialties: list[str] = Field(default_factory=list)
    experience_years: int | None = Field(None, ge=0)
    height_cm: float | None = Field(None, ge=0)
    weight_kg: float | None = Field(None, ge=0)
    goal: str | None = None
    workout_days_per_week: int | None = Field(None, ge=0, le=7)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdateRequest(BaseModel):
    phone_number: str | None = Field(
        None, max_length=32, validation_alias=AliasChoices("phoneNumber", "phone_number")
    )
    date_of_birth: date | None = Field(None, validation_alias=AliasChoices("dateOfBirth", "date_of_birth"))
    sex: str | None = Field(None, max_length=16)
    height_cm: float | None = Field(None, ge=0, validation_alias=AliasChoices("height", "height_cm"))
    weight_kg: float | None = Field(None, ge=0, validation_alias=AliasChoices("weight", "weight_kg"))
    goal: str | None = Field(None, min_length=1, max_length=128)
    workout_days_per_week: int | None = Field(
        None, ge=0, le=7, validation_alias=AliasChoices("workoutDaysPerWeek", "workout_days_per_week")
    )


@router.post("/signup", status_code=201)
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    """Register a client or trainer (gym owners only when enabled). Returns a token."""
    profile = body.model_dump(exclude={"username", "email", "password", "role"})
    user, token = auth_service.signup(
        db, username=body.username, email=body.email, password=body.password, role=body.role, **profile
    )
    return {"message": "User registered successfully", "token": token, "user": auth_service.serialize_user(user, private=True)}


@router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user, token = auth_service.login(db, body.email, body.password)
    return {"message": "Login successful", "token": token, "user": auth_service.serialize_user(user, private=True)}


@router.get("/me")
@router.get("/profile")
def me(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    """Return the caller's own profile, including balance fields."""
    return auth_service.serialize_user(auth_service.get_user(db, identity.id), private=True)


@router.put("/profile")
def update_profile(
    body: ProfileUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Update only the fields sent; omitted or null fields keep their stored value."""
    user = auth_service.update_profile(db, identity.id, body.model_dump(exclude_none=True))
    return {"message": "Profile updated successfully", "user": auth_service.serialize_user(user, private=True)}
