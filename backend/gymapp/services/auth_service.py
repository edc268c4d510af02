"""
Accounts: signup, login and profile lookups for clients, trainers and gym owners.
"""
import logging
import re

from sqlalchemy import or_
from sqlalchemy.orm import Session

from gymapp.config import settings
from gymapp.core.constants import PASSWORD_MIN_LENGTH
from gymapp.core.errors import AuthenticationError, InvalidInput, NotFound
from gymapp.core.security import Role, create_token, hash_password, verify_password
from gymapp.core.timeutils import isoformat
from gymapp.models.user import User

logger = logging.getLogger(__name__)

_PASSWORD_RE = re.compile(r"^(?=.*[A-Za-z])(?=.*\d).+$")


def is_valid_password(password: str) -> bool:
    return len(password or "") >= PASSWORD_MIN_LENGTH and bool(_PASSWORD_RE.match(password))


def serialize_user(user: User, *, private: bool = False) -> dict:
    """Public profile; private=True adds balance fields (own profile, gym owner views)."""
    out = {
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "specialties": list(user.specialties or []),
        "experience_years": user.experience_years,
        "certifications": list(user.certifications or []),
        "created_at": isoformat(user.created_at),
    }
    if private:
        out.update(
            {
                "email": user.email,
                "phone_number": user.phone_number,
                "date_of_birth": user.date_of_birth.isoformat() if user.date_of_birth else None,
                "sex": user.sex,
                "height_cm": user.height_cm,
                "weight_kg": user.weight_kg,
                "goal": user.goal,
                "workout_days_per_week": user.workout_days_per_week,
                "balance_due": user.balance_due,
                "balance_limit": user.balance_limit,
                "gym_owner_id": user.gym_owner_id,
            }
        )
    return out


def signup(
    db: Session,
    *,
    username: str,
    email: str,
    password: str,
    role: Role = Role.CLIENT,
    **profile,
) -> tuple[User, str]:
    """Create an account and return (user, token). Raises InvalidInput on bad or taken credentials."""
    username = (username or "").strip()
    email = (email or "").strip().lower()
    if not username or not email or not password:
        raise InvalidInput("Username, email, and password are required.")
    if not is_valid_password(password):
        raise InvalidInput("Password must be at least 8 characters long and include letters and numbers.")
    if role is Role.GYM_OWNER and not settings.allow_owner_signup:
        raise InvalidInput("Gym owner signup is disabled.")

    existing = db.query(User).filter(or_(User.username == username, User.email == email)).first()
    if existing:
        field = "username" if existing.username == username else "email"
        raise InvalidInput(f"{field.capitalize()} already exists.")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role.value,
        phone_number=profile.get("phone_number") or "",
        specialties=list(profile.get("specialties") or []),
        experience_years=profile.get("experience_years") or 0,
        height_cm=profile.get("height_cm") or 0,
        weight_kg=profile.get("weight_kg") or 0,
        goal=profile.get("goal") or "none",
        workout_days_per_week=profile.get("workout_days_per_week") or 3,
        balance_due=0.0,
        balance_limit=settings.default_balance_limit,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered %s id=%s username=%s", role.value, user.id, user.username)
    return user, create_token(user.id, role)


def login(db: Session, email: str, password: str) -> tuple[User, str]:
    """Check credentials and return (user, token). Raises AuthenticationError on mismatch."""
    user = db.query(User).filter(User.email == (email or "").strip().lower()).first()
    if not user or not verify_password(password or "", user.password_hash):
        raise AuthenticationError("Invalid email or password.")
    return user, create_token(user.id, user.role)


def get_user(db: Session, user_id: int, role: Role | None = None) -> User:
    """Load a user (optionally of a given role). Raises NotFound."""
    user = db.get(User, user_id)
    if not user or (role is not None and user.role != role.value):
        label = role.value.replace("_", " ").capitalize() if role else "User"
        raise NotFound(f"{label} not found.")
    return user


def list_trainers(db: Session) -> list[dict]:
    rows = db.query(User).filter(User.role == Role.TRAINER.value).order_by(User.username.asc()).all()
    return [serialize_user(r) for r in rows]


# Profile fields each role may edit on itself
PROFILE_FIELDS = frozenset(
    {"phone_number", "date_of_birth", "sex", "height_cm", "weight_kg", "goal", "workout_days_per_week"}
)
TRAINER_PROFILE_FIELDS = frozenset(
    {"phone_number", "date_of_birth", "sex", "height_cm", "weight_kg", "specialties", "experience_years", "certifications"}
)
_LIST_FIELDS = ("specialties", "certifications")


def update_profile(db: Session, user_id: int, changes: dict, role: Role | None = None) -> User:
    """
    Set only the profile fields present in changes; everything else is left as stored.
    role=Role.TRAINER allows the trainer fields and requires the user to be a trainer.
    Raises NotFound, InvalidInput (nothing to update, or a field the role may not edit).
    """
    user = get_user(db, user_id, role)
    allowed = TRAINER_PROFILE_FIELDS if role is Role.TRAINER else PROFILE_FIELDS
    if not changes:
        raise InvalidInput("No profile fields to update.")
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise InvalidInput(f"Profile fields not editable here: {', '.join(unknown)}.")
    for field, value in changes.items():
        if field in _LIST_FIELDS:
            value = [s.strip() for s in value if s and s.strip()]
        elif isinstance(value, str):
            value = value.strip()
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("Profile of user %s updated: %s", user.id, ", ".join(sorted(changes)))
    return user
