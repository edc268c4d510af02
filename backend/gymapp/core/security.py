"""
Identity: password hashing (bcrypt), bearer tokens (JWT, HS256) and role capability checks.

A decoded token becomes an Identity tagged with its Role; routes and services check
capabilities with require_role instead of inspecting token fields.
"""
import enum
import time
from dataclasses import dataclass

import bcrypt
import jwt

from gymapp.config import settings
from gymapp.core.errors import AuthenticationError, Forbidden


class Role(str, enum.Enum):
    CLIENT = "client"
    TRAINER = "trainer"
    GYM_OWNER = "gym_owner"


@dataclass(frozen=True)
class Identity:
    id: int
    role: Role

    @property
    def is_client(self) -> bool:
        return self.role is Role.CLIENT

    @property
    def is_trainer(self) -> bool:
        return self.role is Role.TRAINER

    @property
    def is_gym_owner(self) -> bool:
        return self.role is Role.GYM_OWNER


def require_role(identity: Identity, *roles: Role) -> Identity:
    """Return identity if its role is one of roles; raise Forbidden otherwise."""
    if identity.role not in roles:
        allowed = ", ".join(r.value for r in roles)
        raise Forbidden(f"Access restricted to: {allowed}.")
    return identity


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_token(user_id: int, role: Role | str, expires_minutes: int | None = None) -> str:
    """Issue a signed token for user_id with its role claim."""
    now = int(time.time())
    ttl = (expires_minutes if expires_minutes is not None else settings.jwt_expires_minutes) * 60
    payload = {
        "sub": str(user_id),
        "role": Role(role).value,
        "iat": now,
        "exp": now + ttl,
    }
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    if isinstance(token, bytes):
        token = token.decode("utf-8")
    return token


def decode_token(token: str | None) -> Identity:
    """
    Verify a bearer token and return the Identity it carries.
    Raises AuthenticationError for a missing, expired, tampered or malformed token.
    """
    if not token:
        raise AuthenticationError("Access denied. No token provided.")
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return Identity(id=int(payload["sub"]), role=Role(payload["role"]))
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Token expired.") from e
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        raise AuthenticationError() from e


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an 'Authorization: Bearer <token>' header value."""
    if not authorization:
        return None
    scheme, _, value = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()
