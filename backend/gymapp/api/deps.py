"""
Request dependencies: bearer-token identity and role capability checks.
"""
from fastapi import Depends, Header

from gymapp.core.security import Identity, Role, bearer_token, decode_token, require_role


def get_current_identity(authorization: str | None = Header(None)) -> Identity:
    """Identity from 'Authorization: Bearer <token>'. Raises AuthenticationError (401)."""
    return decode_token(bearer_token(authorization))


def require(*roles: Role):
    """Dependency factory: current identity, restricted to roles (Forbidden otherwise)."""

    def _dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        return require_role(identity, *roles)

    return _dependency
