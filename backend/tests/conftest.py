"""
Test setup: in-memory SQLite (one shared connection), scheduler off, fixed JWT secret.
Environment is set before any gymapp import so Settings and the engine pick it up.
"""
import itertools
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

import gymapp.models  # noqa: F401
from gymapp.config import settings
from gymapp.core.security import Role, create_token, hash_password
from gymapp.db.base import Base
from gymapp.db.session import SessionLocal, engine
from gymapp.models.user import User
from gymapp.services import availability_service, subscription_service

PASSWORD = "secret123"
_PASSWORD_HASH = hash_password(PASSWORD)

MONDAY_10 = "2030-03-11T10:00:00Z"
MONDAY_11 = "2030-03-11T11:00:00Z"
TUESDAY_09 = "2030-03-12T09:00:00Z"
FAR_FUTURE = "2099-01-01T00:00:00Z"


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def _subscriptions_required(monkeypatch):
    monkeypatch.setattr(settings, "require_subscription", True)
    monkeypatch.setattr(settings, "default_session_cost", 0.0)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    from gymapp.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role: Role = Role.CLIENT, **fields) -> User:
        n = next(counter)
        user = User(
            username=fields.pop("username", f"{role.value}{n}"),
            email=fields.pop("email", f"{role.value}{n}@example.com"),
            password_hash=_PASSWORD_HASH,
            role=role.value,
            specialties=fields.pop("specialties", []),
            balance_limit=fields.pop("balance_limit", 200.0),
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def trainer(make_user):
    return make_user(Role.TRAINER, specialties=["strength", "yoga"])


@pytest.fixture
def member(make_user):
    return make_user(Role.CLIENT)


@pytest.fixture
def owner(make_user):
    return make_user(Role.GYM_OWNER)


@pytest.fixture
def headers_for():
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_token(user.id, user.role)}"}

    return _headers


@pytest.fixture
def with_availability(db):
    """Give a trainer the default Monday/Tuesday slots (or the ones passed)."""

    def _set(trainer: User, slots: list[dict] | None = None) -> dict:
        slots = slots or [
            {"day": "Monday", "time": [MONDAY_10, MONDAY_11]},
            {"day": "Tuesday", "time": [TUESDAY_09]},
        ]
        return availability_service.set_availability(db, trainer.id, slots)

    return _set


@pytest.fixture
def subscribe(db, owner):
    """Give a client an active subscription (basic plan unless overridden)."""

    def _subscribe(member: User, plan_type: str = "basic", **overrides) -> dict:
        return subscription_service.add_subscription(
            db,
            owner.id,
            client_id=member.id,
            plan_type=plan_type,
            end_date=overrides.pop("end_date", FAR_FUTURE),
            amount_paid=overrides.pop("amount_paid", 50.0),
            method=overrides.pop("method", "cash"),
            **overrides,
        )

    return _subscribe
