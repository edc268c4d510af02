import asyncio

import pytest
from pydantic_ai.models.test import TestModel

from gymapp.agents.coach_agent import agent as coach_agent
from gymapp.api.routes import ai as ai_routes
from gymapp.core.errors import NotFound
from gymapp.core.security import Role
from gymapp.services.suggestion_service import generate_suggestions, profile_for_prompt


def test_generate_suggestions_returns_three_sections(db, make_user):
    member = make_user(Role.CLIENT, height_cm=175, weight_kg=70, goal="endurance")
    with coach_agent.override(model=TestModel()):
        result = asyncio.run(generate_suggestions(db, member.id))
    assert set(result) == {"workout", "nutrition", "progress"}
    assert all(isinstance(v, str) for v in result.values())


def test_generate_suggestions_unknown_user(db):
    with pytest.raises(NotFound):
        asyncio.run(generate_suggestions(db, 999))


def test_profile_for_prompt_has_no_credentials(make_user):
    member = make_user(Role.CLIENT, goal="strength")
    profile = profile_for_prompt(member)
    assert profile["goal"] == "strength"
    assert "email" not in profile and "password_hash" not in profile


def test_suggestions_route(client, member, headers_for, monkeypatch):
    async def fake(db, user_id):
        return {"workout": f"plan for {user_id}", "nutrition": "eat", "progress": "log"}

    monkeypatch.setattr(ai_routes, "generate_suggestions", fake)
    r = client.post("/ai/suggestions", headers=headers_for(member))
    assert r.status_code == 200
    assert r.json()["workout"] == f"plan for {member.id}"


def test_suggestions_quota_error_is_service_unavailable(client, member, headers_for, monkeypatch):
    async def over_quota(db, user_id):
        raise RuntimeError("Error code: 429 - insufficient_quota")

    monkeypatch.setattr(ai_routes, "generate_suggestions", over_quota)
    r = client.post("/ai/suggestions", headers=headers_for(member))
    assert r.status_code == 503


def test_suggestions_require_token(client):
    assert client.post("/ai/suggestions").status_code == 401


def test_trainer_requests_suggestions_for_client(client, trainer, member, headers_for, monkeypatch):
    async def fake(db, user_id):
        return {"workout": str(user_id), "nutrition": "", "progress": ""}

    monkeypatch.setattr(ai_routes, "generate_suggestions", fake)
    r = client.post("/ai/suggestions", json={"userId": member.id}, headers=headers_for(trainer))
    assert r.json()["workout"] == str(member.id)


def test_client_cannot_request_for_someone_else(client, make_user, member, headers_for):
    other = make_user(Role.CLIENT)
    r = client.post("/ai/suggestions", json={"userId": other.id}, headers=headers_for(member))
    assert r.status_code == 403
