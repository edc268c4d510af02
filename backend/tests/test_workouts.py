import pytest

from gymapp.core.errors import Forbidden, InvalidInput, NotFound
from gymapp.core.security import Identity, Role
from gymapp.models.workout_plan import WorkoutPlan, WorkoutPlanClient
from gymapp.services import workout_service

SQUATS = {"name": "Squats", "sets": 3, "reps": 10}
PLANK = {"name": "Plank", "sets": 2, "reps": 1, "duration": 60, "rest": 30, "notes": "keep hips level"}


def _plan_body(**overrides):
    body = {"title": "Leg day", "description": "Lower body strength", "exercises": [SQUATS, PLANK]}
    body.update(overrides)
    return body


def test_trainer_creates_plan(client, trainer, member, headers_for):
    r = client.post("/workouts", json=_plan_body(assignedClients=[member.id]), headers=headers_for(trainer))
    assert r.status_code == 201
    plan = r.json()
    assert plan["title"] == "Leg day"
    assert plan["trainer_id"] == trainer.id
    assert plan["assigned_clients"] == [member.id]
    assert plan["exercises"][0] == {
        "name": "Squats", "sets": 3, "reps": 10, "duration": None, "rest": None, "notes": None,
    }
    assert plan["exercises"][1]["notes"] == "keep hips level"


def test_only_trainers_create_plans(client, member, owner, headers_for):
    assert client.post("/workouts", json=_plan_body(), headers=headers_for(member)).status_code == 403
    assert client.post("/workouts", json=_plan_body(), headers=headers_for(owner)).status_code == 403
    assert client.post("/workouts", json=_plan_body()).status_code == 401


def test_missing_fields_are_bad_request(client, trainer, headers_for):
    r = client.post("/workouts", json={"title": "No exercises"}, headers=headers_for(trainer))
    assert r.status_code == 400


@pytest.mark.parametrize(
    "exercises",
    [
        [],
        ["squats"],
        [{"sets": 3, "reps": 10}],
        [{"name": "  ", "sets": 3, "reps": 10}],
        [{"name": "Squats", "sets": 0, "reps": 10}],
        [{"name": "Squats", "sets": 3, "reps": 2.5}],
        [{"name": "Squats", "sets": True, "reps": 10}],
        [{"name": "Squats", "sets": 3, "reps": 10, "rest": -5}],
        [{"name": "Squats", "sets": 3, "reps": 10, "notes": 7}],
    ],
)
def test_malformed_exercises_are_rejected(db, trainer, exercises):
    with pytest.raises(InvalidInput):
        workout_service.create_plan(db, trainer.id, title="Bad", description="x", exercises=exercises)
    assert db.query(WorkoutPlan).count() == 0


def test_title_is_required_and_trimmed(db, trainer):
    with pytest.raises(InvalidInput):
        workout_service.create_plan(db, trainer.id, title="   ", description="x", exercises=[SQUATS])
    plan = workout_service.create_plan(db, trainer.id, title="  Leg day ", description="x", exercises=[SQUATS])
    assert plan["title"] == "Leg day"


def test_duplicate_title_is_rejected(client, make_user, trainer, headers_for):
    other = make_user(Role.TRAINER)
    assert client.post("/workouts", json=_plan_body(), headers=headers_for(trainer)).status_code == 201
    r = client.post("/workouts", json=_plan_body(), headers=headers_for(other))
    assert r.status_code == 400
    assert r.json()["detail"] == "A workout plan with this title already exists."


def test_unknown_or_non_client_assignee_is_rejected(db, trainer, make_user):
    other_trainer = make_user(Role.TRAINER)
    with pytest.raises(NotFound):
        workout_service.create_plan(
            db, trainer.id, title="A", description="x", exercises=[SQUATS], assigned_clients=[999]
        )
    with pytest.raises(NotFound):
        workout_service.create_plan(
            db, trainer.id, title="A", description="x", exercises=[SQUATS], assigned_clients=[other_trainer.id]
        )
    with pytest.raises(InvalidInput):
        workout_service.create_plan(
            db, trainer.id, title="A", description="x", exercises=[SQUATS], assigned_clients=["1"]
        )
    assert db.query(WorkoutPlan).count() == 0


def test_repeated_assignee_is_stored_once(db, trainer, member):
    plan = workout_service.create_plan(
        db, trainer.id, title="A", description="x", exercises=[SQUATS], assigned_clients=[member.id, member.id]
    )
    assert plan["assigned_clients"] == [member.id]
    assert db.query(WorkoutPlanClient).count() == 1


def test_listing_depends_on_role(client, make_user, trainer, member, owner, headers_for):
    other_trainer = make_user(Role.TRAINER)
    outsider = make_user(Role.CLIENT)
    client.post("/workouts", json=_plan_body(assignedClients=[member.id]), headers=headers_for(trainer))
    client.post("/workouts", json=_plan_body(title="Arms"), headers=headers_for(other_trainer))

    assert [p["title"] for p in client.get("/workouts", headers=headers_for(trainer)).json()] == ["Leg day"]
    assert [p["title"] for p in client.get("/workouts", headers=headers_for(other_trainer)).json()] == ["Arms"]
    assert [p["title"] for p in client.get("/workouts", headers=headers_for(member)).json()] == ["Leg day"]
    assert client.get("/workouts", headers=headers_for(outsider)).json() == []
    assert len(client.get("/workouts", headers=headers_for(owner)).json()) == 2


def test_get_plan_visibility(db, make_user, trainer, member, owner):
    outsider = make_user(Role.CLIENT)
    plan = workout_service.create_plan(
        db, trainer.id, title="A", description="x", exercises=[SQUATS], assigned_clients=[member.id]
    )
    assert workout_service.get_plan(db, Identity(member.id, Role.CLIENT), plan["id"])["title"] == "A"
    assert workout_service.get_plan(db, Identity(owner.id, Role.GYM_OWNER), plan["id"])["title"] == "A"
    with pytest.raises(Forbidden):
        workout_service.get_plan(db, Identity(outsider.id, Role.CLIENT), plan["id"])
    with pytest.raises(NotFound):
        workout_service.get_plan(db, Identity(member.id, Role.CLIENT), 999)


def test_partial_update_keeps_other_fields(client, make_user, trainer, member, headers_for):
    second = make_user(Role.CLIENT)
    plan = client.post(
        "/workouts", json=_plan_body(assignedClients=[member.id]), headers=headers_for(trainer)
    ).json()

    r = client.put(f"/workouts/{plan['id']}", json={"description": "Heavier"}, headers=headers_for(trainer))
    assert r.status_code == 200
    updated = r.json()
    assert updated["description"] == "Heavier"
    assert updated["title"] == "Leg day"
    assert updated["exercises"] == plan["exercises"]
    assert updated["assigned_clients"] == [member.id]

    r = client.put(
        f"/workouts/{plan['id']}", json={"assignedClients": [second.id, member.id]}, headers=headers_for(trainer)
    )
    assert sorted(r.json()["assigned_clients"]) == sorted([member.id, second.id])

    r = client.put(f"/workouts/{plan['id']}", json={"assignedClients": []}, headers=headers_for(trainer))
    assert r.json()["assigned_clients"] == []


def test_update_rejects_bad_exercises_without_change(db, trainer):
    plan = workout_service.create_plan(db, trainer.id, title="A", description="x", exercises=[SQUATS])
    with pytest.raises(InvalidInput):
        workout_service.update_plan(db, trainer.id, plan["id"], {"exercises": []})
    db.expire_all()
    assert db.get(WorkoutPlan, plan["id"]).exercises[0]["name"] == "Squats"


def test_update_to_taken_title_is_rejected(db, trainer):
    workout_service.create_plan(db, trainer.id, title="A", description="x", exercises=[SQUATS])
    plan = workout_service.create_plan(db, trainer.id, title="B", description="x", exercises=[SQUATS])
    with pytest.raises(InvalidInput):
        workout_service.update_plan(db, trainer.id, plan["id"], {"title": "A"})
    # Keeping its own title is not a clash
    assert workout_service.update_plan(db, trainer.id, plan["id"], {"title": "B"})["title"] == "B"


def test_only_creator_updates_or_deletes(client, make_user, trainer, headers_for):
    other = make_user(Role.TRAINER)
    plan = client.post("/workouts", json=_plan_body(), headers=headers_for(trainer)).json()

    r = client.put(f"/workouts/{plan['id']}", json={"title": "Mine now"}, headers=headers_for(other))
    assert r.status_code == 403
    assert client.delete(f"/workouts/{plan['id']}", headers=headers_for(other)).status_code == 403
    assert client.put("/workouts/999", json={"title": "x"}, headers=headers_for(trainer)).status_code == 404
    assert client.delete("/workouts/999", headers=headers_for(trainer)).status_code == 404


def test_delete_removes_plan_and_assignments(client, db, trainer, member, headers_for):
    plan = client.post(
        "/workouts", json=_plan_body(assignedClients=[member.id]), headers=headers_for(trainer)
    ).json()

    r = client.delete(f"/workouts/{plan['id']}", headers=headers_for(trainer))
    assert r.status_code == 200
    assert r.json() == {"message": "Workout plan deleted successfully"}
    assert db.query(WorkoutPlan).count() == 0
    assert db.query(WorkoutPlanClient).count() == 0
    assert client.get(f"/workouts/{plan['id']}", headers=headers_for(trainer)).status_code == 404
