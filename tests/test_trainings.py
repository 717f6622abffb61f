from buddylifts.db import db
from buddylifts.models import Exercise, ExerciseProgress, SessionParticipant, TrainingSession

from conftest import befriend, error_code


def test_create_and_list(alex):
    c, user = alex
    r = c.post("/trainings/", json={"name": "  Leg Day ", "description": "heavy"})
    assert r.status_code == 201
    assert r.json["name"] == "Leg Day"
    assert r.json["user_id"] == user["id"]

    listed = c.get("/trainings/").json
    assert [(t["name"], t["exercise_count"]) for t in listed] == [("Leg Day", 0)]


def test_create_requires_name(alex):
    c, _ = alex
    r = c.post("/trainings/", json={"name": "   "})
    assert r.status_code == 400
    assert r.json["error"]["message"] == "Training name is required"


def test_create_with_exercises(alex, training):
    c, _ = alex
    assert training["count"] == 2
    assert [e["name"] for e in training["exercises"]] == ["Bench Press", "Squat"]
    assert [e["order"] for e in training["exercises"]] == [0, 1]

    detail = c.get(f"/trainings/{training['training']['id']}").json
    assert [(e["target_sets"], e["target_reps"]) for e in detail["exercises"]] == [(3, 10), (4, 8)]


def test_create_with_exercises_nothing_parsed(alex):
    c, _ = alex
    r = c.post("/trainings/with-exercises", json={"name": "X", "input": "hello world"})
    assert r.status_code == 400
    assert r.json["error"]["message"].startswith("Could not parse any exercises")
    assert c.get("/trainings/").json == []

    r = c.post("/trainings/with-exercises", json={"name": "X", "input": "ab"})
    assert r.status_code == 400


def test_update_and_delete_only_by_owner(alex, sam, training):
    c, _ = alex
    other, _ = sam
    tid = training["training"]["id"]

    r = other.patch(f"/trainings/{tid}", json={"name": "Hijack"})
    assert r.status_code == 403
    assert r.json["error"]["message"] == "You can only update your own trainings"

    r = other.delete(f"/trainings/{tid}")
    assert r.json["error"]["message"] == "You can only delete your own trainings"

    r = c.patch(f"/trainings/{tid}", json={"name": "Push Day v2"})
    assert r.status_code == 200
    assert r.json["name"] == "Push Day v2"

    assert c.patch("/trainings/missing", json={"name": "x"}).status_code == 404


def test_read_access_for_friends(alex, sam, training):
    other, _ = sam
    tid = training["training"]["id"]
    r = other.get(f"/trainings/{tid}")
    assert r.status_code == 403
    assert error_code(r) == "FORBIDDEN"

    befriend(alex, sam)
    assert other.get(f"/trainings/{tid}").status_code == 200


def test_delete_cascades(app, alex, sam, training):
    c, _ = alex
    other, _ = sam
    tid = training["training"]["id"]
    ex_id = training["exercises"][0]["id"]

    sess = c.post("/sessions/", json={"training_id": tid, "access_type": "read"}).json
    other.post("/sessions/join", json={"invite_code": sess["invite_code"]})
    c.post("/progress/", json={"session_id": sess["id"], "exercise_id": ex_id, "completed_reps": [10, 10, 10]})

    assert c.delete(f"/trainings/{tid}").json == {"success": True}
    assert c.get(f"/trainings/{tid}").status_code == 404

    with app.app_context():
        for model in (Exercise, TrainingSession, SessionParticipant, ExerciseProgress):
            assert db.session.scalar(db.select(db.func.count()).select_from(model)) == 0


def test_create_with_exercises_zero_sets(alex):
    c, _ = alex
    r = c.post("/trainings/with-exercises", json={"name": "Zero", "input": "0x10 pushups"})
    assert r.status_code == 400
    assert r.json["error"]["message"].startswith("Could not parse any exercises")
    assert c.get("/trainings/").json == []
