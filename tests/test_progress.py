import pytest

from conftest import error_code

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


@pytest.fixture()
def running(alex, sam, training):
    """Aktive Session von Alex, Sam ist beigetreten (Rolle read)."""
    c, _ = alex
    other, _ = sam
    sess = c.post("/sessions/", json={"training_id": training["training"]["id"], "access_type": "read"}).json
    other.post("/sessions/join", json={"invite_code": sess["invite_code"]})
    return sess


def record(client, session_id, exercise_id, reps, **extra):
    return client.post(
        "/progress/", json={"session_id": session_id, "exercise_id": exercise_id, "completed_reps": reps, **extra}
    )


def test_record_upserts(alex, training, running):
    c, user = alex
    ex_id = training["exercises"][0]["id"]

    first = record(c, running["id"], ex_id, [10, 8, 10]).json
    assert first["completed_reps"] == [10, 8, 10]
    assert first["completed_at"] is not None

    second = record(c, running["id"], ex_id, [10, 10, 10]).json
    assert second["id"] == first["id"]

    entries = c.get(f"/progress/session/{running['id']}").json
    assert [(e["user_id"], e["completed_reps"]) for e in entries] == [(user["id"], [10, 10, 10])]


def test_record_validation(alex, make_user, training, running):
    c, _ = alex
    ex_id = training["exercises"][0]["id"]

    r = record(c, running["id"], ex_id, [])
    assert r.status_code == 400
    assert record(c, running["id"], ex_id, [10, -1]).status_code == 400
    assert record(c, running["id"], "missing", [10]).status_code == 404
    assert record(c, "missing", ex_id, [10]).status_code == 404

    outsider, _ = make_user("Kim")
    r = record(outsider, running["id"], ex_id, [10])
    assert r.status_code == 403

    c.post(f"/sessions/{running['id']}/end")
    r = record(c, running["id"], ex_id, [10])
    assert r.status_code == 400
    assert r.json["error"]["message"] == "This session is not active"


def test_exercise_must_belong_to_session_training(alex, running):
    c, _ = alex
    other = c.post("/trainings/with-exercises", json={"name": "Other", "input": "3x5 deadlift"}).json
    r = record(c, running["id"], other["exercises"][0]["id"], [5, 5, 5])
    assert r.status_code == 404


def test_record_for_other_participant(alex, sam, training, running):
    c, _ = alex
    other, sam_user = sam
    _, alex_user = alex
    ex_id = training["exercises"][0]["id"]

    r = record(c, running["id"], ex_id, [7], user_id=sam_user["id"])
    assert r.status_code == 200
    assert r.json["user_id"] == sam_user["id"]

    r = record(other, running["id"], ex_id, [7], user_id=alex_user["id"])
    assert r.status_code == 403
    assert r.json["error"]["message"] == "You can only record your own progress"


def test_update_and_delete_own_only(alex, sam, training, running):
    c, _ = alex
    other, _ = sam
    entry = record(c, running["id"], training["exercises"][0]["id"], [5]).json

    r = other.patch(f"/progress/{entry['id']}", json={"completed_reps": [10]})
    assert r.status_code == 403
    assert r.json["error"]["message"] == "You can only update your own progress"

    r = other.delete(f"/progress/{entry['id']}")
    assert r.json["error"]["message"] == "You can only delete your own progress"

    assert c.patch(f"/progress/{entry['id']}", json={"completed_reps": [10, 9]}).json["completed_reps"] == [10, 9]
    assert c.delete(f"/progress/{entry['id']}").json == {"success": True}
    r = c.delete(f"/progress/{entry['id']}")
    assert r.status_code == 404
    assert error_code(r) == "NOT_FOUND"


def test_get_by_session_filters_user(alex, sam, training, running):
    c, _ = alex
    other, sam_user = sam
    ex_id = training["exercises"][0]["id"]
    record(c, running["id"], ex_id, [10])
    record(other, running["id"], ex_id, [8])

    assert len(c.get(f"/progress/session/{running['id']}").json) == 2
    only_sam = c.get(f"/progress/session/{running['id']}?user_id={sam_user['id']}").json
    assert [e["completed_reps"] for e in only_sam] == [[8]]


def test_calculate_percentage(alex, training, running):
    c, _ = alex
    entry = record(c, running["id"], training["exercises"][0]["id"], [10, 8, 10]).json

    r = c.get(f"/progress/{entry['id']}/percentage?target_reps=10&target_sets=3").json
    assert r == {"percentage": 93, "total_completed_reps": 28, "total_target_reps": 30, "completed_reps": [10, 8, 10]}

    capped = c.get(f"/progress/{entry['id']}/percentage?target_reps=5&target_sets=3").json
    assert capped["percentage"] == 100

    assert c.get(f"/progress/{entry['id']}/percentage?target_reps=x&target_sets=3").status_code == 400
    assert c.get("/progress/missing/percentage?target_reps=10&target_sets=3").status_code == 404


def test_session_chart_png(alex, training, running):
    c, _ = alex
    record(c, running["id"], training["exercises"][0]["id"], [10, 10, 10])

    r = c.get(f"/progress/sessions/{running['id']}/png")
    assert r.status_code == 200
    assert r.mimetype == "image/png"
    assert r.data.startswith(PNG_MAGIC)
    assert "Content-Disposition" not in r.headers

    r = c.get(f"/progress/sessions/{running['id']}/png?download=1")
    assert r.headers["Content-Disposition"] == f'attachment; filename="session_{running["id"]}.png"'


def test_exercise_chart_png(alex, training, running):
    c, _ = alex
    ex_id = training["exercises"][0]["id"]

    r = c.get(f"/progress/exercises/{ex_id}/png")
    assert r.status_code == 200
    assert r.data.startswith(PNG_MAGIC)

    record(c, running["id"], ex_id, [10, 10, 10])
    r = c.get(f"/progress/exercises/{ex_id}/png?download=1")
    assert r.data.startswith(PNG_MAGIC)
    assert "attachment" in r.headers["Content-Disposition"]

    assert c.get("/progress/exercises/missing/png").status_code == 404


def test_record_rejects_non_string_ids(alex, training, running):
    c, _ = alex
    ex_id = training["exercises"][0]["id"]

    r = record(c, running["id"], ["a", "b"], [10])
    assert r.status_code == 400
    assert r.json["error"]["message"] == "Exercise ID is required"

    r = record(c, {"x": 1}, ex_id, [10])
    assert r.status_code == 400
    assert r.json["error"]["message"] == "Session ID is required"

    assert record(c, running["id"], ex_id, [10], user_id=42).status_code == 400
    assert c.post("/progress/", json={"completed_reps": [10]}).status_code == 400


def test_calculate_percentage_requires_access(alex, make_user, training, running):
    c, _ = alex
    entry = record(c, running["id"], training["exercises"][0]["id"], [10, 8, 10]).json

    outsider, _ = make_user("Kim")
    r = outsider.get(f"/progress/{entry['id']}/percentage?target_reps=10&target_sets=3")
    assert r.status_code == 403
    assert error_code(r) == "FORBIDDEN"
