from datetime import datetime

import pytest

from buddylifts.db import db
from buddylifts.models import TrainingSession
from buddylifts.services.notifications import format_duration, mail, notify_join


@pytest.fixture()
def outbox(app):
    with mail.record_messages() as messages:
        yield messages


@pytest.fixture()
def session(alex, training):
    c, _ = alex
    return c.post("/sessions/", json={"training_id": training["training"]["id"], "access_type": "admin"}).json


def test_join_notifies_host(sam, session, outbox):
    other, _ = sam
    assert other.post("/sessions/join", json={"invite_code": session["invite_code"]}).status_code == 200

    assert len(outbox) == 1
    msg = outbox[0]
    assert msg.subject == "Sam joined your training session!"
    assert msg.recipients == ["alex@example.com"]
    assert "Push Day" in msg.body
    assert "Role: admin" in msg.body
    assert f"/trainings/{session['training_id']}/session" in msg.body


def test_host_join_is_skipped(app, session, outbox):
    with app.app_context():
        sess = db.session.get(TrainingSession, session["id"])
        host = sess.participant_for(sess.host_user_id)
        assert notify_join(sess, host) is False
    assert outbox == []


def test_starting_a_session_sends_nothing(session, outbox):
    assert outbox == []


def test_complete_notifies_every_participant(alex, sam, training, session, outbox):
    c, _ = alex
    other, _ = sam
    bench, squat = (e["id"] for e in training["exercises"])
    other.post("/sessions/join", json={"invite_code": session["invite_code"]})

    def rec(client, ex_id, reps):
        client.post("/progress/", json={"session_id": session["id"], "exercise_id": ex_id, "completed_reps": reps})

    rec(c, bench, [10, 10, 10])
    rec(c, squat, [8, 8, 8, 8])
    rec(other, bench, [10, 8, 10])
    del outbox[:]

    assert c.post(f"/sessions/{session['id']}/end").status_code == 200

    by_recipient = {m.recipients[0]: m for m in outbox}
    assert set(by_recipient) == {"alex@example.com", "sam@example.com"}

    alex_mail = by_recipient["alex@example.com"]
    assert alex_mail.subject == "Training Complete! \U0001F3C6 You finished #1"
    assert "Completion: 100%" in alex_mail.body
    assert "7 of 7 sets completed" in alex_mail.body
    assert "Top Performer!" in alex_mail.body

    sam_mail = by_recipient["sam@example.com"]
    assert sam_mail.subject == "Training Complete! \U0001F948 You finished #2"
    assert "Completion: 45%" in sam_mail.body
    assert "Rank: #2" in sam_mail.body
    assert "3 of 7 sets completed" in sam_mail.body
    assert "Top Performer!" not in sam_mail.body
    assert "Average completion: 73%" in sam_mail.body
    assert "55% gap between #1 and #2" in sam_mail.body

    # ein zweites Ende verschickt nichts mehr
    del outbox[:]
    assert c.post(f"/sessions/{session['id']}/end").status_code == 409
    assert outbox == []


def test_solo_session_has_no_gap_line(alex, session, outbox):
    c, _ = alex
    c.post(f"/sessions/{session['id']}/end")
    assert len(outbox) == 1
    assert "You finished #1" in outbox[0].subject
    assert "gap between" not in outbox[0].body
    assert "1 participant joined" in outbox[0].body


def test_disabled_notifications(app, sam, session, outbox):
    app.config["NOTIFICATIONS_ENABLED"] = False
    other, _ = sam
    other.post("/sessions/join", json={"invite_code": session["invite_code"]})
    assert outbox == []


def test_format_duration():
    start = datetime(2024, 5, 1, 10, 0)
    assert format_duration(start, datetime(2024, 5, 1, 10, 45)) == "45 minutes"
    assert format_duration(start, datetime(2024, 5, 1, 11, 30)) == "1h 30m"
    assert format_duration(None, start) == ""
