from buddylifts.db import db
from buddylifts.models import Exercise, Friend, Training, User
from buddylifts.seed import DEMO_PASSWORD, DEMO_USERS


def test_init_db(app):
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code == 0
    assert "Datenbank initialisiert" in result.output


def test_seed_is_idempotent(app):
    runner = app.test_cli_runner()
    first = runner.invoke(args=["seed"])
    assert first.exit_code == 0
    assert "2 User" in first.output

    second = runner.invoke(args=["seed"])
    assert second.exit_code == 0
    assert "0 User, 0 Freundschaften, 0 Trainings, 0 Übungen" in second.output

    with app.app_context():
        assert db.session.scalar(db.select(db.func.count(User.id))) == 2
        assert db.session.scalar(db.select(db.func.count(Friend.id))) == 1
        training = db.session.execute(db.select(Training)).scalar_one()
        names = [ex.name for ex in training.exercises]
        assert names == ["Bench Press", "Dips", "Shoulder Press"]
        assert db.session.scalar(db.select(db.func.count(Exercise.id))) == 3


def test_seeded_user_can_log_in(app, client):
    app.test_cli_runner().invoke(args=["seed"])
    r = client.post("/auth/login", json={"email": DEMO_USERS[0][0], "password": DEMO_PASSWORD})
    assert r.status_code == 200
