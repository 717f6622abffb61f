import pytest

from buddylifts import create_app
from buddylifts.db import create_tables, db


@pytest.fixture()
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "DATABASE": str(tmp_path / "test.db"),
            "REALTIME_POLL_SECONDS": 0.01,
            "REALTIME_HEARTBEAT_SECONDS": 0.05,
        }
    )
    with app.app_context():
        create_tables()
    yield app
    with app.app_context():
        db.engine.dispose()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_user(app):
    """Registriert einen User und liefert (eingeloggten Client, User-Dict)."""

    def _make(name="Alex", email=None, password="secret123"):
        c = app.test_client()
        email = email or f"{name.lower().replace(' ', '.')}@example.com"
        r = c.post("/auth/register", json={"email": email, "name": name, "password": password})
        assert r.status_code == 201, r.json
        return c, r.json

    return _make


@pytest.fixture()
def alex(make_user):
    return make_user("Alex")


@pytest.fixture()
def sam(make_user):
    return make_user("Sam")


@pytest.fixture()
def training(alex):
    """Training von Alex mit zwei Übungen (3x10 Bench Press, 4x8 Squat)."""
    c, _ = alex
    r = c.post(
        "/trainings/with-exercises",
        json={"name": "Push Day", "input": "10x3 bench press and 4 sets of 8 squat"},
    )
    assert r.status_code == 201, r.json
    return r.json


def error_code(response):
    return response.json["error"]["code"]


def befriend(a, b):
    """a schickt b eine Anfrage, b nimmt an."""
    (ca, ua), (cb, ub) = a, b
    assert ca.post("/friends/request", json={"friend_id": ub["id"]}).status_code == 201
    assert cb.post("/friends/accept", json={"friend_id": ua["id"]}).status_code == 200
