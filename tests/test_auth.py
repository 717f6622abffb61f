from conftest import error_code


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["status"] == "ok"


def test_private_requires_login(client):
    r = client.get("/private")
    assert r.status_code == 401
    assert error_code(r) == "UNAUTHORIZED"


def test_register_login_logout(client, app):
    r = client.post("/auth/register", json={"email": "Ann@Example.com", "name": "Ann", "password": "secret123"})
    assert r.status_code == 201
    assert r.json["email"] == "ann@example.com"
    assert "password_hash" not in r.json

    assert client.get("/auth/me").json["name"] == "Ann"
    assert client.get("/private").json["user"]["name"] == "Ann"

    client.post("/auth/logout")
    assert client.get("/auth/me").status_code == 401

    r = client.post("/auth/login", json={"email": "ann@example.com", "password": "wrong-pass"})
    assert r.status_code == 401
    assert r.json["error"]["message"] == "Invalid email or password"

    r = client.post("/auth/login", json={"email": "ann@example.com", "password": "secret123"})
    assert r.status_code == 200
    assert client.get("/auth/me").status_code == 200


def test_register_validation(client, alex):
    r = client.post("/auth/register", json={"email": "alex@example.com", "name": "Alex", "password": "secret123"})
    assert r.status_code == 409
    assert r.json["error"]["message"] == "Email already registered"

    r = client.post("/auth/register", json={"email": "x@example.com", "name": "X", "password": "short"})
    assert r.status_code == 400
    assert error_code(r) == "BAD_REQUEST"

    r = client.post("/auth/register", json={"email": "x@example.com", "password": "secret123"})
    assert r.json["error"]["message"] == "Name is required"


def test_search_users_excludes_caller(alex, sam, make_user):
    make_user("Sammy Long", email="long@example.com")
    c, _ = alex
    names = [u["name"] for u in c.get("/auth/users/search?q=sam").json]
    assert names == ["Sam", "Sammy Long"]
    assert c.get("/auth/users/search?q=alex").json == []
    assert c.get("/auth/users/search?q=s").json == []


def test_unknown_route_is_json(client):
    r = client.get("/does-not-exist")
    assert r.status_code == 404
    assert error_code(r) == "NOT_FOUND"


def test_dashboard(alex, training):
    c, _ = alex
    r = c.get("/")
    assert r.status_code == 200
    assert r.json["training_count"] == 1
    assert r.json["friend_count"] == 0
    assert r.json["last_session"]["date"] == "—"


def test_login_rejects_non_string_credentials(client, alex):
    r = client.post("/auth/login", json={"email": 123, "password": "secret123"})
    assert r.status_code == 400
    assert r.json["error"]["message"] == "Email is required"

    r = client.post("/auth/login", json={"email": "alex@example.com", "password": ["secret123"]})
    assert r.status_code == 400
    assert r.json["error"]["message"] == "Password is required"

    assert client.post("/auth/login", json={}).status_code == 400


def test_search_treats_wildcards_literally(alex, sam, make_user):
    make_user("Under_Score", email="under_score@example.com")
    c, _ = alex
    assert c.get("/auth/users/search?q=%25%25").json == []
    assert c.get("/auth/users/search?q=__").json == []
    assert [u["name"] for u in c.get("/auth/users/search?q=r_s").json] == ["Under_Score"]
