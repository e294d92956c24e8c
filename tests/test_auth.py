# tests/test_auth.py
from conftest import register


def test_register_returns_token_and_user_without_hash(client):
    r = client.post(
        "/api/auth/register",
        json={"name": "Jane", "email": "Jane@Student.edu", "password": "secret123"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["data"]["token"]
    user = body["data"]["user"]
    assert user["email"] == "jane@student.edu"
    assert user["currency"] == "HKD"
    assert "hashed_password" not in user


def test_register_seeds_default_categories(client):
    headers = register(client)
    r = client.get("/api/categories", headers=headers)
    assert r.status_code == 200
    names = {(c["name"], c["kind"]) for c in r.json()["data"]}
    assert ("Food & Snacks", "expense") in names
    assert ("Part-time job", "income") in names
    assert r.json()["count"] == 12


def test_register_duplicate_email_conflicts(client):
    register(client)
    r = client.post(
        "/api/auth/register",
        json={"name": "Jane 2", "email": "jane@student.edu", "password": "secret123"},
    )
    assert r.status_code == 409
    assert r.json() == {"success": False, "message": "User already exists"}


def test_register_validation(client):
    r = client.post("/api/auth/register", json={"email": "x@y.com", "password": "secret123"})
    assert r.status_code == 400
    assert r.json()["message"] == "Please provide name, email and password"

    r = client.post(
        "/api/auth/register",
        json={"name": "X", "email": "x@y.com", "password": "123"},
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Password must be at least 6 characters"

    r = client.post(
        "/api/auth/register",
        json={"name": "X", "email": "not-an-email", "password": "secret123"},
    )
    assert r.status_code == 400


def test_login_and_me(client):
    register(client)
    r = client.post("/api/auth/login", json={"email": "jane@student.edu", "password": "secret123"})
    assert r.status_code == 200
    token = r.json()["data"]["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["name"] == "Jane"


def test_login_wrong_password(client):
    register(client)
    r = client.post("/api/auth/login", json={"email": "jane@student.edu", "password": "nope-nope"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid email or password"


def test_protected_route_without_token(client):
    r = client.get("/api/expenses")
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Not authorized, no token"}


def test_protected_route_with_tampered_token(client):
    r = client.get("/api/expenses", headers={"Authorization": "Bearer not.a.real.token"})
    assert r.status_code == 401
    assert r.json()["message"] == "Not authorized, token failed"


def test_update_profile(auth, client):
    r = client.put("/api/auth/me", json={"name": "Jane Doe", "currency": "USD"}, headers=auth)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["name"] == "Jane Doe"
    assert data["currency"] == "USD"


def test_unknown_route_is_enveloped(client):
    r = client.get("/api/does-not-exist")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Route not found"}


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "Running"
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["database"] == "Connected"
