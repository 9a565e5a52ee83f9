import pytest

from arcadefinder import models


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.text == "OK"


def test_ready(client):
    r = client.get("/ready")
    assert r.status_code == 200
    assert r.json() == {"db": "ok"}


def test_register_returns_token_and_user_without_hash(client):
    r = client.post("/api/auth/register", json={"username": "alice", "email": "alice@example.com", "password": "pw"})
    assert r.status_code == 201
    body = r.json()
    assert body["token"]
    assert body["user"]["username"] == "alice"
    assert body["user"]["email"] == "alice@example.com"
    assert set(body["user"]) == {"id", "username", "email"}
    assert "pw" not in r.text


def test_register_duplicate_email_conflict(client, db_session):
    payload = {"username": "alice", "email": "alice@example.com", "password": "pw"}
    assert client.post("/api/auth/register", json=payload).status_code == 201

    r = client.post("/api/auth/register", json={**payload, "username": "alice2"})
    assert r.status_code == 400
    assert r.json() == {"msg": "User already exists"}
    assert db_session.query(models.User).count() == 1


@pytest.mark.parametrize("payload", [
    {"email": "a@example.com", "password": "pw"},
    {"username": "a", "password": "pw"},
    {"username": "a", "email": "a@example.com"},
    {"username": "", "email": "a@example.com", "password": "pw"},
    {},
])
def test_register_missing_fields_rejected_before_write(client, db_session, payload):
    r = client.post("/api/auth/register", json=payload)
    assert r.status_code == 400
    assert "msg" in r.json()
    assert db_session.query(models.User).count() == 0


def test_login_flow(client, register):
    register("bob", password="s3cret")

    r = client.post("/api/auth/login", json={"email": "bob@example.com", "password": "s3cret"})
    assert r.status_code == 200
    body = r.json()
    assert body["token"]
    assert body["user"]["username"] == "bob"
    assert "password_hash" not in body["user"]


@pytest.mark.parametrize("email,password", [
    ("bob@example.com", "wrong"),
    ("nobody@example.com", "s3cret"),
])
def test_login_invalid_credentials(client, register, email, password):
    register("bob", password="s3cret")
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 400
    assert r.json() == {"msg": "Invalid credentials"}


@pytest.mark.parametrize("payload", [
    {"email": "bob@example.com"},
    {"password": "s3cret"},
    {"email": "", "password": "s3cret"},
])
def test_login_missing_fields(client, payload):
    r = client.post("/api/auth/login", json=payload)
    assert r.status_code == 400


def test_token_from_login_opens_profile(client, register):
    register("carol", password="pw")
    token = client.post("/api/auth/login", json={"email": "carol@example.com", "password": "pw"}).json()["token"]
    r = client.get("/api/profile", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json() == {"comments": []}


@pytest.mark.parametrize("headers", [
    {},
    {"Authorization": "Bearer not-a-token"},
    {"Authorization": "Token abc"},
])
def test_profile_requires_valid_token(client, headers):
    r = client.get("/api/profile", headers=headers)
    assert r.status_code == 401
    assert "msg" in r.json()
    assert r.headers["www-authenticate"] == "Bearer"
