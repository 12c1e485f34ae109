# File: tests/test_auth.py

from datetime import timedelta

import jwt
from sqlalchemy import func, select

from todo_api.core.security import create_access_token
from todo_api.models.todo import Todo
from todo_api.models.user import User


def test_register_returns_token_and_profile(client):
    resp = client.post(
        "/api/auth/register",
        json={"username": "alice", "email": "a@x.com", "password": "secret1"},
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["username"] == "alice"
    assert data["email"] == "a@x.com"
    assert data["token"]


def test_password_is_stored_hashed(client, db, register_user):
    register_user("alice", password="secret1")
    user = db.scalar(select(User).where(User.username == "alice"))
    assert user.password != "secret1"
    assert user.password.startswith("$2")


def test_register_duplicate_username_conflicts(client, register_user):
    register_user("alice", email="a@x.com")
    resp = client.post(
        "/api/auth/register",
        json={"username": "alice", "email": "other@x.com", "password": "secret1"},
    )
    assert resp.status_code == 409
    assert resp.json() == {"status": 409, "message": "Username is already taken"}


def test_username_match_is_case_sensitive(client, register_user):
    register_user("alice", email="a@x.com")
    resp = client.post(
        "/api/auth/register",
        json={"username": "Alice", "email": "b@x.com", "password": "secret1"},
    )
    assert resp.status_code == 201


def test_register_duplicate_email_conflicts(client, register_user):
    register_user("alice", email="a@x.com")
    resp = client.post(
        "/api/auth/register",
        json={"username": "bob", "email": "A@X.com", "password": "secret1"},
    )
    assert resp.status_code == 409
    assert resp.json()["message"] == "Email is already registered"


def test_register_validation_errors(client):
    cases = [
        {"username": "al", "email": "a@x.com", "password": "secret1"},
        {"username": "a" * 51, "email": "a@x.com", "password": "secret1"},
        {"username": "alice", "email": "not-an-email", "password": "secret1"},
        {"username": "alice", "email": "a@x.com", "password": "12345"},
    ]
    for body in cases:
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 400, body
        assert resp.json()["status"] == 400


def test_register_missing_field_is_bad_request(client):
    resp = client.post("/api/auth/register", json={"username": "alice"})
    assert resp.status_code == 400
    data = resp.json()
    assert data["status"] == 400
    assert "email" in data["message"]


def test_login_with_username_or_email(client, register_user):
    register_user("alice", email="a@x.com", password="secret1")

    by_name = client.post("/api/auth/login", json={"usernameOrEmail": "alice", "password": "secret1"})
    by_email = client.post("/api/auth/login", json={"usernameOrEmail": "a@x.com", "password": "secret1"})

    assert by_name.status_code == 200
    assert by_email.status_code == 200
    assert by_email.json()["username"] == "alice"


def test_login_failures_are_indistinguishable(client, register_user):
    register_user("alice", password="secret1")

    wrong_password = client.post("/api/auth/login", json={"usernameOrEmail": "alice", "password": "nope123"})
    unknown_user = client.post("/api/auth/login", json={"usernameOrEmail": "mallory", "password": "nope123"})

    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()


def test_login_token_works_for_protected_routes(client, register_user):
    register_user("alice")
    token = client.post(
        "/api/auth/login", json={"usernameOrEmail": "alice", "password": "secret1"}
    ).json()["token"]

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["username"] == "alice"
    assert "password" not in resp.json()


# -----------------------------
# Access guard
# -----------------------------

def test_missing_token_is_unauthorized(client):
    resp = client.get("/api/todos")
    assert resp.status_code == 401
    assert resp.json()["status"] == 401
    assert resp.headers["www-authenticate"] == "Bearer"


def test_malformed_header_is_unauthorized(client, register_user):
    headers = register_user("alice")
    token = headers["Authorization"].split()[1]

    assert client.get("/api/todos", headers={"Authorization": f"Token {token}"}).status_code == 401
    assert client.get("/api/todos", headers={"Authorization": "Bearer not.a.jwt"}).status_code == 401


def test_expired_token_is_unauthorized(client, db, register_user):
    register_user("alice")
    user = db.scalar(select(User).where(User.username == "alice"))
    token = create_access_token(str(user.id), expires_delta=timedelta(seconds=-10))

    resp = client.get("/api/todos", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_token_signed_with_other_secret_is_unauthorized(client, db, register_user):
    register_user("alice")
    user = db.scalar(select(User).where(User.username == "alice"))
    forged = jwt.encode({"sub": str(user.id), "exp": 9999999999}, "x" * 40, algorithm="HS256")

    resp = client.get("/api/todos", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401


def test_error_messages_are_generic(client):
    missing = client.get("/api/todos")
    invalid = client.get("/api/todos", headers={"Authorization": "Bearer garbage"})
    assert missing.json() == invalid.json()


# -----------------------------
# Account management
# -----------------------------

def test_change_password(client, register_user):
    headers = register_user("alice", password="secret1")

    bad = client.put(
        "/api/auth/password",
        json={"currentPassword": "wrong12", "newPassword": "newsecret"},
        headers=headers,
    )
    assert bad.status_code == 401

    short = client.put(
        "/api/auth/password",
        json={"currentPassword": "secret1", "newPassword": "abc"},
        headers=headers,
    )
    assert short.status_code == 400

    ok = client.put(
        "/api/auth/password",
        json={"currentPassword": "secret1", "newPassword": "newsecret"},
        headers=headers,
    )
    assert ok.status_code == 204

    old = client.post("/api/auth/login", json={"usernameOrEmail": "alice", "password": "secret1"})
    new = client.post("/api/auth/login", json={"usernameOrEmail": "alice", "password": "newsecret"})
    assert old.status_code == 401
    assert new.status_code == 200


def test_delete_account_removes_owned_todos(client, db, register_user):
    alice = register_user("alice")
    bob = register_user("bob")
    client.post("/api/todos", json={"title": "A1"}, headers=alice)
    client.post("/api/todos", json={"title": "A2"}, headers=alice)
    client.post("/api/todos", json={"title": "B1"}, headers=bob)

    resp = client.delete("/api/auth/me", headers=alice)
    assert resp.status_code == 204

    assert db.scalar(select(User).where(User.username == "alice")) is None
    assert db.scalar(select(func.count()).select_from(Todo)) == 1
    assert client.get("/api/todos", headers=bob).json()["totalElements"] == 1


def test_token_of_deleted_user_is_rejected(client, register_user):
    headers = register_user("alice")
    client.delete("/api/auth/me", headers=headers)

    resp = client.get("/api/todos", headers=headers)
    assert resp.status_code == 401


def test_username_cannot_contain_at_sign(client):
    resp = client.post(
        "/api/auth/register",
        json={"username": "bob@x.com", "email": "evil@x.com", "password": "secret1"},
    )
    assert resp.status_code == 400
    assert resp.json()["status"] == 400


def test_email_login_cannot_be_shadowed_by_a_username(client, register_user):
    client.post(
        "/api/auth/register",
        json={"username": "bob@x.com", "email": "evil@x.com", "password": "secret1"},
    )
    register_user("bobby", email="bob@x.com", password="secret2")

    resp = client.post("/api/auth/login", json={"usernameOrEmail": "bob@x.com", "password": "secret2"})
    assert resp.status_code == 200
    assert resp.json()["username"] == "bobby"


def test_login_missing_field_is_bad_request(client):
    resp = client.post("/api/auth/login", json={"password": "secret1"})
    assert resp.status_code == 400
    assert resp.json()["status"] == 400
    assert "usernameOrEmail" in resp.json()["message"]
