from datetime import datetime, timedelta, timezone

import jwt
from bson.objectid import ObjectId
from fastapi.security import HTTPAuthorizationCredentials

import auth
from tests.helpers import bearer


def test_register_and_login(client, db):
    res = client.post("/api/auth/register", json={"name": "Bilal", "email": "bilal@example.com", "password": "pass1234"})
    assert res.status_code == 201

    stored = db["user"].find_one({"email": "bilal@example.com"})
    assert stored["passwordHash"] != "pass1234"
    assert stored["isVerified"] is False
    assert stored["verificationToken"]

    login = client.post("/api/auth/login", json={"email": "bilal@example.com", "password": "pass1234"})
    assert login.status_code == 200
    body = login.json()
    assert "passwordHash" not in body["user"]
    payload = jwt.decode(body["token"], auth.JWT_SECRET, algorithms=[auth.JWT_ALGO])
    assert payload["id"] == str(stored["_id"])
    assert "role" not in payload


def test_duplicate_registration(client, db, make_user):
    make_user(email="dup@example.com")
    res = client.post("/api/auth/register", json={"name": "Dup", "email": "dup@example.com", "password": "pass1234"})
    assert res.status_code == 400
    assert res.json()["detail"] == "User already exists"


def test_wrong_password(client, db, make_user):
    make_user(email="sara@example.com", password="right-one")
    res = client.post("/api/auth/login", json={"email": "sara@example.com", "password": "wrong-one"})
    assert res.status_code == 401


def test_google_user_cannot_use_password_login(client, db, make_user):
    make_user(email="g@example.com", is_google_user=True, google_id="g-123")
    res = client.post("/api/auth/login", json={"email": "g@example.com", "password": "anything"})
    assert res.status_code == 403


def test_email_verification(client, db, make_user):
    user = make_user()
    token = auth.issue_email_verification({"_id": ObjectId(user["id"])})

    assert client.get(f"/api/auth/verify-email/{token}").status_code == 200
    assert db["user"].find_one({"_id": ObjectId(user["id"])})["isVerified"] is True
    assert client.get(f"/api/auth/verify-email/{token}").status_code == 400


def test_password_reset_flow(client, db, make_user):
    make_user(email="reset@example.com", password="old-password")
    assert client.post("/api/auth/forgot-password", json={"email": "reset@example.com"}).status_code == 200

    stored = db["user"].find_one({"email": "reset@example.com"})
    token = auth.issue_password_reset("user", stored)
    res = client.post(f"/api/auth/reset-password/{token}", json={"password": "new-password"})

    assert res.status_code == 200
    assert client.post("/api/auth/login", json={"email": "reset@example.com", "password": "new-password"}).status_code == 200
    assert client.post(f"/api/auth/reset-password/{token}", json={"password": "again123"}).status_code == 400


def test_expired_reset_token(client, db, make_user):
    make_user(email="late@example.com")
    stored = db["user"].find_one({"email": "late@example.com"})
    token = auth.issue_password_reset("user", stored)
    db["user"].update_one(
        {"_id": stored["_id"]},
        {"$set": {"resetPasswordExpires": datetime.now(timezone.utc) - timedelta(minutes=1)}},
    )

    res = client.post(f"/api/auth/reset-password/{token}", json={"password": "new-password"})

    assert res.status_code == 400


def test_get_user_populates_cart(client, db, make_user, make_product):
    p1 = make_product()
    user = make_user(cart=[(p1, 3)])

    res = client.get("/api/auth/get-user", headers=user["headers"])

    assert res.status_code == 200
    cart = res.json()["user"]["cart"]
    assert cart[0]["quantity"] == 3
    assert cart[0]["product"]["name"] == "Chamomile Flowers"


def test_profile_update_and_password_change(client, db, make_user):
    user = make_user(password="first-pass")

    res = client.put("/api/users/profile", json={"name": "Ayesha K.", "location": "Lahore"}, headers=user["headers"])
    assert res.status_code == 200
    assert res.json()["name"] == "Ayesha K."

    short = client.put(
        "/api/users/profile/password",
        json={"currentPassword": "first-pass", "newPassword": "short"},
        headers=user["headers"],
    )
    wrong = client.put(
        "/api/users/profile/password",
        json={"currentPassword": "nope", "newPassword": "second-pass"},
        headers=user["headers"],
    )
    ok = client.put(
        "/api/users/profile/password",
        json={"currentPassword": "first-pass", "newPassword": "second-pass"},
        headers=user["headers"],
    )
    assert short.status_code == 400
    assert wrong.status_code == 401
    assert ok.status_code == 200


def test_expired_and_garbage_tokens(client, db, make_user):
    user = make_user()
    expired = auth.create_token({"id": user["id"]}, timedelta(seconds=-1))

    assert client.get("/api/users/profile", headers=bearer(expired)).json()["detail"] == "Token expired"
    assert client.get("/api/users/profile", headers=bearer("garbage")).json()["detail"] == "Invalid token"
    assert client.get("/api/users/profile", headers=bearer(auth.create_user_token(str(ObjectId())))).status_code == 401


def test_admin_login_and_token_scope(client, db, admin):
    res = client.post("/api/admins/login", json={"email": "admin@herbie.com", "password": "admin123"})
    assert res.status_code == 200
    token = res.json()["token"]
    assert jwt.decode(token, auth.JWT_SECRET, algorithms=[auth.JWT_ALGO])["role"] == "admin"

    assert client.get("/api/admins/get-admin", headers=bearer(token)).json()["email"] == "admin@herbie.com"
    assert client.get("/api/users/profile", headers=bearer(token)).status_code == 401


def test_admin_management(client, db, admin):
    created = client.post(
        "/api/admins",
        json={"name": "Second", "email": "Second@Herbie.com", "password": "secret1"},
        headers=admin["headers"],
    )
    assert created.status_code == 201
    new_id = created.json()["admin"]["id"]
    assert created.json()["admin"]["email"] == "second@herbie.com"
    assert "passwordHash" not in created.json()["admin"]

    dup = client.post(
        "/api/admins",
        json={"name": "Again", "email": "second@herbie.com", "password": "secret1"},
        headers=admin["headers"],
    )
    assert dup.status_code == 400

    client.put(f"/api/admins/{new_id}", json={"password": "changed1"}, headers=admin["headers"])
    login = client.post("/api/admins/login", json={"email": "second@herbie.com", "password": "changed1"})
    assert login.status_code == 200

    assert len(client.get("/api/admins", headers=admin["headers"]).json()) == 2
    assert client.delete(f"/api/admins/{new_id}", headers=admin["headers"]).status_code == 200
    assert client.get(f"/api/admins/{new_id}", headers=admin["headers"]).status_code == 404


def test_admin_password_reset(client, db, admin):
    stored = db["admin"].find_one({"email": "admin@herbie.com"})
    token = auth.issue_password_reset("admin", stored)

    assert client.post(f"/api/admins/reset-password/{token}", json={"password": "fresh-pass"}).status_code == 200
    assert client.post("/api/admins/login", json={"email": "admin@herbie.com", "password": "fresh-pass"}).status_code == 200


def test_current_user_dependency_runs_synchronously(db, make_user):
    user = make_user()
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=auth.create_user_token(user["id"]))

    account = auth.get_current_user(credentials)

    assert account["email"] == "ayesha@example.com"
    assert "passwordHash" not in account
