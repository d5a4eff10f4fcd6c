from __future__ import annotations

from uuid import UUID

from fastapi.testclient import TestClient

from gameplan.auth.depends import get_client_rate_limiter, get_rate_limiter
from gameplan.clubs.roles import CATEGORY_PLAYERS
from gameplan.commons.ids import random_uuid
from gameplan.commons.ratelimit import ClientRateLimiter, UserRateLimiter

PASSWORD = "Abc123!@"


def _register_payload(email: str = "a@x.com", **overrides):  # type: ignore[no-untyped-def]
    payload = {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": email,
        "password": PASSWORD,
        "birthDate": "1990-05-17",
        "country": "GB",
    }
    payload.update(overrides)
    return payload


def _headers(token: str, session_id: str | None = None) -> dict[str, str]:
    headers = {"Authorization": f"Bearer {token}"}
    if session_id is not None:
        headers["X-Session-ID"] = session_id
    return headers


def _register(client: TestClient, email: str = "a@x.com") -> dict:
    r = client.post("/auth/register", json=_register_payload(email))
    assert r.status_code == 201, r.text
    return r.json()["data"]


def _login(client: TestClient, email: str = "a@x.com", password: str = PASSWORD) -> dict:
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["data"]


def test_session_lifecycle(client: TestClient) -> None:
    registered = _register(client)
    assert registered["user"]["email"] == "a@x.com"
    assert "passwordHash" not in registered["user"]

    logged_in = _login(client)
    assert logged_in["sessionId"] != registered["sessionId"]
    token, session_id = logged_in["token"], logged_in["sessionId"]

    r = client.post("/auth/logout", headers=_headers(token, session_id))
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Logged out successfully"}

    r = client.get("/auth/me", headers=_headers(token, session_id))
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "SESSION_INVALID"

    r = client.get("/auth/me", headers=_headers(token))
    assert r.status_code == 200
    assert r.json()["data"]["user"]["email"] == "a@x.com"

    # The registration session is untouched by the other session's logout.
    r = client.get("/auth/me", headers=_headers(registered["token"], registered["sessionId"]))
    assert r.status_code == 200


def test_register_response_shape(client: TestClient, store) -> None:  # type: ignore[no-untyped-def]
    r = client.post(
        "/auth/register",
        json=_register_payload("Mixed@X.com", phone="+44 (20) 7946-0958"),
    )
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    user = body["data"]["user"]
    assert user["email"] == "mixed@x.com"
    assert user["phone"] == "+442079460958"
    assert user["isEmailVerified"] is False
    assert UUID(body["data"]["sessionId"]) in store.sessions


def test_duplicate_registration_is_conflict(client: TestClient, store) -> None:  # type: ignore[no-untyped-def]
    _register(client)
    r = client.post("/auth/register", json=_register_payload("A@X.COM"))
    assert r.status_code == 409
    body = r.json()
    assert body["success"] is False
    assert body["error"]["code"] == "USER_EXISTS"
    assert body["path"] == "/auth/register"
    assert body["method"] == "POST"
    assert "timestamp" in body
    assert len(store.users) == 1


def test_register_validation_errors(client: TestClient) -> None:
    r = client.post(
        "/auth/register",
        json=_register_payload("not-an-email", password="weakpass", firstName="A"),
    )
    assert r.status_code == 400
    error = r.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    fields = {item["field"] for item in error["details"]["errors"]}
    assert {"email", "password", "firstName"} <= fields
    assert all(item["location"] == "body" for item in error["details"]["errors"])


def test_password_rule_message_is_readable(client: TestClient) -> None:
    r = client.post("/auth/register", json=_register_payload(password="abcdefgh1!"))
    assert r.status_code == 400
    messages = [item["message"] for item in r.json()["error"]["details"]["errors"]]
    assert any(m.startswith("Password must contain") for m in messages)


def test_login_failures_are_indistinguishable(client: TestClient) -> None:
    _register(client)
    wrong = client.post("/auth/login", json={"email": "a@x.com", "password": "Wrong123!@"})
    unknown = client.post("/auth/login", json={"email": "z@x.com", "password": PASSWORD})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["error"] == unknown.json()["error"]
    assert wrong.json()["error"]["code"] == "INVALID_CREDENTIALS"


def test_login_is_case_insensitive_on_email(client: TestClient) -> None:
    _register(client)
    assert _login(client, email="A@X.com")["user"]["email"] == "a@x.com"


def test_deactivated_account(client: TestClient, store) -> None:  # type: ignore[no-untyped-def]
    registered = _register(client)
    store.users[UUID(registered["user"]["id"])].is_active = False

    r = client.post("/auth/login", json={"email": "a@x.com", "password": PASSWORD})
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "ACCOUNT_DEACTIVATED"

    r = client.get("/auth/me", headers=_headers(registered["token"]))
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "ACCOUNT_DEACTIVATED"


def test_missing_and_malformed_tokens(client: TestClient) -> None:
    r = client.get("/auth/me")
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "TOKEN_REQUIRED"

    r = client.get("/auth/me", headers={"Authorization": "Basic abc"})
    assert r.json()["error"]["code"] == "TOKEN_REQUIRED"

    r = client.get("/auth/me", headers=_headers("not.a.jwt"))
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "INVALID_TOKEN"


def test_token_for_deleted_user(client: TestClient, store) -> None:  # type: ignore[no-untyped-def]
    registered = _register(client)
    store.users.clear()
    r = client.get("/auth/me", headers=_headers(registered["token"]))
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "USER_NOT_FOUND"


def test_me_reports_active_memberships(client: TestClient, store) -> None:  # type: ignore[no-untyped-def]
    registered = _register(client)
    user_id = UUID(registered["user"]["id"])
    store.add_membership(user_id=user_id, club_id=random_uuid(), role_name="Player", category=CATEGORY_PLAYERS)
    store.add_membership(
        user_id=user_id, club_id=random_uuid(), role_name="Captain", category=CATEGORY_PLAYERS, is_active=False
    )
    r = client.get("/auth/me", headers=_headers(registered["token"]))
    assert r.status_code == 200
    assert r.json()["data"]["user"]["clubMemberships"] == 1


def test_refresh_returns_new_verifiable_token(client: TestClient, token_service) -> None:  # type: ignore[no-untyped-def]
    registered = _register(client)
    r = client.post("/auth/refresh", headers=_headers(registered["token"], registered["sessionId"]))
    assert r.status_code == 200
    token = r.json()["data"]["token"]
    assert token_service.verify(token).email == "a@x.com"

    r = client.get("/auth/me", headers=_headers(token, registered["sessionId"]))
    assert r.status_code == 200


def test_update_profile(client: TestClient) -> None:
    registered = _register(client)
    headers = _headers(registered["token"])

    r = client.put("/auth/profile", json={"firstName": "  Augusta ", "country": "FR"}, headers=headers)
    assert r.status_code == 200
    user = r.json()["data"]["user"]
    assert user["firstName"] == "Augusta"
    assert user["country"] == "FR"
    assert user["lastName"] == "Lovelace"

    r = client.put("/auth/profile", json={}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "NO_UPDATE_FIELDS"

    r = client.put("/auth/profile", json={"phone": "call me"}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


def test_change_password_revokes_other_sessions(client: TestClient) -> None:
    first = _register(client)
    second = _login(client)
    current = _login(client)

    r = client.post(
        "/auth/change-password",
        json={
            "currentPassword": PASSWORD,
            "newPassword": "Xyz789$%",
            "confirmPassword": "Xyz789$%",
        },
        headers=_headers(current["token"], current["sessionId"]),
    )
    assert r.status_code == 200, r.text

    for revoked in (first, second):
        r = client.get("/auth/me", headers=_headers(revoked["token"], revoked["sessionId"]))
        assert r.json()["error"]["code"] == "SESSION_INVALID"
    r = client.get("/auth/me", headers=_headers(current["token"], current["sessionId"]))
    assert r.status_code == 200

    r = client.post("/auth/login", json={"email": "a@x.com", "password": PASSWORD})
    assert r.json()["error"]["code"] == "INVALID_CREDENTIALS"
    _login(client, password="Xyz789$%")


def test_change_password_rejects_mismatch_and_wrong_current(client: TestClient) -> None:
    registered = _register(client)
    headers = _headers(registered["token"], registered["sessionId"])

    r = client.post(
        "/auth/change-password",
        json={"currentPassword": PASSWORD, "newPassword": "Xyz789$%", "confirmPassword": "Xyz789$&"},
        headers=headers,
    )
    assert r.status_code == 400
    messages = [e["message"] for e in r.json()["error"]["details"]["errors"]]
    assert "Password confirmation does not match" in messages

    r = client.post(
        "/auth/change-password",
        json={"currentPassword": "Nope123!@", "newPassword": "Xyz789$%", "confirmPassword": "Xyz789$%"},
        headers=headers,
    )
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "INVALID_CURRENT_PASSWORD"


def test_authenticated_routes_are_rate_limited(app, client: TestClient) -> None:  # type: ignore[no-untyped-def]
    limiter = UserRateLimiter(max_requests=2, window_s=60)
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    registered = _register(client)
    headers = _headers(registered["token"])

    assert client.get("/auth/me", headers=headers).status_code == 200
    assert client.post("/auth/refresh", headers=headers).status_code == 200
    r = client.get("/auth/me", headers=headers)
    assert r.status_code == 429
    assert r.json()["error"]["code"] == "USER_RATE_LIMIT_EXCEEDED"

    # Login and register are not behind the per-user limiter.
    assert client.post("/auth/login", json={"email": "a@x.com", "password": PASSWORD}).status_code == 200


def test_public_routes_are_limited_per_client(app, client: TestClient) -> None:  # type: ignore[no-untyped-def]
    limiter = ClientRateLimiter(max_requests=3, window_s=60)
    app.dependency_overrides[get_client_rate_limiter] = lambda: limiter
    _register(client)
    _login(client)
    r = client.post("/auth/login", json={"email": "a@x.com", "password": "Wrong123!@"})
    assert r.status_code == 401

    r = client.post("/auth/login", json={"email": "a@x.com", "password": PASSWORD})
    assert r.status_code == 429
    error = r.json()["error"]
    assert error["code"] == "RATE_LIMIT_EXCEEDED"
    assert error["message"] == "Too many requests from this IP, please try again later."

    # Register draws from the same per-address budget.
    r = client.post("/auth/register", json=_register_payload("b@x.com"))
    assert r.status_code == 429
