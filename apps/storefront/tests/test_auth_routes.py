"""
HTTP-level tests for the auth endpoints: login link, password login, sign-up,
callback, session.
"""

from unittest.mock import AsyncMock, patch

from storefront.services.exceptions import AuthProviderError

SITE = "http://localhost:3000"


# ============================================================================
# POST /api/auth/login
# ============================================================================


@patch("storefront.services.auth_service.send_login_link", new_callable=AsyncMock)
def test_login_sets_code_verifier_cookie(mock_send, client):
    response = client.post("/api/auth/login", json={"email": " a@example.com "})

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    email, challenge = mock_send.await_args.args
    assert email == "a@example.com"
    assert challenge
    assert response.cookies.get("sb-code-verifier")
    assert "HttpOnly" in response.headers["set-cookie"]


@patch("storefront.services.auth_service.send_login_link", new_callable=AsyncMock)
def test_login_provider_rejection(mock_send, client):
    mock_send.side_effect = AuthProviderError("Email rate limit exceeded", status_code=400)

    response = client.post("/api/auth/login", json={"email": "a@example.com"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Email rate limit exceeded"
    assert "sb-code-verifier" not in response.cookies


def test_login_requires_email(client):
    response = client.post("/api/auth/login", json={})
    assert response.status_code == 422


@patch("storefront.services.auth_service.send_login_link", new_callable=AsyncMock)
def test_login_rejects_blank_email(mock_send, client):
    response = client.post("/api/auth/login", json={"email": "   "})

    assert response.status_code == 400
    assert response.json()["detail"] == "missing_email"
    mock_send.assert_not_awaited()


# ============================================================================
# POST /api/auth/login/password
# ============================================================================


@patch("storefront.services.auth_service.sign_in_with_password", new_callable=AsyncMock)
def test_password_login_sets_session_cookies(mock_sign_in, client):
    mock_sign_in.return_value = {
        "access_token": "at",
        "refresh_token": "rt",
        "expires_in": 3600,
        "user": {"id": "u1"},
    }

    response = client.post(
        "/api/auth/login/password", json={"email": " a@example.com ", "password": "secret123"}
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    mock_sign_in.assert_awaited_once_with("a@example.com", "secret123")
    set_cookies = response.headers.get_list("set-cookie")
    assert any(c.startswith("sb-access-token=at") and "Max-Age=3600" in c for c in set_cookies)
    assert any(c.startswith("sb-refresh-token=rt") for c in set_cookies)
    assert all("HttpOnly" in c for c in set_cookies)


@patch("storefront.services.auth_service.sign_in_with_password", new_callable=AsyncMock)
def test_password_login_invalid_credentials(mock_sign_in, client):
    mock_sign_in.side_effect = AuthProviderError("invalid_credentials", status_code=400)

    response = client.post(
        "/api/auth/login/password", json={"email": "a@example.com", "password": "wrong"}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "invalid_credentials"
    assert "sb-access-token" not in response.cookies


@patch("storefront.services.auth_service.sign_in_with_password", new_callable=AsyncMock)
def test_password_login_without_session(mock_sign_in, client):
    mock_sign_in.return_value = None

    response = client.post(
        "/api/auth/login/password", json={"email": "a@example.com", "password": "secret123"}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "invalid_credentials"


@patch("storefront.services.auth_service.sign_in_with_password", new_callable=AsyncMock)
def test_password_login_rejects_blank_email(mock_sign_in, client):
    response = client.post("/api/auth/login/password", json={"email": "", "password": "x"})

    assert response.status_code == 400
    assert response.json()["detail"] == "missing_email"
    mock_sign_in.assert_not_awaited()


@patch("storefront.services.auth_service.sign_in_with_password", new_callable=AsyncMock)
def test_password_login_provider_unreachable(mock_sign_in, client):
    mock_sign_in.side_effect = AuthProviderError("Auth provider is not available", status_code=503)

    response = client.post(
        "/api/auth/login/password", json={"email": "a@example.com", "password": "secret123"}
    )

    assert response.status_code == 503


# ============================================================================
# POST /api/auth/signup
# ============================================================================


@patch("storefront.services.auth_service.sign_up", new_callable=AsyncMock)
def test_signup_success(mock_sign_up, client):
    response = client.post(
        "/api/auth/signup",
        json={
            "email": "a@example.com",
            "password": "secret123",
            "confirm_password": "secret123",
            "full_name": "علی",
        },
    )

    assert response.status_code == 200
    assert response.json() == {"status": "success"}
    mock_sign_up.assert_awaited_once_with("a@example.com", "secret123", "علی")


@patch("storefront.services.auth_service.sign_up", new_callable=AsyncMock)
def test_signup_password_mismatch(mock_sign_up, client):
    response = client.post(
        "/api/auth/signup",
        json={"email": "a@example.com", "password": "secret123", "confirm_password": "other"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "password_mismatch"
    mock_sign_up.assert_not_awaited()


@patch("storefront.services.auth_service.sign_up", new_callable=AsyncMock)
def test_signup_existing_email(mock_sign_up, client):
    mock_sign_up.side_effect = AuthProviderError("email_already_exists", status_code=400)

    response = client.post(
        "/api/auth/signup",
        json={"email": "a@example.com", "password": "secret123", "confirm_password": "secret123"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "email_already_exists"


# ============================================================================
# GET /api/auth/callback
# ============================================================================


def test_callback_without_code(client):
    response = client.get("/api/auth/callback", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == f"{SITE}/auth/login?error=no_code"


def test_callback_without_verifier_cookie(client):
    response = client.get("/api/auth/callback?code=abc", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == f"{SITE}/auth/login?error=missing_code_verifier"


@patch("storefront.services.auth_service.exchange_code_for_session", new_callable=AsyncMock)
def test_callback_success_sets_session_cookies(mock_exchange, client):
    mock_exchange.return_value = {
        "access_token": "at",
        "refresh_token": "rt",
        "expires_in": 3600,
        "user": {"id": "u1"},
    }
    client.cookies.set("sb-code-verifier", "verifier-1")

    response = client.get("/api/auth/callback?code=abc", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == f"{SITE}/"
    mock_exchange.assert_awaited_once_with("abc", "verifier-1")
    set_cookies = response.headers.get_list("set-cookie")
    assert any(c.startswith("sb-access-token=at") for c in set_cookies)
    assert any(c.startswith("sb-refresh-token=rt") for c in set_cookies)
    assert any(c.startswith("sb-code-verifier=") and "Max-Age=0" in c for c in set_cookies)


@patch("storefront.services.auth_service.exchange_code_for_session", new_callable=AsyncMock)
def test_callback_exchange_error(mock_exchange, client):
    mock_exchange.side_effect = AuthProviderError("invalid flow state", status_code=400)
    client.cookies.set("sb-code-verifier", "verifier-1")

    response = client.get("/api/auth/callback?code=abc", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == f"{SITE}/auth/login?error=invalid%20flow%20state"


@patch("storefront.services.auth_service.exchange_code_for_session", new_callable=AsyncMock)
def test_callback_no_session(mock_exchange, client):
    mock_exchange.return_value = None
    client.cookies.set("sb-code-verifier", "verifier-1")

    response = client.get("/api/auth/callback?code=abc", follow_redirects=False)

    assert response.headers["location"] == f"{SITE}/auth/login?error=no_session"


# ============================================================================
# GET /api/auth/session, POST /api/auth/logout
# ============================================================================


def test_session_signed_out(client):
    response = client.get("/api/auth/session")

    assert response.status_code == 200
    assert response.json() == {"session": None}


def test_session_signed_in(customer_client):
    response = customer_client.get("/api/auth/session")

    data = response.json()["session"]
    assert data["access_token"] == "customer-token"
    assert data["user"]["email"] == "customer@example.com"


def test_session_with_rejected_token(client, monkeypatch):
    from storefront.services import auth_service

    async def fake_get_user(token):
        return None

    monkeypatch.setattr(auth_service, "get_user", fake_get_user, raising=True)
    response = client.get("/api/auth/session", headers={"Authorization": "Bearer expired"})

    assert response.json() == {"session": None}


def test_logout_clears_cookies(client):
    response = client.post("/api/auth/logout")

    assert response.status_code == 200
    set_cookies = response.headers.get_list("set-cookie")
    assert any(c.startswith("sb-access-token=") and "Max-Age=0" in c for c in set_cookies)
    assert any(c.startswith("sb-refresh-token=") and "Max-Age=0" in c for c in set_cookies)
