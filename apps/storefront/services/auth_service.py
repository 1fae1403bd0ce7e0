"""
Client for the hosted auth provider (GoTrue-compatible REST API).

User accounts, passwords, magic links and session tokens all live with the
provider. This module only forwards requests to it. It resolves access tokens
to users, signs users up and in, sends login links (PKCE flow) and exchanges
the callback code for a session.
"""

import base64
import hashlib
import logging
import os
import secrets
from typing import Any, Dict, Optional, Tuple

import httpx

from storefront.services.exceptions import AuthProviderError

logger = logging.getLogger(__name__)

# Default timeout for auth provider requests (in seconds)
AUTH_REQUEST_TIMEOUT = 10.0


def _get_config():
    """Read auth provider configuration from environment at call time."""
    return {
        "base_url": os.getenv("SUPABASE_URL", "").rstrip("/") + "/auth/v1",
        "anon_key": os.getenv("SUPABASE_ANON_KEY", ""),
        "site_url": os.getenv("SITE_URL", "http://localhost:3000").rstrip("/"),
        "timeout": float(os.getenv("AUTH_REQUEST_TIMEOUT", AUTH_REQUEST_TIMEOUT)),
    }


def _build_client(access_token: Optional[str] = None) -> httpx.AsyncClient:
    """Create an AsyncClient with the provider's base URL and API key headers."""
    cfg = _get_config()
    headers = {
        "apikey": cfg["anon_key"],
        "Authorization": f"Bearer {access_token or cfg['anon_key']}",
    }
    return httpx.AsyncClient(base_url=cfg["base_url"], headers=headers, timeout=cfg["timeout"])


def _error_message(response: httpx.Response) -> str:
    """Pull the human-readable error out of a provider error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    for field in ("msg", "message", "error_description", "error"):
        if isinstance(body, dict) and body.get(field):
            return str(body[field])
    return f"HTTP {response.status_code}"


async def _request(
    method: str,
    path: str,
    *,
    access_token: Optional[str] = None,
    json: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, Any]] = None,
) -> httpx.Response:
    """
    Send a request to the auth provider.

    Raises:
        AuthProviderError: With status 503 if the provider is unreachable,
            504 on timeout
    """
    try:
        async with _build_client(access_token) as client:
            return await client.request(method, path, json=json, params=params)
    except httpx.TimeoutException:
        logger.error("Auth provider request %s %s timed out", method, path)
        raise AuthProviderError("Auth provider request timed out", status_code=504)
    except httpx.HTTPError as e:
        logger.error("Auth provider request %s %s failed: %s", method, path, e)
        raise AuthProviderError("Auth provider is not available", status_code=503)


async def get_user(access_token: str) -> Optional[Dict]:
    """
    Resolve an access token to the provider's user record.

    Args:
        access_token: JWT issued by the provider

    Returns:
        User dictionary, or None if the provider rejects the token

    Raises:
        AuthProviderError: If the provider cannot be reached
    """
    if not access_token:
        return None
    response = await _request("GET", "/user", access_token=access_token)
    if response.status_code in (401, 403, 404):
        return None
    if response.status_code >= 400:
        raise AuthProviderError(_error_message(response), status_code=502)
    return response.json()


def create_pkce_pair() -> Tuple[str, str]:
    """
    Create a PKCE code verifier and its S256 challenge.

    Returns:
        (verifier, challenge)
    """
    verifier = secrets.token_urlsafe(48)
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return verifier, challenge


def site_url() -> str:
    """Public base URL of the storefront."""
    return _get_config()["site_url"]


def callback_url() -> str:
    """URL the provider redirects to after a magic-link login."""
    return f"{site_url()}/api/auth/callback"


async def send_login_link(email: str, code_challenge: str) -> None:
    """
    Email a magic login link to ``email``.

    Raises:
        AuthProviderError: With the provider's message if it refuses
    """
    response = await _request(
        "POST",
        "/otp",
        params={"redirect_to": callback_url()},
        json={
            "email": email,
            "create_user": True,
            "code_challenge": code_challenge,
            "code_challenge_method": "s256",
        },
    )
    if response.status_code >= 400:
        message = _error_message(response)
        logger.warning("Login link for %s rejected: %s", email, message)
        raise AuthProviderError(message, status_code=400)
    logger.info("Sent login link to %s", email)


def map_signup_error(message: str) -> str:
    """Map a provider sign-up error message to a stable error code."""
    lowered = (message or "").lower()
    if "already registered" in lowered or "already exists" in lowered:
        return "email_already_exists"
    if "invalid email" in lowered:
        return "invalid_email"
    if "password" in lowered:
        return "password_too_short"
    return "signup_failed"


async def sign_up(email: str, password: str, full_name: Optional[str] = None) -> Dict:
    """
    Register a new user with the provider.

    Returns:
        Provider response (user and possibly a session)

    Raises:
        AuthProviderError: With the mapped error code as message if refused
    """
    response = await _request(
        "POST",
        "/signup",
        json={"email": email, "password": password, "data": {"full_name": full_name}},
    )
    if response.status_code >= 400:
        message = _error_message(response)
        logger.warning("Sign-up for %s rejected: %s", email, message)
        raise AuthProviderError(map_signup_error(message), status_code=400)
    return response.json()


async def exchange_code_for_session(code: str, code_verifier: str) -> Optional[Dict]:
    """
    Exchange the magic-link callback code for a session.

    Returns:
        Session dict with ``access_token``, ``refresh_token``, ``expires_in``
        and ``user``, or None if the provider returned no session

    Raises:
        AuthProviderError: With the provider's message if the exchange fails
    """
    response = await _request(
        "POST",
        "/token",
        params={"grant_type": "pkce"},
        json={"auth_code": code, "code_verifier": code_verifier},
    )
    if response.status_code >= 400:
        message = _error_message(response)
        logger.error("Code exchange failed: %s", message)
        raise AuthProviderError(message, status_code=400)
    session = response.json()
    if not session or not session.get("access_token"):
        return None
    return session


async def sign_in_with_password(email: str, password: str) -> Optional[Dict]:
    """
    Sign in with email and password (``grant_type=password``).

    Returns:
        Session dict like ``exchange_code_for_session``, or None if the
        provider returned no session

    Raises:
        AuthProviderError: ``invalid_credentials`` (400) if the provider
            rejects the email/password pair
    """
    response = await _request(
        "POST",
        "/token",
        params={"grant_type": "password"},
        json={"email": email, "password": password},
    )
    if response.status_code >= 400:
        logger.warning("Password sign-in for %s rejected: %s", email, _error_message(response))
        raise AuthProviderError("invalid_credentials", status_code=400)
    session = response.json()
    if not session or not session.get("access_token"):
        return None
    return session
