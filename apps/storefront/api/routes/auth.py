"""Auth route handlers: magic-link and password login, sign-up, callback, session."""

import logging
import os
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import RedirectResponse

from storefront.api.auth_dependencies import (
    ACCESS_TOKEN_COOKIE,
    get_access_token,
    get_current_user_optional,
)
from storefront.api.routes import limiter
from storefront.models.schemas import (
    LoginRequest,
    LoginResponse,
    PasswordLoginRequest,
    SessionResponse,
    SignupRequest,
    SignupResponse,
)
from storefront.services import auth_service
from storefront.services.exceptions import AuthProviderError

logger = logging.getLogger(__name__)
router = APIRouter()

CODE_VERIFIER_COOKIE = "sb-code-verifier"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"
CODE_VERIFIER_MAX_AGE = 60 * 60  # magic links expire after an hour


def _cookie_secure() -> bool:
    return os.getenv("COOKIE_SECURE", "false").lower() == "true"


def _set_cookie(response: Response, name: str, value: str, max_age: Optional[int] = None):
    response.set_cookie(
        name,
        value,
        max_age=max_age,
        httponly=True,
        secure=_cookie_secure(),
        samesite="lax",
        path="/",
    )


def _set_session_cookies(response: Response, session: dict):
    _set_cookie(
        response, ACCESS_TOKEN_COOKIE, session["access_token"], max_age=session.get("expires_in")
    )
    if session.get("refresh_token"):
        _set_cookie(response, REFRESH_TOKEN_COOKIE, session["refresh_token"])


def _require_email(email: str) -> str:
    email = (email or "").strip()
    if not email:
        raise HTTPException(status_code=400, detail="missing_email")
    return email


def _login_redirect(reason: str) -> RedirectResponse:
    return RedirectResponse(
        f"{auth_service.site_url()}/auth/login?error={quote(reason)}", status_code=303
    )


@router.post("/api/auth/login", response_model=LoginResponse)
@limiter.limit("5/minute")
async def login(request: Request, response: Response, body: LoginRequest):
    """Email a magic login link and remember the PKCE verifier in a cookie."""
    email = _require_email(body.email)
    verifier, challenge = auth_service.create_pkce_pair()
    try:
        await auth_service.send_login_link(email, challenge)
    except AuthProviderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    _set_cookie(response, CODE_VERIFIER_COOKIE, verifier, max_age=CODE_VERIFIER_MAX_AGE)
    return {"ok": True}


@router.post("/api/auth/login/password", response_model=LoginResponse)
@limiter.limit("5/minute")
async def login_with_password(request: Request, response: Response, body: PasswordLoginRequest):
    """Sign in with email and password and set the session cookies."""
    email = _require_email(body.email)
    try:
        session = await auth_service.sign_in_with_password(email, body.password)
    except AuthProviderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    if not session:
        logger.error("Password sign-in for %s returned no session", email)
        raise HTTPException(status_code=400, detail="invalid_credentials")

    _set_session_cookies(response, session)
    return {"ok": True}


@router.post("/api/auth/signup", response_model=SignupResponse)
@limiter.limit("5/minute")
async def signup(request: Request, body: SignupRequest):
    """Register a new account with the auth provider."""
    if body.password != body.confirm_password:
        raise HTTPException(status_code=400, detail="password_mismatch")

    try:
        await auth_service.sign_up(body.email.strip(), body.password, body.full_name)
    except AuthProviderError as e:
        # Message is already a stable error code for 4xx responses
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return {"status": "success"}


@router.get("/api/auth/callback")
async def auth_callback(request: Request, code: Optional[str] = None):
    """Exchange the magic-link code for a session and set session cookies."""
    if not code:
        logger.error("[AUTH CALLBACK] No code parameter provided")
        return _login_redirect("no_code")

    verifier = request.cookies.get(CODE_VERIFIER_COOKIE)
    if not verifier:
        logger.error("[AUTH CALLBACK] Missing PKCE code verifier cookie")
        return _login_redirect("missing_code_verifier")

    try:
        session = await auth_service.exchange_code_for_session(code, verifier)
    except AuthProviderError as e:
        return _login_redirect(e.message)

    if not session:
        logger.error("[AUTH CALLBACK] No session returned after code exchange")
        return _login_redirect("no_session")

    user_id = (session.get("user") or {}).get("id")
    logger.info(f"[AUTH CALLBACK] Successfully authenticated user: {user_id}")

    response = RedirectResponse(f"{auth_service.site_url()}/", status_code=303)
    _set_session_cookies(response, session)
    response.delete_cookie(CODE_VERIFIER_COOKIE, path="/")
    return response


@router.get("/api/auth/session", response_model=SessionResponse)
async def get_session(
    token: Optional[str] = Depends(get_access_token),
    user: Optional[dict] = Depends(get_current_user_optional),
):
    """Return the current session, or null when signed out."""
    if user is None:
        return {"session": None}
    return {"session": {"access_token": token, "user": user}}


@router.post("/api/auth/logout", response_model=LoginResponse)
async def logout(response: Response):
    """Clear session cookies."""
    response.delete_cookie(ACCESS_TOKEN_COOKIE, path="/")
    response.delete_cookie(REFRESH_TOKEN_COOKIE, path="/")
    return {"ok": True}
