"""
api/routes/v1/users.py -- Account registration, session, and password-reset endpoints.

Routes:
  POST /api/v1/user/register         -- create account; sets session cookie; 201
  POST /api/v1/user/login            -- password login; sets session cookie
  POST /api/v1/user/logout           -- clears session cookie; 200
  GET  /api/v1/user/me               -- current account (requires auth)
  PUT  /api/v1/user/forgot-password  -- issue a reset token and email it
  PUT  /api/v1/user/new-password     -- consume a reset token, set new password
  GET  /api/v1/user/{token}          -- check a reset token without consuming it

Route registration order matters: GET /user/me must be registered before
GET /user/{token} or FastAPI captures "me" as a token.

Security:
  POST /login and PUT /forgot-password are rate-limited per client IP.
  authenticate_user() provides timing equalization -- use it, never inline.
  Cache-Control: no-store on every response that sets the session cookie.
  Reset tokens expire after TEMP_PASSWORD_TTL_SECONDS and are cleared on use.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from api.limiter import limiter
from api.models import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    NewPasswordRequest,
    RegisterRequest,
    UserResponse,
)
from auth.dependencies import get_current_user
from auth.models import User, user_name_from_email
from auth.store import UserStore
from auth.tokens import (
    authenticate_user,
    clear_auth_cookie,
    create_access_token,
    generate_temp_password,
    hash_password,
    set_auth_cookie,
    temp_password_expiry,
)
from core.config import get_settings
from core.mailer import Mailer

logger = logging.getLogger("gatehouse.users")


# Read per request so a settings override takes effect without re-import.
def _login_rate_limit() -> str:
    return get_settings().login_rate_limit


def _forgot_password_rate_limit() -> str:
    return get_settings().forgot_password_rate_limit


# Auth policy:
# - POST /api/v1/user/register:         public
# - POST /api/v1/user/login:            public, rate-limited
# - POST /api/v1/user/logout:           public -- clearing a cookie needs no prior auth
# - GET  /api/v1/user/me:               requires auth (get_current_user)
# - PUT  /api/v1/user/forgot-password:  public, rate-limited
# - PUT  /api/v1/user/new-password:     public -- the reset token is the credential
# - GET  /api/v1/user/{token}:          public -- the reset token is the credential
router = APIRouter()


# ---------------------------------------------------------------------------
# Registration and session
# ---------------------------------------------------------------------------


@router.post("/user/register", response_model=UserResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account and start a session.

    The user name is the local part of the email. Two accounts whose emails
    share a local part (ada@a.com, ada@b.com) collide on user_name; the store's
    UNIQUE constraint rejects the second and we report invalid user data.
    """
    user_store: UserStore = request.app.state.user_store

    if user_store.get_by_email(body.email) is not None:
        raise HTTPException(
            status_code=400,
            detail={"code": "user_exists", "message": "User already exists"},
        )

    new_user = User(
        first_name=body.first_name,
        last_name=body.last_name,
        user_name=user_name_from_email(body.email),
        email=body.email,
        hashed_password=hash_password(body.password),
    )
    try:
        user_id = user_store.create_user(new_user)
    except IntegrityError as exc:
        raise HTTPException(
            status_code=400,
            detail={"code": "invalid_user_data", "message": "Invalid user data"},
        ) from exc

    created = user_store.get_by_id(user_id)
    if created is None:
        raise HTTPException(
            status_code=500,
            detail={"code": "internal_error", "message": "User not found after write."},
        )
    logger.info("Registered user %s (id=%d)", created.user_name, created.id)
    return _session_response(created, status_code=201)


@limiter.limit(_login_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/user/login", response_model=UserResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with user name and password; start a session.

    Returns the same error for unknown user and wrong password to avoid
    leaking which user names exist.
    """
    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.user_name, body.password)
    if user is None:
        resp = JSONResponse(
            status_code=401,
            content={"error": {"code": "bad_credentials", "message": "Invalid username or password"}},
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    user_store.update_last_login(user.id)
    return _session_response(user)


@router.post("/user/logout", response_model=MessageResponse)
async def logout() -> JSONResponse:
    """Clear the session cookie."""
    resp = JSONResponse(content={"message": "Logged out successfully"})
    clear_auth_cookie(resp)
    return resp


@router.get("/user/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)) -> JSONResponse:
    """Return the account behind the current session."""
    return JSONResponse(content=UserResponse.from_user(current_user).model_dump(by_alias=True))


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------


@limiter.limit(_forgot_password_rate_limit)
@router.put("/user/forgot-password", response_model=MessageResponse)
def forgot_password(request: Request, body: ForgotPasswordRequest, background_tasks: BackgroundTasks) -> MessageResponse:
    """Issue a fresh reset token and email it to the account owner.

    Any token already pending is replaced. The email goes out as a background
    task after the response is sent; delivery failures are logged by the mailer.
    """
    user_store: UserStore = request.app.state.user_store
    mailer: Mailer = request.app.state.mailer

    user = user_store.get_by_email(body.email)
    if user is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "user_not_found", "message": "User not Found"},
        )

    token = generate_temp_password()
    user_store.set_temp_password(user.id, token, temp_password_expiry())
    background_tasks.add_task(mailer.send_forgot_password_mail, user.display_name, user.email, token)
    logger.info("Issued reset token for user id=%d", user.id)

    return MessageResponse(message="Reset password link has been sent to your mail")


@router.put("/user/new-password", response_model=UserResponse)
def new_password(request: Request, body: NewPasswordRequest) -> JSONResponse:
    """Consume a reset token: set the new password and start a session."""
    user_store: UserStore = request.app.state.user_store

    user = user_store.get_by_temp_password(body.temp_token)
    if user is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "invalid_temp_password", "message": "Please go to forgot password page, try again"},
        )

    if not user_store.reset_password(user.id, body.temp_token, hash_password(body.password)):
        # Another request consumed or replaced the token while this one was hashing.
        raise HTTPException(
            status_code=404,
            detail={"code": "invalid_temp_password", "message": "Please go to forgot password page, try again"},
        )
    logger.info("Password reset completed for user id=%d", user.id)
    return _session_response(user)


@router.get("/user/{token}", response_model=MessageResponse)
def check_temp_password(request: Request, token: str) -> MessageResponse:
    """Report whether a reset token is valid. Does not consume it."""
    user_store: UserStore = request.app.state.user_store
    if user_store.get_by_temp_password(token) is None:
        raise HTTPException(
            status_code=404,
            detail={
                "code": "invalid_temp_password",
                "message": "The temporary password you entered is incorrect, try again",
            },
        )
    return MessageResponse(message="The generated password is valid, you can set your new password.")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _session_response(user: User, status_code: int = 200) -> JSONResponse:
    """Build the user payload response and attach a fresh session cookie."""
    token = create_access_token(user.id, user.user_name)
    resp = JSONResponse(
        status_code=status_code,
        content=UserResponse.from_user(user).model_dump(by_alias=True),
    )
    set_auth_cookie(resp, token)
    resp.headers["Cache-Control"] = "no-store"
    return resp
