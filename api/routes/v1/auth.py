"""
api/routes/v1/auth.py -- Login, registration and admin-check endpoints.

Routes:
  POST /api/v1/auth/login                  -- email/password/app_id -> signed token
  POST /api/v1/auth/register               -- email/password -> new user id
  GET  /api/v1/auth/users/{user_id}/admin  -- admin flag for a user

Error mapping:
  InvalidCredentialsError -> 401 invalid_credentials. Same body for unknown
      email and wrong password; do not add detail that tells them apart.
  Any other AuthServiceError -> 500 internal_error with a fixed, generic
      message. The service error text (which names the failing step) is
      logged, never returned.
  Body validation is handled by Pydantic -> 422 (see api/main.py).
"""

from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Path, Request
from fastapi.responses import JSONResponse

from api.models import (
    MAX_ID,
    IsAdminResponse,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from auth.errors import AuthServiceError, InvalidCredentialsError
from auth.service import AuthService

logger = logging.getLogger("sso.api")

router = APIRouter()


def get_auth_service(request: Request) -> AuthService:
    """Return the AuthService built at startup (see api/main.py lifespan)."""
    return request.app.state.auth_service


def _raise_for(err: AuthServiceError, message: str) -> NoReturn:
    """Translate a service error into an HTTPException carrying only its category."""
    if isinstance(err, InvalidCredentialsError):
        raise HTTPException(
            status_code=401,
            detail={"code": err.code, "message": "Invalid email or password."},
        ) from err
    logger.error("%s (%s)", err, type(err).__name__)
    raise HTTPException(
        status_code=500,
        detail={"code": "internal_error", "message": message},
    ) from err


@router.post("/auth/login", response_model=LoginResponse)
async def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)) -> JSONResponse:
    """Authenticate with email and password; return a token bound to app_id."""
    try:
        token = await service.login(body.email, body.password, body.app_id)
    except AuthServiceError as err:
        _raise_for(err, "failed to login")

    resp = JSONResponse(content=LoginResponse(token=token).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
async def register(body: RegisterRequest, service: AuthService = Depends(get_auth_service)) -> RegisterResponse:
    try:
        user_id = await service.register(body.email, body.password)
    except AuthServiceError as err:
        _raise_for(err, "failed to register")
    return RegisterResponse(user_id=user_id)


@router.get("/auth/users/{user_id}/admin", response_model=IsAdminResponse)
async def is_admin(
    user_id: int = Path(gt=0, le=MAX_ID),
    service: AuthService = Depends(get_auth_service),
) -> IsAdminResponse:
    try:
        flag = await service.is_admin(user_id)
    except AuthServiceError as err:
        _raise_for(err, "failed to check admin status")
    return IsAdminResponse(is_admin=flag)
