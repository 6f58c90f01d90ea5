"""
Auth API routes — register, login, me.

Route prefix: /api/v1/auth
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Depends, status
from pydantic import BaseModel

from auth.dependencies import get_auth_service, get_notifier, require_identity
from auth.models import AuthenticatedIdentity, Credentials
from auth.notifier import Notifier, send_welcome
from auth.service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


# ── Response schemas ───────────────────────────────────────────────────


class UserOut(BaseModel):
    email: str
    identity_id: str


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
    data: UserOut


class LoginResponse(BaseModel):
    success: bool = True
    token: str


class IdentityResponse(BaseModel):
    success: bool = True
    data: AuthenticatedIdentity


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    req: Credentials,
    background_tasks: BackgroundTasks,
    service: AuthService = Depends(get_auth_service),
    notifier: Notifier = Depends(get_notifier),
) -> Dict[str, Any]:
    """Register a new user, then send the welcome notification."""
    user = await service.register(req)
    background_tasks.add_task(send_welcome, notifier, user.email)
    return {
        "success": True,
        "message": "Registration successful",
        "data": {"email": user.email, "identity_id": user.identity_id},
    }


@router.post("/login", response_model=LoginResponse)
async def login(
    req: Credentials,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Login with email + password."""
    token = await service.login(req)
    return {"success": True, "token": token}


@router.get("/me", response_model=IdentityResponse)
async def me(
    identity: AuthenticatedIdentity = Depends(require_identity),
) -> Dict[str, Any]:
    """Return the identity carried by the caller's token."""
    return {"success": True, "data": identity}
