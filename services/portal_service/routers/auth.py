"""Password recovery and the development login bypass."""

import asyncio

from fastapi import APIRouter, Depends, HTTPException, Response, status
from libs.auth.middleware import DEV_BYPASS_COOKIE
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.supabase import get_supabase_admin_client, get_supabase_client

from services.portal_service.schemas import (
    ForgotPasswordRequest,
    MessageOnlyResponse,
    ResetPasswordRequest,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

MIN_PASSWORD_LENGTH = 8
DEV_BYPASS_MAX_AGE = 60 * 60


@router.post("/forgot-password", response_model=MessageOnlyResponse)
async def forgot_password(
    payload: ForgotPasswordRequest,
    supabase=Depends(get_supabase_client),
):
    """Send a Supabase recovery email that lands on the reset page."""
    redirect_to = f"{get_settings().FRONTEND_URL}/auth/reset"
    try:
        await asyncio.to_thread(
            supabase.auth.reset_password_for_email,
            payload.email,
            {"redirect_to": redirect_to},
        )
    except Exception as exc:
        logger.warning(
            "Password recovery request failed",
            extra={"extra_fields": {"error": str(exc)}},
        )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return MessageOnlyResponse(message="If the address is registered, a reset link is on its way")


@router.post("/reset-password", response_model=MessageOnlyResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    supabase=Depends(get_supabase_admin_client),
):
    """Set a new password for the user holding a recovery access token."""
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )

    try:
        user_response = await asyncio.to_thread(supabase.auth.get_user, payload.access_token)
    except Exception as exc:
        logger.info("Invalid recovery token", extra={"extra_fields": {"error": str(exc)}})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired reset link"
        )
    user = getattr(user_response, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired reset link"
        )

    try:
        await asyncio.to_thread(
            supabase.auth.admin.update_user_by_id, user.id, {"password": payload.password}
        )
    except Exception as exc:
        logger.error(
            "Password update failed",
            extra={"extra_fields": {"user_id": user.id, "error": str(exc)}},
        )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return MessageOnlyResponse(message="Password updated")


@router.post("/dev-login", response_model=MessageOnlyResponse)
async def dev_login(response: Response):
    """Let page requests through without Supabase for one hour. Never in production."""
    if get_settings().ENVIRONMENT == "production":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    response.set_cookie(
        DEV_BYPASS_COOKIE,
        "1",
        max_age=DEV_BYPASS_MAX_AGE,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return MessageOnlyResponse(message="Development login active")


@router.post("/logout", response_model=MessageOnlyResponse)
async def logout(response: Response):
    response.delete_cookie(DEV_BYPASS_COOKIE, path="/")
    return MessageOnlyResponse(message="Logged out")
