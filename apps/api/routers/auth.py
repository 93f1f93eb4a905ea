"""
Authentication router for identity-provider session sync and user profile.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from routers.rate_limit import rate_limit
from services.identity import verify_identity_token
from services.session_token import create_session_token
from services.users import get_current_user_profile, sync_identity_user, update_user_settings

router = APIRouter()
logger = logging.getLogger(__name__)


class SyncIdentityRequest(BaseModel):
    identity_token: str = Field(min_length=1)


class SyncIdentityResponse(BaseModel):
    user_id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image: Optional[str] = None
    personal_workspace_id: str
    created: bool
    session_token: str
    session_expires_at: int


class CurrentUserResponse(BaseModel):
    user_id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image: Optional[str] = None
    role: str
    plan: Optional[str] = None
    first_view_enabled: bool = False
    personal_workspace_id: Optional[str] = None


class UserSettingsRequest(BaseModel):
    first_view_enabled: bool


@router.post("/sync", response_model=SyncIdentityResponse)
async def sync_identity_session(
    request: SyncIdentityRequest,
    _rate_limit: None = Depends(rate_limit("auth_sync", limit=60, window_seconds=3600)),
    db: AsyncSession = Depends(get_db),
):
    """
    Exchange an identity-provider token for a backend session, provisioning the user on first sign-in.
    """
    try:
        claims = verify_identity_token(request.identity_token)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    try:
        synced = await sync_identity_user(claims, db)
    except Exception:
        logger.exception("Identity sync failed for external id %s", claims.external_auth_id)
        raise HTTPException(status_code=500, detail="Failed to sync user.")

    user = synced["user"]
    session = create_session_token(user.id, user.email, user.display_name)
    return SyncIdentityResponse(
        user_id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        image=user.image,
        personal_workspace_id=synced["personal_workspace_id"],
        created=synced["created"],
        session_token=session["token"],
        session_expires_at=session["expires_at"],
    )


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Get current user profile, plan and personal workspace."""
    return CurrentUserResponse(**await get_current_user_profile(auth, db))


@router.put("/me/settings")
async def update_settings(
    request: UserSettingsRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Toggle the first-view notification preference."""
    return await update_user_settings(auth, db, first_view_enabled=request.first_view_enabled)


@router.post("/logout")
async def logout(_auth: AuthContext = Depends(get_auth_context)):
    """Frontend-managed logout acknowledgment endpoint."""
    return {"message": "Logged out successfully"}
