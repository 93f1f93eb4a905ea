"""Video routes: creation, preview, edits, first view, analytics and CTA clicks."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context, get_optional_auth_context
from routers.rate_limit import rate_limit
from services.analytics import (
    client_country_from_headers,
    client_ip_from_headers,
    get_video_analytics,
    record_cta_click,
    record_view_sample,
)
from services.first_view import send_email_for_first_view
from services.videos import (
    create_video,
    edit_video_info,
    get_preview_video,
    get_recent_videos,
    list_owner_videos,
    mark_video_processed,
    move_video,
    upsert_call_to_action,
)

router = APIRouter()
logger = logging.getLogger(__name__)


class CreateVideoRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    source: str = Field(min_length=1, max_length=2000)
    workspace_id: str
    folder_id: Optional[str] = None
    description: Optional[str] = None


class EditVideoRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = ""


class MoveVideoRequest(BaseModel):
    workspace_id: str
    folder_id: Optional[str] = None


class CallToActionRequest(BaseModel):
    button_text: str = Field(min_length=1, max_length=80)
    button_link: str = Field(min_length=1, max_length=2000)
    button_color: Optional[str] = None
    text_color: Optional[str] = None


class AnalyticsSampleRequest(BaseModel):
    watch_time: float = Field(ge=0)
    watch_percentage: float = Field(ge=0, le=100)


@router.post("", status_code=201)
async def post_video(
    request: CreateVideoRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await create_video(
            auth,
            title=request.title,
            source=request.source,
            workspace_id=request.workspace_id,
            folder_id=request.folder_id,
            description=request.description,
            db=db,
        )
    except HTTPException:
        raise
    except Exception:
        logger.exception("Video creation failed for user %s", auth.user_id)
        raise HTTPException(status_code=500, detail="Failed to create video.")


@router.get("")
async def get_videos(
    workspace_id: Optional[str] = Query(default=None),
    folder_id: Optional[str] = Query(default=None),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await list_owner_videos(auth, db, workspace_id=workspace_id, folder_id=folder_id)


@router.get("/recent")
async def get_recent(
    limit: int = Query(default=10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    """Public showcase of the newest videos."""
    return await get_recent_videos(db, limit=limit)


@router.get("/{video_id}/preview")
async def get_video_preview(
    video_id: str,
    auth: Optional[AuthContext] = Depends(get_optional_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await get_preview_video(auth, video_id, db)


@router.patch("/{video_id}")
async def patch_video(
    video_id: str,
    request: EditVideoRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await edit_video_info(auth, video_id, request.title, request.description, db)


@router.patch("/{video_id}/location")
async def patch_video_location(
    video_id: str,
    request: MoveVideoRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await move_video(auth, video_id, request.workspace_id, db, folder_id=request.folder_id)


@router.post("/{video_id}/processed")
async def post_video_processed(
    video_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await mark_video_processed(auth, video_id, db)


@router.put("/{video_id}/cta")
async def put_call_to_action(
    video_id: str,
    request: CallToActionRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await upsert_call_to_action(
        auth,
        video_id,
        db,
        button_text=request.button_text,
        button_link=request.button_link,
        button_color=request.button_color,
        text_color=request.text_color,
    )


@router.post("/{video_id}/first-view")
async def post_first_view(
    video_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await send_email_for_first_view(auth, video_id, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("First-view workflow failed for video %s", video_id)
        raise HTTPException(status_code=500, detail="Failed to record first view.")


@router.post("/{video_id}/analytics")
async def post_video_analytics(
    video_id: str,
    sample: AnalyticsSampleRequest,
    request: Request,
    _rate_limit: None = Depends(rate_limit("analytics_ingest", limit=1200, window_seconds=3600)),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Store one player beacon tagged with the viewer's IP and country."""
    peer = request.client.host if request.client else None
    try:
        return await record_view_sample(
            video_id,
            watch_time=sample.watch_time,
            watch_percentage=sample.watch_percentage,
            viewer_ip=client_ip_from_headers(request.headers, peer),
            viewer_country=client_country_from_headers(request.headers),
            db=db,
        )
    except HTTPException:
        raise
    except Exception:
        logger.exception("Analytics tracking failed for video %s", video_id)
        raise HTTPException(status_code=500, detail="Failed to record analytics.")


@router.get("/{video_id}/analytics")
async def get_analytics(
    video_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await get_video_analytics(auth, video_id, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Analytics fetch failed for video %s", video_id)
        raise HTTPException(status_code=500, detail="Failed to fetch analytics.")


@router.post("/{video_id}/cta-click")
async def post_cta_click(
    video_id: str,
    _rate_limit: None = Depends(rate_limit("cta_click", limit=600, window_seconds=3600)),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await record_cta_click(video_id, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("CTA click tracking failed for video %s", video_id)
        raise HTTPException(status_code=500, detail="Failed to record click.")
