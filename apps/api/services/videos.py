"""Video listing, preview and edit operations."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from models.call_to_action import CallToAction
from models.folder import Folder
from models.user import User
from models.video import Video
from services.access import (
    Principal,
    can_modify_video,
    require_folder_access,
    require_principal,
    require_video,
    require_video_access,
    require_video_owner,
    require_workspace_access,
)

logger = logging.getLogger(__name__)

RECENT_VIDEOS_LIMIT = 10


def _serialize_author(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "image": user.image,
    }


def serialize_call_to_action(cta: Optional[CallToAction]) -> Optional[Dict[str, Any]]:
    if cta is None:
        return None
    return {
        "id": cta.id,
        "button_text": cta.button_text,
        "button_link": cta.button_link,
        "button_color": cta.button_color,
        "text_color": cta.text_color,
        "clicks": int(cta.clicks or 0),
    }


def _loaded_relation(instance: Any, name: str) -> Any:
    if name in inspect(instance).unloaded:
        return None
    return getattr(instance, name)


def serialize_video(video: Video) -> Dict[str, Any]:
    folder = _loaded_relation(video, "folder")
    return {
        "id": video.id,
        "title": video.title,
        "description": video.description,
        "source": video.source,
        "thumbnail": video.thumbnail,
        "processing": bool(video.processing),
        "views": int(video.views or 0),
        "workspace_id": video.work_space_id,
        "folder_id": video.folder_id,
        "folder": {"id": folder.id, "name": folder.name} if folder is not None else None,
        "author": _serialize_author(_loaded_relation(video, "user")),
        "created_at": video.created_at.isoformat() if video.created_at else None,
    }


def _listing_query():
    return select(Video).options(selectinload(Video.folder), selectinload(Video.user))


async def list_videos_by_workspace(workspace_id: str, db: AsyncSession) -> List[Video]:
    result = await db.execute(
        _listing_query().where(Video.work_space_id == workspace_id).order_by(Video.created_at.asc())
    )
    return list(result.scalars().all())


async def list_videos_by_folder(folder_id: str, db: AsyncSession) -> List[Video]:
    result = await db.execute(
        _listing_query().where(Video.folder_id == folder_id).order_by(Video.created_at.asc())
    )
    return list(result.scalars().all())


async def list_videos(
    principal: Optional[Principal],
    workspace_id: str,
    db: AsyncSession,
) -> List[Dict[str, Any]]:
    """Videos in the workspace plus any filed under a folder with the same id."""
    await require_workspace_access(principal, workspace_id, db)
    merged: Dict[str, Video] = {}
    for video in await list_videos_by_workspace(workspace_id, db):
        merged[video.id] = video
    for video in await list_videos_by_folder(workspace_id, db):
        merged.setdefault(video.id, video)
    ordered = sorted(merged.values(), key=lambda item: (item.created_at is None, item.created_at))
    return [serialize_video(video) for video in ordered]


async def list_folder_videos(
    principal: Optional[Principal],
    folder_id: str,
    db: AsyncSession,
) -> List[Dict[str, Any]]:
    await require_folder_access(principal, folder_id, db)
    return [serialize_video(video) for video in await list_videos_by_folder(folder_id, db)]


async def list_owner_videos(
    principal: Optional[Principal],
    db: AsyncSession,
    workspace_id: Optional[str] = None,
    folder_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """The principal's own videos, newest first, with their CTA."""
    scoped = require_principal(principal)
    query = (
        select(Video)
        .options(selectinload(Video.call_to_action), selectinload(Video.folder))
        .where(Video.user_id == scoped.user_id)
    )
    if workspace_id:
        query = query.where(Video.work_space_id == workspace_id)
    if folder_id:
        query = query.where(Video.folder_id == folder_id)
    result = await db.execute(query.order_by(Video.created_at.desc()))

    payload = []
    for video in result.scalars().all():
        item = serialize_video(video)
        item["call_to_action"] = serialize_call_to_action(video.call_to_action)
        payload.append(item)
    return payload


async def _require_folder_in_workspace(folder_id: str, workspace_id: str, db: AsyncSession) -> Folder:
    result = await db.execute(
        select(Folder).where(Folder.id == folder_id, Folder.work_space_id == workspace_id)
    )
    folder = result.scalar_one_or_none()
    if not folder:
        raise HTTPException(status_code=404, detail="Folder not found in workspace")
    return folder


async def create_video(
    principal: Optional[Principal],
    *,
    title: str,
    source: str,
    workspace_id: str,
    db: AsyncSession,
    folder_id: Optional[str] = None,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """Register an uploaded video; it stays ``processing`` until ingestion completes."""
    scoped = require_principal(principal)
    clean_title = str(title or "").strip()
    clean_source = str(source or "").strip()
    if not clean_title or not clean_source:
        raise HTTPException(status_code=422, detail="title and source are required.")

    await require_workspace_access(scoped, workspace_id, db)
    if folder_id:
        await _require_folder_in_workspace(folder_id, workspace_id, db)

    video = Video(
        id=str(uuid.uuid4()),
        user_id=scoped.user_id,
        work_space_id=workspace_id,
        folder_id=folder_id or None,
        title=clean_title,
        description=(description or "").strip() or "No Description",
        source=clean_source,
        processing=True,
        views=0,
    )
    db.add(video)
    await db.commit()
    await db.refresh(video)
    logger.info("video_created user=%s video=%s workspace=%s", scoped.user_id, video.id, workspace_id)
    return serialize_video(video)


async def mark_video_processed(
    principal: Optional[Principal],
    video_id: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    video = await require_video_owner(principal, video_id, db)
    video.processing = False
    await db.commit()
    return serialize_video(video)


async def get_preview_video(
    principal: Optional[Principal],
    video_id: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    """Video detail plus ``author`` telling the caller whether they own it.

    Anonymous callers get a 404 even when the video exists.
    """
    if principal is None or not principal.user_id:
        raise HTTPException(status_code=404, detail="Video not found")

    result = await db.execute(
        select(Video)
        .options(selectinload(Video.user).selectinload(User.subscription))
        .where(Video.id == video_id)
    )
    video = result.scalar_one_or_none()
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")

    payload = serialize_video(video)
    owner = video.user
    if owner is not None and payload["author"] is not None:
        payload["author"]["plan"] = owner.subscription.plan if owner.subscription else None
    return {"video": payload, "author": can_modify_video(principal, video)}


async def edit_video_info(
    principal: Optional[Principal],
    video_id: str,
    title: str,
    description: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    require_principal(principal)
    video = await require_video(video_id, db)
    if not can_modify_video(principal, video):
        raise HTTPException(status_code=403, detail="Only the video author can edit this video.")

    clean_title = str(title or "").strip()
    if not clean_title:
        raise HTTPException(status_code=422, detail="Title is required.")
    video.title = clean_title
    video.description = str(description or "")
    await db.commit()
    return serialize_video(video)


async def move_video(
    principal: Optional[Principal],
    video_id: str,
    workspace_id: str,
    db: AsyncSession,
    folder_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Reassign a video's workspace; a missing ``folder_id`` clears the folder."""
    video = await require_video_access(principal, video_id, db)
    await require_workspace_access(principal, workspace_id, db)
    if folder_id:
        await _require_folder_in_workspace(folder_id, workspace_id, db)

    video.work_space_id = workspace_id
    video.folder_id = folder_id or None
    await db.commit()
    return serialize_video(video)


async def upsert_call_to_action(
    principal: Optional[Principal],
    video_id: str,
    db: AsyncSession,
    *,
    button_text: str,
    button_link: str,
    button_color: Optional[str] = None,
    text_color: Optional[str] = None,
) -> Dict[str, Any]:
    """Create or edit the video's CTA overlay without touching its click count."""
    video = await require_video_owner(principal, video_id, db)
    result = await db.execute(select(CallToAction).where(CallToAction.video_id == video.id))
    cta = result.scalar_one_or_none()
    if cta is None:
        cta = CallToAction(id=str(uuid.uuid4()), video_id=video.id, clicks=0)
        db.add(cta)

    cta.button_text = button_text
    cta.button_link = button_link
    if button_color:
        cta.button_color = button_color
    elif not cta.button_color:
        cta.button_color = "#000000"
    if text_color:
        cta.text_color = text_color
    elif not cta.text_color:
        cta.text_color = "#ffffff"
    await db.commit()
    await db.refresh(cta)
    return serialize_call_to_action(cta)


async def get_recent_videos(db: AsyncSession, limit: int = RECENT_VIDEOS_LIMIT) -> List[Dict[str, Any]]:
    """Newest videos across the platform for the public showcase."""
    result = await db.execute(
        _listing_query().order_by(Video.created_at.desc()).limit(max(1, min(int(limit), 50)))
    )
    return [serialize_video(video) for video in result.scalars().all()]
