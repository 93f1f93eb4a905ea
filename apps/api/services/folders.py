"""Folder operations and derived video counts."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.folder import Folder
from models.video import Video
from services.access import Principal, require_folder_access, require_workspace_access


DEFAULT_FOLDER_NAME = "Untitled"


async def count_folder_videos(folder_id: str, db: AsyncSession) -> int:
    result = await db.execute(select(func.count(Video.id)).where(Video.folder_id == folder_id))
    return int(result.scalar() or 0)


def serialize_folder(folder: Folder, video_count: int) -> Dict[str, Any]:
    return {
        "id": folder.id,
        "name": folder.name,
        "workspace_id": folder.work_space_id,
        "video_count": int(video_count),
        "created_at": folder.created_at.isoformat() if folder.created_at else None,
    }


async def create_folder(
    principal: Optional[Principal],
    workspace_id: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    """Append an "Untitled" folder; repeated calls create repeated folders."""
    await require_workspace_access(principal, workspace_id, db)
    folder = Folder(id=str(uuid.uuid4()), work_space_id=workspace_id, name=DEFAULT_FOLDER_NAME)
    db.add(folder)
    await db.commit()
    await db.refresh(folder)
    return serialize_folder(folder, 0)


async def list_workspace_folders(
    principal: Optional[Principal],
    workspace_id: str,
    db: AsyncSession,
) -> List[Dict[str, Any]]:
    await require_workspace_access(principal, workspace_id, db)
    result = await db.execute(
        select(Folder, func.count(Video.id))
        .outerjoin(Video, Video.folder_id == Folder.id)
        .where(Folder.work_space_id == workspace_id)
        .group_by(Folder.id)
        .order_by(Folder.created_at.asc())
    )
    return [serialize_folder(folder, count) for folder, count in result.all()]


async def rename_folder(
    principal: Optional[Principal],
    folder_id: str,
    name: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    folder_name = str(name or "").strip()
    if not folder_name:
        raise HTTPException(status_code=422, detail="Folder name is required.")
    folder = await require_folder_access(principal, folder_id, db)
    folder.name = folder_name
    await db.commit()
    return serialize_folder(folder, await count_folder_videos(folder.id, db))


async def get_folder_info(
    principal: Optional[Principal],
    folder_id: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    """Folder name plus its current video count."""
    folder = await require_folder_access(principal, folder_id, db)
    return serialize_folder(folder, await count_folder_videos(folder.id, db))
