"""Authorization gate for workspaces, folders, videos and members.

Every check takes the principal explicitly. A missing principal always fails
closed, and every ``require_*`` helper raises before the caller writes
anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.folder import Folder
from models.member import Member
from models.user import User
from models.video import Video
from models.workspace import WorkSpace


ROLE_MEMBER = "MEMBER"
ROLE_ADMIN = "ADMIN"
ROLE_SUPER_ADMIN = "SUPER_ADMIN"
MANAGER_ROLES = frozenset({ROLE_ADMIN, ROLE_SUPER_ADMIN})

WORKSPACE_PERSONAL = "PERSONAL"
WORKSPACE_PUBLIC = "PUBLIC"


@dataclass
class Principal:
    """Authenticated identity making a request."""

    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None


async def get_membership(user_id: str, workspace_id: str, db: AsyncSession) -> Optional[Member]:
    result = await db.execute(
        select(Member).where(
            Member.user_id == user_id,
            Member.work_space_id == workspace_id,
        )
    )
    return result.scalar_one_or_none()


async def can_access_workspace(
    principal: Optional[Principal],
    workspace_id: str,
    db: AsyncSession,
) -> bool:
    """True iff the principal owns the workspace or is one of its members."""
    if principal is None or not principal.user_id:
        return False

    result = await db.execute(select(WorkSpace.user_id).where(WorkSpace.id == workspace_id))
    owner_id = result.scalar_one_or_none()
    if owner_id is None:
        return False
    if owner_id == principal.user_id:
        return True
    return await get_membership(principal.user_id, workspace_id, db) is not None


async def can_manage_members(
    principal: Optional[Principal],
    workspace_id: str,
    db: AsyncSession,
) -> bool:
    """True iff the principal's role in the workspace is ADMIN or SUPER_ADMIN."""
    if principal is None or not principal.user_id:
        return False
    membership = await get_membership(principal.user_id, workspace_id, db)
    return membership is not None and membership.role in MANAGER_ROLES


def can_modify_video(principal: Optional[Principal], video: Video) -> bool:
    if principal is None or not principal.user_id:
        return False
    return principal.user_id == video.user_id


def is_super_admin(member: Member) -> bool:
    return member.role == ROLE_SUPER_ADMIN


def require_principal(principal: Optional[Principal]) -> Principal:
    if principal is None or not principal.user_id:
        raise HTTPException(status_code=401, detail="Authentication required.")
    return principal


async def require_user(principal: Optional[Principal], db: AsyncSession) -> User:
    """Load the principal's user row or reject with 404."""
    scoped = require_principal(principal)
    result = await db.execute(select(User).where(User.id == scoped.user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def require_workspace_access(
    principal: Optional[Principal],
    workspace_id: str,
    db: AsyncSession,
) -> WorkSpace:
    scoped = require_principal(principal)
    result = await db.execute(select(WorkSpace).where(WorkSpace.id == workspace_id))
    workspace = result.scalar_one_or_none()
    if not workspace:
        raise HTTPException(status_code=404, detail="Workspace not found")
    if not await can_access_workspace(scoped, workspace_id, db):
        raise HTTPException(status_code=403, detail="You do not have access to this workspace.")
    return workspace


async def require_folder_access(
    principal: Optional[Principal],
    folder_id: str,
    db: AsyncSession,
) -> Folder:
    scoped = require_principal(principal)
    result = await db.execute(select(Folder).where(Folder.id == folder_id))
    folder = result.scalar_one_or_none()
    if not folder:
        raise HTTPException(status_code=404, detail="Folder not found")
    if not await can_access_workspace(scoped, folder.work_space_id, db):
        raise HTTPException(status_code=403, detail="You do not have access to this folder.")
    return folder


async def require_video(video_id: str, db: AsyncSession) -> Video:
    result = await db.execute(select(Video).where(Video.id == video_id))
    video = result.scalar_one_or_none()
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    return video


async def require_video_access(
    principal: Optional[Principal],
    video_id: str,
    db: AsyncSession,
) -> Video:
    scoped = require_principal(principal)
    video = await require_video(video_id, db)
    if not can_modify_video(scoped, video) and not await can_access_workspace(scoped, video.work_space_id, db):
        raise HTTPException(status_code=403, detail="You do not have access to this video.")
    return video


async def require_video_owner(
    principal: Optional[Principal],
    video_id: str,
    db: AsyncSession,
) -> Video:
    scoped = require_principal(principal)
    video = await require_video(video_id, db)
    if not can_modify_video(scoped, video):
        raise HTTPException(status_code=403, detail="Only the video author can modify this video.")
    return video


async def require_member_manager(
    principal: Optional[Principal],
    workspace_id: str,
    db: AsyncSession,
) -> None:
    scoped = require_principal(principal)
    if not await can_manage_members(scoped, workspace_id, db):
        raise HTTPException(status_code=403, detail="Forbidden")
