"""Workspace creation and listing."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from models.member import Member
from models.subscription import Subscription
from models.workspace import WorkSpace
from services.access import (
    ROLE_SUPER_ADMIN,
    WORKSPACE_PUBLIC,
    Principal,
    require_user,
)

logger = logging.getLogger(__name__)


def serialize_workspace(workspace: WorkSpace) -> Dict[str, Any]:
    return {
        "id": workspace.id,
        "name": workspace.name,
        "type": workspace.type,
        "owner_id": workspace.user_id,
        "created_at": workspace.created_at.isoformat() if workspace.created_at else None,
    }


async def get_subscription_plan(user_id: str, db: AsyncSession) -> Optional[str]:
    result = await db.execute(select(Subscription.plan).where(Subscription.user_id == user_id))
    return result.scalar_one_or_none()


async def create_workspace(
    principal: Optional[Principal],
    name: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    """Create a shared workspace for a paid-plan principal."""
    user = await require_user(principal, db)
    workspace_name = str(name or "").strip()
    if not workspace_name:
        raise HTTPException(status_code=422, detail="Workspace name is required.")

    plan = await get_subscription_plan(user.id, db)
    if plan != settings.PAID_PLAN:
        raise HTTPException(status_code=403, detail="You are not authorized to create a workspace.")

    workspace = WorkSpace(
        id=str(uuid.uuid4()),
        user_id=user.id,
        name=workspace_name,
        type=WORKSPACE_PUBLIC,
    )
    db.add(workspace)
    await db.flush()
    db.add(
        Member(
            id=str(uuid.uuid4()),
            user_id=user.id,
            work_space_id=workspace.id,
            role=ROLE_SUPER_ADMIN,
        )
    )
    await db.commit()
    await db.refresh(workspace)
    logger.info("workspace_created user=%s workspace=%s", user.id, workspace.id)
    return serialize_workspace(workspace)


async def list_workspaces(principal: Optional[Principal], db: AsyncSession) -> Dict[str, Any]:
    """Return the principal's plan, owned workspaces and shared memberships."""
    user = await require_user(principal, db)

    owned_result = await db.execute(
        select(WorkSpace).where(WorkSpace.user_id == user.id).order_by(WorkSpace.created_at.asc())
    )
    owned = owned_result.scalars().all()
    owned_ids = {workspace.id for workspace in owned}

    member_result = await db.execute(
        select(WorkSpace)
        .join(Member, Member.work_space_id == WorkSpace.id)
        .where(Member.user_id == user.id)
        .order_by(WorkSpace.created_at.asc())
    )
    shared = [workspace for workspace in member_result.scalars().all() if workspace.id not in owned_ids]

    return {
        "plan": await get_subscription_plan(user.id, db),
        "workspaces": [serialize_workspace(workspace) for workspace in owned],
        "member_workspaces": [serialize_workspace(workspace) for workspace in shared],
    }
