"""Workspace member listing and removal."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from models.member import Member
from services.access import (
    Principal,
    is_super_admin,
    require_member_manager,
    require_workspace_access,
)

logger = logging.getLogger(__name__)


def serialize_member(member: Member) -> Dict[str, Any]:
    user = member.user
    return {
        "id": member.id,
        "user_id": member.user_id,
        "email": user.email if user else None,
        "name": user.display_name if user else None,
        "role": member.role,
    }


async def list_members(
    principal: Optional[Principal],
    workspace_id: str,
    db: AsyncSession,
) -> List[Dict[str, Any]]:
    await require_workspace_access(principal, workspace_id, db)
    result = await db.execute(
        select(Member)
        .options(selectinload(Member.user))
        .where(Member.work_space_id == workspace_id)
        .order_by(Member.created_at.asc())
    )
    return [serialize_member(member) for member in result.scalars().all()]


async def remove_member(
    principal: Optional[Principal],
    workspace_id: str,
    member_id: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    """Delete one membership row; SUPER_ADMIN members can never be removed."""
    await require_member_manager(principal, workspace_id, db)

    result = await db.execute(
        select(Member).where(
            Member.id == member_id,
            Member.work_space_id == workspace_id,
        )
    )
    member = result.scalar_one_or_none()
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    if is_super_admin(member):
        raise HTTPException(status_code=403, detail="Cannot remove SUPER_ADMIN")

    await db.delete(member)
    await db.commit()
    logger.info("member_removed workspace=%s member=%s by=%s", workspace_id, member_id, principal.user_id)
    return {"success": True}
