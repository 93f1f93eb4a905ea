"""User provisioning from identity-provider claims and user settings."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.subscription import Subscription
from models.user import User
from models.workspace import WorkSpace
from services.access import WORKSPACE_PERSONAL, Principal, require_user
from services.identity import IdentityClaims

logger = logging.getLogger(__name__)

FREE_PLAN = "FREE"


def personal_workspace_name(user: User) -> str:
    owner = user.first_name or user.email.split("@", 1)[0]
    return f"{owner}'s Workspace"


async def get_personal_workspace(user_id: str, db: AsyncSession) -> Optional[WorkSpace]:
    result = await db.execute(
        select(WorkSpace)
        .where(WorkSpace.user_id == user_id, WorkSpace.type == WORKSPACE_PERSONAL)
        .order_by(WorkSpace.created_at.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def sync_identity_user(claims: IdentityClaims, db: AsyncSession) -> Dict[str, Any]:
    """Upsert the user for verified claims and provision first-sync defaults.

    First sync creates a FREE subscription and the single PERSONAL workspace;
    later syncs only refresh profile fields.
    """
    result = await db.execute(select(User).where(User.external_auth_id == claims.external_auth_id))
    user = result.scalar_one_or_none()
    created = False

    if not user:
        user = User(
            id=str(uuid.uuid4()),
            external_auth_id=claims.external_auth_id,
            email=claims.email,
            first_name=claims.first_name,
            last_name=claims.last_name,
            image=claims.image,
        )
        db.add(user)
        await db.flush()
        created = True
    else:
        user.email = claims.email
        if claims.first_name:
            user.first_name = claims.first_name
        if claims.last_name:
            user.last_name = claims.last_name
        if claims.image:
            user.image = claims.image

    subscription_result = await db.execute(select(Subscription).where(Subscription.user_id == user.id))
    if subscription_result.scalar_one_or_none() is None:
        db.add(Subscription(id=str(uuid.uuid4()), user_id=user.id, plan=FREE_PLAN))

    workspace = await get_personal_workspace(user.id, db)
    if workspace is None:
        workspace = WorkSpace(
            id=str(uuid.uuid4()),
            user_id=user.id,
            name=personal_workspace_name(user),
            type=WORKSPACE_PERSONAL,
        )
        db.add(workspace)

    await db.commit()
    await db.refresh(user)
    if created:
        logger.info("user_provisioned user=%s workspace=%s", user.id, workspace.id)

    return {"user": user, "personal_workspace_id": workspace.id, "created": created}


async def get_current_user_profile(principal: Optional[Principal], db: AsyncSession) -> Dict[str, Any]:
    user = await require_user(principal, db)
    subscription_result = await db.execute(select(Subscription.plan).where(Subscription.user_id == user.id))
    workspace = await get_personal_workspace(user.id, db)
    return {
        "user_id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "image": user.image,
        "role": user.role,
        "plan": subscription_result.scalar_one_or_none(),
        "first_view_enabled": bool(user.first_view_enabled),
        "personal_workspace_id": workspace.id if workspace else None,
    }


async def update_user_settings(
    principal: Optional[Principal],
    db: AsyncSession,
    *,
    first_view_enabled: bool,
) -> Dict[str, Any]:
    user = await require_user(principal, db)
    user.first_view_enabled = bool(first_view_enabled)
    await db.commit()
    return {"first_view_enabled": bool(user.first_view_enabled)}
