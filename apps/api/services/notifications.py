"""In-app notification helpers."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.notification import Notification
from services.access import Principal, require_principal


def add_notification(user_id: str, content: str, db: AsyncSession) -> Notification:
    """Stage a notification on the session; the caller commits."""
    notification = Notification(id=str(uuid.uuid4()), user_id=user_id, content=content)
    db.add(notification)
    return notification


def serialize_notification(notification: Notification) -> Dict[str, Any]:
    return {
        "id": notification.id,
        "content": notification.content,
        "created_at": notification.created_at.isoformat() if notification.created_at else None,
    }


async def list_notifications(
    principal: Optional[Principal],
    db: AsyncSession,
    limit: int = 50,
) -> List[Dict[str, Any]]:
    scoped = require_principal(principal)
    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == scoped.user_id)
        .order_by(Notification.created_at.desc())
        .limit(max(1, min(int(limit), 200)))
    )
    return [serialize_notification(row) for row in result.scalars().all()]
