"""First-view notification workflow.

A video moves from UNVIEWED (views == 0) to VIEWED exactly once. The
transition is a conditional UPDATE, so concurrent callers cannot both win it,
and the owner is told through mail or, when mail is unavailable, an in-app
notification written before the call returns.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.user import User
from models.video import Video
from services.access import Principal, require_principal, require_video
from services.mailer import MAIL_DISABLED, MAIL_SENT, send_email
from services.notifications import add_notification

logger = logging.getLogger(__name__)

FIRST_VIEW_SUBJECT = "You got a viewer"


def first_view_message(title: str) -> str:
    return f"Your video {title} just got its first viewer"


async def _claim_first_view(video_id: str, db: AsyncSession) -> bool:
    result = await db.execute(
        update(Video)
        .where(Video.id == video_id, Video.views == 0)
        .values(views=Video.views + 1)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount == 1


async def send_email_for_first_view(
    principal: Optional[Principal],
    video_id: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    """Count the first view of a video and tell its owner.

    With mail disabled only an in-app notification is written; a sent mail is
    also recorded as a notification once the send has been awaited.
    """
    scoped = require_principal(principal)
    caller_result = await db.execute(select(User.first_view_enabled).where(User.id == scoped.user_id))
    first_view_enabled = caller_result.scalar_one_or_none()
    if first_view_enabled is None:
        raise HTTPException(status_code=404, detail="User not found")
    if not first_view_enabled:
        return {"status": "skipped", "reason": "first_view_disabled", "channel": None}

    video = await require_video(video_id, db)
    if int(video.views or 0) != 0:
        return {"status": "skipped", "reason": "already_viewed", "channel": None}

    if not await _claim_first_view(video.id, db):
        return {"status": "skipped", "reason": "already_viewed", "channel": None}

    owner_result = await db.execute(select(User).where(User.id == video.user_id))
    owner = owner_result.scalar_one_or_none()
    if owner is None:
        logger.warning("First view on video %s has no owner row", video.id)
        return {"status": "viewed", "channel": None}

    message = first_view_message(video.title)
    mail = await send_email(owner.email, FIRST_VIEW_SUBJECT, message)

    if mail.status == MAIL_DISABLED:
        add_notification(owner.id, message, db)
        await db.commit()
        return {"status": "viewed", "channel": "notification"}

    if mail.status == MAIL_SENT:
        add_notification(owner.id, message, db)
        await db.commit()
        return {"status": "viewed", "channel": "email"}

    logger.error("First-view mail for video %s failed: %s", video.id, mail.error)
    return {"status": "viewed", "channel": None, "error": "email_failed"}
