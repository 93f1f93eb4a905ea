"""Workspace invitation workflow."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from models.invite import Invite
from models.user import User
from models.workspace import WorkSpace
from services.access import Principal, get_membership, require_member_manager, require_user
from services.mailer import MAIL_DISABLED, MAIL_SENT, send_email
from services.notifications import add_notification

logger = logging.getLogger(__name__)

INVITE_SUBJECT = "You got an invitation"


def invite_content(workspace_name: str) -> str:
    return f"You are invited to join {workspace_name} Workspace, click accept to confirm"


def invite_accept_url(invite_id: str) -> str:
    return f"{settings.APP_HOST_URL.rstrip('/')}/invite/{invite_id}"


def invite_email_html(invite_id: str) -> str:
    return (
        f'<a href="{invite_accept_url(invite_id)}" '
        'style="background-color: #000; color: #fff; padding: 5px 10px; border-radius: 10px;">'
        "Accept Invite</a>"
    )


async def invite_member(
    principal: Optional[Principal],
    workspace_id: str,
    email: str,
    db: AsyncSession,
) -> Dict[str, Any]:
    """Create an invite, notify the sender and mail the invitee.

    Mail delivery is decoupled from the invite: a disabled or failing
    transport still leaves the invite in place.
    """
    sender = await require_user(principal, db)

    workspace_result = await db.execute(select(WorkSpace).where(WorkSpace.id == workspace_id))
    workspace = workspace_result.scalar_one_or_none()
    if not workspace:
        raise HTTPException(status_code=404, detail="Workspace not found")

    await require_member_manager(principal, workspace_id, db)

    invited_email = str(email or "").strip().lower()
    receiver_result = await db.execute(select(User).where(User.email == invited_email))
    receiver = receiver_result.scalar_one_or_none()
    if not receiver:
        raise HTTPException(status_code=404, detail="User not found")

    if receiver.id == workspace.user_id or await get_membership(receiver.id, workspace_id, db):
        raise HTTPException(status_code=409, detail="User is already a member")

    content = invite_content(workspace.name)
    invite = Invite(
        id=str(uuid.uuid4()),
        sender_id=sender.id,
        receiver_id=receiver.id,
        work_space_id=workspace.id,
        content=content,
    )
    db.add(invite)
    add_notification(
        sender.id,
        f"{sender.display_name} invited {receiver.display_name} into {workspace.name}",
        db,
    )
    await db.commit()
    logger.info("invite_created sender=%s receiver=%s workspace=%s", sender.id, receiver.id, workspace.id)

    mail = await send_email(invited_email, INVITE_SUBJECT, content, invite_email_html(invite.id))
    if mail.status == MAIL_SENT:
        detail = "Invite sent"
    elif mail.status == MAIL_DISABLED:
        detail = "Invite created but email notification is disabled"
    else:
        logger.warning("Invite %s mail delivery failed: %s", invite.id, mail.error)
        detail = "Invite created but email delivery failed"

    return {
        "status": "success",
        "detail": detail,
        "email_status": mail.status,
        "invite": {
            "id": invite.id,
            "sender_id": invite.sender_id,
            "receiver_id": invite.receiver_id,
            "workspace_id": invite.work_space_id,
            "content": invite.content,
        },
    }
