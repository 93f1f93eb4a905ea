"""Workspace, folder-listing, member and invite routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from routers.rate_limit import rate_limit
from services.access import require_workspace_access
from services.folders import create_folder, list_workspace_folders
from services.invites import invite_member
from services.members import list_members, remove_member
from services.videos import list_videos
from services.workspaces import create_workspace, list_workspaces, serialize_workspace

router = APIRouter()
logger = logging.getLogger(__name__)


class CreateWorkspaceRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)


class InviteMemberRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)


@router.get("")
async def get_workspaces(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Plan plus owned and shared workspaces for the sidebar."""
    return await list_workspaces(auth, db)


@router.post("", status_code=201)
async def post_workspace(
    request: CreateWorkspaceRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await create_workspace(auth, request.name, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to create workspace for user %s", auth.user_id)
        raise HTTPException(status_code=500, detail="Failed to create workspace.")


@router.get("/{workspace_id}")
async def verify_access_to_workspace(
    workspace_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    workspace = await require_workspace_access(auth, workspace_id, db)
    return {"workspace": serialize_workspace(workspace)}


@router.get("/{workspace_id}/folders")
async def get_workspace_folders(
    workspace_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await list_workspace_folders(auth, workspace_id, db)


@router.post("/{workspace_id}/folders", status_code=201)
async def post_workspace_folder(
    workspace_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await create_folder(auth, workspace_id, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to create folder in workspace %s", workspace_id)
        raise HTTPException(status_code=500, detail="Failed to create folder.")


@router.get("/{workspace_id}/videos")
async def get_workspace_videos(
    workspace_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await list_videos(auth, workspace_id, db)


@router.get("/{workspace_id}/members")
async def get_workspace_members(
    workspace_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await list_members(auth, workspace_id, db)


@router.delete("/{workspace_id}/members/{member_id}")
async def delete_workspace_member(
    workspace_id: str,
    member_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await remove_member(auth, workspace_id, member_id, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Member removal failed workspace=%s member=%s", workspace_id, member_id)
        raise HTTPException(status_code=500, detail="Failed to remove member.")


@router.post("/{workspace_id}/invite", status_code=201)
async def post_workspace_invite(
    workspace_id: str,
    request: InviteMemberRequest,
    _rate_limit: None = Depends(rate_limit("workspace_invite", limit=50, window_seconds=3600)),
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await invite_member(auth, workspace_id, request.email, db)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Invitation failed workspace=%s", workspace_id)
        raise HTTPException(status_code=500, detail="Failed to send invitation.")
