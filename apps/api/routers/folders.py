"""Folder routes."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from routers.auth_scope import AuthContext, get_auth_context
from services.folders import get_folder_info, rename_folder
from services.videos import list_folder_videos

router = APIRouter()


class RenameFolderRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)


@router.get("/{folder_id}")
async def get_folder(
    folder_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Folder name and video count."""
    return await get_folder_info(auth, folder_id, db)


@router.patch("/{folder_id}")
async def patch_folder(
    folder_id: str,
    request: RenameFolderRequest,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await rename_folder(auth, folder_id, request.name, db)


@router.get("/{folder_id}/videos")
async def get_folder_videos(
    folder_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    return await list_folder_videos(auth, folder_id, db)
