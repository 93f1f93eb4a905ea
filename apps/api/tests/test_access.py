import pytest
import pytest_asyncio
from fastapi import HTTPException

from conftest import make_member, make_user, make_video, make_workspace
from models.member import Member
from models.video import Video
from services.access import (
    Principal,
    can_access_workspace,
    can_manage_members,
    can_modify_video,
    is_super_admin,
    require_workspace_access,
)


@pytest_asyncio.fixture
async def access_db(session_maker):
    async with session_maker() as session:
        for user_id in ("owner", "admin", "viewer", "outsider"):
            session.add_all(make_user(user_id))
        session.add(make_workspace("ws-team", "owner"))
        session.add(make_workspace("ws-personal", "owner", type_="PERSONAL"))
        session.add(make_member("owner", "ws-team", role="SUPER_ADMIN"))
        session.add(make_member("admin", "ws-team", role="ADMIN"))
        session.add(make_member("viewer", "ws-team", role="MEMBER"))
        session.add(make_video("vid-1", "viewer", "ws-team"))
        await session.commit()
        yield session


@pytest.mark.asyncio
async def test_workspace_access_is_owner_or_member(access_db):
    assert await can_access_workspace(Principal(user_id="owner"), "ws-team", access_db)
    assert await can_access_workspace(Principal(user_id="admin"), "ws-team", access_db)
    assert await can_access_workspace(Principal(user_id="viewer"), "ws-team", access_db)
    assert not await can_access_workspace(Principal(user_id="outsider"), "ws-team", access_db)


@pytest.mark.asyncio
async def test_personal_workspace_is_owner_only(access_db):
    assert await can_access_workspace(Principal(user_id="owner"), "ws-personal", access_db)
    assert not await can_access_workspace(Principal(user_id="viewer"), "ws-personal", access_db)


@pytest.mark.asyncio
async def test_access_fails_closed_without_principal_or_workspace(access_db):
    assert not await can_access_workspace(None, "ws-team", access_db)
    assert not await can_access_workspace(Principal(user_id=""), "ws-team", access_db)
    assert not await can_access_workspace(Principal(user_id="owner"), "ws-missing", access_db)


@pytest.mark.asyncio
async def test_manage_members_requires_admin_role(access_db):
    assert await can_manage_members(Principal(user_id="owner"), "ws-team", access_db)
    assert await can_manage_members(Principal(user_id="admin"), "ws-team", access_db)
    assert not await can_manage_members(Principal(user_id="viewer"), "ws-team", access_db)
    assert not await can_manage_members(Principal(user_id="outsider"), "ws-team", access_db)
    assert not await can_manage_members(None, "ws-team", access_db)


@pytest.mark.asyncio
async def test_video_modification_is_author_only(access_db):
    video = await access_db.get(Video, "vid-1")
    assert can_modify_video(Principal(user_id="viewer"), video)
    assert not can_modify_video(Principal(user_id="owner"), video)
    assert not can_modify_video(None, video)


@pytest.mark.asyncio
async def test_require_workspace_access_status_codes(access_db):
    with pytest.raises(HTTPException) as unauthenticated:
        await require_workspace_access(None, "ws-team", access_db)
    assert unauthenticated.value.status_code == 401

    with pytest.raises(HTTPException) as forbidden:
        await require_workspace_access(Principal(user_id="outsider"), "ws-team", access_db)
    assert forbidden.value.status_code == 403

    with pytest.raises(HTTPException) as missing:
        await require_workspace_access(Principal(user_id="owner"), "ws-missing", access_db)
    assert missing.value.status_code == 404


def test_is_super_admin():
    assert is_super_admin(Member(role="SUPER_ADMIN"))
    assert not is_super_admin(Member(role="ADMIN"))
