import pytest
from sqlalchemy.future import select

from conftest import auth_header, make_member, make_user, make_video, make_workspace
from models.folder import Folder
from models.member import Member
from models.video import Video
from models.workspace import WorkSpace


@pytest.mark.asyncio
async def test_pro_user_creates_public_workspace_as_super_admin(api_client):
    client, session_maker = api_client
    async with session_maker() as session:
        session.add_all(make_user("pro-user", plan="PRO"))
        await session.commit()

    response = await client.post("/workspaces", json={"name": "Launch Team"}, headers=auth_header("pro-user"))
    assert response.status_code == 201
    payload = response.json()
    assert payload["name"] == "Launch Team"
    assert payload["type"] == "PUBLIC"
    assert payload["owner_id"] == "pro-user"

    async with session_maker() as session:
        member = (
            await session.execute(select(Member).where(Member.work_space_id == payload["id"]))
        ).scalar_one()
        assert member.user_id == "pro-user"
        assert member.role == "SUPER_ADMIN"


@pytest.mark.asyncio
async def test_free_user_cannot_create_workspace(api_client):
    client, session_maker = api_client
    async with session_maker() as session:
        session.add_all(make_user("free-user"))
        await session.commit()

    response = await client.post("/workspaces", json={"name": "Nope"}, headers=auth_header("free-user"))
    assert response.status_code == 403
    assert response.json()["detail"] == "You are not authorized to create a workspace."

    async with session_maker() as session:
        workspaces = (await session.execute(select(WorkSpace))).scalars().all()
        assert workspaces == []


@pytest.mark.asyncio
async def test_workspace_routes_require_session_token(api_client):
    client, _ = api_client
    assert (await client.get("/workspaces")).status_code == 401
    assert (await client.post("/workspaces", json={"name": "x"})).status_code == 401


@pytest.mark.asyncio
async def test_list_workspaces_splits_owned_and_shared(api_client):
    client, session_maker = api_client
    async with session_maker() as session:
        session.add_all(make_user("owner", plan="PRO"))
        session.add_all(make_user("teammate"))
        session.add(make_workspace("ws-personal", "teammate", type_="PERSONAL"))
        session.add(make_workspace("ws-team", "owner"))
        session.add(make_member("owner", "ws-team", role="SUPER_ADMIN"))
        session.add(make_member("teammate", "ws-team"))
        await session.commit()

    response = await client.get("/workspaces", headers=auth_header("teammate"))
    assert response.status_code == 200
    payload = response.json()
    assert payload["plan"] == "FREE"
    assert [item["id"] for item in payload["workspaces"]] == ["ws-personal"]
    assert [item["id"] for item in payload["member_workspaces"]] == ["ws-team"]

    owner_view = (await client.get("/workspaces", headers=auth_header("owner"))).json()
    assert [item["id"] for item in owner_view["workspaces"]] == ["ws-team"]
    assert owner_view["member_workspaces"] == []


@pytest.mark.asyncio
async def test_verify_workspace_access(api_client):
    client, session_maker = api_client
    async with session_maker() as session:
        session.add_all(make_user("owner"))
        session.add_all(make_user("stranger"))
        session.add(make_workspace("ws-1", "owner", type_="PERSONAL"))
        await session.commit()

    allowed = await client.get("/workspaces/ws-1", headers=auth_header("owner"))
    assert allowed.status_code == 200
    assert allowed.json()["workspace"]["id"] == "ws-1"

    assert (await client.get("/workspaces/ws-1", headers=auth_header("stranger"))).status_code == 403
    assert (await client.get("/workspaces/ws-missing", headers=auth_header("owner"))).status_code == 404


@pytest.mark.asyncio
async def test_folder_create_rename_and_counts(api_client):
    client, session_maker = api_client
    async with session_maker() as session:
        session.add_all(make_user("owner"))
        session.add(make_workspace("ws-1", "owner", type_="PERSONAL"))
        await session.commit()

    headers = auth_header("owner")
    first = await client.post("/workspaces/ws-1/folders", headers=headers)
    second = await client.post("/workspaces/ws-1/folders", headers=headers)
    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["name"] == "Untitled"
    assert second.json()["name"] == "Untitled"
    assert first.json()["id"] != second.json()["id"]
    folder_id = first.json()["id"]

    async with session_maker() as session:
        session.add(make_video("vid-a", "owner", "ws-1", folder_id=folder_id))
        session.add(make_video("vid-b", "owner", "ws-1", folder_id=folder_id, offset_minutes=1))
        await session.commit()

    renamed = await client.patch(f"/folders/{folder_id}", json={"name": "  Demos  "}, headers=headers)
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Demos"
    assert renamed.json()["video_count"] == 2

    blank = await client.patch(f"/folders/{folder_id}", json={"name": "   "}, headers=headers)
    assert blank.status_code == 422

    info = await client.get(f"/folders/{folder_id}", headers=headers)
    assert info.status_code == 200
    assert info.json()["name"] == "Demos"
    assert info.json()["video_count"] == 2

    listing = await client.get("/workspaces/ws-1/folders", headers=headers)
    counts = {item["id"]: item["video_count"] for item in listing.json()}
    assert counts == {folder_id: 2, second.json()["id"]: 0}

    folder_videos = await client.get(f"/folders/{folder_id}/videos", headers=headers)
    assert [item["id"] for item in folder_videos.json()] == ["vid-a", "vid-b"]


@pytest.mark.asyncio
async def test_folder_access_is_scoped_to_workspace(api_client):
    client, session_maker = api_client
    async with session_maker() as session:
        session.add_all(make_user("owner"))
        session.add_all(make_user("stranger"))
        session.add(make_workspace("ws-1", "owner", type_="PERSONAL"))
        session.add(Folder(id="folder-1", work_space_id="ws-1", name="Private"))
        await session.commit()

    headers = auth_header("stranger")
    assert (await client.get("/folders/folder-1", headers=headers)).status_code == 403
    assert (await client.patch("/folders/folder-1", json={"name": "Mine"}, headers=headers)).status_code == 403
    assert (await client.post("/workspaces/ws-1/folders", headers=headers)).status_code == 403
    assert (await client.get("/folders/folder-missing", headers=auth_header("owner"))).status_code == 404


@pytest.mark.asyncio
async def test_workspace_video_listing_merges_folder_matches_once(api_client):
    client, session_maker = api_client
    async with session_maker() as session:
        session.add_all(make_user("owner"))
        session.add(make_workspace("ws-1", "owner"))
        session.add(make_workspace("ws-2", "owner"))
        # A folder whose id collides with the listed workspace id.
        session.add(Folder(id="ws-1", work_space_id="ws-2", name="Collision"))
        session.add(make_video("vid-late", "owner", "ws-1", offset_minutes=2))
        session.add(make_video("vid-early", "owner", "ws-1", offset_minutes=0))
        session.add(make_video("vid-folder", "owner", "ws-2", folder_id="ws-1", offset_minutes=1))
        session.add(make_video("vid-both", "owner", "ws-1", folder_id="ws-1", offset_minutes=3))
        session.add(make_video("vid-other", "owner", "ws-2", offset_minutes=4))
        await session.commit()

    response = await client.get("/workspaces/ws-1/videos", headers=auth_header("owner"))
    assert response.status_code == 200
    ids = [item["id"] for item in response.json()]
    assert ids == ["vid-early", "vid-folder", "vid-late", "vid-both"]
    assert response.json()[0]["author"]["id"] == "owner"


@pytest.mark.asyncio
async def test_move_video_without_folder_clears_folder(api_client):
    client, session_maker = api_client
    async with session_maker() as session:
        session.add_all(make_user("owner"))
        session.add(make_workspace("ws-1", "owner"))
        session.add(make_workspace("ws-2", "owner"))
        session.add(Folder(id="folder-1", work_space_id="ws-1", name="Drafts"))
        session.add(Folder(id="folder-2", work_space_id="ws-2", name="Final"))
        session.add(make_video("vid-1", "owner", "ws-1", folder_id="folder-1"))
        await session.commit()

    headers = auth_header("owner")
    moved = await client.patch("/videos/vid-1/location", json={"workspace_id": "ws-2"}, headers=headers)
    assert moved.status_code == 200
    assert moved.json()["workspace_id"] == "ws-2"
    assert moved.json()["folder_id"] is None

    filed = await client.patch(
        "/videos/vid-1/location",
        json={"workspace_id": "ws-2", "folder_id": "folder-2"},
        headers=headers,
    )
    assert filed.status_code == 200
    assert filed.json()["folder_id"] == "folder-2"

    mismatched = await client.patch(
        "/videos/vid-1/location",
        json={"workspace_id": "ws-2", "folder_id": "folder-1"},
        headers=headers,
    )
    assert mismatched.status_code == 404

    async with session_maker() as session:
        video = await session.get(Video, "vid-1")
        assert video.work_space_id == "ws-2"
        assert video.folder_id == "folder-2"
