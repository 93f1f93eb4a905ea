import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from database import Base, get_db
from main import app
from models.member import Member
from models.subscription import Subscription
from models.user import User
from models.video import Video
from models.workspace import WorkSpace
from routers import rate_limit
from services.session_token import create_session_token


BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def auth_header(user_id: str, email: Optional[str] = None) -> dict:
    return {"Authorization": f"Bearer {create_session_token(user_id, email)['token']}"}


def make_user(user_id: str, *, plan: str = "FREE", first_view_enabled: bool = False, first_name: Optional[str] = None):
    user = User(
        id=user_id,
        external_auth_id=f"ext_{user_id}",
        email=f"{user_id}@example.com",
        first_name=first_name or user_id.title(),
        first_view_enabled=first_view_enabled,
    )
    subscription = Subscription(id=f"sub-{user_id}", user_id=user_id, plan=plan)
    return [user, subscription]


def make_workspace(workspace_id: str, owner_id: str, *, type_: str = "PUBLIC", name: Optional[str] = None):
    return WorkSpace(id=workspace_id, user_id=owner_id, name=name or f"{workspace_id} space", type=type_)


def make_member(user_id: str, workspace_id: str, role: str = "MEMBER", member_id: Optional[str] = None):
    return Member(id=member_id or f"m-{user_id}-{workspace_id}", user_id=user_id, work_space_id=workspace_id, role=role)


def make_video(video_id: str, owner_id: str, workspace_id: str, *, folder_id=None, views: int = 0, offset_minutes: int = 0):
    return Video(
        id=video_id,
        user_id=owner_id,
        work_space_id=workspace_id,
        folder_id=folder_id,
        title=f"Video {video_id}",
        description="demo",
        source=f"videos/{owner_id}/{uuid.uuid4()}.webm",
        processing=False,
        views=views,
        created_at=BASE_TIME + timedelta(minutes=offset_minutes),
    )


@pytest.fixture(autouse=True)
def reset_local_rate_limit_counters():
    """Keep in-memory rate-limit state isolated between tests."""
    previous = getattr(app.state, "disable_rate_limits", False)
    app.state.disable_rate_limits = True
    rate_limit._local_counters.clear()
    yield
    rate_limit._local_counters.clear()
    app.state.disable_rate_limits = previous


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    db_path = tmp_path / "video_workspace.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield maker
    await engine.dispose()


@pytest_asyncio.fixture
async def api_client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client, session_maker

    app.dependency_overrides.pop(get_db, None)
