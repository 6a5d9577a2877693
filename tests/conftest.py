"""Shared test fixtures — one in-memory SQLite DB per test."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import selectinload
# A single shared connection so every session sees the same in-memory database
from sqlalchemy.pool import StaticPool

from config.settings import settings
from src.db.abuse_tables import VideoAbuseRow
from src.db.engine import get_session
from src.db.tables import (
    AccountBlocklistRow, AccountRow, Base, VideoBlacklistRow, VideoChannelRow, VideoRow,
)
from src.models.abuse import VideoAbuseState
from src.services.video_snapshot import build_video_snapshot

TEST_DB_URL = "sqlite+aiosqlite://"
SERVER_ACCOUNT_ID = 1
ADMIN_KEY = "test-admin-key"
BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class Seed:
    """Helpers for building accounts, channels, videos and abuses."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._ticks = 0

    def _next_time(self) -> datetime:
        self._ticks += 1
        return BASE_TIME + timedelta(minutes=self._ticks)

    async def account(self, username: str, display_name: str | None = None, host: str | None = None) -> AccountRow:
        row = AccountRow(username=username, display_name=display_name or username.title(), host=host)
        self.session.add(row)
        await self.session.commit()
        return row

    async def channel(self, owner: AccountRow, username: str, display_name: str | None = None) -> VideoChannelRow:
        row = VideoChannelRow(username=username, display_name=display_name or username.title(), account_id=owner.id)
        self.session.add(row)
        await self.session.commit()
        return row

    async def video(
        self, channel: VideoChannelRow, name: str, nsfw: bool = False, thumbnail: str | None = "thumb.jpg",
    ) -> VideoRow:
        row = VideoRow(
            name=name,
            nsfw=nsfw,
            url=f"https://videos.example/w/{name.replace(' ', '-').lower()}",
            thumbnail_filename=thumbnail,
            channel_id=channel.id,
        )
        self.session.add(row)
        await self.session.commit()
        return row

    async def abuse(
        self,
        reporter: AccountRow | None,
        video: VideoRow | None = None,
        *,
        reason: str = "This video is spam",
        state: int = VideoAbuseState.PENDING,
        moderation_comment: str | None = None,
        deleted_video: dict | None = None,
        created_at: datetime | None = None,
    ) -> VideoAbuseRow:
        row = VideoAbuseRow(
            reason=reason,
            state=state,
            moderation_comment=moderation_comment,
            deleted_video=deleted_video,
            reporter_account_id=reporter.id if reporter is not None else None,
            video_id=video.id if video is not None else None,
            created_at=created_at or self._next_time(),
        )
        self.session.add(row)
        await self.session.commit()
        return row

    async def blacklist(self, video: VideoRow, reason: str = "copyright") -> VideoBlacklistRow:
        row = VideoBlacklistRow(video_id=video.id, reason=reason)
        self.session.add(row)
        await self.session.commit()
        return row

    async def block(self, blocker_id: int, target: AccountRow) -> AccountBlocklistRow:
        row = AccountBlocklistRow(account_id=blocker_id, target_account_id=target.id)
        self.session.add(row)
        await self.session.commit()
        return row

    async def delete_video(self, video: VideoRow) -> dict:
        """Snapshot ``video`` onto its abuses, then delete it."""
        loaded = (await self.session.execute(
            select(VideoRow)
            .where(VideoRow.id == video.id)
            .options(selectinload(VideoRow.channel).selectinload(VideoChannelRow.account))
        )).scalar_one()
        snapshot = build_video_snapshot(loaded)
        await self.session.execute(
            update(VideoAbuseRow)
            .where(VideoAbuseRow.video_id == video.id)
            .values(deleted_video=snapshot, video_id=None)
        )
        await self.session.execute(delete(VideoBlacklistRow).where(VideoBlacklistRow.video_id == video.id))
        await self.session.execute(delete(VideoRow).where(VideoRow.id == video.id))
        await self.session.commit()
        return snapshot


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed(session):
    seed = Seed(session)
    # Account 1 is the server account whose blocklist applies to everyone
    server = await seed.account("peertube", "Server")
    assert server.id == SERVER_ACCOUNT_ID
    return seed


@pytest_asyncio.fixture
async def client(session_factory, monkeypatch):
    from src.api.main import app

    async def override_get_session():
        async with session_factory() as session:
            yield session

    monkeypatch.setattr(settings, "ADMIN_API_KEY", ADMIN_KEY)
    monkeypatch.setattr(settings, "SERVER_ACCOUNT_ID", SERVER_ACCOUNT_ID)
    app.dependency_overrides[get_session] = override_get_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_session, None)
