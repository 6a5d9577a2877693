"""Video abuse repository: moderation listing with per-row statistics."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import distinct, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, contains_eager, join, selectinload

from src.db.abuse_tables import VideoAbuseRow
from src.db.blocklist import SqlBlocklistStore
from src.db.sort import get_sort
from src.db.tables import AccountRow, VideoBlacklistRow, VideoChannelRow, VideoRow
from src.services.abuse_counters import AbuseCounters, AbuseStats
from src.services.abuse_search import build_scoped_filters, build_search
from src.services.blocklist_filter import BlocklistStore, load_exclusion
from src.services.predicates import all_of
from src.services.video_snapshot import (
    snapshot_channel_display_name,
    snapshot_name,
    snapshot_owner_account_id,
    snapshot_uuid,
)

logger = logging.getLogger(__name__)


@dataclass
class AbuseWithStats:
    abuse: VideoAbuseRow
    stats: AbuseStats = field(default_factory=AbuseStats)


@dataclass
class AbusePage:
    total: int
    data: list[AbuseWithStats]


class _ListingSource:
    """Aliases for the listed abuse and everything joined to it."""

    def __init__(self):
        self.reporter = aliased(AccountRow, name="reporter")
        self.video = aliased(VideoRow, name="video")
        self.channel = aliased(VideoChannelRow, name="channel")
        self.owner = aliased(AccountRow, name="owner")
        self.blacklist = aliased(VideoBlacklistRow, name="blacklist")

    def fields(self) -> dict:
        deleted_video = VideoAbuseRow.deleted_video
        return {
            "abuse.id": VideoAbuseRow.id,
            "reporter.id": VideoAbuseRow.reporter_account_id,
            "reporter.name": self.reporter.display_name,
            "video.id": VideoAbuseRow.video_id,
            "video.name": self.video.name,
            "channel.display_name": self.channel.display_name,
            "snapshot": deleted_video,
            "snapshot.name": snapshot_name(deleted_video),
            "snapshot.channel.display_name": snapshot_channel_display_name(deleted_video),
        }

    def from_clause(self):
        # Reporter is an inner join: reports whose account is gone are not listed
        return (
            join(VideoAbuseRow, self.reporter, self.reporter.id == VideoAbuseRow.reporter_account_id)
            .outerjoin(self.video, self.video.id == VideoAbuseRow.video_id)
            .outerjoin(self.channel, self.channel.id == self.video.channel_id)
            .outerjoin(self.owner, self.owner.id == self.channel.account_id)
            .outerjoin(self.blacklist, self.blacklist.video_id == self.video.id)
        )

    def owner_account_id(self):
        """Reportee of the listed row: live channel owner, else snapshot owner."""
        return func.coalesce(
            self.channel.account_id,
            snapshot_owner_account_id(VideoAbuseRow.deleted_video),
        )

    def eager_options(self) -> list:
        video = VideoAbuseRow.video.of_type(self.video)
        return [
            contains_eager(VideoAbuseRow.reporter_account.of_type(self.reporter)),
            contains_eager(video)
            .contains_eager(self.video.channel.of_type(self.channel))
            .contains_eager(self.channel.account.of_type(self.owner)),
            contains_eager(video).contains_eager(self.video.blacklist.of_type(self.blacklist)),
        ]


class VideoAbuseRepository:
    """Async video abuse queries backed by SQLAlchemy."""

    def __init__(self, session: AsyncSession, blocklist: Optional[BlocklistStore] = None):
        self.session = session
        self.blocklist = blocklist or SqlBlocklistStore(session)

    async def list_for_api(
        self,
        start: int = 0,
        count: int = 15,
        sort: str | None = None,
        search: str | None = None,
        search_reporter: str | None = None,
        search_video: str | None = None,
        search_video_channel: str | None = None,
        *,
        server_account_id: int,
        user_account_id: int | None = None,
    ) -> AbusePage:
        """One page of abuses plus the size of the whole filtered set.

        Blocked reporters are dropped from the rows and from every counter.
        """
        exclusion = await load_exclusion(self.blocklist, server_account_id, user_account_id)
        predicate = all_of([
            exclusion,
            build_search(search),
            build_scoped_filters(search_reporter, search_video, search_video_channel),
        ])

        source = _ListingSource()
        where = predicate.compile(source.fields())
        counters = AbuseCounters(exclusion)

        stmt = (
            select(VideoAbuseRow, *counters.columns())
            .select_from(counters.join(source.from_clause(), VideoAbuseRow, source.owner_account_id()))
            .options(*source.eager_options())
            .where(where)
            .order_by(*get_sort(sort))
            .offset(start)
            .limit(count)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        data = [
            AbuseWithStats(abuse=row[0], stats=AbuseStats.from_mapping(row._mapping))
            for row in result.all()
        ]

        # Distinct on the abuse id so the joins can never inflate the total
        count_source = _ListingSource()
        count_stmt = (
            select(func.count(distinct(VideoAbuseRow.id)))
            .select_from(count_source.from_clause())
            .where(predicate.compile(count_source.fields()))
        )
        total = (await self.session.execute(count_stmt)).scalar() or 0

        logger.debug(
            "Listed %d/%d video abuses (start=%s count=%s sort=%s search=%r)",
            len(data), total, start, count, sort, search,
        )
        return AbusePage(total=total, data=data)

    async def load_by_id(
        self,
        abuse_id: int,
        video_id: int | None = None,
        video_uuid: str | None = None,
    ) -> Optional[VideoAbuseRow]:
        """Load one abuse, optionally checking which video it targets.

        ``video_uuid`` matches the live video or the deleted-video snapshot.
        """
        stmt = (
            select(VideoAbuseRow)
            .outerjoin(VideoRow, VideoRow.id == VideoAbuseRow.video_id)
            .where(VideoAbuseRow.id == abuse_id)
            .options(
                selectinload(VideoAbuseRow.reporter_account),
                selectinload(VideoAbuseRow.video).selectinload(VideoRow.channel).selectinload(VideoChannelRow.account),
                selectinload(VideoAbuseRow.video).selectinload(VideoRow.blacklist),
            )
            .execution_options(populate_existing=True)
        )
        if video_id is not None:
            stmt = stmt.where(VideoAbuseRow.video_id == video_id)
        if video_uuid is not None:
            stmt = stmt.where(or_(
                VideoRow.uuid == video_uuid,
                snapshot_uuid(VideoAbuseRow.deleted_video) == video_uuid,
            ))

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
