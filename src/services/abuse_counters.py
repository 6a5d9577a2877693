"""Per-row statistics attached to listed video abuses.

Every counter is a grouped (or windowed) derived table over the whole
``video_abuses`` table, outer-joined to the listed rows by its key. The listing
therefore stays a single statement whatever the page size.

- ``count``: reports against the same live video.
- ``nth``: rank of the report among those, by creation time then id.
- ``count_reports_for_reporter``: reports against videos owned by the listed
  row's reporter account.
- ``count_reports_for_reportee``: reports against videos of the same owner account
  as the listed row's video.

Reports whose video was deleted have no ``count``/``nth`` (0). Reporter and
reportee counts add a live population (video still there, owner read through
video -> channel) and a deleted population (no video, snapshot present, owner
read from the snapshot). A report belongs to exactly one of them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy import distinct, func, select
from sqlalchemy.orm import aliased
from sqlalchemy.sql.elements import ColumnElement

from src.db.abuse_tables import VideoAbuseRow
from src.db.tables import VideoChannelRow, VideoRow
from src.services.predicates import Predicate
from src.services.video_snapshot import snapshot_owner_account_id


@dataclass(frozen=True)
class AbuseStats:
    count: int = 0
    nth: int = 0
    count_reports_for_reporter: int = 0
    count_reports_for_reportee: int = 0

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> AbuseStats:
        return cls(
            count=row.get("count") or 0,
            nth=row.get("nth") or 0,
            count_reports_for_reporter=row.get("count_reports_for_reporter") or 0,
            count_reports_for_reportee=row.get("count_reports_for_reportee") or 0,
        )


def _population(exclusion: Predicate):
    other = aliased(VideoAbuseRow)
    return other, exclusion.compile({"reporter.id": other.reporter_account_id})


def _join_live(stmt, other, video, channel):
    """Restrict ``stmt`` to reports whose video still exists."""
    return (
        stmt.select_from(other)
        .join(video, video.id == other.video_id)
        .join(channel, channel.id == video.channel_id)
    )


def _deleted_population_filter(other) -> list[ColumnElement]:
    return [other.video_id.is_(None), other.deleted_video.is_not(None)]


def reports_per_video(exclusion: Predicate):
    other, allowed = _population(exclusion)
    return (
        select(other.video_id.label("video_id"), func.count(other.id).label("total"))
        .where(other.video_id.is_not(None), allowed)
        .group_by(other.video_id)
        .subquery("abuses_per_video")
    )


def report_rank(exclusion: Predicate):
    other, allowed = _population(exclusion)
    nth = func.row_number().over(
        partition_by=other.video_id,
        order_by=(other.created_at.asc(), other.id.asc()),
    )
    return (
        select(other.id.label("abuse_id"), nth.label("nth"))
        .where(other.video_id.is_not(None), allowed)
        .subquery("abuse_rank")
    )


def reports_against_owner_live(exclusion: Predicate, name: str):
    """Reports on live videos, grouped by the account owning the video's channel."""
    other, allowed = _population(exclusion)
    video, channel = aliased(VideoRow), aliased(VideoChannelRow)
    stmt = select(channel.account_id.label("account_id"), func.count(distinct(other.id)).label("total"))
    return (
        _join_live(stmt, other, video, channel)
        .where(allowed)
        .group_by(channel.account_id)
        .subquery(name)
    )


def reports_against_owner_deleted(exclusion: Predicate, name: str):
    """Reports on deleted videos, grouped by the owner recorded in the snapshot."""
    other, allowed = _population(exclusion)
    # Label the JSON extraction first: grouping on it directly would repeat the
    # path as a second bind parameter, which PostgreSQL rejects.
    owners = (
        select(
            other.id.label("abuse_id"),
            snapshot_owner_account_id(other.deleted_video).label("account_id"),
        )
        .where(allowed, *_deleted_population_filter(other))
        .subquery(f"{name}_owners")
    )
    return (
        select(owners.c.account_id, func.count(distinct(owners.c.abuse_id)).label("total"))
        .where(owners.c.account_id.is_not(None))
        .group_by(owners.c.account_id)
        .subquery(name)
    )


class AbuseCounters:
    """The four counters, ready to be joined onto a listing statement."""

    def __init__(self, exclusion: Predicate):
        self.per_video = reports_per_video(exclusion)
        self.rank = report_rank(exclusion)
        # Both account counters group reports by the owner of the reported video.
        # The reporter side joins that owner on the listed reporter, the
        # reportee side on the listed row's owner.
        self.reporter_live = reports_against_owner_live(exclusion, "reports_against_reporter_live")
        self.reporter_deleted = reports_against_owner_deleted(exclusion, "reports_against_reporter_deleted")
        self.reportee_live = reports_against_owner_live(exclusion, "reports_against_reportee_live")
        self.reportee_deleted = reports_against_owner_deleted(exclusion, "reports_against_reportee_deleted")

    def join(self, from_clause, abuse, owner_account_id: ColumnElement):
        """Outer-join every counter table onto ``from_clause``.

        ``owner_account_id`` is the listed row's reportee: live channel owner,
        else snapshot owner.
        """
        return (
            from_clause
            .outerjoin(self.per_video, self.per_video.c.video_id == abuse.video_id)
            .outerjoin(self.rank, self.rank.c.abuse_id == abuse.id)
            .outerjoin(self.reporter_live, self.reporter_live.c.account_id == abuse.reporter_account_id)
            .outerjoin(self.reporter_deleted, self.reporter_deleted.c.account_id == abuse.reporter_account_id)
            .outerjoin(self.reportee_live, self.reportee_live.c.account_id == owner_account_id)
            .outerjoin(self.reportee_deleted, self.reportee_deleted.c.account_id == owner_account_id)
        )

    def columns(self) -> list[ColumnElement]:
        return [
            func.coalesce(self.per_video.c.total, 0).label("count"),
            func.coalesce(self.rank.c.nth, 0).label("nth"),
            (
                func.coalesce(self.reporter_live.c.total, 0)
                + func.coalesce(self.reporter_deleted.c.total, 0)
            ).label("count_reports_for_reporter"),
            (
                func.coalesce(self.reportee_live.c.total, 0)
                + func.coalesce(self.reportee_deleted.c.total, 0)
            ).label("count_reports_for_reportee"),
        ]
