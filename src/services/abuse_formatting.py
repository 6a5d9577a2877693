"""Video abuse → API / federation representations."""
from __future__ import annotations

import logging
from typing import Optional

from src.db.abuse_tables import VideoAbuseRow
from src.errors import DeletedVideoError
from src.models.abuse import (
    VIDEO_ABUSE_STATES,
    AbusedVideo,
    AbuseState,
    FlagObject,
    VideoAbuseSummary,
)
from src.services.abuse_counters import AbuseStats
from src.services.video_snapshot import resolve_video

logger = logging.getLogger(__name__)


def get_state_label(state: int) -> str:
    try:
        return VIDEO_ABUSE_STATES[state]
    except (KeyError, TypeError):
        logger.warning("Unknown video abuse state %r", state)
        return "Unknown"


def to_summary(abuse: VideoAbuseRow, stats: Optional[AbuseStats] = None) -> VideoAbuseSummary:
    """Moderator view of ``abuse``.

    Raises ``IntegrityGapError`` if the abuse has neither a video nor a snapshot.
    """
    stats = stats or AbuseStats()
    video = resolve_video(abuse)
    reporter = abuse.reporter_account

    return VideoAbuseSummary(
        id=abuse.id,
        reason=abuse.reason,
        reporter_account=reporter.to_summary() if reporter is not None else None,
        state=AbuseState(id=abuse.state, label=get_state_label(abuse.state)),
        moderation_comment=abuse.moderation_comment,
        video=AbusedVideo(
            id=video.id,
            uuid=video.uuid,
            name=video.name,
            nsfw=video.nsfw,
            deleted=video.deleted,
            blacklisted=video.blacklisted,
            thumbnail_path=video.thumbnail_path,
            channel=video.channel,
        ),
        created_at=abuse.created_at,
        updated_at=abuse.updated_at,
        count=stats.count,
        nth=stats.nth,
        count_reports_for_reporter=stats.count_reports_for_reporter,
        count_reports_for_reportee=stats.count_reports_for_reportee,
    )


def to_flag_object(abuse: VideoAbuseRow) -> FlagObject:
    """ActivityPub ``Flag`` for ``abuse``. Deleted videos cannot be federated."""
    if abuse.video_id is None or abuse.video is None:
        raise DeletedVideoError(abuse.id)
    return FlagObject(content=abuse.reason, object=abuse.video.url)
