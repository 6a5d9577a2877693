"""Video abuse data models — moderation states, field constraints and API shapes."""
from __future__ import annotations

from datetime import datetime
from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel


class VideoAbuseState(IntEnum):
    PENDING = 1
    REJECTED = 2
    ACCEPTED = 3


VIDEO_ABUSE_STATES = {
    VideoAbuseState.PENDING: "Pending",
    VideoAbuseState.REJECTED: "Rejected",
    VideoAbuseState.ACCEPTED: "Accepted",
}

REASON_MIN_LENGTH = 2
REASON_MAX_LENGTH = 3000
MODERATION_COMMENT_MIN_LENGTH = 2
MODERATION_COMMENT_MAX_LENGTH = 3000


class AbuseState(BaseModel):
    id: int
    label: str


class AbusedVideo(BaseModel):
    id: int
    uuid: str
    name: str
    nsfw: bool
    deleted: bool
    blacklisted: bool
    thumbnail_path: Optional[str] = None
    channel: Optional[dict[str, Any]] = None


class VideoAbuseSummary(BaseModel):
    """A report as shown to moderators, with its cross-referencing counts."""
    id: int
    reason: str
    reporter_account: Optional[dict[str, Any]] = None
    state: AbuseState
    moderation_comment: Optional[str] = None
    video: AbusedVideo
    created_at: datetime
    updated_at: Optional[datetime] = None

    count: int = 0
    nth: int = 0
    count_reports_for_reporter: int = 0
    count_reports_for_reportee: int = 0


class FlagObject(BaseModel):
    """Federation notice sent to remote instances."""
    type: str = "Flag"
    content: str
    object: str


class VideoAbuseList(BaseModel):
    total: int
    data: list[VideoAbuseSummary]
    # Ids of listed reports left out because they cannot be displayed
    integrity_gaps: list[int] = []
