"""Video abuse table: moderation reports filed against videos."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship, validates

from src.db.tables import Base
from src.errors import VideoAbuseValidationError
from src.models.abuse import (
    VIDEO_ABUSE_STATES,
    REASON_MIN_LENGTH, REASON_MAX_LENGTH,
    MODERATION_COMMENT_MIN_LENGTH, MODERATION_COMMENT_MAX_LENGTH,
)


def _now():
    return datetime.now(timezone.utc)


class VideoAbuseRow(Base):
    """A complaint against a video.

    When the video is deleted ``video_id`` is set to null and ``deleted_video``
    keeps a snapshot of it (see ``src.services.video_snapshot``).
    """
    __tablename__ = "video_abuses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    reason = Column(String(REASON_MAX_LENGTH), nullable=False)
    state = Column(Integer, nullable=False)
    moderation_comment = Column(String(MODERATION_COMMENT_MAX_LENGTH), nullable=True)
    # none_as_null: a missing snapshot must be SQL NULL, not the JSON literal null
    deleted_video = Column(JSON(none_as_null=True), nullable=True)

    reporter_account_id = Column(
        Integer, ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )
    video_id = Column(
        Integer, ForeignKey("videos.id", ondelete="SET NULL"),
        nullable=True, index=True,
    )

    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now, nullable=False)

    reporter_account = relationship("AccountRow", lazy="raise")
    video = relationship("VideoRow", lazy="raise")

    @validates("reason")
    def validate_reason(self, key, reason):
        if not isinstance(reason, str) or not REASON_MIN_LENGTH <= len(reason) <= REASON_MAX_LENGTH:
            raise VideoAbuseValidationError(
                key, f"must be {REASON_MIN_LENGTH} to {REASON_MAX_LENGTH} characters",
            )
        return reason

    @validates("state")
    def validate_state(self, key, state):
        if isinstance(state, bool) or state not in VIDEO_ABUSE_STATES:
            raise VideoAbuseValidationError(key, f"unknown state {state!r}")
        return int(state)

    @validates("moderation_comment")
    def validate_moderation_comment(self, key, comment):
        if comment is None:
            return comment
        if (
            not isinstance(comment, str)
            or not MODERATION_COMMENT_MIN_LENGTH <= len(comment) <= MODERATION_COMMENT_MAX_LENGTH
        ):
            raise VideoAbuseValidationError(
                key,
                f"must be {MODERATION_COMMENT_MIN_LENGTH} to {MODERATION_COMMENT_MAX_LENGTH} characters",
            )
        return comment

    def __repr__(self) -> str:
        return f"<VideoAbuse(id={self.id}, video={self.video_id}, reporter={self.reporter_account_id})>"
