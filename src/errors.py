"""Typed failures surfaced by the video abuse engine.

Store failures are not wrapped: ``sqlalchemy.exc.SQLAlchemyError`` reaches the
caller as raised by the driver.
"""
from __future__ import annotations


class VideoAbuseError(Exception):
    """Base class for video abuse errors."""

    def __init__(self, detail: str, *, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class VideoAbuseValidationError(VideoAbuseError, ValueError):
    """Raised when a reason, state or moderation comment is rejected on write."""

    def __init__(self, field: str, detail: str) -> None:
        super().__init__(f"{field}: {detail}", status_code=422)
        self.field = field


class IntegrityGapError(VideoAbuseError):
    """Raised when a report has neither a live video nor a deleted-video snapshot."""

    def __init__(self, abuse_id: int | None, missing: list[str] | None = None) -> None:
        if missing:
            detail = f"video abuse {abuse_id} has a snapshot without {', '.join(missing)}"
        else:
            detail = f"video abuse {abuse_id} has no video and no snapshot"
        super().__init__(detail, status_code=500)
        self.abuse_id = abuse_id
        self.missing = missing or []


class DeletedVideoError(VideoAbuseError):
    """Raised when an operation needs the live video but it was deleted."""

    def __init__(self, abuse_id: int | None) -> None:
        super().__init__(f"video of abuse {abuse_id} was deleted", status_code=409)
        self.abuse_id = abuse_id
