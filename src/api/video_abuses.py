"""Video abuse moderation API — listing, lookup and federation notice.

Admin endpoints, guarded by the X-Admin-Key header.
"""
from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.db.engine import get_session
from src.db.repository import VideoAbuseRepository
from src.errors import IntegrityGapError
from src.models.abuse import FlagObject, VideoAbuseList, VideoAbuseSummary
from src.services.abuse_formatting import to_flag_object, to_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin", tags=["video-abuses"])


def verify_admin(x_admin_key: str = Header(None)) -> None:
    """Verify admin API key (timing-safe)."""
    expected = settings.ADMIN_API_KEY
    if not expected:
        raise HTTPException(503, "Admin endpoints disabled")
    if not x_admin_key or not hmac.compare_digest(x_admin_key, expected):
        raise HTTPException(403, "Invalid admin key")


@router.get("/video-abuses", response_model=VideoAbuseList, dependencies=[Depends(verify_admin)])
async def list_video_abuses(
    start: int = Query(0, ge=0),
    count: int = Query(settings.ABUSES_DEFAULT_COUNT, ge=1, le=settings.ABUSES_MAX_COUNT),
    sort: str = Query("-createdAt", pattern="^-?(id|createdAt|state)$"),
    search: str | None = Query(None, max_length=200),
    search_reporter: str | None = Query(None, alias="searchReporter", max_length=200),
    search_video: str | None = Query(None, alias="searchVideo", max_length=200),
    search_video_channel: str | None = Query(None, alias="searchVideoChannel", max_length=200),
    user_account_id: int | None = Query(None, alias="userAccountId", ge=1),
    session: AsyncSession = Depends(get_session),
):
    """Moderation queue with duplicate / reporter / reportee counts."""
    page = await VideoAbuseRepository(session).list_for_api(
        start=start,
        count=count,
        sort=sort,
        search=search,
        search_reporter=search_reporter,
        search_video=search_video,
        search_video_channel=search_video_channel,
        server_account_id=settings.SERVER_ACCOUNT_ID,
        user_account_id=user_account_id,
    )
    data, integrity_gaps = [], []
    for item in page.data:
        try:
            data.append(to_summary(item.abuse, item.stats))
        except IntegrityGapError as exc:
            # One broken report must not hide the rest of the queue
            logger.error("Skipping video abuse %s in listing: %s", exc.abuse_id, exc.detail)
            integrity_gaps.append(exc.abuse_id)
    return VideoAbuseList(total=page.total, data=data, integrity_gaps=integrity_gaps)


async def _load_or_404(
    session: AsyncSession, abuse_id: int, video_id: int | None, video_uuid: str | None,
):
    abuse = await VideoAbuseRepository(session).load_by_id(abuse_id, video_id=video_id, video_uuid=video_uuid)
    if abuse is None:
        raise HTTPException(404, "Video abuse not found")
    return abuse


@router.get("/video-abuses/{abuse_id}", response_model=VideoAbuseSummary, dependencies=[Depends(verify_admin)])
async def get_video_abuse(
    abuse_id: int,
    video_id: int | None = Query(None, alias="videoId"),
    video_uuid: str | None = Query(None, alias="videoUuid", max_length=36),
    session: AsyncSession = Depends(get_session),
):
    """Single abuse, without listing statistics."""
    abuse = await _load_or_404(session, abuse_id, video_id, video_uuid)
    return to_summary(abuse)


@router.get("/video-abuses/{abuse_id}/flag", response_model=FlagObject, dependencies=[Depends(verify_admin)])
async def get_video_abuse_flag(abuse_id: int, session: AsyncSession = Depends(get_session)):
    """ActivityPub Flag for the abuse. 409 once the video is deleted."""
    abuse = await _load_or_404(session, abuse_id, None, None)
    return to_flag_object(abuse)
