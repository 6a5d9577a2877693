"""Live video vs deleted-video snapshot.

A report points at a live ``VideoRow`` until the video is deleted; from then on
only the JSON snapshot in ``VideoAbuseRow.deleted_video`` remains. Display code
goes through ``resolve_video`` and never branches on the two columns itself.

Snapshot shape::

    {"id": 3, "uuid": "...", "name": "...", "nsfw": false, "url": "...",
     "channel": {"id": 2, "username": "...", "display_name": "...",
                 "owner_account": {"id": 7, "username": "...", ...}}}
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from sqlalchemy.sql.elements import ColumnElement

from src.db.tables import VideoRow
from src.errors import IntegrityGapError

logger = logging.getLogger(__name__)

SNAPSHOT_OWNER_ID_PATH = ("channel", "owner_account", "id")
SNAPSHOT_CHANNEL_NAME_PATH = ("channel", "display_name")


def build_video_snapshot(video: VideoRow) -> dict[str, Any]:
    """Snapshot to store in ``deleted_video`` right before ``video`` is deleted.

    ``video.channel`` and its account must be loaded.
    """
    return {
        "id": video.id,
        "uuid": video.uuid,
        "name": video.name,
        "nsfw": bool(video.nsfw),
        "url": video.url,
        "channel": video.channel.to_summary(),
    }


# SQL accessors for the snapshot column (JSON path extraction works on SQLite and PostgreSQL)

def snapshot_name(column) -> ColumnElement:
    return column["name"].as_string()


def snapshot_uuid(column) -> ColumnElement:
    return column["uuid"].as_string()


def snapshot_channel_display_name(column) -> ColumnElement:
    return column[SNAPSHOT_CHANNEL_NAME_PATH].as_string()


def snapshot_owner_account_id(column) -> ColumnElement:
    return column[SNAPSHOT_OWNER_ID_PATH].as_integer()


@dataclass(frozen=True)
class LiveVideo:
    row: VideoRow

    deleted = False

    @property
    def id(self) -> int:
        return self.row.id

    @property
    def uuid(self) -> str:
        return self.row.uuid

    @property
    def name(self) -> str:
        return self.row.name

    @property
    def nsfw(self) -> bool:
        return bool(self.row.nsfw)

    @property
    def url(self) -> str:
        return self.row.url

    @property
    def blacklisted(self) -> bool:
        return self.row.is_blacklisted()

    @property
    def thumbnail_path(self) -> Optional[str]:
        return self.row.get_thumbnail_static_path()

    @property
    def channel(self) -> dict[str, Any]:
        return self.row.channel.to_summary()

    @property
    def owner_account_id(self) -> int:
        return self.row.channel.account_id


@dataclass(frozen=True)
class DeletedVideo:
    snapshot: dict[str, Any]

    deleted = True
    blacklisted = False
    # Snapshots carry no thumbnail
    thumbnail_path = None

    @property
    def id(self) -> int:
        return self.snapshot.get("id")

    @property
    def uuid(self) -> str:
        return self.snapshot.get("uuid")

    @property
    def name(self) -> str:
        return self.snapshot.get("name")

    @property
    def nsfw(self) -> bool:
        return bool(self.snapshot.get("nsfw", False))

    @property
    def url(self) -> Optional[str]:
        return self.snapshot.get("url")

    @property
    def channel(self) -> Optional[dict[str, Any]]:
        return self.snapshot.get("channel")

    @property
    def owner_account_id(self) -> Optional[int]:
        owner = (self.channel or {}).get("owner_account") or {}
        return owner.get("id")


DisplayedVideo = Union[LiveVideo, DeletedVideo]

# Every snapshot must carry these to be displayed
SNAPSHOT_REQUIRED_KEYS = ("id", "uuid", "name")


def resolve_video(abuse) -> DisplayedVideo:
    """Pick what to display for ``abuse``: the live video, else its snapshot.

    Raises ``IntegrityGapError`` when the report has neither, or when the
    snapshot lacks one of ``SNAPSHOT_REQUIRED_KEYS``.
    """
    # video_id is nulled when the video goes away, the relationship may still be cached
    if abuse.video_id is not None and abuse.video is not None:
        return LiveVideo(abuse.video)
    snapshot = abuse.deleted_video
    if snapshot:
        missing = [
            key for key in SNAPSHOT_REQUIRED_KEYS
            if not isinstance(snapshot, dict) or snapshot.get(key) is None
        ]
        if missing:
            logger.warning("Video abuse %s has an incomplete snapshot (missing %s)", abuse.id, ", ".join(missing))
            raise IntegrityGapError(abuse.id, missing=missing)
        return DeletedVideo(snapshot)
    logger.warning("Video abuse %s has neither a video nor a snapshot", abuse.id)
    raise IntegrityGapError(abuse.id)
