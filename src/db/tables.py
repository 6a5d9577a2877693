"""SQLAlchemy ORM models for accounts, channels, videos and blocklists."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, Text,
    ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship

from config.settings import settings


def _now():
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class AccountRow(Base):
    """Local or remote account. Files reports and owns channels."""
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False)
    display_name = Column(String(120), nullable=False)
    host = Column(String(255), nullable=True)  # None for local accounts
    created_at = Column(DateTime(timezone=True), default=_now)

    __table_args__ = (
        UniqueConstraint("username", "host", name="uq_account_username_host"),
    )

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "display_name": self.display_name,
            "host": self.host,
        }


class VideoChannelRow(Base):
    __tablename__ = "video_channels"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False)
    display_name = Column(String(120), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_now)

    account = relationship("AccountRow", lazy="raise")

    def to_summary(self) -> dict:
        """Channel summary with its owner account, also the shape kept in video snapshots."""
        return {
            "id": self.id,
            "username": self.username,
            "display_name": self.display_name,
            "owner_account": self.account.to_summary(),
        }


class VideoRow(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(String(36), nullable=False, unique=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(120), nullable=False, index=True)
    nsfw = Column(Boolean, nullable=False, default=False)
    url = Column(String(2000), nullable=False)
    thumbnail_filename = Column(String(255), nullable=True)
    channel_id = Column(Integer, ForeignKey("video_channels.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_now)

    channel = relationship("VideoChannelRow", lazy="raise")
    blacklist = relationship("VideoBlacklistRow", uselist=False, lazy="raise")

    def is_blacklisted(self) -> bool:
        return self.blacklist is not None

    def get_thumbnail_static_path(self) -> str | None:
        if not self.thumbnail_filename:
            return None
        return settings.STATIC_THUMBNAILS_PATH + self.thumbnail_filename


class VideoBlacklistRow(Base):
    """A video hidden by moderators."""
    __tablename__ = "video_blacklist"

    id = Column(Integer, primary_key=True, autoincrement=True)
    video_id = Column(Integer, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, unique=True)
    reason = Column(Text, nullable=True)
    unfederated = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_now)


class AccountBlocklistRow(Base):
    """`account_id` mutes `target_account_id`. The server account's entries apply to everyone."""
    __tablename__ = "account_blocklist"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)
    target_account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_now)

    __table_args__ = (
        UniqueConstraint("account_id", "target_account_id", name="uq_account_blocklist_pair"),
        Index("ix_account_blocklist_account", "account_id"),
    )
