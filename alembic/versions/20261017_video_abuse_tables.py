"""Create accounts, channels, videos, blocklists and video_abuses tables.

Revision ID: 5f0c2a91d7e3
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

revision = "5f0c2a91d7e3"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("display_name", sa.String(120), nullable=False),
        sa.Column("host", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True)),
        sa.UniqueConstraint("username", "host", name="uq_account_username_host"),
    )
    op.create_table(
        "video_channels",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("display_name", sa.String(120), nullable=False),
        sa.Column("account_id", sa.Integer, sa.ForeignKey("accounts.id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )
    op.create_table(
        "videos",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(36), nullable=False, unique=True),
        sa.Column("name", sa.String(120), nullable=False, index=True),
        sa.Column("nsfw", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("url", sa.String(2000), nullable=False),
        sa.Column("thumbnail_filename", sa.String(255), nullable=True),
        sa.Column("channel_id", sa.Integer, sa.ForeignKey("video_channels.id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )
    op.create_table(
        "video_blacklist",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("video_id", sa.Integer, sa.ForeignKey("videos.id", ondelete="CASCADE"),
                  nullable=False, unique=True),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column("unfederated", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )
    op.create_table(
        "account_blocklist",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("account_id", sa.Integer, sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("target_account_id", sa.Integer, sa.ForeignKey("accounts.id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("created_at", sa.DateTime(timezone=True)),
        sa.UniqueConstraint("account_id", "target_account_id", name="uq_account_blocklist_pair"),
    )
    op.create_index("ix_account_blocklist_account", "account_blocklist", ["account_id"])
    op.create_table(
        "video_abuses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("reason", sa.String(3000), nullable=False),
        sa.Column("state", sa.Integer, nullable=False),
        sa.Column("moderation_comment", sa.String(3000), nullable=True),
        sa.Column("deleted_video", sa.JSON, nullable=True),
        sa.Column("reporter_account_id", sa.Integer, sa.ForeignKey("accounts.id", ondelete="SET NULL"),
                  nullable=True, index=True),
        sa.Column("video_id", sa.Integer, sa.ForeignKey("videos.id", ondelete="SET NULL"),
                  nullable=True, index=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("video_abuses")
    op.drop_index("ix_account_blocklist_account", table_name="account_blocklist")
    op.drop_table("account_blocklist")
    op.drop_table("video_blacklist")
    op.drop_table("videos")
    op.drop_table("video_channels")
    op.drop_table("accounts")
