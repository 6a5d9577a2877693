"""Search predicates for the video abuse listing.

``build_search`` is the loose, free-text OR across every name a moderator may
type: live video, live channel, snapshot video, snapshot channel, reporter.
``build_scoped_filters`` turns the dedicated search boxes into AND-ed
narrowing conditions.
"""
from __future__ import annotations

from typing import Optional

from src.services.predicates import Always, IsNotNull, Matches, Or, Predicate, all_of


def build_search(search: Optional[str]) -> Predicate:
    if not search:
        return Always()

    return Or((
        IsNotNull("video.id") & Matches("video.name", search),
        IsNotNull("video.id") & Matches("channel.display_name", search),
        IsNotNull("snapshot") & Matches("snapshot.name", search),
        IsNotNull("snapshot") & Matches("snapshot.channel.display_name", search),
        Matches("reporter.name", search),
    ))


def _live_or_snapshot(live_field: str, snapshot_field: str, term: str) -> Predicate:
    return Or((
        IsNotNull("video.id") & Matches(live_field, term),
        IsNotNull("snapshot") & Matches(snapshot_field, term),
    ))


def build_scoped_filters(
    search_reporter: Optional[str] = None,
    search_video: Optional[str] = None,
    search_video_channel: Optional[str] = None,
) -> Predicate:
    """Required matches on the reporter, the video and the channel."""
    return all_of([
        Matches("reporter.name", search_reporter) if search_reporter else None,
        _live_or_snapshot("video.name", "snapshot.name", search_video) if search_video else None,
        _live_or_snapshot("channel.display_name", "snapshot.channel.display_name", search_video_channel)
        if search_video_channel else None,
    ])
