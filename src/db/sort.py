"""Translate API sort keys ("createdAt", "-createdAt", ...) to ORDER BY clauses."""
from __future__ import annotations

import logging

from src.db.abuse_tables import VideoAbuseRow

logger = logging.getLogger(__name__)

DEFAULT_SORT = "-createdAt"

SORTABLE_COLUMNS = {
    "id": VideoAbuseRow.id,
    "createdAt": VideoAbuseRow.created_at,
    "state": VideoAbuseRow.state,
}


def get_sort(sort: str | None) -> list:
    """ORDER BY for ``sort``, always ending with ``id ASC`` so pages are stable."""
    sort = sort or DEFAULT_SORT
    descending = sort.startswith("-")
    key = sort[1:] if descending else sort

    if key not in SORTABLE_COLUMNS:
        logger.debug("Unknown sort key %r, using %s", sort, DEFAULT_SORT)
        key, descending = DEFAULT_SORT[1:], True

    column = SORTABLE_COLUMNS[key]
    order = [column.desc() if descending else column.asc()]
    if key != "id":
        order.append(VideoAbuseRow.id.asc())
    return order
