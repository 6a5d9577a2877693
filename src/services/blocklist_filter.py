"""Exclude reports filed by blocked accounts."""
from __future__ import annotations

from collections.abc import Iterable
from typing import Optional, Protocol

from src.services.predicates import NotIn, Predicate


class BlocklistStore(Protocol):
    async def blocked_account_ids(
        self, server_account_id: int, user_account_id: Optional[int] = None,
    ) -> set[int]:
        """Accounts blocked by the server account or by the viewing user."""
        ...


def build_exclusion(blocked_account_ids: Iterable[int]) -> Predicate:
    """Reject reports whose reporter is in the (operator ∪ user) blocked set."""
    return NotIn("reporter.id", blocked_account_ids)


async def load_exclusion(
    store: BlocklistStore,
    server_account_id: int,
    user_account_id: Optional[int] = None,
) -> Predicate:
    blocked = await store.blocked_account_ids(server_account_id, user_account_id)
    return build_exclusion(blocked)
