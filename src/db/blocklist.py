"""Blocklist lookups backed by the ``account_blocklist`` table."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tables import AccountBlocklistRow


class SqlBlocklistStore:
    """Accounts muted server-wide (by the server account) or by the viewing user."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def blocked_account_ids(
        self, server_account_id: int, user_account_id: Optional[int] = None,
    ) -> set[int]:
        blockers = [server_account_id]
        if user_account_id is not None:
            blockers.append(user_account_id)

        result = await self.session.execute(
            select(AccountBlocklistRow.target_account_id)
            .where(AccountBlocklistRow.account_id.in_(blockers))
            .distinct()
        )
        return set(result.scalars().all())

    async def block(self, account_id: int, target_account_id: int) -> AccountBlocklistRow:
        row = AccountBlocklistRow(account_id=account_id, target_account_id=target_account_id)
        self.session.add(row)
        await self.session.flush()
        return row
