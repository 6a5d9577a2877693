"""Tests for blocklist lookups and the reporter exclusion."""
from __future__ import annotations

import pytest

from src.db.blocklist import SqlBlocklistStore
from src.db.repository import VideoAbuseRepository
from src.services.blocklist_filter import build_exclusion, load_exclusion
from src.services.predicates import NotIn
from tests.conftest import SERVER_ACCOUNT_ID


@pytest.fixture
async def world(seed):
    owner = await seed.account("owner")
    moderator = await seed.account("moderator")
    other_moderator = await seed.account("other_moderator")
    spammer = await seed.account("spammer")
    troll = await seed.account("troll")
    honest = await seed.account("honest")
    video = await seed.video(await seed.channel(owner, "owner_channel"), "Target")
    abuses = {
        "spammer": await seed.abuse(spammer, video),
        "troll": await seed.abuse(troll, video),
        "honest": await seed.abuse(honest, video),
    }
    await seed.block(SERVER_ACCOUNT_ID, spammer)
    await seed.block(moderator.id, troll)
    await seed.block(other_moderator.id, honest)
    return {"moderator": moderator, "spammer": spammer, "troll": troll, "honest": honest, "abuses": abuses}


def test_build_exclusion():
    assert build_exclusion([3, 1, 3]) == NotIn("reporter.id", {1, 3})


async def test_server_blocklist_only(session, world):
    blocked = await SqlBlocklistStore(session).blocked_account_ids(SERVER_ACCOUNT_ID)
    assert blocked == {world["spammer"].id}


async def test_union_of_server_and_user_blocklists(session, world):
    blocked = await SqlBlocklistStore(session).blocked_account_ids(SERVER_ACCOUNT_ID, world["moderator"].id)
    assert blocked == {world["spammer"].id, world["troll"].id}


async def test_load_exclusion(session, world):
    exclusion = await load_exclusion(SqlBlocklistStore(session), SERVER_ACCOUNT_ID, world["moderator"].id)
    assert exclusion == NotIn("reporter.id", {world["spammer"].id, world["troll"].id})


async def test_block_is_visible_to_next_lookup(session, world):
    store = SqlBlocklistStore(session)
    await store.block(SERVER_ACCOUNT_ID, world["honest"].id)
    assert world["honest"].id in await store.blocked_account_ids(SERVER_ACCOUNT_ID)


async def test_listing_drops_server_blocked_reporters(session, world):
    page = await VideoAbuseRepository(session).list_for_api(server_account_id=SERVER_ACCOUNT_ID)
    abuses = world["abuses"]
    assert page.total == 2
    assert {item.abuse.id for item in page.data} == {abuses["troll"].id, abuses["honest"].id}
    assert {item.stats.count for item in page.data} == {2}


async def test_listing_drops_user_blocked_reporters(session, world):
    page = await VideoAbuseRepository(session).list_for_api(
        server_account_id=SERVER_ACCOUNT_ID, user_account_id=world["moderator"].id,
    )
    assert page.total == 1
    assert [item.abuse.id for item in page.data] == [world["abuses"]["honest"].id]
    assert page.data[0].stats.count == 1
    assert page.data[0].stats.nth == 1


class StaticBlocklist:
    def __init__(self, blocked):
        self.blocked = set(blocked)
        self.calls = []

    async def blocked_account_ids(self, server_account_id, user_account_id=None):
        self.calls.append((server_account_id, user_account_id))
        return self.blocked


async def test_repository_accepts_any_blocklist_store(session, world):
    store = StaticBlocklist([world["honest"].id])
    page = await VideoAbuseRepository(session, blocklist=store).list_for_api(
        server_account_id=SERVER_ACCOUNT_ID, user_account_id=7,
    )
    assert store.calls == [(SERVER_ACCOUNT_ID, 7)]
    assert {item.abuse.id for item in page.data} == {
        world["abuses"]["spammer"].id, world["abuses"]["troll"].id,
    }
