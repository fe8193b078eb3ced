"""Tests for the history recorder."""

import pytest

from leadintake.crud import buyer as crud_buyer
from leadintake.models import BuyerHistory
from leadintake.models.enums import HistoryAction, Status
from leadintake.services.history_recorder import HistoryRecorder


@pytest.fixture
def stored_buyer(session_factory, user):
    async def _create():
        async with session_factory() as db:
            buyer = await crud_buyer.create_buyer(db, {"full_name": "Jane", "phone": "9999999999"}, owner_id=user.id)
            await db.commit()
            return buyer
    return _create


@pytest.mark.asyncio
async def test_empty_diff_writes_nothing(session_factory, user, stored_buyer, count_rows):
    buyer = await stored_buyer()
    async with session_factory() as db:
        entry = await HistoryRecorder(db).record_change(buyer.id, user.id, HistoryAction.UPDATE, {})
        await db.commit()

    assert entry is None
    assert await count_rows(BuyerHistory) == 0


@pytest.mark.asyncio
async def test_change_is_recorded(session_factory, user, stored_buyer, fetch_all):
    buyer = await stored_buyer()
    diff = {"status": {"old": "New", "new": "Qualified"}}
    async with session_factory() as db:
        await HistoryRecorder(db).record_change(buyer.id, user.id, HistoryAction.UPDATE, diff)
        await db.commit()

    [entry] = await fetch_all(BuyerHistory)
    assert entry.action == "UPDATE"
    assert entry.diff == diff
    assert entry.changed_at is not None


@pytest.mark.asyncio
async def test_import_is_always_recorded(session_factory, user, stored_buyer, fetch_all):
    buyer = await stored_buyer()
    async with session_factory() as db:
        await HistoryRecorder(db).record_import(buyer.id, user.id, {"full_name": "Jane", "status": Status.NEW})
        await db.commit()

    [entry] = await fetch_all(BuyerHistory)
    assert entry.action == "IMPORT"
    assert entry.diff == {"full_name": "Jane", "status": "New"}


@pytest.mark.asyncio
async def test_list_is_newest_first_with_actor(session_factory, user, stored_buyer):
    buyer = await stored_buyer()
    async with session_factory() as db:
        recorder = HistoryRecorder(db)
        await recorder.record_change(buyer.id, user.id, HistoryAction.CREATE, {"phone": {"old": None, "new": "9999999999"}})
        await recorder.record_change(buyer.id, user.id, HistoryAction.UPDATE, {"status": {"old": "New", "new": "Visited"}})
        await db.commit()

    async with session_factory() as db:
        entries = await HistoryRecorder(db).list_for_buyer(buyer.id)

    assert [e["action"] for e in entries] == ["UPDATE", "CREATE"]
    assert entries[0]["changed_by"] == {"name": "Test Agent", "email": "agent@leads.io"}
