"""Tests for single-record buyer services and their history entries."""

from uuid import uuid4

import pytest

from leadintake.models import Buyer, BuyerHistory
from leadintake.schemas.buyer import BuyerForm, BuyerListParams
from leadintake.services.buyer_services import BuyerServices
from leadintake.services.exceptions import BuyerNotFoundError, DuplicatePhoneError


@pytest.fixture
def create(session_factory, user, buyer_data):
    async def _create(**overrides):
        form = BuyerForm.model_validate({**buyer_data, **overrides})
        async with session_factory() as db:
            return await BuyerServices.create_buyer_service(form, user, db)
    return _create


async def update(session_factory, user, buyer_id, payload):
    async with session_factory() as db:
        return await BuyerServices.update_buyer_service(buyer_id, BuyerForm.model_validate(payload), user, db)


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_writes_create_history(self, create, fetch_all, user):
        buyer = await create()

        assert buyer.full_name == "Jane Doe"
        assert buyer.owner_id == user.id

        [entry] = await fetch_all(BuyerHistory)
        assert entry.action == "CREATE"
        assert entry.diff["phone"] == {"old": None, "new": "9876543210"}
        assert entry.diff["tags"] == {"old": None, "new": ["urgent", "premium"]}

    @pytest.mark.asyncio
    async def test_create_history_skips_null_fields(self, create, fetch_all):
        await create(email=None, notes=None)

        [entry] = await fetch_all(BuyerHistory)
        assert "email" not in entry.diff
        assert "notes" not in entry.diff

    @pytest.mark.asyncio
    async def test_duplicate_phone_rejected(self, create, count_rows):
        await create()

        with pytest.raises(DuplicatePhoneError, match="already exists"):
            await create(fullName="Someone Else")

        assert await count_rows(Buyer) == 1


class TestUpdate:

    @pytest.mark.asyncio
    async def test_unchanged_update_writes_no_history(self, create, session_factory, user, buyer_data, count_rows):
        buyer = await create()

        await update(session_factory, user, buyer.id, buyer_data)

        assert await count_rows(BuyerHistory) == 1

    @pytest.mark.asyncio
    async def test_update_records_only_changed_fields(self, create, session_factory, user, buyer_data, fetch_all):
        buyer = await create()

        updated = await update(session_factory, user, buyer.id, {**buyer_data, "status": "Qualified", "budgetMax": 8000000})

        assert updated.status == "Qualified"
        [entry] = await fetch_all(BuyerHistory, BuyerHistory.action == "UPDATE")
        assert entry.diff == {
            "budget_max": {"old": 7500000, "new": 8000000},
            "status": {"old": "New", "new": "Qualified"},
        }

    @pytest.mark.asyncio
    async def test_reordered_tags_are_a_change(self, create, session_factory, user, buyer_data, fetch_all):
        buyer = await create()

        await update(session_factory, user, buyer.id, {**buyer_data, "tags": ["premium", "urgent"]})

        [entry] = await fetch_all(BuyerHistory, BuyerHistory.action == "UPDATE")
        assert list(entry.diff) == ["tags"]

    @pytest.mark.asyncio
    async def test_update_to_taken_phone_rejected(self, create, session_factory, user, buyer_data):
        await create()
        other = await create(phone="9123456789")

        with pytest.raises(DuplicatePhoneError):
            await update(session_factory, user, other.id, buyer_data)

    @pytest.mark.asyncio
    async def test_update_missing_buyer(self, session_factory, user, buyer_data):
        with pytest.raises(BuyerNotFoundError):
            await update(session_factory, user, uuid4(), buyer_data)


class TestDeleteAndRead:

    @pytest.mark.asyncio
    async def test_delete_removes_buyer_and_history(self, create, session_factory, user, count_rows):
        buyer = await create()

        async with session_factory() as db:
            await BuyerServices.delete_buyer_service(buyer.id, user, db)

        assert await count_rows(Buyer) == 0
        assert await count_rows(BuyerHistory) == 0

    @pytest.mark.asyncio
    async def test_history_is_newest_first(self, create, session_factory, user, buyer_data):
        buyer = await create()
        await update(session_factory, user, buyer.id, {**buyer_data, "status": "Contacted"})

        async with session_factory() as db:
            entries = await BuyerServices.get_history_service(buyer.id, db)

        assert [e.action for e in entries] == ["UPDATE", "CREATE"]
        assert entries[0].changed_by.name == "Test Agent"

    @pytest.mark.asyncio
    async def test_list_filters_and_paginates(self, create, session_factory):
        await create()
        await create(phone="9123456789", fullName="Ravi Kumar", city="Zirakpur")
        await create(phone="9123456780", fullName="Ravi Singh", city="Zirakpur")

        async with session_factory() as db:
            page = await BuyerServices.list_buyers_service(BuyerListParams(city="Zirakpur", limit=1), db)

        assert page.pagination.total == 2
        assert page.pagination.pages == 2
        assert len(page.buyers) == 1
        assert page.buyers[0].city == "Zirakpur"

    @pytest.mark.asyncio
    async def test_list_search_matches_phone(self, create, session_factory):
        await create()
        await create(phone="9123456789", fullName="Ravi Kumar")

        async with session_factory() as db:
            page = await BuyerServices.list_buyers_service(BuyerListParams(search="91234"), db)

        assert [b.full_name for b in page.buyers] == ["Ravi Kumar"]

    @pytest.mark.asyncio
    async def test_export_uses_import_columns(self, create, session_factory):
        await create()

        async with session_factory() as db:
            text = await BuyerServices.export_csv_service(BuyerListParams(), db)

        header, row = text.strip().splitlines()
        assert header.startswith("fullName,email,phone")
        assert row.endswith('"urgent,premium"')
