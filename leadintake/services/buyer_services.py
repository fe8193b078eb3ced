import csv
import io
import math
from typing import List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from leadintake.crud import buyer as crud_buyer
from leadintake.models.enums import HistoryAction
from leadintake.models.user import User
from leadintake.schemas.buyer import BuyerForm, BuyerOut, BuyerListParams, BuyerListResponse, Pagination
from leadintake.schemas.buyer_import import IMPORT_COLUMNS
from leadintake.schemas.history import HistoryEntryOut
from leadintake.services.diff_engine import compute_diff, snapshot
from leadintake.services.exceptions import BuyerNotFoundError, DuplicatePhoneError
from leadintake.services.history_recorder import HistoryRecorder

TEMPLATE_EXAMPLE_ROW = [
    "John Doe", "john@example.com", "9876543210", "Chandigarh", "Apartment", "Two",
    "Buy", "500000", "1000000", "ZeroToThree", "Website", "New", "Interested in 2BHK", "urgent,premium",
]

# Status written to history when a buyer is removed
DELETED_STATUS = "DELETED"


class BuyerServices:

    @staticmethod
    async def create_buyer_service(request: BuyerForm, actor: User, db: AsyncSession) -> BuyerOut:
        """
        Create a single buyer from the form schema.

        Workflow:
        1. Reject the request if another buyer already has this phone.
        2. Insert the buyer owned by the acting user.
        3. Write a CREATE history entry listing every non-null field.
        4. Commit.

        Raises:
            DuplicatePhoneError: phone already in use (checked up front and
            again through the unique constraint).
        """
        if await crud_buyer.get_buyer_by_phone(db, request.phone):
            raise DuplicatePhoneError(request.phone)

        new_state = snapshot(request)
        try:
            buyer = await crud_buyer.create_buyer(db, new_state, owner_id=actor.id)
        except IntegrityError:
            await db.rollback()
            raise DuplicatePhoneError(request.phone)

        await HistoryRecorder(db).record_change(
            buyer.id, actor.id, HistoryAction.CREATE, compute_diff(None, new_state)
        )
        await db.commit()
        return BuyerOut.model_validate(buyer)


    @staticmethod
    async def get_buyer_service(buyer_id: UUID, db: AsyncSession) -> BuyerOut:
        buyer = await crud_buyer.get_buyer_by_id(db, buyer_id)
        if not buyer:
            raise BuyerNotFoundError(buyer_id)
        return BuyerOut.model_validate(buyer)


    @staticmethod
    async def update_buyer_service(buyer_id: UUID, request: BuyerForm, actor: User, db: AsyncSession) -> BuyerOut:
        """
        Replace a buyer's fields and record what changed.

        The phone is re-checked for uniqueness only when it changes. History is
        written only if at least one field actually differs.
        """
        buyer = await crud_buyer.get_buyer_by_id(db, buyer_id)
        if not buyer:
            raise BuyerNotFoundError(buyer_id)

        if request.phone != buyer.phone:
            if await crud_buyer.get_buyer_by_phone(db, request.phone, exclude_id=buyer_id):
                raise DuplicatePhoneError(request.phone)

        old_state = snapshot(buyer)
        new_state = snapshot(request)
        diff = compute_diff(old_state, new_state)

        try:
            await crud_buyer.update_buyer(db, buyer, new_state)
        except IntegrityError:
            await db.rollback()
            raise DuplicatePhoneError(request.phone)

        await HistoryRecorder(db).record_change(buyer.id, actor.id, HistoryAction.UPDATE, diff)
        await db.commit()
        return BuyerOut.model_validate(buyer)


    @staticmethod
    async def delete_buyer_service(buyer_id: UUID, actor: User, db: AsyncSession) -> None:
        """Write a DELETE history entry capturing the last status, then remove the buyer."""
        buyer = await crud_buyer.get_buyer_by_id(db, buyer_id)
        if not buyer:
            raise BuyerNotFoundError(buyer_id)

        diff = compute_diff(snapshot(buyer), {"status": DELETED_STATUS})
        await HistoryRecorder(db).record_change(buyer.id, actor.id, HistoryAction.DELETE, diff)
        await crud_buyer.delete_buyer(db, buyer)
        await db.commit()


    @staticmethod
    async def list_buyers_service(params: BuyerListParams, db: AsyncSession) -> BuyerListResponse:
        page = max(params.page, 1)
        limit = min(max(params.limit, 1), 100)

        buyers, total = await crud_buyer.list_buyers(
            db,
            search=params.search,
            city=params.city,
            property_type=params.property_type,
            status=params.status,
            timeline=params.timeline,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return BuyerListResponse(
            buyers=[BuyerOut.model_validate(b) for b in buyers],
            pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
        )


    @staticmethod
    async def get_history_service(buyer_id: UUID, db: AsyncSession) -> List[HistoryEntryOut]:
        if not await crud_buyer.get_buyer_by_id(db, buyer_id):
            raise BuyerNotFoundError(buyer_id)
        entries = await HistoryRecorder(db).list_for_buyer(buyer_id)
        return [HistoryEntryOut.model_validate(entry) for entry in entries]


    @staticmethod
    async def export_csv_service(params: BuyerListParams, db: AsyncSession) -> str:
        buyers, _ = await crud_buyer.list_buyers(
            db,
            search=params.search,
            city=params.city,
            property_type=params.property_type,
            status=params.status,
            timeline=params.timeline,
        )

        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(IMPORT_COLUMNS)
        for b in buyers:
            writer.writerow([
                b.full_name,
                b.email or "",
                b.phone,
                b.city,
                b.property_type,
                b.bhk or "",
                b.purpose,
                "" if b.budget_min is None else b.budget_min,
                "" if b.budget_max is None else b.budget_max,
                b.timeline,
                b.source,
                b.status,
                b.notes or "",
                ",".join(b.tags or []),
            ])
        return output.getvalue()


    @staticmethod
    def template_csv() -> str:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(IMPORT_COLUMNS)
        writer.writerow(TEMPLATE_EXAMPLE_ROW)
        return output.getvalue()
