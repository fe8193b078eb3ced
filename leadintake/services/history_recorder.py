import logging
from typing import Any, Dict, List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from leadintake.crud import buyer_history as crud_history
from leadintake.models.buyer_history import BuyerHistory
from leadintake.models.enums import HistoryAction
from leadintake.services.diff_engine import plain_value

logger = logging.getLogger(__name__)


class HistoryRecorder:
    """
    Appends audit entries for buyer mutations.

    Create, update and delete go through `record_change`, which writes
    nothing for an empty diff. Imports go through `record_import`, which
    always writes one entry holding the imported row itself.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_change(
        self,
        buyer_id: UUID,
        actor_id: UUID,
        action: HistoryAction,
        diff: Dict[str, Dict[str, Any]],
    ) -> Optional[BuyerHistory]:
        if not diff:
            logger.debug("No changes for buyer %s, skipping %s history", buyer_id, action.value)
            return None
        return await crud_history.create_history_entry(
            self.db, buyer_id=buyer_id, changed_by=actor_id, action=action.value, diff=diff
        )

    async def record_import(self, buyer_id: UUID, actor_id: UUID, row: Dict[str, Any]) -> BuyerHistory:
        payload = {field: plain_value(value) for field, value in row.items()}
        return await crud_history.create_history_entry(
            self.db, buyer_id=buyer_id, changed_by=actor_id, action=HistoryAction.IMPORT.value, diff=payload
        )

    async def list_for_buyer(self, buyer_id: UUID) -> List[Dict[str, Any]]:
        rows = await crud_history.get_history_by_buyer(self.db, buyer_id)
        return [
            {
                "id": entry.id,
                "action": entry.action,
                "changed_at": entry.changed_at,
                "changed_by": {"name": user.name, "email": user.email},
                "diff": entry.diff,
            }
            for entry, user in rows
        ]
