# crud/buyer_history.py
from typing import Any, Dict, List, Tuple
from uuid import UUID, uuid4
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime

from leadintake.models.buyer_history import BuyerHistory
from leadintake.models.user import User


# ---------------- CREATE ----------------
async def create_history_entry(
    db: AsyncSession,
    buyer_id: UUID,
    changed_by: UUID,
    action: str,
    diff: Dict[str, Any],
) -> BuyerHistory:
    entry = BuyerHistory(
        id=uuid4(),
        buyer_id=buyer_id,
        changed_by=changed_by,
        changed_at=datetime.utcnow(),
        action=action,
        diff=diff,
    )
    db.add(entry)
    await db.flush()
    return entry


# ---------------- READ ----------------
async def get_history_by_buyer(db: AsyncSession, buyer_id: UUID) -> List[Tuple[BuyerHistory, User]]:
    result = await db.execute(
        select(BuyerHistory, User)
        .join(User, BuyerHistory.changed_by == User.id)
        .where(BuyerHistory.buyer_id == buyer_id)
        .order_by(BuyerHistory.changed_at.desc())
    )
    return result.all()
