# crud/buyer.py
from typing import List, Optional, Tuple
from uuid import UUID, uuid4
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from datetime import datetime

from leadintake.models.buyer import Buyer


# --- Phone lookup (uniqueness checks) ---
async def get_buyer_by_phone(db: AsyncSession, phone: str, exclude_id: Optional[UUID] = None) -> Optional[Buyer]:
    stmt = select(Buyer).where(Buyer.phone == phone)
    if exclude_id is not None:
        stmt = stmt.where(Buyer.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    return result.scalar_one_or_none()


# --- Fetch Buyer by ID ---
async def get_buyer_by_id(db: AsyncSession, buyer_id: UUID) -> Optional[Buyer]:
    result = await db.execute(select(Buyer).where(Buyer.id == buyer_id))
    return result.scalar_one_or_none()


# --- Insert Buyer ---
async def create_buyer(db: AsyncSession, buyer_data: dict, owner_id: UUID) -> Buyer:
    new_buyer = Buyer(
        id=uuid4(),
        **buyer_data,
        owner_id=owner_id,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow(),
    )
    db.add(new_buyer)
    await db.flush()
    return new_buyer


# --- Update Buyer ---
async def update_buyer(db: AsyncSession, buyer: Buyer, buyer_data: dict) -> Buyer:
    for field, value in buyer_data.items():
        setattr(buyer, field, value)
    buyer.updated_at = datetime.utcnow()
    await db.flush()
    return buyer


# --- Delete Buyer ---
async def delete_buyer(db: AsyncSession, buyer: Buyer) -> None:
    await db.delete(buyer)
    await db.flush()


def _filters(search: Optional[str], city=None, property_type=None, status=None, timeline=None) -> list:
    filters = []
    if search:
        pattern = f"%{search}%"
        filters.append(
            or_(
                Buyer.full_name.ilike(pattern),
                Buyer.email.ilike(pattern),
                Buyer.phone.contains(search),
            )
        )
    if city:
        filters.append(Buyer.city == city.value)
    if property_type:
        filters.append(Buyer.property_type == property_type.value)
    if status:
        filters.append(Buyer.status == status.value)
    if timeline:
        filters.append(Buyer.timeline == timeline.value)
    return filters


# --- List Buyers (filtered, newest update first) ---
async def list_buyers(
    db: AsyncSession,
    search: Optional[str] = None,
    city=None,
    property_type=None,
    status=None,
    timeline=None,
    offset: int = 0,
    limit: Optional[int] = None,
) -> Tuple[List[Buyer], int]:
    filters = _filters(search, city, property_type, status, timeline)

    stmt = select(Buyer).where(*filters).order_by(Buyer.updated_at.desc()).offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)

    total = await db.scalar(select(func.count()).select_from(Buyer).where(*filters))
    return result.scalars().all(), total or 0
