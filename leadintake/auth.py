# leadintake/auth.py
from typing import Optional
from uuid import UUID
from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from leadintake.crud import user as crud_user
from leadintake.db.session import get_db
from leadintake.models.user import User


async def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the acting user from the `X-User-Id` header.
    Session handling lives in front of this service; here we only
    check that the id belongs to a known user.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Unauthorized")

    user = await crud_user.get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
