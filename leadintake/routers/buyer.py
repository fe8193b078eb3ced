from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID
import logging
import traceback

from leadintake.auth import get_current_user
from leadintake.models.user import User
from leadintake.schemas.buyer import BuyerForm, BuyerOut, BuyerListParams, BuyerListResponse
from leadintake.schemas.history import HistoryEntryOut
from leadintake.db.session import get_db
from leadintake.services.buyer_services import BuyerServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/buyers", tags=["Buyers"])


@router.post(
    "",
    response_model=BuyerOut,
    status_code=201,
    summary="Create a buyer",
    description="Creates a buyer owned by the acting user and records a CREATE history entry."
)
async def create_buyer(
    request: BuyerForm,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await BuyerServices.create_buyer_service(request, user, db)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Error in create_buyer: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get(
    "",
    response_model=BuyerListResponse,
    summary="List buyers",
    description="Paginated buyers, most recently updated first, with search and enum filters."
)
async def list_buyers(
    params: BuyerListParams = Depends(),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await BuyerServices.list_buyers_service(params, db)
    except Exception as e:
        logger.error("Error in list_buyers: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/{buyer_id}", response_model=BuyerOut, summary="Get a buyer")
async def get_buyer(
    buyer_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await BuyerServices.get_buyer_service(buyer_id, db)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in get_buyer: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.put(
    "/{buyer_id}",
    response_model=BuyerOut,
    summary="Update a buyer",
    description="Replaces the buyer's fields; history is written only for fields that changed."
)
async def update_buyer(
    buyer_id: UUID,
    request: BuyerForm,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await BuyerServices.update_buyer_service(buyer_id, request, user, db)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Error in update_buyer: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.delete("/{buyer_id}", summary="Delete a buyer")
async def delete_buyer(
    buyer_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        await BuyerServices.delete_buyer_service(buyer_id, user, db)
        return {"message": "Buyer deleted successfully"}
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in delete_buyer: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get(
    "/{buyer_id}/history",
    response_model=List[HistoryEntryOut],
    summary="Buyer change history",
    description="History entries for a buyer, newest first, with the acting user's name and email."
)
async def get_buyer_history(
    buyer_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await BuyerServices.get_history_service(buyer_id, db)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in get_buyer_history: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")
