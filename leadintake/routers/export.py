from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
import logging
import traceback

from leadintake.auth import get_current_user
from leadintake.db.session import get_db
from leadintake.models.user import User
from leadintake.schemas.buyer import BuyerListParams
from leadintake.services.buyer_services import BuyerServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/export", tags=["Export"])


@router.get("", summary="Export buyers as CSV", description="Same filters as the buyer list, without pagination.")
async def export_buyers(
    params: BuyerListParams = Depends(),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        csv_text = await BuyerServices.export_csv_service(params, db)
    except Exception as e:
        logger.error("Error in export_buyers: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")

    filename = f"buyers-export-{datetime.utcnow().date().isoformat()}.csv"
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
