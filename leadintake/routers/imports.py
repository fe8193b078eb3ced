from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response
from redis.asyncio import Redis
from typing import Optional
import logging
import traceback

from leadintake.auth import get_current_user
from leadintake.config import IMPORT_MAX_BYTES
from leadintake.db.redis_client import get_redis
from leadintake.db.session import get_session_factory
from leadintake.models.user import User
from leadintake.schemas.buyer_import import ImportSummary, ImportValidationResponse
from leadintake.services.buyer_services import BuyerServices
from leadintake.services.exceptions import ImportFileError, ImportValidationError, RateLimitExceeded
from leadintake.services.import_orchestrator import BuyerImportOrchestrator
from leadintake.services.rate_limit import enforce_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/import", tags=["Import"])


@router.post(
    "",
    response_model=ImportSummary,
    responses={400: {"model": ImportValidationResponse}},
    summary="Bulk import buyers",
    description="Validates every row of an uploaded CSV/Excel file, then imports valid rows in batches of 20, "
                "skipping phones that already exist."
)
async def import_buyers(
    file: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    session_factory=Depends(get_session_factory),
    redis: Redis = Depends(get_redis),
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    try:
        await enforce_rate_limit(redis, f"import:{user.id}")
        # one byte past the cap is enough to spot an oversized file
        content = await file.read(IMPORT_MAX_BYTES + 1)
        orchestrator = BuyerImportOrchestrator(session_factory)
        return await orchestrator.run(content, file.filename, file.content_type, user.id)
    except RateLimitExceeded as e:
        raise HTTPException(status_code=429, detail=str(e))
    except ImportValidationError as e:
        return JSONResponse(
            status_code=400,
            content=ImportValidationResponse(message=str(e), errors=e.errors).model_dump(),
        )
    except ImportFileError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Error in import_buyers: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/template", summary="Download the import template")
async def download_template():
    return Response(
        content=BuyerServices.template_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="buyers-import-template.csv"'},
    )
