"""Admin routes for writing whole cases"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from casetrack.api.deps import (
    INVALID_TOKEN_MESSAGE, MISSING_TOKEN_MESSAGE, find_active_token, require_admin_token, touch_token,
)
from casetrack.api.v1.schemas.cases import CaseWriteResponse, MessageResponse, TokenCheckResponse
from casetrack.db.session import get_db
from casetrack.services.case_sync_service import CaseSyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/cases",
    response_model=CaseWriteResponse,
    status_code=201,
    dependencies=[Depends(require_admin_token)],
)
async def create_case(
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a case from a full case document.

    The body is `{"case": {...}}`. People, documents and authorities inside it
    are matched against existing rows by their natural keys.
    """
    case_id = await CaseSyncService(db).create_case(payload.get("case"))
    return CaseWriteResponse(message="Case created successfully", case_id=case_id)


@router.put(
    "/cases/{case_id}",
    response_model=CaseWriteResponse,
    dependencies=[Depends(require_admin_token)],
)
async def update_case(
    case_id: int,
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db)
):
    """
    Replace a case with the submitted document.

    Collections are complete: anything the document no longer lists is
    removed from the case.
    """
    await CaseSyncService(db).update_case(case_id, payload.get("case"))
    return CaseWriteResponse(message="Case updated successfully", case_id=case_id)


@router.delete(
    "/cases/{case_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin_token)],
)
async def delete_case(
    case_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Delete a case and everything it owns. People and authorities are kept."""
    await CaseSyncService(db).delete_case(case_id)
    return MessageResponse(message="Case and all related records deleted successfully")


@router.get("/verify-token", response_model=TokenCheckResponse)
async def verify_token(
    admin_token: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Report whether an admin token is usable, for the admin UI login"""
    if not admin_token:
        return JSONResponse(
            status_code=401,
            content={"message": MISSING_TOKEN_MESSAGE, "isValid": False},
        )

    token = await find_active_token(db, admin_token)
    if token is None:
        logger.info("Rejected admin token check")
        return TokenCheckResponse(message=INVALID_TOKEN_MESSAGE, isValid=False)

    await touch_token(db, token)
    return TokenCheckResponse(message="Token is valid", isValid=True)
