"""Public case routes"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from casetrack.db.models import CaseStatus, CaseType
from casetrack.db.session import get_db
from casetrack.services.case_assembler import CaseReadAssembler
from casetrack.services.case_query_service import CaseQueryService

router = APIRouter(prefix="/cases", tags=["Cases"])


@router.get("")
async def list_cases(
    search: Optional[str] = Query(None, description="Substring matched across the case and everything linked to it"),
    type: Optional[CaseType] = Query(None),
    status: Optional[CaseStatus] = Query(None),
    date_after: Optional[date] = Query(None, description="Filed on or after"),
    date_before: Optional[date] = Query(None, description="Filed on or before"),
    db: AsyncSession = Depends(get_db)
):
    """List case summaries, most recently filed first"""
    cases = await CaseQueryService(db).list_cases(
        search=search,
        case_type=type,
        status=status,
        date_after=date_after,
        date_before=date_before,
    )
    return {"message": "Cases fetched successfully", "cases": cases}


@router.get("/{case_id}")
async def get_case(
    case_id: int,
    db: AsyncSession = Depends(get_db)
):
    """
    Get one case with all of its incidents, evidences, sentences,
    investigating authorities and proceedings.

    The `case` object can be edited and sent back to the admin update route.
    """
    case = await CaseReadAssembler(db).assemble(case_id)
    return {"message": "Case details fetched successfully", "case": case}
