"""People directory routes"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from casetrack.db.session import get_db
from casetrack.services.case_query_service import CaseQueryService

router = APIRouter(prefix="/persons", tags=["Persons"])


@router.get("")
async def list_persons(
    search: Optional[str] = Query(None, description="Matches name, aadhaar, phone or address"),
    db: AsyncSession = Depends(get_db)
):
    """List people with the roles they hold in each case"""
    people = await CaseQueryService(db).list_people(search)
    return {"message": "Persons fetched successfully", "people": people}
