"""Dashboard analytics routes"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from casetrack.db.session import get_db
from casetrack.services.case_query_service import CaseQueryService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/trending")
async def trending_cases(db: AsyncSession = Depends(get_db)):
    """Cases with the most recent proceeding, evidence or incident"""
    cases = await CaseQueryService(db).trending_cases()
    return {"message": "Trending cases fetched successfully", "trending_cases": cases}


@router.get("/location")
async def location_cases(db: AsyncSession = Depends(get_db)):
    """Cases pinned at the location of their latest incident"""
    cases = await CaseQueryService(db).location_cases()
    return {"message": "Location-based cases fetched successfully", "location_cases": cases}


@router.get("/types")
async def case_type_statistics(db: AsyncSession = Depends(get_db)):
    """Filing dates grouped by case type"""
    statistics = await CaseQueryService(db).case_type_statistics()
    return {"message": "Case type statistics fetched successfully", "type_statistics": statistics}
