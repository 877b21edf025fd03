"""API dependencies for admin authorization"""
from typing import Optional

from fastapi import Depends, HTTPException, Query
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from casetrack.db.session import get_db
from casetrack.db.models import AdminToken

MISSING_TOKEN_MESSAGE = "Admin token is required as a query parameter"
INVALID_TOKEN_MESSAGE = "Invalid or inactive admin token"


async def find_active_token(db: AsyncSession, token: str) -> Optional[AdminToken]:
    """Look up an active admin token"""
    result = await db.execute(
        select(AdminToken).where(AdminToken.token == token, AdminToken.is_active.is_(True))
    )
    return result.scalar_one_or_none()


async def touch_token(db: AsyncSession, token: AdminToken) -> None:
    """Stamp the token's last use; committed by the request session"""
    await db.execute(
        update(AdminToken.__table__)
        .where(AdminToken.__table__.c.id == token.id)
        .values(last_used_at=func.now())
    )


async def require_admin_token(
    admin_token: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
) -> AdminToken:
    """
    Gate for the admin write endpoints.

    The token travels in the `admin_token` query parameter and must match an
    active row of `admin_tokens`.

    Raises:
        HTTPException 401: no token supplied
        HTTPException 403: unknown or deactivated token
    """
    if not admin_token:
        raise HTTPException(status_code=401, detail=MISSING_TOKEN_MESSAGE)

    token = await find_active_token(db, admin_token)
    if token is None:
        raise HTTPException(status_code=403, detail=INVALID_TOKEN_MESSAGE)

    return token
