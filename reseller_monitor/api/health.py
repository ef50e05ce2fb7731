from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..db.engine import get_session

router = APIRouter()


@router.get("/health", tags=["System"])
async def get_system_health(session: AsyncSession = Depends(get_session)):
    """
    Returns the system health status including database reachability.
    """
    try:
        await session.exec(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        database = "error"

    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
    }
