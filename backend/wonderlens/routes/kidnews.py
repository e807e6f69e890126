"""
Daily kid news route
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..exceptions import ContentNotFoundError, InvalidParameterError
from ..services.age_bands import age_band_for
from ..services.content import find_news
from ..logger import logger

router = APIRouter(prefix="/api", tags=["Content"])

@router.get("/kidnews")
async def get_kid_news(
    country: Optional[str] = Query(None),
    age: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    """Get today's news pack for a country and age, falling back to the global pack"""
    if not country or age is None:
        raise InvalidParameterError("Missing country or age parameter")

    age_band = age_band_for(age)
    if not age_band:
        raise InvalidParameterError("Invalid age")

    today = datetime.now(timezone.utc).date()
    logger.info("Looking up news", extra={"date": today.isoformat(), "country": country, "age_band": age_band})

    blob = await find_news(db, country, age_band, today)
    if blob is None:
        raise ContentNotFoundError("No news found for today")
    return blob
