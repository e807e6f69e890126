"""
Quiz route
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..exceptions import ContentNotFoundError, InvalidParameterError
from ..services.age_bands import age_band_for
from ..services.content import find_quiz
from ..logger import logger

router = APIRouter(prefix="/api", tags=["Content"])

@router.get("/quiz")
async def get_quiz(
    category: Optional[str] = Query(None),
    age: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the quiz pack for a category and age.

    When the category has no pack for the age band, any pack for that band is
    served instead; X-Quiz-Fallback / X-Quiz-Category tell the client which one.
    """
    if not category or age is None:
        raise InvalidParameterError("Missing category or age parameter")

    age_band = age_band_for(age)
    if not age_band:
        raise InvalidParameterError("Invalid age")

    logger.info("Looking up quiz", extra={"category": category, "age_band": age_band})
    found = await find_quiz(db, category, age_band)
    if found is None:
        raise ContentNotFoundError("No quiz found for this age group")

    return JSONResponse(
        content=found.json_blob,
        headers={
            "X-Quiz-Fallback": "true" if found.fallback else "false",
            "X-Quiz-Category": found.category,
        },
    )
