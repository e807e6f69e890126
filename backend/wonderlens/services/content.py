from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import DataStoreError
from ..inference.prompts import GLOBAL_COUNTRY
from ..logger import logger
from ..models import DailyKidNews, QuizContent


@dataclass(frozen=True)
class QuizLookup:
    json_blob: Dict[str, Any]
    category: str
    fallback: bool


async def find_news(db: AsyncSession, country: str, age_band: str, today: date) -> Optional[Dict[str, Any]]:
    """
    Today's news pack for (country, age_band), else today's global pack.

    Returns None when neither exists; store failures raise DataStoreError.
    """
    for candidate in (country, GLOBAL_COUNTRY):
        try:
            result = await db.execute(
                select(DailyKidNews.json_blob).where(
                    DailyKidNews.date == today,
                    DailyKidNews.country == candidate,
                    DailyKidNews.age_band == age_band,
                )
            )
            blob = result.scalars().first()
        except SQLAlchemyError as e:
            raise DataStoreError(details=str(e))

        if blob is not None:
            logger.info(
                "News pack found",
                extra={"country": candidate, "age_band": age_band, "date": today.isoformat(),
                       "fallback": candidate != country},
            )
            return blob
        if candidate == GLOBAL_COUNTRY:
            break
    return None


async def find_quiz(db: AsyncSession, category: str, age_band: str) -> Optional[QuizLookup]:
    """Exact (category, age_band) quiz pack, else any pack for the age band."""
    try:
        result = await db.execute(
            select(QuizContent).where(QuizContent.category == category, QuizContent.age_band == age_band)
        )
        row = result.scalars().first()
        if row is not None:
            return QuizLookup(json_blob=row.json_blob, category=row.category, fallback=False)

        result = await db.execute(
            select(QuizContent).where(QuizContent.age_band == age_band).order_by(QuizContent.category).limit(1)
        )
        row = result.scalars().first()
    except SQLAlchemyError as e:
        raise DataStoreError(details=str(e))

    if row is None:
        return None
    logger.info(
        "Serving fallback quiz for age band",
        extra={"requested_category": category, "served_category": row.category, "age_band": age_band},
    )
    return QuizLookup(json_blob=row.json_blob, category=row.category, fallback=True)
