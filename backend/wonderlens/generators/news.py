from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Awaitable, Callable, List, Optional

from sqlalchemy import delete, text
from sqlalchemy.exc import SQLAlchemyError

from ..config import settings
from ..db import AsyncSessionLocal, upsert_insert
from ..exceptions import ModelOutputParseError
from ..inference import llm
from ..inference.json_guard import parse_model_json
from ..inference.prompts import NEWS_AGE_BANDS, NEWS_COUNTRIES, build_news_prompt
from ..logger import logger
from ..models import DailyKidNews

CompleteFn = Callable[[str], Awaitable[str]]


@dataclass
class GenerationReport:
    stored: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    purge_method: Optional[str] = None


async def _complete_news(prompt: str) -> str:
    return await llm.complete_prompt(
        prompt,
        model=settings.CONTENT_MODEL,
        max_tokens=settings.NEWS_MAX_TOKENS,
    )


async def upsert_news_pack(db, *, day: date, country: str, age_band: str, pack: dict) -> None:
    stmt = upsert_insert(db, DailyKidNews).values(
        date=day,
        country=country,
        age_band=age_band,
        json_blob=pack,
        created_at=datetime.utcnow(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["date", "country", "age_band"],
        set_={"json_blob": stmt.excluded.json_blob, "created_at": stmt.excluded.created_at},
    )
    await db.execute(stmt)
    await db.commit()


async def purge_old_news(db, today: date) -> str:
    """
    Delete expired news packs.

    Prefers the database-side delete_old_kidnews procedure, which is handed today's
    date and owns its retention rule. Where that procedure does not exist, rows dated
    more than NEWS_RETENTION_DAYS before today are deleted directly. Returns the method used.
    """
    try:
        await db.execute(text("SELECT delete_old_kidnews(:cutoff)"), {"cutoff": today.isoformat()})
        await db.commit()
        return "procedure"
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning(f"delete_old_kidnews unavailable, deleting manually: {e}")

    cutoff = today - timedelta(days=settings.NEWS_RETENTION_DAYS)
    await db.execute(delete(DailyKidNews).where(DailyKidNews.date < cutoff))
    await db.commit()
    return "manual"


async def generate_daily_news(
    *,
    session_factory=AsyncSessionLocal,
    complete: CompleteFn = _complete_news,
    today: Optional[date] = None,
) -> GenerationReport:
    today = today or datetime.now(timezone.utc).date()
    report = GenerationReport()
    logger.info("Starting daily news generation", extra={"date": today.isoformat()})

    async with session_factory() as db:
        for country in NEWS_COUNTRIES:
            for age_band, max_words in NEWS_AGE_BANDS:
                key = f"{country}:{age_band}"
                try:
                    raw = await complete(build_news_prompt(country, age_band, max_words))
                    pack = parse_model_json(raw)
                    await upsert_news_pack(db, day=today, country=country, age_band=age_band, pack=pack)
                except ModelOutputParseError as e:
                    logger.error(f"[{key}] Could not parse model response: {e}", extra={"combination": key})
                    report.failed.append(key)
                    continue
                except SQLAlchemyError as e:
                    await db.rollback()
                    logger.error(f"[{key}] Store error: {e}", extra={"combination": key})
                    report.failed.append(key)
                    continue
                except Exception as e:
                    logger.error(f"[{key}] Model call failed: {e}", extra={"combination": key})
                    report.failed.append(key)
                    continue

                logger.info(f"[{key}] News pack stored", extra={"combination": key})
                report.stored.append(key)

        try:
            report.purge_method = await purge_old_news(db, today)
            logger.info("Purged old news", extra={"date": today.isoformat(), "method": report.purge_method})
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Failed to purge old news: {e}", extra={"date": today.isoformat()})

    logger.info(
        "Daily news generation completed",
        extra={"stored": len(report.stored), "failed": report.failed},
    )
    return report


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate today's kid news packs for every country and age band.",
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Date to generate for (YYYY-MM-DD, defaults to today in UTC).",
    )
    return parser


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    report = asyncio.run(generate_daily_news(today=args.date))
    if report.failed:
        raise SystemExit(f"News generation finished with failures: {', '.join(report.failed)}")


if __name__ == "__main__":
    main()
