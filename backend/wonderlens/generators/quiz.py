from __future__ import annotations

import argparse
import asyncio
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from ..config import settings
from ..db import AsyncSessionLocal, upsert_insert
from ..exceptions import ModelOutputParseError
from ..inference import llm
from ..inference.json_guard import parse_model_json
from ..inference.prompts import QUIZ_AGE_BANDS, QUIZ_CATEGORIES, build_quiz_prompt
from ..logger import logger
from ..models import QuizContent
from .news import CompleteFn, GenerationReport


async def _complete_quiz(prompt: str) -> str:
    return await llm.complete_prompt(
        prompt,
        model=settings.CONTENT_MODEL,
        max_tokens=settings.QUIZ_MAX_TOKENS,
        temperature=settings.QUIZ_TEMPERATURE,
    )


async def upsert_quiz_pack(db, *, category: str, age_band: str, pack: dict) -> None:
    stmt = upsert_insert(db, QuizContent).values(
        category=category,
        age_band=age_band,
        json_blob=pack,
        created_at=datetime.utcnow(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["category", "age_band"],
        set_={"json_blob": stmt.excluded.json_blob, "created_at": stmt.excluded.created_at},
    )
    await db.execute(stmt)
    await db.commit()


async def generate_quiz_content(
    *,
    session_factory=AsyncSessionLocal,
    complete: CompleteFn = _complete_quiz,
) -> GenerationReport:
    report = GenerationReport()
    logger.info("Starting quiz generation")

    async with session_factory() as db:
        for category in QUIZ_CATEGORIES:
            for age_band, question_count in QUIZ_AGE_BANDS:
                key = f"{category}:{age_band}"
                try:
                    raw = await complete(build_quiz_prompt(category, age_band, question_count))
                    pack = parse_model_json(raw)
                    await upsert_quiz_pack(db, category=category, age_band=age_band, pack=pack)
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

                logger.info(f"[{key}] Quiz pack stored", extra={"combination": key})
                report.stored.append(key)

    logger.info(
        "Quiz generation completed",
        extra={"stored": len(report.stored), "failed": report.failed},
    )
    return report


def _build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        description="Generate quiz packs for every category and age band.",
    )


def main() -> None:
    _build_parser().parse_args()
    report = asyncio.run(generate_quiz_content())
    if report.failed:
        raise SystemExit(f"Quiz generation finished with failures: {', '.join(report.failed)}")


if __name__ == "__main__":
    main()
