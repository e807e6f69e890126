from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass

from sqlalchemy import func, select

from wonderlens.db import AsyncSessionLocal
from wonderlens.logger import logger
from wonderlens.models import DailyKidNews, Device, LLMResponse, QuizContent, Scan


@dataclass(frozen=True)
class TableCounts:
    devices: int
    scans: int
    openai_responses: int
    daily_kidnews: int
    quiz_content: int


async def _count(db, model) -> int:
    return int((await db.execute(select(func.count()).select_from(model))).scalar_one())


async def get_counts() -> TableCounts:
    async with AsyncSessionLocal() as db:
        return TableCounts(
            devices=await _count(db, Device),
            scans=await _count(db, Scan),
            openai_responses=await _count(db, LLMResponse),
            daily_kidnews=await _count(db, DailyKidNews),
            quiz_content=await _count(db, QuizContent),
        )


async def check_tables() -> None:
    counts = await get_counts()
    logger.info("Table row counts", extra={"counts": asdict(counts)})
    for table, count in asdict(counts).items():
        print(f"{table:<18} {count}")


def main() -> None:
    asyncio.run(check_tables())


if __name__ == "__main__":
    main()
