import asyncio
import traceback
from .workers import celery_app
from .generators.news import generate_daily_news
from .generators.quiz import generate_quiz_content
from .logger import logger

def _summary(report) -> dict:
    return {
        "stored": report.stored,
        "failed": report.failed,
        "purge_method": report.purge_method,
    }

@celery_app.task(bind=True, acks_late=True, max_retries=0)
def generate_daily_news_task(self):
    """
    Celery task that refreshes today's news packs and purges expired ones.
    """
    logger.info("Daily news task started", extra={"task_id": self.request.id})
    try:
        report = asyncio.run(generate_daily_news())
    except Exception as e:
        logger.error(
            f"Daily news task failed: {e}",
            extra={"task_id": self.request.id, "traceback": traceback.format_exc()}
        )
        raise
    return _summary(report)

@celery_app.task(bind=True, acks_late=True, max_retries=0)
def generate_quiz_content_task(self):
    """
    Celery task that regenerates every quiz pack.
    """
    logger.info("Quiz content task started", extra={"task_id": self.request.id})
    try:
        report = asyncio.run(generate_quiz_content())
    except Exception as e:
        logger.error(
            f"Quiz content task failed: {e}",
            extra={"task_id": self.request.id, "traceback": traceback.format_exc()}
        )
        raise
    return _summary(report)
