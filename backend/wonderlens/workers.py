from celery import Celery
from celery.schedules import crontab
from .config import settings

celery_app = Celery(
    "wonderlens",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["wonderlens.tasks"]
)

celery_app.conf.update(
    timezone="UTC",
    task_track_started=True,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    broker_transport_options={"visibility_timeout": 3600},
    task_routes={"wonderlens.tasks.*": {"queue": "content"}},
    beat_schedule={
        "generate-daily-news": {
            "task": "wonderlens.tasks.generate_daily_news_task",
            "schedule": crontab(hour=4, minute=0),
        },
        "generate-quiz-content": {
            "task": "wonderlens.tasks.generate_quiz_content_task",
            "schedule": crontab(hour=5, minute=0, day_of_week="mon"),
        },
    },
)
