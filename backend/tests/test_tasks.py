import pytest
from celery.schedules import crontab

from wonderlens import tasks
from wonderlens.generators.news import GenerationReport
from wonderlens.workers import celery_app


def test_beat_schedule_runs_news_daily_and_quiz_weekly():
    schedule = celery_app.conf.beat_schedule
    assert schedule["generate-daily-news"]["task"] == "wonderlens.tasks.generate_daily_news_task"
    assert schedule["generate-daily-news"]["schedule"] == crontab(hour=4, minute=0)
    assert schedule["generate-quiz-content"]["schedule"] == crontab(hour=5, minute=0, day_of_week="mon")


def test_news_task_returns_generation_summary(monkeypatch):
    async def fake_generate():
        return GenerationReport(stored=["in:10"], failed=["us:6-7"], purge_method="manual")

    monkeypatch.setattr(tasks, "generate_daily_news", fake_generate)

    result = tasks.generate_daily_news_task.apply().get()
    assert result == {"stored": ["in:10"], "failed": ["us:6-7"], "purge_method": "manual"}


def test_quiz_task_propagates_failures(monkeypatch):
    async def broken_generate():
        raise RuntimeError("database unreachable")

    monkeypatch.setattr(tasks, "generate_quiz_content", broken_generate)

    result = tasks.generate_quiz_content_task.apply()
    assert result.failed()
    with pytest.raises(RuntimeError):
        result.get()
