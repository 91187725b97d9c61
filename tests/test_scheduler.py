import logging

import pytest
from apscheduler.triggers.cron import CronTrigger

from autoblog import scheduler, store
from autoblog.config import DEFAULT_TOPIC


def test_build_scheduler_registers_daily_job():
    sched = scheduler.build_scheduler("0 3 * * *")
    job = sched.get_job(scheduler.JOB_ID)

    assert job is not None
    assert isinstance(job.trigger, CronTrigger)
    fields = {f.name: str(f) for f in job.trigger.fields}
    assert fields["hour"] == "3"
    assert fields["minute"] == "0"


def test_build_scheduler_rejects_bad_expression():
    with pytest.raises(ValueError):
        scheduler.build_scheduler("every day at three")


def test_scheduled_job_creates_article(db):
    scheduler.scheduled_create_article()

    articles = store.fetch_all(db)
    assert len(articles) == 1
    assert articles[0].title == f"Fallback article on {DEFAULT_TOPIC}"


def test_scheduled_job_failure_is_logged_not_raised(monkeypatch, caplog, db):
    def boom(session):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(scheduler, "create_article", boom)

    with caplog.at_level(logging.ERROR, logger="autoblog.scheduler"):
        scheduler.scheduled_create_article()

    assert "Daily article generation failed: database is locked" in caplog.text
    assert store.count_all(db) == 0
