import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from autoblog import db as database
from autoblog.article_service import create_article

logger = logging.getLogger(__name__)

JOB_ID = "daily_article"


def scheduled_create_article() -> None:
    """Create one article with the default topic; failures wait for the next tick."""
    session = database.SessionLocal()
    try:
        article = create_article(session)
        logger.info("Daily article generated: id=%s", article.id)
    except Exception as e:
        logger.error("Daily article generation failed: %s", e)
    finally:
        session.close()


def build_scheduler(schedule: str, scheduler: Optional[BackgroundScheduler] = None) -> BackgroundScheduler:
    scheduler = scheduler or BackgroundScheduler()
    scheduler.add_job(
        scheduled_create_article,
        CronTrigger.from_crontab(schedule),
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def start_article_job(schedule: str) -> BackgroundScheduler:
    logger.info('Starting article cron at "%s"', schedule)
    scheduler = build_scheduler(schedule)
    scheduler.start()
    return scheduler
