import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from autoblog import store
from autoblog.ai_client import GenerationClient, get_ai_client
from autoblog.config import DEFAULT_TOPIC
from autoblog.models import Article

logger = logging.getLogger(__name__)


def list_articles(db: Session) -> List[Article]:
    return store.fetch_all(db)


def get_article(db: Session, article_id: int) -> Optional[Article]:
    return store.fetch_by_id(db, article_id)


def create_article(
    db: Session,
    topic: str = DEFAULT_TOPIC,
    client: Optional[GenerationClient] = None,
) -> Article:
    """Generate an article for ``topic`` and persist it.

    Generation always yields at least the fallback template, so the only
    errors that reach the caller come from the database.
    """
    client = client or get_ai_client()
    result = client.generate(topic)
    article_id = store.insert_article(db, result.title, result.content)
    article = store.fetch_by_id(db, article_id)
    logger.info("Stored article id=%s title=%r", article_id, result.title)
    return article
