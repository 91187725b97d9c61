import logging
import os
import time

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from autoblog.config import get_settings

logger = logging.getLogger(__name__)

DATABASE_URL = get_settings().database_url


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(DATABASE_URL, connect_args=_connect_args(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def wait_for_db(max_attempts: int = 10, delay: int = 1) -> None:
    """Attempt to connect to the database until it is ready."""
    _ensure_sqlite_dir(DATABASE_URL)
    for _ in range(max_attempts):
        try:
            with engine.connect():
                return
        except OperationalError:
            time.sleep(delay)
    raise RuntimeError("Database is not ready")


def _ensure_sqlite_dir(url: str) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite" or not parsed.database:
        return
    if parsed.database == ":memory:":
        return
    directory = os.path.dirname(os.path.abspath(parsed.database))
    os.makedirs(directory, exist_ok=True)


def init_db() -> None:
    """Create the articles table if it does not exist yet."""
    from autoblog.models import Base

    _ensure_sqlite_dir(DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready at %s", engine.url.render_as_string(hide_password=True))


def ping(db) -> None:
    """Run a trivial query; raises if the store is unreachable."""
    db.execute(text("SELECT 1"))
