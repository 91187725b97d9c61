import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

import uvicorn
from fastapi import APIRouter, Body, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from autoblog import article_service, store
from autoblog.ai_client import GenerationClient, get_ai_client
from autoblog.config import DEFAULT_TOPIC, Settings, get_settings
from autoblog.db import SessionLocal, get_db, init_db, ping, wait_for_db
from autoblog.scheduler import start_article_job
from autoblog.schemas import ArticleOut, Diagnostics, GenerateRequest, HealthOut

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def initialize(settings: Settings) -> None:
    """One-time startup work: schema, seed data and AI configuration report."""
    wait_for_db()
    init_db()
    db = SessionLocal()
    try:
        store.seed_if_empty(db)
    finally:
        db.close()
    GenerationClient(settings).log_configuration()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    initialize(settings)
    scheduler = None
    if settings.scheduler_enabled:
        scheduler = start_article_job(settings.cron_schedule)
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)


settings = get_settings()

app = FastAPI(title="Autoblog", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

router = APIRouter(prefix="/api/articles")


def _error_response(status_code: int, error: str, details: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "details": details})


@router.get("", response_model=List[ArticleOut])
def list_articles(db: Session = Depends(get_db)):
    try:
        articles = article_service.list_articles(db)
    except SQLAlchemyError as e:
        logger.error("Error fetching articles: %s", e)
        return _error_response(500, "Failed to fetch articles", str(e))
    return [ArticleOut.model_validate(a) for a in articles]


@router.post("/generate", response_model=ArticleOut, status_code=201)
def generate_article(
    req: Optional[GenerateRequest] = Body(None),
    db: Session = Depends(get_db),
    client: GenerationClient = Depends(get_ai_client),
):
    topic = req.topic if req and req.topic and req.topic.strip() else DEFAULT_TOPIC
    try:
        article = article_service.create_article(db, topic, client=client)
    except SQLAlchemyError as e:
        logger.error("Error generating article: %s", e)
        return _error_response(500, "Failed to generate article", str(e))
    return ArticleOut.model_validate(article)


@router.get("/diagnostics/ai", response_model=Diagnostics)
def ai_diagnostics(client: GenerationClient = Depends(get_ai_client)):
    try:
        return client.test_connection()
    except Exception as e:
        logger.error("Error running AI diagnostics: %s", e)
        return _error_response(500, "Failed to run diagnostics", str(e))


@router.get("/{article_id}", response_model=ArticleOut)
def get_article(article_id: int, db: Session = Depends(get_db)):
    try:
        article = article_service.get_article(db, article_id)
    except SQLAlchemyError as e:
        logger.error("Error fetching article: %s", e)
        return _error_response(500, "Failed to fetch article", str(e))
    if article is None:
        return _error_response(404, "Not found", f"Article {article_id} does not exist")
    return ArticleOut.model_validate(article)


app.include_router(router)


@app.get("/health", response_model=HealthOut, response_model_exclude_none=True)
def health(db: Session = Depends(get_db)):
    try:
        ping(db)
    except SQLAlchemyError as e:
        return JSONResponse(
            status_code=503,
            content={"ok": False, "db": "disconnected", "error": str(e)},
        )
    return HealthOut(ok=True, db="connected", timestamp=datetime.now(timezone.utc).isoformat())


# Routes above take precedence over the static mount.
if os.path.isdir(settings.static_dir):
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
