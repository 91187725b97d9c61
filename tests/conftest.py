import json
import os
import pathlib
import sys

import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Configure environment before importing the app
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["SCHEDULER_ENABLED"] = "false"
base_dir = pathlib.Path(__file__).resolve().parents[1]
sys.path.append(str(base_dir))

from autoblog import ai_client  # noqa: E402
from autoblog.db import SessionLocal, engine  # noqa: E402
from autoblog.models import Base  # noqa: E402

FREE_MODEL = "meta-llama/llama-3.2-3b-instruct:free"


@pytest.fixture(autouse=True)
def reset_state(monkeypatch):
    """Fresh schema and no API key for every test."""
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("AI_MODEL", raising=False)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def broken_session_factory():
    """Sessions bound to a SQLite file that cannot be opened."""
    broken_engine = create_engine("sqlite:////nonexistent-autoblog-dir/blog.db")
    yield sessionmaker(bind=broken_engine)
    broken_engine.dispose()


def make_response(status_code: int, payload=None, text: str | None = None) -> requests.Response:
    r = requests.Response()
    r.status_code = status_code
    r.url = "https://openrouter.ai/api/v1"
    r.encoding = "utf-8"
    if payload is not None:
        r._content = json.dumps(payload).encode()
        r.headers["Content-Type"] = "application/json"
    else:
        r._content = (text or "").encode()
        r.headers["Content-Type"] = "text/plain"
    return r


def completion(text: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


class FakeOpenRouter:
    """Stands in for ``requests.request``; replays queued completion responses."""

    def __init__(self):
        self.calls = []
        self.models = make_response(200, {"data": [{"id": FREE_MODEL}, {"id": "openai/gpt-4o"}]})
        self.completions = []

    def add_completion(self, status_code: int = 200, payload=None, text=None, exc=None):
        self.completions.append(exc or make_response(status_code, payload, text))

    def add_error(self, status_code: int, message: str = "error"):
        self.add_completion(status_code, {"error": {"message": message, "code": status_code}})

    @property
    def completion_calls(self):
        return [c for c in self.calls if c["url"].endswith("/chat/completions")]

    def __call__(self, method, url, headers=None, json=None, timeout=None, **kwargs):
        self.calls.append(
            {"method": method, "url": url, "headers": headers, "json": json, "timeout": timeout}
        )
        if url.endswith("/models"):
            resp = self.models
        else:
            assert self.completions, "unexpected completion request"
            resp = self.completions.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


@pytest.fixture
def fake_openrouter(monkeypatch):
    fake = FakeOpenRouter()
    monkeypatch.setattr(ai_client.requests, "request", fake)
    return fake
