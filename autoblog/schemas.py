from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class ArticleOut(BaseModel):
    id: int
    title: str
    content: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class GenerateRequest(BaseModel):
    topic: Optional[str] = None


class GenerationResult(BaseModel):
    title: str
    content: str


class Diagnostics(BaseModel):
    has_api_key: bool
    api_key_length: int = 0
    configured_model: str
    fallback_model: str
    errors: List[str] = []
    warnings: List[str] = []
    success: bool = False
    available_free_models: Optional[List[str]] = None
    model_count: Optional[int] = None
    test_response: Optional[str] = None
    raw_response: Optional[str] = None
    status_code: Optional[int] = None
    error_details: Optional[Any] = None


class ErrorOut(BaseModel):
    error: str
    details: str = ""


class HealthOut(BaseModel):
    ok: bool
    db: str
    timestamp: Optional[str] = None
    error: Optional[str] = None
