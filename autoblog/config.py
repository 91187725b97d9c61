import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

DEFAULT_TOPIC = "B2B SaaS and open-source Web3 infrastructure"
FALLBACK_MODEL = "meta-llama/llama-3.2-3b-instruct:free"
ALTERNATIVE_FREE_MODELS = [
    "meta-llama/llama-3.2-3b-instruct:free",
    "meta-llama/llama-3.1-8b-instruct:free",
    "google/gemini-flash-1.5:free",
    "mistralai/mistral-7b-instruct:free",
    "qwen/qwen-2-7b-instruct:free",
]
TOP_P = 0.9


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    database_url: str = "sqlite:///./data/blog.db"
    openrouter_api_key: Optional[str] = None
    ai_model: str = FALLBACK_MODEL
    alternative_models: List[str] = ALTERNATIVE_FREE_MODELS
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    timeout_ms: int = 30_000
    max_tokens: int = 500
    temperature: float = 0.7
    http_referer: str = "http://localhost:4000"
    x_title: str = "Autoblog"
    cron_schedule: str = "0 3 * * *"
    scheduler_enabled: bool = True
    allowed_origins: List[str] = ["*"]
    port: int = 4000
    static_dir: str = "public"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, keeping defaults for unset ones."""
        values = {
            "openrouter_api_key": (os.getenv("OPENROUTER_API_KEY") or "").strip() or None,
            "ai_model": (os.getenv("AI_MODEL") or "").strip() or FALLBACK_MODEL,
            "scheduler_enabled": _env_bool("SCHEDULER_ENABLED", True),
        }
        env_map = {
            "database_url": "DATABASE_URL",
            "openrouter_base_url": "OPENROUTER_BASE_URL",
            "timeout_ms": "OPENROUTER_TIMEOUT_MS",
            "max_tokens": "OPENROUTER_MAX_TOKENS",
            "temperature": "OPENROUTER_TEMPERATURE",
            "http_referer": "OPENROUTER_HTTP_REFERER",
            "x_title": "OPENROUTER_X_TITLE",
            "cron_schedule": "CRON_SCHEDULE",
            "port": "PORT",
            "static_dir": "STATIC_DIR",
            "log_level": "LOG_LEVEL",
        }
        for field, key in env_map.items():
            value = os.getenv(key)
            if value:
                values[field] = value.strip()

        origins = os.getenv("ALLOWED_ORIGIN")
        if origins:
            values["allowed_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
        return cls(**values)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


def get_settings() -> Settings:
    return Settings.from_env()
