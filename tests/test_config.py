from autoblog.config import ALTERNATIVE_FREE_MODELS, FALLBACK_MODEL, Settings, get_settings


def test_defaults():
    settings = Settings()
    assert settings.openrouter_api_key is None
    assert settings.ai_model == FALLBACK_MODEL
    assert settings.timeout_ms == 30_000
    assert settings.timeout_seconds == 30
    assert settings.max_tokens == 500
    assert settings.temperature == 0.7
    assert settings.cron_schedule == "0 3 * * *"
    assert settings.allowed_origins == ["*"]
    assert settings.port == 4000
    assert len(ALTERNATIVE_FREE_MODELS) == 5


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", " sk-or-abc ")
    monkeypatch.setenv("AI_MODEL", "mistralai/mistral-7b-instruct:free")
    monkeypatch.setenv("OPENROUTER_TIMEOUT_MS", "1500")
    monkeypatch.setenv("OPENROUTER_MAX_TOKENS", "250")
    monkeypatch.setenv("OPENROUTER_TEMPERATURE", "0.2")
    monkeypatch.setenv("CRON_SCHEDULE", "*/5 * * * *")
    monkeypatch.setenv("ALLOWED_ORIGIN", "https://a.example, https://b.example")
    monkeypatch.setenv("PORT", "8080")

    settings = get_settings()

    assert settings.openrouter_api_key == "sk-or-abc"
    assert settings.ai_model == "mistralai/mistral-7b-instruct:free"
    assert settings.timeout_seconds == 1.5
    assert settings.max_tokens == 250
    assert settings.temperature == 0.2
    assert settings.cron_schedule == "*/5 * * * *"
    assert settings.allowed_origins == ["https://a.example", "https://b.example"]
    assert settings.port == 8080


def test_blank_values_fall_back(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "   ")
    monkeypatch.setenv("AI_MODEL", "")
    monkeypatch.setenv("SCHEDULER_ENABLED", "false")

    settings = get_settings()

    assert settings.openrouter_api_key is None
    assert settings.ai_model == FALLBACK_MODEL
    assert settings.scheduler_enabled is False
