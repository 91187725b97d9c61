import json
import logging
import re
from typing import Any, List, Optional, Tuple

import requests

from autoblog.config import FALLBACK_MODEL, TOP_P, Settings, get_settings
from autoblog.exceptions import AIServiceError, AuthenticationError, RateLimitError
from autoblog.schemas import Diagnostics, GenerationResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a concise blog writer specializing in B2B SaaS and open-source Web3 "
    "infrastructure topics. Return short markdown articles (<=250 words) with a title and "
    "a few paragraphs. Focus exclusively on topics related to B2B SaaS (product-led growth, "
    "customer success, pricing strategies, go-to-market, retention, etc.) or open-source "
    "Web3 infrastructure (blockchain networks, decentralized storage, smart contracts, DeFi "
    "protocols, DAOs, etc.)."
)

DIAGNOSTIC_PROMPT = 'Say "test" in one word.'
MAX_TITLE_LENGTH = 140
VERIFY_TIMEOUT = 5
DIAGNOSTICS_TIMEOUT = 10

_HEADING_RE = re.compile(r"^#+\s*")


def build_prompt(topic: str) -> str:
    return (
        f'Write a concise blog post about "{topic}". The article must focus on B2B SaaS or '
        "open-source Web3 infrastructure topics. Include a clear title followed by 2-4 short "
        "paragraphs. Do not write about general engineering productivity, software development "
        "practices, or generic tech topics - only B2B SaaS or Web3 infrastructure."
    )


def normalize_generated_text(data: Any) -> Optional[str]:
    """Extract generated text from a completion response.

    Tries chat-completion message content, then legacy completion ``text``,
    then a bare string body, then top-level ``content`` / ``text`` fields.
    Returns ``None`` when nothing usable is found.
    """
    if not data:
        return None

    text = None
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            choice = choices[0]
            message = choice.get("message")
            if isinstance(message, dict) and message.get("content"):
                text = message["content"]
            elif choice.get("text"):
                text = choice["text"]
        if text is None:
            text = data.get("content") or data.get("text")
    elif isinstance(data, str):
        text = data

    if isinstance(text, str) and text.strip():
        return text
    return None


def parse_generated_text(raw: str, topic: str) -> GenerationResult:
    """Split generated markdown into a title line and body."""
    lines = [line for line in raw.strip().split("\n") if line.strip()]
    title_line = _HEADING_RE.sub("", lines[0]).strip() if lines else ""
    title = title_line[:MAX_TITLE_LENGTH] or f"New article on {topic}"[:MAX_TITLE_LENGTH]

    content_lines = lines[1:]
    if content_lines:
        content = "\n".join(content_lines).strip()
    else:
        content = raw.strip()
    return GenerationResult(title=title, content=content)


def generate_fallback(topic: str) -> GenerationResult:
    paragraphs = [
        f"In today's fast-paced landscape, {topic} continues to shape how teams deliver value.",
        "Practitioners emphasize iterative learning, pragmatic tooling, and measurable outcomes "
        "as the best path to sustainable progress.",
        "Looking ahead, expect lightweight automation, sensible defaults, and a human-first "
        f"perspective to remain central to successful {topic} initiatives.",
    ]
    return GenerationResult(
        title=f"Fallback article on {topic}"[:MAX_TITLE_LENGTH],
        content="\n\n".join(paragraphs),
    )


def candidate_models(configured: str, alternatives: List[str]) -> List[str]:
    """Configured model first, then the alternatives, without duplicates."""
    seen = set()
    models = []
    for model in [configured, *alternatives]:
        if model and model not in seen:
            seen.add(model)
            models.append(model)
    return models


def _free_model_ids(data: Any) -> List[str]:
    if not isinstance(data, dict) or not isinstance(data.get("data"), list):
        return []
    return [
        m["id"]
        for m in data["data"]
        if isinstance(m, dict) and isinstance(m.get("id"), str) and ":free" in m["id"]
    ]


def _error_payload(response: requests.Response) -> Tuple[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return f"HTTP {response.status_code}", response.text or None
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        message = data["error"].get("message")
        if message:
            return message, data
    return f"HTTP {response.status_code}", data


class GenerationClient:
    """Chat-completion client with model fallback and template degradation."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def api_key(self) -> Optional[str]:
        return self.settings.openrouter_api_key

    def log_configuration(self) -> None:
        key = self.api_key
        logger.info("AI client model: %s", self.settings.ai_model)
        if key:
            logger.info("AI client API key: set (%s...)", key[:10])
        else:
            logger.warning(
                "OPENROUTER_API_KEY not set. AI generation will use fallback templates."
            )
        logger.info(
            "AI client timeout: %sms, max tokens: %s",
            self.settings.timeout_ms,
            self.settings.max_tokens,
        )

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.settings.http_referer,
            "X-Title": self.settings.x_title,
        }

    def _request(
        self,
        method: str,
        path: str,
        payload: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        url = f"{self.settings.openrouter_base_url.rstrip('/')}{path}"
        try:
            response = requests.request(
                method,
                url,
                headers=self._headers(),
                json=payload,
                timeout=timeout or self.settings.timeout_seconds,
            )
            response.raise_for_status()
        except requests.Timeout as e:
            raise AIServiceError("Request timed out") from e
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            message, data = (
                _error_payload(e.response) if e.response is not None else (str(e), None)
            )
            if status == 401:
                raise AuthenticationError(message, data=data) from e
            if status == 429:
                raise RateLimitError(message, data=data) from e
            raise AIServiceError(message, status_code=status, data=data) from e
        except requests.RequestException as e:
            raise AIServiceError(str(e) or "Unknown error") from e

        try:
            return response.json()
        except ValueError:
            return response.text

    def _completion_payload(self, prompt: str, model: str) -> dict:
        return {
            "model": model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": self.settings.max_tokens,
            "temperature": self.settings.temperature,
            "top_p": TOP_P,
        }

    def _chat(self, prompt: str, model: str) -> Any:
        return self._request("POST", "/chat/completions", self._completion_payload(prompt, model))

    def verify_token(self) -> bool:
        """Check the key against the models listing.

        Only an explicit 401 counts as a failed verification; any other error
        lets generation continue.
        """
        try:
            data = self._request("GET", "/models", timeout=VERIFY_TIMEOUT)
        except AuthenticationError:
            logger.error("OpenRouter token verification failed - invalid API key")
            return False
        except AIServiceError as e:
            logger.warning("Could not verify OpenRouter token, but continuing: %s", e)
            return True

        free_models = _free_model_ids(data)[:5]
        if free_models:
            logger.info("OpenRouter token verified. Available free models: %s", ", ".join(free_models))
        else:
            logger.info("OpenRouter token verified. No free models found in response")
        return True

    def _first_success(
        self, prompt: str, models: List[str]
    ) -> Tuple[Optional[str], List[AIServiceError]]:
        errors: List[AIServiceError] = []
        for model in models:
            logger.info("Attempting OpenRouter generation with model: %s", model)
            try:
                data = self._chat(prompt, model)
            except AuthenticationError as e:
                logger.error("Authentication failed - check your OPENROUTER_API_KEY: %s", e.data)
                errors.append(e)
                break
            except RateLimitError as e:
                logger.warning("Rate limit exceeded for model %s: %s", model, e)
                errors.append(e)
                continue
            except AIServiceError as e:
                if e.status_code == 400:
                    logger.error("Bad request for model %s: %s", model, e)
                elif e.status_code == 404:
                    logger.error("Model %s not found or not available", model)
                else:
                    logger.error(
                        "OpenRouter API call failed for model %s: status=%s error=%s",
                        model,
                        e.status_code,
                        e,
                    )
                errors.append(e)
                continue

            text = normalize_generated_text(data)
            if text:
                logger.info("OpenRouter generation succeeded with model: %s", model)
                return text, errors
            logger.warning(
                "OpenRouter returned data but no text could be extracted: %s",
                json.dumps(data)[:500] if not isinstance(data, str) else data[:500],
            )
            errors.append(AIServiceError(f"No text extracted from {model} response"))
        return None, errors

    def generate_text(self, prompt: str) -> Optional[str]:
        if not self.api_key:
            logger.warning("OPENROUTER_API_KEY not set; using deterministic fallback text.")
            return None

        if not self.verify_token():
            logger.error("Token verification failed; check OPENROUTER_API_KEY")
            return None

        models = candidate_models(self.settings.ai_model, self.settings.alternative_models)
        logger.info("Will try %s model(s): %s", len(models), ", ".join(models))

        text, errors = self._first_success(prompt, models)
        if text is None and errors:
            last = errors[-1]
            logger.error(
                "All OpenRouter attempts failed. Last error: %s (status %s)",
                last,
                last.status_code,
            )
            logger.error(
                "Check the key at https://openrouter.ai/keys, free-tier models need the "
                ":free suffix, and GET /api/articles/diagnostics/ai reports details"
            )
        return text

    def generate(self, topic: str) -> GenerationResult:
        """Return a title/content pair for ``topic``; never raises."""
        logger.info('Generating article about: "%s"', topic)
        try:
            raw = self.generate_text(build_prompt(topic))
            if raw:
                return parse_generated_text(raw, topic)
        except Exception:
            logger.exception("Error generating article")
        logger.warning('Using fallback article for topic: "%s"', topic)
        return generate_fallback(topic)

    def test_connection(self) -> Diagnostics:
        key = self.api_key
        diagnostics = Diagnostics(
            has_api_key=bool(key),
            api_key_length=len(key) if key else 0,
            configured_model=self.settings.ai_model,
            fallback_model=FALLBACK_MODEL,
        )
        if not key:
            diagnostics.errors.append("OPENROUTER_API_KEY is not set")
            return diagnostics

        try:
            data = self._request("GET", "/models", timeout=DIAGNOSTICS_TIMEOUT)
        except AuthenticationError:
            diagnostics.errors.append("API key is invalid (401 Unauthorized)")
            return diagnostics
        except AIServiceError as e:
            diagnostics.errors.append(f"Failed to verify API key: {e}")
            return diagnostics

        if isinstance(data, dict) and data.get("data"):
            free_models = _free_model_ids(data)
            diagnostics.available_free_models = free_models[:10]
            diagnostics.model_count = len(free_models)
            if self.settings.ai_model not in free_models:
                diagnostics.warnings.append(
                    f'Configured model "{self.settings.ai_model}" not found in available free models'
                )

        try:
            data = self._chat(DIAGNOSTIC_PROMPT, self.settings.ai_model)
        except AIServiceError as e:
            diagnostics.errors.append(f"Generation test failed: {e}")
            diagnostics.status_code = e.status_code
            diagnostics.error_details = e.data
            return diagnostics

        text = normalize_generated_text(data)
        if text:
            diagnostics.success = True
            diagnostics.test_response = text[:100]
        else:
            diagnostics.errors.append("API returned data but could not extract text")
            diagnostics.raw_response = (data if isinstance(data, str) else json.dumps(data))[:200]
        return diagnostics


def get_ai_client() -> GenerationClient:
    return GenerationClient(get_settings())
