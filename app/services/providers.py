from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx
import openai
from openai import AsyncOpenAI

from app.config import Settings
from app.errors import GenerationFailed, UnsupportedProvider
from app.models.schemas import ModelPreference

logger = logging.getLogger(__name__)


class ProviderAdapter(ABC):
    """One text-generation backend behind the shared generate() contract."""

    name: ModelPreference
    available = True

    def __init__(self, chars_per_token: int = 4):
        self.chars_per_token = max(1, chars_per_token)

    @property
    def configured(self) -> bool:
        return self.available

    def token_budget(self, max_length: int) -> int:
        """Approximate output tokens for a character budget.

        Characters divided by ``chars_per_token``, floored. This is a heuristic
        and not a tokenizer count, so output can stop short of ``max_length``.
        """
        return max(1, max_length // self.chars_per_token)

    @abstractmethod
    async def generate(self, system: str, user: str, max_output_tokens: int) -> str:
        """Return the generated text or raise GenerationFailed."""


class OpenAIAdapter(ProviderAdapter):
    name = ModelPreference.OPENAI

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        chars_per_token: int = 4,
        timeout: float = 60.0,
        client: AsyncOpenAI | None = None,
    ):
        super().__init__(chars_per_token)
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.api_key) or self._client is not None

    async def generate(self, system: str, user: str, max_output_tokens: int) -> str:
        if not self.configured:
            raise GenerationFailed(self.name.value, "OpenAI API key not configured")

        # Retries are disabled: a repeated completion is billed again
        client = self._client or AsyncOpenAI(
            api_key=self.api_key, timeout=self.timeout, max_retries=0
        )
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                temperature=self.temperature,
                max_tokens=max_output_tokens,
            )
        except openai.APITimeoutError as e:
            raise GenerationFailed(self.name.value, "request timed out") from e
        except openai.APIStatusError as e:
            raise GenerationFailed(self.name.value, f"HTTP {e.status_code}: {e.message}") from e
        except openai.APIError as e:
            raise GenerationFailed(self.name.value, str(e)) from e
        finally:
            if self._client is None:
                await client.close()

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""
        if not content.strip():
            raise GenerationFailed(self.name.value, "No content generated by AI model")
        return content.strip()


class GeminiAdapter(ProviderAdapter):
    name = ModelPreference.GEMINI

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        temperature: float = 0.7,
        chars_per_token: int = 4,
        timeout: float = 60.0,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(chars_per_token)
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _payload(self, system: str, user: str, max_output_tokens: int) -> dict:
        return {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": user}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": max_output_tokens,
            },
        }

    async def generate(self, system: str, user: str, max_output_tokens: int) -> str:
        provider = self.name.value
        if not self.configured:
            raise GenerationFailed(provider, "Gemini API key not configured")

        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {"x-goog-api-key": self.api_key}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    url, headers=headers, json=self._payload(system, user, max_output_tokens)
                )
        except httpx.TimeoutException as e:
            raise GenerationFailed(provider, "request timed out") from e
        except httpx.HTTPError as e:
            raise GenerationFailed(provider, str(e) or type(e).__name__) from e

        if resp.status_code == 400:
            raise GenerationFailed(provider, "Bad request")
        if resp.status_code in (401, 403):
            raise GenerationFailed(provider, "Invalid API key")
        if resp.status_code == 429:
            raise GenerationFailed(provider, "Rate limit / quota exhausted")
        if resp.status_code != 200:
            raise GenerationFailed(provider, f"HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise GenerationFailed(provider, "Malformed response body") from e
        return self._extract_text(data)

    def _extract_text(self, data: dict) -> str:
        provider = self.name.value
        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates")
            raise GenerationFailed(provider, f"No content generated ({reason})")

        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text.strip():
            finish = candidates[0].get("finishReason", "unknown")
            raise GenerationFailed(provider, f"No content generated (finish reason {finish})")
        return text.strip()


class UnavailableAdapter(ProviderAdapter):
    """A provider users can pick but that has no integration yet."""

    available = False

    def __init__(self, name: ModelPreference):
        super().__init__()
        self.name = name

    async def generate(self, system: str, user: str, max_output_tokens: int) -> str:
        raise UnsupportedProvider(self.name.value)


def build_registry(config: Settings) -> dict[ModelPreference, ProviderAdapter]:
    return {
        ModelPreference.OPENAI: OpenAIAdapter(
            api_key=config.openai_api_key,
            model=config.openai_model,
            temperature=config.temperature,
            chars_per_token=config.openai_chars_per_token,
            timeout=config.provider_timeout,
        ),
        ModelPreference.GEMINI: GeminiAdapter(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            temperature=config.temperature,
            chars_per_token=config.gemini_chars_per_token,
            timeout=config.provider_timeout,
            base_url=config.gemini_base_url,
        ),
        ModelPreference.CLAUDE: UnavailableAdapter(ModelPreference.CLAUDE),
        ModelPreference.GROK: UnavailableAdapter(ModelPreference.GROK),
    }


def _parse_preference(value: str | ModelPreference | None) -> ModelPreference | None:
    if isinstance(value, ModelPreference):
        return value
    if not value or not value.strip():
        return None
    try:
        return ModelPreference(value.strip().lower())
    except ValueError:
        return None


def resolve_provider(
    preference: str | ModelPreference | None,
    registry: dict[ModelPreference, ProviderAdapter],
    default: str | ModelPreference,
) -> ProviderAdapter:
    """Pick the adapter for a stored preference.

    Unknown, blank or not-yet-available preferences fall back to ``default``.
    The default adapter is returned even when it is itself unavailable, in
    which case generate() raises UnsupportedProvider.
    """
    default_key = _parse_preference(default)
    if default_key is None or default_key not in registry:
        raise ValueError(f"Default provider {default!r} is not registered")

    key = _parse_preference(preference)
    if key is None:
        if preference:
            logger.info("Unknown provider preference %r, using %s", preference, default_key.value)
        return registry[default_key]

    adapter = registry.get(key)
    if adapter is None or not adapter.available:
        logger.info("Provider %s is not available, using %s", key.value, default_key.value)
        return registry[default_key]
    return adapter
