"""Clients for the third-party text-generation and voice-synthesis APIs.

Each client makes one blocking call per request through httpx and raises
:class:`ProviderError` for anything that does not produce usable output:
missing credentials, transport errors, non-2xx replies, or a reply of an
unexpected shape. :class:`FallbackChain` tries text providers in order.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import httpx
from loguru import logger

from karaoke.backend import config

TEMPERATURE = 0.7
MAX_TOKENS = 2000
APP_TITLE = "Nabila Portal Karaoke"


class ProviderError(Exception):
    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class _HttpProvider:
    name = "provider"

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = config.AI_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _post(self, path: str, payload: Dict[str, Any], headers: Dict[str, str]) -> httpx.Response:
        if not self.configured:
            raise ProviderError(self.name, "API key not configured")
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(f"{self.base_url}{path}", json=payload, headers=headers)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            raise ProviderError(self.name, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"request failed: {e}") from e


class TextProvider(_HttpProvider):
    def complete(self, prompt: str) -> str:
        raise NotImplementedError

    def _json(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(self.name, "reply is not JSON") from e


class _ChatCompletionsProvider(TextProvider):
    """OpenAI-compatible ``/chat/completions`` endpoint."""

    def __init__(self, api_key: str, base_url: str, model: str, **kwargs):
        super().__init__(api_key, base_url, **kwargs)
        self.model = model

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def complete(self, prompt: str) -> str:
        response = self._post(
            "/chat/completions",
            {
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": TEMPERATURE,
                "max_tokens": MAX_TOKENS,
            },
            self._headers(),
        )
        data = self._json(response)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(self.name, "reply has no choices") from e
        if not isinstance(content, str) or not content.strip():
            raise ProviderError(self.name, "empty reply")
        return content


class GroqProvider(_ChatCompletionsProvider):
    name = "groq"


class OpenRouterProvider(_ChatCompletionsProvider):
    name = "openrouter"

    def __init__(self, api_key: str, base_url: str, model: str, referer: str = config.PUBLIC_ORIGIN, **kwargs):
        super().__init__(api_key, base_url, model, **kwargs)
        self.referer = referer

    def _headers(self) -> Dict[str, str]:
        return {
            **super()._headers(),
            "HTTP-Referer": self.referer,
            "X-Title": APP_TITLE,
        }


class GeminiProvider(TextProvider):
    name = "gemini"

    def __init__(self, api_key: str, base_url: str, model: str, **kwargs):
        super().__init__(api_key, base_url, **kwargs)
        self.model = model

    def complete(self, prompt: str) -> str:
        response = self._post(
            f"/models/{self.model}:generateContent",
            {
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {
                    "temperature": TEMPERATURE,
                    "maxOutputTokens": MAX_TOKENS,
                },
            },
            {"x-goog-api-key": self.api_key},
        )
        data = self._json(response)
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(self.name, "reply has no candidates") from e
        if not isinstance(text, str) or not text.strip():
            raise ProviderError(self.name, "empty reply")
        return text


class PlayAIVoice(_HttpProvider):
    name = "playai"

    def synthesize(self, text: str, voice: str, speed: float = 1.0, emotion: str = "neutral") -> bytes:
        response = self._post(
            "/tts",
            {"text": text, "voice": voice, "speed": speed, "emotion": emotion},
            {"Authorization": f"Bearer {self.api_key}"},
        )
        if not response.content:
            raise ProviderError(self.name, "empty audio")
        return response.content


class FallbackChain:
    """Text providers tried one after another until one answers."""

    def __init__(self, providers: Sequence[TextProvider]):
        self.providers = list(providers)

    @property
    def names(self) -> List[str]:
        return [p.name for p in self.providers]

    def complete(self, prompt: str) -> str:
        failures = []
        for provider in self.providers:
            try:
                text = provider.complete(prompt)
            except ProviderError as e:
                logger.warning(f"[providers] {provider.name} failed, trying next: {e.message}")
                failures.append(provider.name)
                continue
            logger.info(f"[providers] {provider.name} answered ({len(text)} chars)")
            return text
        raise ProviderError("chain", f"all providers failed ({', '.join(failures) or 'none configured'})")


def default_text_chain(transport: Optional[httpx.BaseTransport] = None) -> FallbackChain:
    """Groq first for speed, then Gemini, then OpenRouter."""
    return FallbackChain([
        GroqProvider(config.GROQ_API_KEY, config.GROQ_BASE_URL, config.GROQ_MODEL, transport=transport),
        GeminiProvider(config.GEMINI_API_KEY, config.GEMINI_BASE_URL, config.GEMINI_MODEL, transport=transport),
        OpenRouterProvider(
            config.OPENROUTER_API_KEY, config.OPENROUTER_BASE_URL, config.OPENROUTER_MODEL, transport=transport,
        ),
    ])


def default_voice(transport: Optional[httpx.BaseTransport] = None) -> PlayAIVoice:
    return PlayAIVoice(config.PLAYAI_API_KEY, config.PLAYAI_BASE_URL, transport=transport)
