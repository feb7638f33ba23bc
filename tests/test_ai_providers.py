import json

import httpx
import pytest

from karaoke.backend.services.ai_providers import (
    FallbackChain,
    GeminiProvider,
    GroqProvider,
    OpenRouterProvider,
    PlayAIVoice,
    ProviderError,
)

from conftest import StaticText


class Recorder:
    def __init__(self, response: httpx.Response):
        self.response = response
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def transport(self):
        return httpx.MockTransport(self)


def chat_reply(text):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": text}}]})


def test_groq_chat_completion():
    recorder = Recorder(chat_reply("Lirik lagu"))
    groq = GroqProvider("gsk", "https://api.groq.test/v1", "mixtral-8x7b-32768", transport=recorder.transport)

    assert groq.complete("Tulis lagu") == "Lirik lagu"

    request = recorder.requests[0]
    body = json.loads(request.content)
    assert str(request.url) == "https://api.groq.test/v1/chat/completions"
    assert request.headers["authorization"] == "Bearer gsk"
    assert body == {
        "model": "mixtral-8x7b-32768",
        "messages": [{"role": "user", "content": "Tulis lagu"}],
        "temperature": 0.7,
        "max_tokens": 2000,
    }


def test_openrouter_identifies_the_portal():
    recorder = Recorder(chat_reply("ok"))
    router = OpenRouterProvider(
        "sk-or", "https://openrouter.test/api/v1", "anthropic/claude-3.5-sonnet",
        referer="https://karaoke.example", transport=recorder.transport,
    )

    router.complete("hi")

    headers = recorder.requests[0].headers
    assert headers["authorization"] == "Bearer sk-or"
    assert headers["http-referer"] == "https://karaoke.example"
    assert headers["x-title"] == "Nabila Portal Karaoke"


def test_gemini_generate_content():
    recorder = Recorder(httpx.Response(200, json={
        "candidates": [{"content": {"parts": [{"text": "Halo"}]}}],
    }))
    gemini = GeminiProvider("AIza", "https://gemini.test/v1beta", "gemini-2.0-flash-exp",
                            transport=recorder.transport)

    assert gemini.complete("prompt") == "Halo"

    request = recorder.requests[0]
    assert request.url.path == "/v1beta/models/gemini-2.0-flash-exp:generateContent"
    assert request.headers["x-goog-api-key"] == "AIza"
    assert json.loads(request.content)["generationConfig"] == {"temperature": 0.7, "maxOutputTokens": 2000}


@pytest.mark.parametrize("response", [
    httpx.Response(500, json={"error": "overloaded"}),
    httpx.Response(200, json={"choices": []}),
    httpx.Response(200, text="<html>gateway</html>"),
    httpx.Response(200, json={"choices": [{"message": {"content": "   "}}]}),
])
def test_bad_replies_raise_provider_error(response):
    groq = GroqProvider("gsk", "https://api.groq.test/v1", "m", transport=Recorder(response).transport)

    with pytest.raises(ProviderError) as exc_info:
        groq.complete("x")
    assert exc_info.value.provider == "groq"


def test_missing_key_fails_without_request():
    recorder = Recorder(chat_reply("never"))
    groq = GroqProvider("", "https://api.groq.test/v1", "m", transport=recorder.transport)

    assert groq.configured is False
    with pytest.raises(ProviderError, match="not configured"):
        groq.complete("x")
    assert recorder.requests == []


def test_playai_returns_audio_bytes():
    recorder = Recorder(httpx.Response(200, content=b"RIFF....WAVE"))
    voice = PlayAIVoice("play", "https://play.test/api/v1", transport=recorder.transport)

    audio = voice.synthesize("Di dalam hati ku", voice="indonesian_singer")

    assert audio == b"RIFF....WAVE"
    assert json.loads(recorder.requests[0].content) == {
        "text": "Di dalam hati ku", "voice": "indonesian_singer", "speed": 1.0, "emotion": "neutral",
    }


def test_chain_stops_at_first_success():
    first, second, third = StaticText("groq"), StaticText("gemini", "dari gemini"), StaticText("openrouter", "x")

    assert FallbackChain([first, second, third]).complete("p") == "dari gemini"
    assert first.prompts == ["p"]
    assert second.prompts == ["p"]
    assert third.prompts == []


def test_chain_reports_every_failure():
    chain = FallbackChain([StaticText("groq"), StaticText("gemini")])

    with pytest.raises(ProviderError, match="groq, gemini"):
        chain.complete("p")
