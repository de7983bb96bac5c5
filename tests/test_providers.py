import pytest
import json
import sys
import os

import requests

# Add the parent directory to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.request import ProviderRequest
from providers.base import ERROR_BODY_SENTINEL, normalize_max_output_tokens, normalize_temperature
from providers.errors import ProviderError
from providers.gemini_provider import GeminiProvider
from providers.provider_factory import ProviderFactory, call_provider

API_KEY = "sk-test-123"


class FakeResponse:
    """Stand-in for requests.Response"""

    def __init__(self, status_code=200, payload=None, text=None, unreadable=False):
        self.status_code = status_code
        self._payload = payload
        self._text = text if text is not None else json.dumps(payload)
        self._unreadable = unreadable

    @property
    def text(self):
        if self._unreadable:
            raise requests.exceptions.ChunkedEncodingError("connection reset")
        return self._text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


@pytest.fixture
def sent(monkeypatch):
    """Capture outgoing calls and answer with whatever the test queues"""
    calls = []
    replies = []

    def fake_post(url, headers=None, json=None, timeout=None):
        calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        reply = replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    monkeypatch.setattr(requests, "post", fake_post)
    return calls, replies


def _request(provider, **overrides):
    values = {
        "provider": provider,
        "api_key": API_KEY,
        "model": "test-model",
        "instructions": "Return JSON.",
        "input": "Analyze this job.",
    }
    values.update(overrides)
    return ProviderRequest(**values)


def test_factory_creates_all_providers():
    providers = ProviderFactory.create_providers()

    assert sorted(providers.keys()) == ["gemini", "grok", "openai"]
    with pytest.raises(ValueError, match="Unsupported provider"):
        ProviderFactory.get("claude")


def test_normalizers_clamp_and_fall_back():
    assert normalize_temperature(5, 0.2) == 2.0
    assert normalize_temperature(-1, 0.2) == 0.0
    assert normalize_temperature(float("nan"), 0.2) == 0.2
    assert normalize_temperature(None, 0.2) == 0.2
    assert normalize_max_output_tokens(100000, 1400) == 32000
    assert normalize_max_output_tokens(0, 1400) == 1400
    assert normalize_max_output_tokens(None, 1400) == 1400


@pytest.mark.asyncio
async def test_openai_output_text(sent):
    calls, replies = sent
    replies.append(FakeResponse(payload={"output_text": '{"ok": true}'}))

    text = await call_provider(_request("openai", temperature=7, max_output_tokens=50000))

    assert text == '{"ok": true}'
    call = calls[0]
    assert call["url"] == "https://api.openai.com/v1/responses"
    assert call["headers"]["Authorization"] == f"Bearer {API_KEY}"
    assert call["json"]["instructions"] == "Return JSON."
    assert call["json"]["temperature"] == 2.0
    assert call["json"]["max_output_tokens"] == 32000


@pytest.mark.asyncio
async def test_openai_output_items_are_joined(sent):
    _, replies = sent
    replies.append(FakeResponse(payload={
        "output": [
            {"type": "reasoning", "summary": []},
            {"type": "message", "content": [{"type": "output_text", "text": '{"a": '}, {"type": "output_text", "text": "1}"}]},
        ]
    }))

    assert await call_provider(_request("openai")) == '{"a": 1}'


@pytest.mark.asyncio
async def test_openai_missing_output(sent):
    _, replies = sent
    replies.append(FakeResponse(payload={"id": "resp_1"}))

    with pytest.raises(ProviderError, match="missing output_text/output") as exc_info:
        await call_provider(_request("openai"))

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_http_error_keeps_status_and_body(sent):
    _, replies = sent
    replies.append(FakeResponse(status_code=429, text="rate limited"))

    with pytest.raises(ProviderError) as exc_info:
        await call_provider(_request("openai"))

    error = exc_info.value
    assert error.provider == "openai"
    assert error.status_code == 429
    assert error.raw_error == "rate limited"
    assert error.message == "OpenAI error (429)"


@pytest.mark.asyncio
async def test_unreadable_error_body(sent):
    _, replies = sent
    replies.append(FakeResponse(status_code=500, unreadable=True))

    with pytest.raises(ProviderError) as exc_info:
        await call_provider(_request("grok"))

    assert exc_info.value.status_code == 500
    assert exc_info.value.raw_error == ERROR_BODY_SENTINEL


@pytest.mark.asyncio
async def test_transport_error_hides_key(sent):
    _, replies = sent
    replies.append(requests.exceptions.ConnectionError(f"cannot connect with key={API_KEY}"))

    with pytest.raises(ProviderError) as exc_info:
        await call_provider(_request("gemini"))

    assert exc_info.value.status_code is None
    assert API_KEY not in exc_info.value.message
    assert exc_info.value.message.startswith("Gemini request failed:")


@pytest.mark.asyncio
async def test_transport_error_hides_encoded_key(sent):
    calls, replies = sent
    key = "AIza/key+with=chars"
    request = _request("gemini", api_key=key)
    url = GeminiProvider().endpoint(request)
    replies.append(requests.exceptions.ConnectionError(f"Max retries exceeded with url: {url}"))

    with pytest.raises(ProviderError) as exc_info:
        await call_provider(request)

    message = exc_info.value.message
    assert calls[0]["url"] == url
    assert "AIza%2Fkey%2Bwith%3Dchars" in url
    assert "AIza%2Fkey%2Bwith%3Dchars" not in message
    assert key not in message
    assert "key=***" in message


@pytest.mark.asyncio
async def test_empty_text_is_an_error(sent):
    _, replies = sent
    replies.append(FakeResponse(payload={"choices": [{"message": {"content": "   "}}]}))

    with pytest.raises(ProviderError, match="Grok response text is empty.") as exc_info:
        await call_provider(_request("grok"))

    assert exc_info.value.raw_error is not None


@pytest.mark.asyncio
async def test_grok_chat_completion(sent):
    calls, replies = sent
    replies.append(FakeResponse(payload={"choices": [{"message": {"role": "assistant", "content": '{"ok":true}'}}]}))

    assert await call_provider(_request("grok")) == '{"ok":true}'
    messages = calls[0]["json"]["messages"]
    assert messages == [
        {"role": "system", "content": "Return JSON."},
        {"role": "user", "content": "Analyze this job."},
    ]
    assert calls[0]["json"]["max_tokens"] == 1400


@pytest.mark.asyncio
async def test_grok_missing_choices(sent):
    _, replies = sent
    replies.append(FakeResponse(payload={"choices": []}))

    with pytest.raises(ProviderError, match="Grok response missing choices."):
        await call_provider(_request("grok"))


@pytest.mark.asyncio
async def test_gemini_parts_are_joined(sent):
    calls, replies = sent
    replies.append(FakeResponse(payload={
        "candidates": [{"finishReason": "STOP", "content": {"parts": [{"text": '{"ok":'}, {"text": "true}"}]}}]
    }))

    assert await call_provider(_request("gemini", model="gemini-2.5-flash")) == '{"ok":true}'
    call = calls[0]
    assert call["url"] == (
        "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent"
        f"?key={API_KEY}"
    )
    assert "Authorization" not in call["headers"]
    config = call["json"]["generationConfig"]
    assert config["maxOutputTokens"] == 2048
    assert config["responseMimeType"] == "application/json"


@pytest.mark.asyncio
async def test_gemini_truncated_output(sent):
    _, replies = sent
    replies.append(FakeResponse(payload={
        "candidates": [{"finishReason": "MAX_TOKENS", "content": {"parts": [{"text": '{"shouldApply": tr'}]}}]
    }))

    with pytest.raises(ProviderError) as exc_info:
        await call_provider(_request("gemini"))

    assert exc_info.value.status_code is None
    assert "max tokens" in exc_info.value.message


@pytest.mark.asyncio
async def test_gemini_no_candidates(sent):
    _, replies = sent
    replies.append(FakeResponse(payload={"promptFeedback": {"blockReason": "SAFETY"}}))

    with pytest.raises(ProviderError, match="Gemini returned no candidates."):
        await call_provider(_request("gemini"))


@pytest.mark.asyncio
async def test_custom_base_url(sent):
    calls, replies = sent
    replies.append(FakeResponse(payload={"output_text": "{}"}))

    await call_provider(_request("openai", base_url=" https://proxy.example.com/v1/responses "))

    assert calls[0]["url"] == "https://proxy.example.com/v1/responses"
