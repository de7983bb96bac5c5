import pytest
import json
import sys
import os

# Add the parent directory to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import utils.llm_processor as llm_processor_module
from models.job import JobSnapshot
from providers.errors import ProviderError
from utils.llm_processor import HEALTH_CHECK_MAX_TOKENS, LLMProcessor
from utils.output_validator import AnalysisValidationError
from utils.settings import AssistantSettings, DEFAULT_PROVIDERS

ANSWER = json.dumps({
    "shouldApply": False,
    "fitScore": 35,
    "keyReasons": ["Needs PHP"],
    "risks": ["Stack mismatch"],
    "questionsToAsk": [],
    "proposalShort": "Not a fit.",
    "proposalFull": "Not a fit for this stack.",
})


@pytest.fixture
def job():
    return JobSnapshot(
        url="https://www.upwork.com/jobs/~0123456789abcdef",
        title="Laravel admin panel",
        description="Build an admin panel in Laravel.",
        budget_text="$300 (Fixed-price)",
    )


@pytest.fixture
def processor(monkeypatch):
    for provider in ("OPENAI", "GEMINI", "GROK"):
        monkeypatch.delenv(f"{provider}_API_KEY", raising=False)
    return LLMProcessor(AssistantSettings(active_provider="grok", providers=dict(DEFAULT_PROVIDERS)))


@pytest.fixture
def captured(monkeypatch):
    """Replace the provider call and remember the requests it was given"""
    requests_seen = []
    answers = []

    async def fake_call_provider(request):
        requests_seen.append(request)
        answer = answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer

    monkeypatch.setattr(llm_processor_module, "call_provider", fake_call_provider)
    return requests_seen, answers


@pytest.mark.asyncio
async def test_analyze_job(processor, job, captured):
    requests_seen, answers = captured
    answers.append("```json\n" + ANSWER + "\n```")

    result = await processor.analyze_job(job, api_key="xai-key")

    assert result.should_apply is False
    assert result.fit_score == 35
    request = requests_seen[0]
    assert request.provider == "grok"
    assert request.model == "grok-3-latest"
    assert request.api_key == "xai-key"
    assert "Budget: $300 (Fixed-price)" in request.input
    assert "Return STRICT JSON only" in request.instructions


@pytest.mark.asyncio
async def test_provider_override_and_env_key(processor, job, captured, monkeypatch):
    requests_seen, answers = captured
    answers.append(ANSWER)
    monkeypatch.setenv("GEMINI_API_KEY", "env-gemini-key")

    await processor.analyze_job(job, provider="gemini")

    assert requests_seen[0].provider == "gemini"
    assert requests_seen[0].api_key == "env-gemini-key"
    assert requests_seen[0].max_output_tokens == 2048


@pytest.mark.asyncio
async def test_missing_api_key(processor, job, captured):
    requests_seen, _ = captured

    with pytest.raises(ValueError, match="No API key is set for grok"):
        await processor.analyze_job(job)

    assert requests_seen == []


@pytest.mark.asyncio
async def test_provider_error_propagates(processor, job, captured):
    _, answers = captured
    answers.append(ProviderError("grok", "Grok error (401)", status_code=401, raw_error="bad key"))

    with pytest.raises(ProviderError) as exc_info:
        await processor.analyze_job(job, api_key="xai-key")

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_invalid_answer_keeps_raw_text(processor, job, captured):
    _, answers = captured
    answers.append('{"shouldApply": "maybe"}')

    with pytest.raises(AnalysisValidationError) as exc_info:
        await processor.analyze_job(job, api_key="xai-key")

    assert exc_info.value.raw_text == '{"shouldApply": "maybe"}'


@pytest.mark.asyncio
async def test_connection_check(processor, captured):
    requests_seen, answers = captured
    answers.append('{"ok":true,"provider":"openai"}')

    message = await processor.test_connection(provider="openai", api_key="sk-key")

    assert message == "OPENAI connection succeeded."
    request = requests_seen[0]
    assert request.input == "Perform a minimal connection verification."
    assert request.max_output_tokens == HEALTH_CHECK_MAX_TOKENS
