import logging
from typing import Optional

from models.analysis import AnalysisResult
from models.job import JobSnapshot
from models.profile import Profile
from models.request import ProviderRequest
from providers.provider_factory import call_provider
from utils.output_validator import validate_analysis
from utils.prompt_builder import build_prompt
from utils.settings import AssistantSettings, ProviderConfig, get_api_key, load_settings

HEALTH_CHECK_INSTRUCTIONS = (
    'You are a health check endpoint. Return STRICT JSON only: {"ok":true,"provider":"name"}'
)
HEALTH_CHECK_INPUT = "Perform a minimal connection verification."
HEALTH_CHECK_MAX_TOKENS = 400


class LLMProcessor:
    """
    Run a job snapshot through prompt building, the provider call and output validation
    """

    def __init__(self, settings: Optional[AssistantSettings] = None):
        self.settings = settings or load_settings()
        logging.info(f"LLM processor ready, active provider: {self.settings.active_provider}")

    def resolve_provider(self, provider: Optional[str]) -> str:
        return provider or self.settings.active_provider

    def resolve_api_key(self, provider: str, api_key: Optional[str]) -> str:
        """
        The caller's key if given, else <PROVIDER>_API_KEY

        Raises:
            ValueError: when neither is set
        """
        key = (api_key or "").strip() or get_api_key(provider)
        if not key:
            raise ValueError(
                f"No API key is set for {provider}. Provide apiKey or set {provider.upper()}_API_KEY."
            )
        return key

    def _config(self, provider: str) -> ProviderConfig:
        config = self.settings.providers.get(provider)
        if config is None:
            raise ValueError(f"Unsupported provider: {provider}")
        return config

    def _request(self, provider: str, api_key: str, instructions: str, input: str,
                 max_output_tokens: Optional[int] = None) -> ProviderRequest:
        config = self._config(provider)
        return ProviderRequest(
            provider=provider,
            api_key=api_key,
            model=config.model,
            instructions=instructions,
            input=input,
            base_url=config.base_url,
            temperature=config.temperature,
            max_output_tokens=max_output_tokens if max_output_tokens is not None else config.max_output_tokens,
        )

    async def analyze_job(self, job: JobSnapshot, provider: Optional[str] = None,
                          api_key: Optional[str] = None, profile: Optional[Profile] = None) -> AnalysisResult:
        """
        Analyze a job against the user's profile

        Args:
            job: Extracted snapshot
            provider: Provider name; defaults to the active provider
            api_key: Key for that provider; defaults to the environment
            profile: Mindset profile; defaults to the configured one

        Returns:
            Validated AnalysisResult

        Raises:
            ValueError: for an unknown provider or a missing key
            ProviderError: when the provider call fails
            AnalysisValidationError: when the answer does not match the output contract
        """
        provider = self.resolve_provider(provider)
        key = self.resolve_api_key(provider, api_key)
        prompt = build_prompt(profile or self.settings.profile, job)

        logging.info(f"Analyzing job '{job.title}' with {provider}")
        text = await call_provider(self._request(provider, key, prompt.instructions, prompt.input))
        result = validate_analysis(text)
        logging.info(f"Analysis complete: shouldApply={result.should_apply}, fitScore={result.fit_score}")
        return result

    async def test_connection(self, provider: Optional[str] = None, api_key: Optional[str] = None) -> str:
        """
        Send a tiny request to check the provider accepts the key

        Returns:
            Success message naming the provider

        Raises:
            ValueError: for an unknown provider or a missing key
            ProviderError: when the provider call fails
        """
        provider = self.resolve_provider(provider)
        key = self.resolve_api_key(provider, api_key)
        configured = self._config(provider).max_output_tokens
        max_tokens = min(configured or 1400, HEALTH_CHECK_MAX_TOKENS)

        await call_provider(self._request(provider, key, HEALTH_CHECK_INSTRUCTIONS, HEALTH_CHECK_INPUT,
                                          max_output_tokens=max_tokens))
        logging.info(f"Connection test for {provider} succeeded")
        return f"{provider.upper()} connection succeeded."
