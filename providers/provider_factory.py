from typing import Dict
import logging

from models.request import ProviderRequest
from providers.base import BaseProvider
from providers.gemini_provider import GeminiProvider
from providers.grok_provider import GrokProvider
from providers.openai_provider import OpenAIProvider


class ProviderFactory:
    """Factory class for creating completion providers"""

    @staticmethod
    def create_providers() -> Dict[str, BaseProvider]:
        """
        Create and return all available providers

        Returns:
            Dictionary of providers keyed by name
        """
        providers = {}
        for provider in (OpenAIProvider(), GeminiProvider(), GrokProvider()):
            providers[provider.name] = provider
        return providers

    @staticmethod
    def get(name: str) -> BaseProvider:
        """
        Return the provider registered under ``name``

        Raises:
            ValueError: if no such provider exists
        """
        providers = ProviderFactory.create_providers()
        if name not in providers:
            raise ValueError(f"Unsupported provider: {name}")
        return providers[name]


async def call_provider(request: ProviderRequest) -> str:
    """
    Send a completion request to the provider it names

    Args:
        request: Normalized completion request

    Returns:
        Non-empty completion text

    Raises:
        ProviderError: whenever the provider call fails, for any vendor
    """
    provider = ProviderFactory.get(request.provider)
    logging.debug(f"Dispatching completion request to {provider.label}")
    return await provider.call(request)
