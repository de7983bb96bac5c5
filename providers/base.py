from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import asyncio
import json
import logging
import math
import os
from urllib.parse import quote

import requests

from models.request import ProviderRequest
from providers.errors import ProviderError

MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0
MIN_OUTPUT_TOKENS = 1
MAX_OUTPUT_TOKENS = 32000

ERROR_BODY_SENTINEL = "Failed to read error body."


def normalize_temperature(value: Optional[float], fallback: float) -> float:
    """Clamp into [0, 2]; anything that is not a finite number gets the provider default"""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return fallback
    return min(max(value, MIN_TEMPERATURE), MAX_TEMPERATURE)


def normalize_max_output_tokens(value: Optional[int], fallback: int) -> int:
    """Clamp into [1, 32000]; anything that is not a positive integer gets the provider default"""
    if isinstance(value, bool) or not isinstance(value, int) or value < MIN_OUTPUT_TOKENS:
        return fallback
    return min(value, MAX_OUTPUT_TOKENS)


class BaseProvider(ABC):
    """Base class for completion providers

    Subclasses describe their vendor: endpoint, headers, how the request body
    is shaped and where the text sits in the response. The HTTP exchange and
    the failure handling are shared, so every vendor fails the same way.
    """

    def __init__(self):
        self.name = "base"
        self.label = "Base"
        self.default_base_url = ""
        self.default_temperature = 0.2
        self.default_max_output_tokens = 1400

    @abstractmethod
    def build_request_body(self, request: ProviderRequest) -> Dict[str, Any]:
        """
        Map the normalized request onto the vendor's JSON body

        Args:
            request: Normalized completion request

        Returns:
            JSON-serializable request body
        """
        pass

    @abstractmethod
    def parse_response(self, data: Any) -> str:
        """
        Pull the completion text out of a decoded success response

        Args:
            data: Decoded JSON body

        Returns:
            The completion text (may be empty; emptiness is checked by the caller)
        """
        pass

    def endpoint(self, request: ProviderRequest) -> str:
        return (request.base_url or "").strip() or self.default_base_url

    def headers(self, request: ProviderRequest) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {request.api_key}",
            "Content-Type": "application/json",
        }

    def temperature(self, request: ProviderRequest) -> float:
        return normalize_temperature(request.temperature, self.default_temperature)

    def max_output_tokens(self, request: ProviderRequest) -> int:
        return normalize_max_output_tokens(request.max_output_tokens, self.default_max_output_tokens)

    @property
    def timeout(self) -> float:
        return float(os.getenv("PROVIDER_TIMEOUT", 120))

    async def call(self, request: ProviderRequest) -> str:
        """
        Send one completion request; never retries

        Args:
            request: Normalized completion request

        Returns:
            Non-empty completion text

        Raises:
            ProviderError: on transport failure, non-2xx status, an
                unusable response body or empty text
        """
        logging.info(f"Calling {self.label} with model {request.model}")

        # requests is blocking, keep it off the event loop
        return await asyncio.to_thread(self._call_sync, request)

    def _call_sync(self, request: ProviderRequest) -> str:
        try:
            response = requests.post(
                self.endpoint(request),
                headers=self.headers(request),
                json=self.build_request_body(request),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            message = redact_key(str(e), request.api_key)
            logging.error(f"{self.label} request failed: {message}")
            raise ProviderError(self.name, f"{self.label} request failed: {message}")

        if not 200 <= response.status_code < 300:
            raw = self._read_body(response)
            logging.error(f"{self.label} returned HTTP {response.status_code}")
            raise ProviderError(
                self.name,
                f"{self.label} error ({response.status_code})",
                status_code=response.status_code,
                raw_error=raw,
            )

        try:
            data = response.json()
        except ValueError:
            raise ProviderError(
                self.name,
                f"{self.label} returned a response that is not JSON.",
                raw_error=self._read_body(response),
            )

        text = self.parse_response(data)
        if not isinstance(text, str) or not text.strip():
            raise ProviderError(self.name, f"{self.label} response text is empty.", raw_error=dump_body(data))

        logging.info(f"{self.label} returned {len(text)} characters")
        return text

    def _read_body(self, response: requests.Response) -> str:
        try:
            return response.text
        except Exception as e:
            logging.debug(f"Could not read {self.label} response body: {str(e)}")
            return ERROR_BODY_SENTINEL


def dump_body(data: Any) -> str:
    try:
        return json.dumps(data)
    except (TypeError, ValueError):
        return repr(data)


def redact_key(text: str, api_key: str) -> str:
    """Mask the key in ``text``, raw and percent-encoded as it appears in query strings"""
    if not api_key:
        return text
    for form in (api_key, quote(api_key, safe=""), quote(api_key)):
        text = text.replace(form, "***")
    return text
