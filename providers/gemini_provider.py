from typing import Any, Dict
from urllib.parse import quote

from models.request import ProviderRequest
from providers.base import BaseProvider, dump_body
from providers.errors import ProviderError

TRUNCATED_FINISH_REASON = "MAX_TOKENS"


class GeminiProvider(BaseProvider):
    """Google Gemini generateContent API

    The model goes in the path and the key in the query string, so the
    endpoint must never be logged.
    """

    def __init__(self):
        super().__init__()
        self.name = "gemini"
        self.label = "Gemini"
        self.default_base_url = "https://generativelanguage.googleapis.com/v1beta"
        self.default_max_output_tokens = 2048

    def endpoint(self, request: ProviderRequest) -> str:
        base = super().endpoint(request).rstrip("/")
        return f"{base}/models/{quote(request.model, safe='')}:generateContent?key={quote(request.api_key, safe='')}"

    def headers(self, request: ProviderRequest) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def build_request_body(self, request: ProviderRequest) -> Dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": request.instructions}]},
            "contents": [{"parts": [{"text": request.input}]}],
            "generationConfig": {
                "temperature": self.temperature(request),
                "maxOutputTokens": self.max_output_tokens(request),
                "responseMimeType": "application/json",
                "thinkingConfig": {"thinkingBudget": 0},
            },
        }

    def parse_response(self, data: Any) -> str:
        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            raise ProviderError(self.name, "Gemini returned no candidates.", raw_error=dump_body(data))

        first = candidates[0]
        if first.get("finishReason") == TRUNCATED_FINISH_REASON:
            raise ProviderError(
                self.name,
                "Gemini output was truncated at max tokens. Increase Max output tokens in provider settings.",
                raw_error=dump_body(data),
            )

        content = first.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            raise ProviderError(self.name, "Gemini response missing content parts.", raw_error=dump_body(data))

        return "".join(
            part["text"] for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ).strip()
