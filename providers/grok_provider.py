from typing import Any, Dict

from models.request import ProviderRequest
from providers.base import BaseProvider, dump_body
from providers.errors import ProviderError


class GrokProvider(BaseProvider):
    """xAI Grok, OpenAI-compatible chat completions"""

    def __init__(self):
        super().__init__()
        self.name = "grok"
        self.label = "Grok"
        self.default_base_url = "https://api.x.ai/v1/chat/completions"
        self.default_max_output_tokens = 1400

    def build_request_body(self, request: ProviderRequest) -> Dict[str, Any]:
        return {
            "model": request.model,
            "temperature": self.temperature(request),
            "max_tokens": self.max_output_tokens(request),
            "messages": [
                {"role": "system", "content": request.instructions},
                {"role": "user", "content": request.input},
            ],
        }

    def parse_response(self, data: Any) -> str:
        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise ProviderError(self.name, "Grok response missing choices.", raw_error=dump_body(data))

        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) else ""
