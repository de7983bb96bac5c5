from typing import Any, Dict

from models.request import ProviderRequest
from providers.base import BaseProvider, dump_body
from providers.errors import ProviderError


class OpenAIProvider(BaseProvider):
    """OpenAI Responses API"""

    def __init__(self):
        super().__init__()
        self.name = "openai"
        self.label = "OpenAI"
        self.default_base_url = "https://api.openai.com/v1/responses"
        self.default_max_output_tokens = 1400

    def build_request_body(self, request: ProviderRequest) -> Dict[str, Any]:
        return {
            "model": request.model,
            "instructions": request.instructions,
            "input": request.input,
            "text": {"format": {"type": "text"}},
            "temperature": self.temperature(request),
            "max_output_tokens": self.max_output_tokens(request),
        }

    def parse_response(self, data: Any) -> str:
        """
        Prefer the flat ``output_text``; otherwise join the text parts of
        every output item in order
        """
        if not isinstance(data, dict):
            raise ProviderError(self.name, "OpenAI response is invalid.", raw_error=dump_body(data))

        direct = data.get("output_text")
        if isinstance(direct, str) and direct.strip():
            return direct

        output = data.get("output")
        if not isinstance(output, list):
            raise ProviderError(self.name, "OpenAI response missing output_text/output.", raw_error=dump_body(data))

        chunks = []
        for item in output:
            if not isinstance(item, dict) or not isinstance(item.get("content"), list):
                continue
            for part in item["content"]:
                if not isinstance(part, dict):
                    continue
                text = part.get("text")
                if isinstance(text, str) and text.strip():
                    chunks.append(text)

        return "".join(chunks).strip()
