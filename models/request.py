from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Literal, Optional

from models.job import JobSnapshot

ProviderName = Literal["openai", "gemini", "grok"]

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProviderRequest(BaseModel):
    """Normalized input to one completion call, whatever the vendor"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    provider: ProviderName
    api_key: str = Field(..., repr=False)
    model: str
    instructions: str
    input: str
    base_url: Optional[str] = None
    temperature: Optional[float] = None
    max_output_tokens: Optional[int] = None


class ExtractRequest(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "url": "https://www.upwork.com/jobs/~0123456789abcdef",
                "html": "<html><body><div class='job-details-content'>...</div></body></html>",
                "tabId": 42,
            }
        },
    )

    url: str = Field(..., description="Address of the page the HTML was captured from")
    html: str = Field(..., description="Rendered document markup")
    tab_id: Optional[int] = Field(None, description="Browser tab to remember the snapshot for")


class PreviewRequest(BaseModel):
    model_config = _camel

    job: JobSnapshot


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "job": {
                    "url": "https://www.upwork.com/jobs/~0123456789abcdef",
                    "title": "Build a React dashboard",
                    "description": "We need a dashboard for our sales data.",
                    "budgetText": "$500 (Fixed-price)",
                },
                "provider": "openai",
            }
        },
    )

    job: Optional[JobSnapshot] = Field(None, description="Snapshot to analyze; falls back to the tab's snapshot")
    tab_id: Optional[int] = None
    provider: Optional[ProviderName] = Field(None, description="Overrides the active provider")
    api_key: Optional[str] = Field(None, repr=False, description="Decrypted key; falls back to <PROVIDER>_API_KEY")


class ConnectionTestRequest(BaseModel):
    model_config = _camel

    provider: Optional[ProviderName] = None
    api_key: Optional[str] = Field(None, repr=False)
