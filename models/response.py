from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Optional

from models.analysis import AnalysisResult
from models.job import JobSnapshot


class AssistantResponse(BaseModel):
    """Discriminated reply: ``ok`` tells which of the other fields apply.

    Success replies carry ``type`` plus the matching payload, failures
    carry ``error`` and, for provider failures, the provider details.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ok: bool
    type: Optional[str] = None
    job: Optional[JobSnapshot] = None
    preview: Optional[str] = None
    result: Optional[AnalysisResult] = None
    settings: Optional[Dict[str, Any]] = None
    message: Optional[str] = None

    error: Optional[str] = None
    provider: Optional[str] = None
    status_code: Optional[int] = None
    raw_error: Optional[str] = None
