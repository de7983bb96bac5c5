from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Optional


class AnalysisResult(BaseModel):
    """Validated model answer for one job.

    Only build this from values that already passed
    utils.output_validator checks; pydantic's lax coercion is not a
    substitute for them.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    should_apply: bool
    fit_score: float  # 0-100
    key_reasons: List[str]
    risks: List[str]
    questions_to_ask: List[str]
    proposal_short: str
    proposal_full: str
    bid_suggestion: Optional[str] = None
