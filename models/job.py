from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, Optional, Tuple

TITLE_PLACEHOLDER = "Job title cannot be parsed!"

# Fields that are always present on a snapshot; every other field is optional
REQUIRED_FIELDS = ("url", "title", "description")


class JobSnapshot(BaseModel):
    """A job posting as observed on the page at extraction time.

    Optional fields are either a non-empty value or None; an empty string or
    empty list is never stored.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    url: str
    title: str = TITLE_PLACEHOLDER
    description: str = ""

    posted_date: Optional[str] = None
    job_location: Optional[str] = None

    # Budget & contract info
    budget_text: Optional[str] = None
    experience_level: Optional[str] = None
    project_type: Optional[str] = None
    skills: Optional[Tuple[str, ...]] = None

    # Activity on this job
    proposals: Optional[str] = None
    last_viewed_by_client: Optional[str] = None
    hires: Optional[str] = None
    interviewing: Optional[str] = None
    invites_sent: Optional[str] = None
    unanswered_invites: Optional[str] = None
    bid_range: Optional[str] = None

    # Connects
    connects_required: Optional[str] = None
    connects_available: Optional[str] = None

    # About the client
    client_location: Optional[str] = None
    client_payment_verified: Optional[bool] = None
    client_rating: Optional[str] = None
    client_review_count: Optional[str] = None
    client_jobs_posted: Optional[str] = None
    client_hire_rate: Optional[str] = None
    client_open_jobs: Optional[str] = None
    client_total_spent: Optional[str] = None
    client_total_hires: Optional[str] = None
    client_active_hires: Optional[str] = None
    client_avg_hourly_rate: Optional[str] = None
    client_total_hours: Optional[str] = None
    client_industry: Optional[str] = None
    client_company_size: Optional[str] = None
    client_member_since: Optional[str] = None

    preferred_qualifications: Optional[Tuple[str, ...]] = None
    required_questions: Optional[Tuple[str, ...]] = None

    @model_validator(mode="before")
    @classmethod
    def drop_empty_values(cls, data: Any) -> Any:
        # Absence is the only "unknown" signal
        if not isinstance(data, dict):
            return data
        cleaned = {}
        for key, value in data.items():
            if key not in REQUIRED_FIELDS:
                if isinstance(value, str) and not value.strip():
                    continue
                if isinstance(value, (list, tuple)):
                    # stored as tuples
                    value = tuple(item for item in value if not (isinstance(item, str) and not item.strip()))
                    if not value:
                        continue
            cleaned[key] = value
        return cleaned

    @field_validator("title", mode="before")
    @classmethod
    def title_never_empty(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return TITLE_PLACEHOLDER
        return value

    def to_wire(self) -> dict:
        """Serialize with camelCase keys, leaving out absent fields"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class BuiltPrompt(BaseModel):
    instructions: str
    input: str
