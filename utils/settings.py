"""
Runtime configuration read from the environment (.env supported)
"""
from typing import Dict, Optional
import json
import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from models.profile import DEFAULT_PROFILE, Profile
from models.request import ProviderName

# Load environment variables
load_dotenv()

PROVIDER_NAMES = ("openai", "gemini", "grok")


class ProviderConfig(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    model: str
    base_url: Optional[str] = None
    temperature: Optional[float] = None
    max_output_tokens: Optional[int] = None


class AssistantSettings(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    active_provider: ProviderName = "openai"
    providers: Dict[str, ProviderConfig] = Field(default_factory=dict)
    profile: Profile = DEFAULT_PROFILE


DEFAULT_PROVIDERS: Dict[str, ProviderConfig] = {
    "openai": ProviderConfig(
        model="gpt-5.2",
        base_url="https://api.openai.com/v1/responses",
        temperature=0.2,
        max_output_tokens=1400,
    ),
    "gemini": ProviderConfig(
        model="gemini-2.5-flash",
        base_url="https://generativelanguage.googleapis.com/v1beta",
        temperature=0.2,
        max_output_tokens=2048,
    ),
    "grok": ProviderConfig(
        model="grok-3-latest",
        base_url="https://api.x.ai/v1/chat/completions",
        temperature=0.2,
        max_output_tokens=1400,
    ),
}


def _env_float(key: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(key)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        logging.warning(f"Ignoring {key}={value!r}: not a number")
        return default


def _env_int(key: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(key)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logging.warning(f"Ignoring {key}={value!r}: not an integer")
        return default


def load_provider_config(name: str) -> ProviderConfig:
    """Defaults for ``name`` overridden by <NAME>_MODEL, _BASE_URL, _TEMPERATURE, _MAX_OUTPUT_TOKENS"""
    default = DEFAULT_PROVIDERS[name]
    prefix = name.upper()
    return ProviderConfig(
        model=os.getenv(f"{prefix}_MODEL") or default.model,
        base_url=os.getenv(f"{prefix}_BASE_URL") or default.base_url,
        temperature=_env_float(f"{prefix}_TEMPERATURE", default.temperature),
        max_output_tokens=_env_int(f"{prefix}_MAX_OUTPUT_TOKENS", default.max_output_tokens),
    )


def load_profile(path: Optional[str] = None) -> Profile:
    """
    Load the mindset profile from a JSON file

    Args:
        path: File to read; defaults to PROFILE_PATH from the environment

    Returns:
        The profile from the file, or the built-in default when no file is
        configured or it cannot be used
    """
    path = path or os.getenv("PROFILE_PATH")
    if not path:
        return DEFAULT_PROFILE

    try:
        with open(path, "r", encoding="utf-8") as f:
            return Profile.model_validate(json.load(f))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logging.error(f"Could not load profile from {path}: {str(e)}")
        return DEFAULT_PROFILE


def load_settings() -> AssistantSettings:
    """Build the full settings object from the environment"""
    active = (os.getenv("ACTIVE_PROVIDER") or "openai").strip().lower()
    if active not in PROVIDER_NAMES:
        logging.warning(f"Unknown ACTIVE_PROVIDER {active!r}, using openai")
        active = "openai"

    return AssistantSettings(
        active_provider=active,
        providers={name: load_provider_config(name) for name in PROVIDER_NAMES},
        profile=load_profile(),
    )


def get_api_key(provider: str) -> Optional[str]:
    """Key for ``provider`` from <PROVIDER>_API_KEY, if set"""
    key = os.getenv(f"{provider.upper()}_API_KEY", "").strip()
    return key or None
