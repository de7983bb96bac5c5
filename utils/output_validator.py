"""
Turn the model's free-form answer into an AnalysisResult

The model is asked for strict JSON but does not always comply, so the text
is salvaged first (JSON wrapped in prose or markdown fences is accepted) and
then every field is checked by hand. Nothing is defaulted: a missing or
mistyped mandatory field rejects the whole answer.
"""
from typing import Any, List, Optional
import json
import logging
import math

from models.analysis import AnalysisResult

NOT_JSON_MESSAGE = "The AI response did not contain valid JSON."


class AnalysisValidationError(ValueError):
    """The model answer is not usable; ``field`` names the offending field when there is one"""

    def __init__(self, message: str, field: Optional[str] = None, raw_text: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.raw_text = raw_text


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _loads(text: str) -> Any:
    # NaN and Infinity are not JSON even though the json module accepts them
    return json.loads(text, parse_constant=_reject_constant)


def strict_json_object(text: str) -> Any:
    """
    Parse the JSON object contained in the model answer

    Args:
        text: Raw completion text

    Returns:
        The decoded JSON value

    Raises:
        AnalysisValidationError: if no parseable object is found
    """
    trimmed = (text or "").strip()

    if trimmed.startswith("{") and trimmed.endswith("}"):
        candidate = trimmed
    else:
        first = trimmed.find("{")
        last = trimmed.rfind("}")
        if first == -1 or last <= first:
            raise AnalysisValidationError(NOT_JSON_MESSAGE, raw_text=text)
        candidate = trimmed[first:last + 1]

    try:
        return _loads(candidate)
    except (ValueError, RecursionError) as e:
        logging.warning(f"AI response JSON could not be parsed: {str(e)}")
        raise AnalysisValidationError(NOT_JSON_MESSAGE, raw_text=text) from e


def as_boolean(value: Any, field: str) -> bool:
    if not isinstance(value, bool):
        raise AnalysisValidationError(f"AI output field {field} must be boolean.", field=field)
    return value


def as_number(value: Any, field: str) -> float:
    message = f"AI output field {field} must be a valid number."
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise AnalysisValidationError(message, field=field)
    try:
        finite = math.isfinite(float(value))
    except OverflowError:
        # ints too large for a float
        finite = False
    if not finite:
        raise AnalysisValidationError(message, field=field)
    return value


def as_string(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise AnalysisValidationError(f"AI output field {field} must be a string.", field=field)
    return value


def as_string_list(value: Any, field: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise AnalysisValidationError(f"AI output field {field} must be string[].", field=field)
    return value


def coerce_analysis(value: Any) -> AnalysisResult:
    """
    Check a decoded answer field by field

    Args:
        value: Decoded JSON value

    Returns:
        AnalysisResult with fitScore clamped into [0, 100]

    Raises:
        AnalysisValidationError: naming the first field that is missing or mistyped
    """
    if not isinstance(value, dict):
        raise AnalysisValidationError("Invalid AI output format.")

    should_apply = as_boolean(value.get("shouldApply"), "shouldApply")
    fit_score = min(max(as_number(value.get("fitScore"), "fitScore"), 0), 100)
    key_reasons = as_string_list(value.get("keyReasons"), "keyReasons")
    risks = as_string_list(value.get("risks"), "risks")
    questions_to_ask = as_string_list(value.get("questionsToAsk"), "questionsToAsk")
    proposal_short = as_string(value.get("proposalShort"), "proposalShort")
    proposal_full = as_string(value.get("proposalFull"), "proposalFull")

    bid_suggestion = value.get("bidSuggestion")
    if not isinstance(bid_suggestion, str) or not bid_suggestion.strip():
        bid_suggestion = None

    return AnalysisResult(
        should_apply=should_apply,
        fit_score=fit_score,
        key_reasons=key_reasons,
        risks=risks,
        questions_to_ask=questions_to_ask,
        proposal_short=proposal_short,
        proposal_full=proposal_full,
        bid_suggestion=bid_suggestion,
    )


def validate_analysis(text: str) -> AnalysisResult:
    """
    Salvage-parse the completion text and validate it as an AnalysisResult

    Args:
        text: Raw completion text

    Returns:
        The validated result

    Raises:
        AnalysisValidationError: when the text holds no JSON object or the
            object does not match the output contract
    """
    parsed = strict_json_object(text)
    try:
        return coerce_analysis(parsed)
    except AnalysisValidationError as e:
        logging.warning(f"AI output rejected: {str(e)}")
        e.raw_text = text
        raise
