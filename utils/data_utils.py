from typing import Iterable, List, Optional, Sequence
import re

_HORIZONTAL_WS = re.compile(r"[^\S\n]+")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def clean_text(text: Optional[str]) -> str:
    """
    Collapse every run of whitespace (newlines included) to one space and trim

    Args:
        text: The text to clean

    Returns:
        Cleaned text
    """
    if not text:
        return ""

    text = re.sub(r'\s+', ' ', text)
    return text.strip()


def normalize_space(text: Optional[str], keep_newlines: bool = False) -> str:
    """
    Normalize whitespace the way every extracted field is normalized

    Args:
        text: Raw text taken from the page
        keep_newlines: Preserve line breaks (description-like fields) while
            still collapsing whitespace inside each line

    Returns:
        Normalized text, possibly empty
    """
    if not text:
        return ""

    if not keep_newlines:
        return clean_text(text)

    lines = [_HORIZONTAL_WS.sub(" ", line).strip() for line in text.split("\n")]
    return _EXCESS_NEWLINES.sub("\n\n", "\n".join(lines)).strip()


def truncate(text: str, limit: int, suffix: str = "...") -> str:
    """Cut text down to ``limit`` characters, marking the cut with ``suffix``"""
    if len(text) <= limit:
        return text
    return text[:limit] + suffix


def unique(values: Iterable[str]) -> List[str]:
    """De-duplicate while keeping first-seen order"""
    return list(dict.fromkeys(values))


def find_labeled_value(text: Optional[str], labels: Sequence[str]) -> str:
    """
    Find the value printed next to a label in free text

    Matches both "Label: Value" and "Label" followed by the value on the
    next line. Labels are tried in order, first match wins.

    Args:
        text: Visible text of a container
        labels: Label candidates

    Returns:
        The normalized value or an empty string
    """
    if not text:
        return ""

    for label in labels:
        match = re.search(rf"{re.escape(label)}\s*[:\n]\s*([^\n]+)", text, re.IGNORECASE)
        if match:
            value = clean_text(match.group(1))
            if value:
                return value

    return ""


def split_comma_list(text: str) -> List[str]:
    """Split "a, b, a" into unique, normalized, non-empty items"""
    return unique(part for part in (clean_text(p) for p in text.split(",")) if part)
