from typing import Any, List, Optional
import json
import logging

from bs4 import BeautifulSoup

NUXT_DATA_SELECTOR = "#__NUXT_DATA__"

# How many entries after a key are searched for its value
LOOKAHEAD = 4
MIN_VALUE_LENGTH = 4


def load_embedded_data(soup: BeautifulSoup) -> Optional[List[Any]]:
    """
    Read the serialized page state that Upwork ships in a script tag

    Args:
        soup: Parsed document

    Returns:
        The flat state array, or None when the page has none
    """
    script = soup.select_one(NUXT_DATA_SELECTOR)
    if script is None:
        return None

    raw = script.string or script.get_text()
    if not raw or not raw.strip():
        return None

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logging.debug(f"Embedded page data is not valid JSON: {str(e)}")
        return None

    return data if isinstance(data, list) else None


def find_embedded_value(data: Optional[List[Any]], field: str) -> str:
    """
    Find the value stored right after ``field`` in the flat state array

    The state array is a flattened object graph, so a field name is followed
    by references and finally its string value. Only a few entries after the
    key are inspected, and short strings are treated as references or
    flags rather than content.

    Args:
        data: State array from load_embedded_data
        field: Key to look for, e.g. "title"

    Returns:
        The value or an empty string
    """
    if not data:
        return ""

    for i, entry in enumerate(data):
        if entry != field:
            continue
        for candidate in data[i + 1:i + 1 + LOOKAHEAD]:
            if isinstance(candidate, str) and len(candidate) >= MIN_VALUE_LENGTH:
                return candidate

    return ""
