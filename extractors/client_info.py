"""
"About the client" probes

Each probe reads one fact from the client-info container and is independent
of the others. When the container is missing the whole set is skipped.
"""
from typing import Any, Callable, Dict, Optional, Tuple
import logging
import re

from bs4.element import Tag

from extractors.dom import inner_text, text_of

CLIENT_CONTAINER_SELECTOR = '[data-test="about-client-container"], .cfe-ui-job-about-client'


def find_client_container(container: Optional[Tag]) -> Optional[Tag]:
    if container is None:
        return None
    return container.select_one(CLIENT_CONTAINER_SELECTOR)


def _search(pattern: str, text: str) -> Optional[re.Match]:
    return re.search(pattern, text, re.IGNORECASE)


def payment_verified(about: Tag) -> Optional[bool]:
    text = inner_text(about)
    if _search(r"payment (method )?(not verified|unverified)", text):
        return False
    if _search(r"payment (method )?verified", text):
        return True
    return None


def rating(about: Tag) -> str:
    return text_of(about.select_one(".air3-rating-value-text"))


def review_count(about: Tag) -> str:
    # "4.95 of 391 reviews"
    match = _search(r"([\d.]+)\s+of\s+([\d,]+)\s+reviews?", inner_text(about))
    return f"{match.group(1)} of {match.group(2)} reviews" if match else ""


def location(about: Tag) -> str:
    element = about.select_one('[data-qa="client-location"]')
    if element is None:
        return ""
    strong = element.select_one("strong")
    return text_of(strong if strong is not None else element)


def _job_stats_text(about: Tag) -> Tuple[str, str]:
    element = about.select_one('[data-qa="client-job-posting-stats"]')
    if element is None:
        return "", ""
    strong = element.select_one("strong")
    detail = element.select_one("div")
    return text_of(strong), text_of(detail if detail is not None else element)


def jobs_posted(about: Tag) -> str:
    headline, _ = _job_stats_text(about)
    match = _search(r"([\d,]+)\s+jobs?\s+posted", headline)
    return match.group(1) if match else ""


def hire_rate(about: Tag) -> str:
    _, detail = _job_stats_text(about)
    match = _search(r"([\d.]+%)\s+hire\s+rate", detail)
    return match.group(1) if match else ""


def open_jobs(about: Tag) -> str:
    _, detail = _job_stats_text(about)
    match = _search(r"([\d,]+)\s+open\s+jobs?", detail)
    return match.group(1) if match else ""


def total_spent(about: Tag) -> str:
    match = _search(r"([$\d,.KkMm]+)\s*total\s*spent", text_of(about.select_one('[data-qa="client-spend"]')))
    return match.group(1) if match else ""


def total_hires(about: Tag) -> str:
    match = _search(r"([\d,]+)\s*hires?", text_of(about.select_one('[data-qa="client-hires"]')))
    return match.group(1) if match else ""


def active_hires(about: Tag) -> str:
    match = _search(r"([\d,]+)\s*active", text_of(about.select_one('[data-qa="client-hires"]')))
    return match.group(1) if match else ""


def avg_hourly_rate(about: Tag) -> str:
    match = _search(r"([$\d,.]+/hr)", text_of(about.select_one('[data-qa="client-hourly-rate"]')))
    return match.group(1) if match else ""


def total_hours(about: Tag) -> str:
    return text_of(about.select_one('[data-qa="client-hours"]'))


def industry(about: Tag) -> str:
    return text_of(about.select_one('[data-qa="client-company-profile-industry"]'))


def company_size(about: Tag) -> str:
    return text_of(about.select_one('[data-qa="client-company-profile-size"]'))


def member_since(about: Tag) -> str:
    text = text_of(about.select_one('[data-qa="client-contract-date"]'))
    match = _search(r"Member since\s+(.+)", text)
    return match.group(1) if match else text


CLIENT_PROBES: Dict[str, Callable[[Tag], Any]] = {
    "client_payment_verified": payment_verified,
    "client_rating": rating,
    "client_review_count": review_count,
    "client_location": location,
    "client_jobs_posted": jobs_posted,
    "client_hire_rate": hire_rate,
    "client_open_jobs": open_jobs,
    "client_total_spent": total_spent,
    "client_total_hires": total_hires,
    "client_active_hires": active_hires,
    "client_avg_hourly_rate": avg_hourly_rate,
    "client_total_hours": total_hours,
    "client_industry": industry,
    "client_company_size": company_size,
    "client_member_since": member_since,
}


def extract_client_info(container: Optional[Tag]) -> Dict[str, Any]:
    """
    Run every client probe against the client-info container

    Args:
        container: Sidebar or job container that holds the client card

    Returns:
        Snapshot fields keyed by attribute name; probes that found nothing
        are left out
    """
    about = find_client_container(container)
    if about is None:
        logging.debug("No client info container on page")
        return {}

    info: Dict[str, Any] = {}
    for field_name, probe in CLIENT_PROBES.items():
        try:
            value = probe(about)
        except Exception as e:
            logging.warning(f"Client probe {field_name} failed: {str(e)}")
            continue
        if value is not None and value != "":
            info[field_name] = value

    return info
