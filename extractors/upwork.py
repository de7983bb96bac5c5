from typing import Dict, List, Optional, Tuple
import logging
import re

from bs4 import BeautifulSoup
from bs4.element import Tag

from extractors.base import BaseExtractor, PageContext
from extractors.client_info import extract_client_info
from extractors.dom import Document, inner_text, load_document, page_body, page_title, text_of
from extractors.embedded_data import find_embedded_value, load_embedded_data
from models.job import TITLE_PLACEHOLDER, JobSnapshot
from utils.data_utils import find_labeled_value, normalize_space, split_comma_list, truncate, unique

JOB_URL_REGEX = re.compile(r"upwork\.com/(jobs/|nx/find-work/(.*/)?details/)")

CONTENT_SELECTOR = ".job-details-content"
SIDEBAR_SELECTOR = ".sidebar"

DESCRIPTION_SELECTORS = [
    '[data-test="Description"]',
    '[data-test="job-description"]',
    '[data-test="job-description-text"]',
    ".job-description",
]
MIN_DESCRIPTION_LENGTH = 21
MAX_BODY_DUMP = 20_000

SKILL_SELECTOR = '.skills-list .air3-badge, .skills-list .badge, [data-test="skill"]'

LOCATION_PATTERN = re.compile(r"worldwide|domestic|u\.?s\.?\s*only|europe|asia|remote", re.IGNORECASE)

BUDGET_LABELS = ["Budget", "Hourly Range", "Fixed-price"]
EXPERIENCE_LABELS = ["Experience level"]
PROJECT_TYPE_LABELS = ["Project type"]

# Keys of the "Activity on this job" list mapped to snapshot fields
ACTIVITY_FIELDS = {
    "proposals": "proposals",
    "last viewed by client": "last_viewed_by_client",
    "hires": "hires",
    "interviewing": "interviewing",
    "invites sent": "invites_sent",
    "unanswered invites": "unanswered_invites",
}

# Tried in order; the page wording differs between layouts
CONNECTS_REQUIRED_PATTERNS = [
    re.compile(r"Send a proposal for:?\s*(\d+)\s*Connects", re.IGNORECASE),
    re.compile(r"Required Connects[^:\n]*:\s*(\d+)", re.IGNORECASE),
]
CONNECTS_AVAILABLE_PATTERN = re.compile(r"Available Connects:\s*(\d+)", re.IGNORECASE)

QUESTIONS_MARKER = "You will be asked to answer the following questions when submitting a proposal"


def is_job_url(url: str) -> bool:
    """True for Upwork job details pages"""
    return bool(url and JOB_URL_REGEX.search(url))


class UpworkExtractor(BaseExtractor):
    """Upwork job details page extractor

    Every field is read through a priority chain of strategies: the
    selector for the current layout, the selector for the alternate
    layout, the serialized page state, and a generic page-level fallback.
    The first strategy that produces a non-empty value wins.
    """

    def __init__(self):
        super().__init__()
        self.name = "Upwork"

    def extract(self, document: Document, url: str) -> JobSnapshot:
        """
        Extract a job snapshot from a job details page

        Args:
            document: HTML markup or a parsed document
            url: Address of the page

        Returns:
            A fresh JobSnapshot; fields that could not be found are absent
        """
        soup = load_document(document)
        page = self._page_context(soup, url)

        title = self.first_match("title", self.title_strategies(), page) or TITLE_PLACEHOLDER
        description = self.first_match("description", self.description_strategies(), page) or ""
        budget_text, experience_level, project_type = self._soft_fields(page)
        connects_container = page.sidebar if page.sidebar is not None else page.content

        fields = {
            "url": url,
            "title": title,
            "description": description,
            "posted_date": self.first_match("posted_date", [self._posted_date], page),
            "job_location": self.first_match("job_location", [self._location_near_posted_line, self._location_in_posted_line], page),
            "budget_text": budget_text,
            "experience_level": experience_level,
            "project_type": project_type,
            "skills": self.first_match("skills", [self._skill_badges, self._skills_line], page),
            "bid_range": self.first_match("bid_range", [self._bid_range], page),
            "preferred_qualifications": self.first_match("preferred_qualifications", [self._preferred_qualifications], page),
            "required_questions": self.first_match("required_questions", [self._required_questions], page),
        }
        fields.update(self._activity(page))
        fields.update(self._connects(connects_container))
        fields.update(extract_client_info(connects_container))

        snapshot = JobSnapshot(**fields)
        logging.info(f"Extracted Upwork job '{snapshot.title}' from {url}")
        return snapshot

    def _page_context(self, soup: BeautifulSoup, url: str) -> PageContext:
        content = soup.select_one(CONTENT_SELECTOR)
        sidebar = content.select_one(SIDEBAR_SELECTOR) if content is not None else None
        if content is None:
            logging.debug("Job container not found, falling back to page-level strategies")
        return PageContext(
            url=url,
            soup=soup,
            content=content,
            sidebar=sidebar,
            embedded_data=load_embedded_data(soup),
        )

    # ---- Title ----

    def title_strategies(self):
        return [
            self._title_from_header_span,
            self._title_from_header,
            self._title_from_alternate_layout,
            self._title_from_embedded_data,
            self._title_from_h1,
            self._title_from_document_title,
        ]

    def _title_from_header_span(self, page: PageContext) -> str:
        if page.content is None:
            return ""
        return text_of(page.content.select_one("h4 span.flex-1"))

    def _title_from_header(self, page: PageContext) -> str:
        if page.content is None:
            return ""
        return text_of(page.content.select_one("h4"))

    def _title_from_alternate_layout(self, page: PageContext) -> str:
        return text_of(page.soup.select_one('[data-test="job-title"]'))

    def _title_from_embedded_data(self, page: PageContext) -> str:
        return normalize_space(find_embedded_value(page.embedded_data, "title"))

    def _title_from_h1(self, page: PageContext) -> str:
        return text_of(page.soup.select_one("h1"))

    def _title_from_document_title(self, page: PageContext) -> str:
        return re.sub(r"\s*[-|]\s*Upwork.*$", "", page_title(page.soup), flags=re.IGNORECASE).strip()

    # ---- Description ----

    def description_strategies(self):
        return [
            self._description_from_selectors,
            self._description_from_embedded_data,
            self._description_from_section,
            self._description_from_container,
            self._description_from_body,
        ]

    def _description_from_selectors(self, page: PageContext) -> str:
        for selector in DESCRIPTION_SELECTORS:
            text = inner_text(page.root.select_one(selector))
            if len(text) >= MIN_DESCRIPTION_LENGTH:
                return text
        return ""

    def _description_from_embedded_data(self, page: PageContext) -> str:
        return normalize_space(find_embedded_value(page.embedded_data, "description"), keep_newlines=True)

    def _description_from_section(self, page: PageContext) -> str:
        if page.content is None:
            return ""
        return inner_text(page.content.select_one("section"))

    def _description_from_container(self, page: PageContext) -> str:
        return inner_text(page.content)

    def _description_from_body(self, page: PageContext) -> str:
        return truncate(inner_text(page_body(page.soup)), MAX_BODY_DUMP, suffix="")

    # ---- Posted date & location ----

    def _posted_date(self, page: PageContext) -> str:
        if page.content is None:
            return ""
        text = text_of(page.content.select_one(".posted-on-line"))
        match = re.search(r"Posted\s+(.+)", text, re.IGNORECASE)
        return match.group(1) if match else text

    def _location_near_posted_line(self, page: PageContext) -> str:
        if page.content is None:
            return ""
        for element in page.content.select(".posted-on-line ~ div, .posted-on-line div"):
            text = text_of(element)
            if text and LOCATION_PATTERN.search(text):
                return text
        return ""

    def _location_in_posted_line(self, page: PageContext) -> str:
        if page.content is None:
            return ""
        line = page.content.select_one(".posted-on-line")
        if line is None:
            return ""
        for paragraph in line.select("p"):
            text = text_of(paragraph)
            if LOCATION_PATTERN.search(text):
                return text
        return ""

    # ---- Budget, experience level, project type ----

    def _soft_fields(self, page: PageContext) -> Tuple[str, str, str]:
        budget = self.first_match("budget_text", [
            self._budget_from_features,
            self._budget_from_data_attributes,
            self._budget_from_text,
        ], page)
        experience = self.first_match("experience_level", [
            self._experience_from_features,
            self._experience_from_data_attributes,
            self._experience_from_text,
        ], page)
        project_type = self.first_match("project_type", [
            self._project_type_from_segmentations,
            self._project_type_from_text,
        ], page)
        return budget or "", experience or "", project_type or ""

    def _features_list(self, page: PageContext) -> Dict[str, str]:
        """Read {label, value} pairs from the features list"""
        found: Dict[str, str] = {}
        if page.content is None:
            return found

        for item in page.content.select("ul.features li, .features li"):
            label_element = item.select_one(".description")
            if label_element is None:
                continue
            label = text_of(label_element)
            value = text_of(item.select_one("strong"))
            lowered = label.lower()

            if "fixed-price" in lowered or "hourly" in lowered:
                found["budget"] = f"{value} ({label})" if value else label
            elif "experience" in lowered:
                found["experience"] = value or label

        return found

    def _budget_from_features(self, page: PageContext) -> str:
        return self._features_list(page).get("budget", "")

    def _experience_from_features(self, page: PageContext) -> str:
        return self._features_list(page).get("experience", "")

    def _budget_from_data_attributes(self, page: PageContext) -> str:
        if page.content is None:
            return ""
        marker = page.content.select_one('[data-cy="fixed-price"], [data-cy="hourly"]')
        item = marker.find_parent("li") if marker is not None else None
        if item is None:
            return ""
        amount = text_of(item.select_one("strong"))
        kind = text_of(item.select_one(".description"))
        return f"{amount} ({kind})" if amount else kind

    def _budget_from_text(self, page: PageContext) -> str:
        return find_labeled_value(inner_text(page.root), BUDGET_LABELS)

    def _experience_from_data_attributes(self, page: PageContext) -> str:
        if page.content is None:
            return ""
        marker = page.content.select_one('[data-cy="expertise"]')
        item = marker.find_parent("li") if marker is not None else None
        return text_of(item.select_one("strong")) if item is not None else ""

    def _experience_from_text(self, page: PageContext) -> str:
        return find_labeled_value(inner_text(page.root), EXPERIENCE_LABELS)

    def _project_type_from_segmentations(self, page: PageContext) -> str:
        if page.content is None:
            return ""
        for item in page.content.select(".segmentations li, ul.list-unstyled li"):
            if "project type" in text_of(item.select_one("strong")).lower():
                return text_of(item.select_one("span"))
        return ""

    def _project_type_from_text(self, page: PageContext) -> str:
        return find_labeled_value(inner_text(page.root), PROJECT_TYPE_LABELS)

    # ---- Skills ----

    def _skill_badges(self, page: PageContext) -> List[str]:
        tags = []
        for badge in page.root.select(SKILL_SELECTOR):
            clamp = badge.select_one(".air3-line-clamp")
            text = normalize_space((clamp if clamp is not None else badge).get_text())
            if text:
                tags.append(text)
        return unique(tags)

    def _skills_line(self, page: PageContext) -> List[str]:
        match = re.search(r"Skills\s*[:\n]\s*([^\n]+)", inner_text(page.content), re.IGNORECASE)
        return split_comma_list(match.group(1)) if match else []

    # ---- Activity, bid range, connects ----

    def _activity(self, page: PageContext) -> Dict[str, str]:
        activity: Dict[str, str] = {}
        if page.content is None:
            return activity

        for item in page.content.select(".client-activity-items .ca-item, .client-activity-items li"):
            title_element = item.select_one(".title")
            value_element = item.select_one(".value")
            if title_element is None or value_element is None:
                continue
            key = re.sub(r":$", "", text_of(title_element)).lower()
            field_name = ACTIVITY_FIELDS.get(key)
            if field_name:
                activity[field_name] = text_of(value_element)

        return activity

    def _bid_range(self, page: PageContext) -> str:
        if page.content is None:
            return ""
        for heading in page.content.select("h5 strong, h5"):
            text = text_of(heading)
            if "bid range" in text.lower():
                return re.sub(r"^bid range\s*[-–—:]?\s*", "", text, flags=re.IGNORECASE)
        return ""

    def _connects(self, container: Optional[Tag]) -> Dict[str, str]:
        if container is None:
            return {}

        text = inner_text(container)
        connects: Dict[str, str] = {}

        for pattern in CONNECTS_REQUIRED_PATTERNS:
            match = pattern.search(text)
            if match:
                connects["connects_required"] = match.group(1)
                break

        match = CONNECTS_AVAILABLE_PATTERN.search(text)
        if match:
            connects["connects_available"] = match.group(1)

        return connects

    # ---- Qualifications & screening questions ----

    def _preferred_qualifications(self, page: PageContext) -> List[str]:
        if page.content is None:
            return []
        return [text for text in (text_of(li) for li in page.content.select(".qualification-items li")) if text]

    def _required_questions(self, page: PageContext) -> List[str]:
        if page.content is None:
            return []

        marker = next((p for p in page.content.select("p") if QUESTIONS_MARKER in p.get_text()), None)
        if marker is None:
            return []

        sibling = marker.find_next_sibling()
        if sibling is not None and sibling.name == "ol":
            questions = sibling
        else:
            questions = marker.parent.select_one("ol") if marker.parent is not None else None
        if questions is None:
            return []

        return [text for text in (text_of(li) for li in questions.select("li")) if text]


def extract_job(document: Document, url: str) -> JobSnapshot:
    """Extract a snapshot from an Upwork job details page"""
    return UpworkExtractor().extract(document, url)
