"""
Helpers for reading a rendered document with BeautifulSoup

The extractor works on a parsed document instead of a live browser tree, so
the browser's ``innerText`` is approximated here: block elements start new
lines, paragraphs and headings are separated by a blank line, and the
contents of script/style/template elements are never visible.
"""
from typing import List, Optional, Union
import re

from bs4 import BeautifulSoup
from bs4.element import Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag

from utils.data_utils import normalize_space

Document = Union[str, BeautifulSoup]

HIDDEN_TAGS = {"script", "style", "noscript", "template", "head", "title", "svg"}

PARAGRAPH_TAGS = {"p", "h1", "h2", "h3", "h4", "h5", "h6"}

BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "header", "hr",
    "li", "main", "nav", "ol", "pre", "section", "table", "tr", "ul",
}

_INVISIBLE_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


class EmptyDocumentError(ValueError):
    """Raised when there is no document to extract from at all"""


def load_document(document: Document) -> BeautifulSoup:
    """
    Accept raw HTML or an already parsed document

    Args:
        document: HTML markup or a BeautifulSoup instance

    Returns:
        Parsed document
    """
    if isinstance(document, BeautifulSoup):
        if not document.contents:
            raise EmptyDocumentError("The document is empty.")
        return document

    if document is None or not str(document).strip():
        raise EmptyDocumentError("The document is empty.")

    return BeautifulSoup(document, "html.parser")


def inner_text(element: Optional[Tag]) -> str:
    """Visible text of an element with line structure preserved"""
    if element is None:
        return ""

    parts: List[str] = []
    _collect_text(element, parts)
    return normalize_space("".join(parts), keep_newlines=True)


def text_of(element: Optional[Tag]) -> str:
    """Visible text of an element on a single line"""
    return normalize_space(inner_text(element))


def _collect_text(node: Tag, parts: List[str]) -> None:
    for child in node.children:
        if isinstance(child, _INVISIBLE_STRINGS):
            continue

        if isinstance(child, NavigableString):
            parts.append(re.sub(r"\s+", " ", str(child)))
            continue

        if not isinstance(child, Tag) or child.name in HIDDEN_TAGS:
            continue

        if child.name == "br":
            parts.append("\n")
        elif child.name in PARAGRAPH_TAGS:
            parts.append("\n\n")
            _collect_text(child, parts)
            parts.append("\n\n")
        elif child.name in BLOCK_TAGS:
            parts.append("\n")
            _collect_text(child, parts)
            parts.append("\n")
        else:
            _collect_text(child, parts)


def page_title(soup: BeautifulSoup) -> str:
    """Text of the document's <title>"""
    title = soup.find("title")
    return normalize_space(title.get_text()) if title else ""


def page_body(soup: BeautifulSoup) -> Tag:
    return soup.body or soup
