from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence
import logging

from bs4 import BeautifulSoup
from bs4.element import Tag

from extractors.dom import Document
from models.job import JobSnapshot


@dataclass
class PageContext:
    """Everything a field strategy may look at, parsed once per extraction"""
    url: str
    soup: BeautifulSoup
    content: Optional[Tag] = None
    sidebar: Optional[Tag] = None
    embedded_data: Optional[List[Any]] = field(default=None, repr=False)

    @property
    def root(self) -> Tag:
        """The job container when present, otherwise the whole document"""
        return self.content if self.content is not None else self.soup


Strategy = Callable[[PageContext], Any]


class BaseExtractor(ABC):
    """Base class for job page extractors"""

    def __init__(self):
        self.name = "base"

    @abstractmethod
    def extract(self, document: Document, url: str) -> JobSnapshot:
        """
        Read a job snapshot from a rendered document

        Args:
            document: HTML markup or a parsed document
            url: Address of the page

        Returns:
            A fresh JobSnapshot
        """
        pass

    def first_match(self, field_name: str, strategies: Sequence[Strategy], page: PageContext) -> Any:
        """
        Run strategies in priority order and return the first non-empty result

        A strategy that raises is logged and skipped; a missing field is
        never an error.

        Args:
            field_name: Name used in log messages
            strategies: Functions taking the page context
            page: Parsed page

        Returns:
            The first truthy value, or None when every strategy came up empty
        """
        for strategy in strategies:
            try:
                value = strategy(page)
            except Exception as e:
                logging.warning(f"{self.name} strategy {strategy.__name__} for {field_name} failed: {str(e)}")
                continue

            if value:
                logging.debug(f"{self.name}: {field_name} found with {strategy.__name__}")
                return value

        logging.debug(f"{self.name}: no value found for {field_name}")
        return None
