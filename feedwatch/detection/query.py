"""Selector execution against page markup."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchedElement:
    """Text and attributes of one element matched by a selector."""

    text: str
    attributes: dict[str, str] = field(default_factory=dict)


class QueryEngine(Protocol):
    """Protocol for selector engines.

    Implementations return matches in document order and never raise on an
    invalid selector; they log it and return an empty list.
    """

    def query(self, markup: str, selector: str) -> list[MatchedElement]: ...


class SoupQueryEngine:
    """Runs CSS selectors with BeautifulSoup and soupsieve."""

    def __init__(self, parser: str = "html.parser") -> None:
        self._parser = parser

    def query(self, markup: str, selector: str) -> list[MatchedElement]:
        soup = BeautifulSoup(markup, self._parser)
        try:
            elements = soup.select(selector)
        except SelectorSyntaxError:
            logger.warning("invalid css selector", extra={"selector": selector}, exc_info=True)
            return []

        return [
            MatchedElement(text=el.get_text(), attributes=_flatten_attributes(el.attrs))
            for el in elements
        ]


def _flatten_attributes(attrs: dict) -> dict[str, str]:
    # bs4 returns multi-valued attributes such as class as lists
    return {
        name: " ".join(value) if isinstance(value, list) else str(value)
        for name, value in attrs.items()
    }
