"""Typed data structures used by the link title engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


class LinkKind(str, Enum):
    """What a fragment of text looks like to the classifier."""

    BARE_URL = "bare_url"
    MARKDOWN_LINK = "markdown_link"
    HTML_LINK = "html_link"
    IMAGE = "image"
    PLAIN_TEXT = "plain_text"


@dataclass(frozen=True)
class LinkCandidate:
    """A classified text fragment."""

    raw_text: str
    kind: LinkKind


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based line/column coordinate inside a text buffer."""

    line: int
    column: int


@dataclass(frozen=True)
class Span:
    """Region of buffer text delimited by two positions."""

    start: Position
    end: Position

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True)
class TitleFetchResult:
    """Outcome of a single title lookup.

    ``sentinel`` marks a synthetic fallback such as ``Site Unreachable``.
    ``blacklisted`` marks a short-circuited lookup whose title is the bare
    host name and must be rendered as-is.
    """

    title: str
    sentinel: bool = False
    blacklisted: bool = False


@dataclass(frozen=True)
class TemplateRule:
    """Per-domain search/replace applied to fetched titles."""

    domain: str
    search: str
    replace: str


@dataclass(frozen=True)
class DomainPolicy:
    """Blacklist and title templates derived from the configuration."""

    blacklist: Tuple[str, ...] = ()
    templates: Tuple[TemplateRule, ...] = ()

    def blocks(self, host: str) -> bool:
        return any(entry in host for entry in self.blacklist)

    def template_for(self, url: str) -> Optional[TemplateRule]:
        for rule in self.templates:
            if rule.domain and rule.domain in url:
                return rule
        return None


@dataclass(frozen=True)
class HttpResponse:
    """Minimal response record returned by network clients."""

    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 400

    def header(self, name: str, default: str = "") -> str:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default
