"""Rules for telling bare URLs, existing links and plain text apart."""

from __future__ import annotations

import re

from .types import LinkCandidate, LinkKind

# Scheme and/or www. prefix, a host with at least one dot, no whitespace.
URL_PATTERN = (
    r"https?://(?:www\.|(?!www))[a-zA-Z0-9][a-zA-Z0-9-]+[a-zA-Z0-9]\.[^\s]{2,}"
    r"|www\.[a-zA-Z0-9][a-zA-Z0-9-]+[a-zA-Z0-9]\.[^\s]{2,}"
    r"|https?://(?:www\.|(?!www))[a-zA-Z0-9]+\.[^\s]{2,}"
    r"|www\.[a-zA-Z0-9]+\.[^\s]{2,}"
)

URL_RE = re.compile(rf"^(?:{URL_PATTERN})$", re.IGNORECASE)
LINE_URL_RE = re.compile(rf"(?:{URL_PATTERN})", re.IGNORECASE)

MARKDOWN_LINK_RE = re.compile(rf"^\[([^\[\]]*)\]\(({URL_PATTERN})\)$", re.IGNORECASE)
LINE_MARKDOWN_LINK_RE = re.compile(rf"\[([^\[\]]*)\]\(({URL_PATTERN})\)", re.IGNORECASE)

# The href may not contain a quote, so the URL alternative is tightened here.
_HREF_PATTERN = URL_PATTERN.replace(r"[^\s]", r"[^\s\"']")
HTML_LINK_RE = re.compile(rf"^<a\s+href=[\"']({_HREF_PATTERN})[\"']\s*>([^<]*)</a>$", re.IGNORECASE)
LINE_HTML_LINK_RE = re.compile(rf"<a\s+href=[\"']({_HREF_PATTERN})[\"']\s*>([^<]*)</a>", re.IGNORECASE)

IMAGE_RE = re.compile(r"\.(gif|jpe?g|tiff?|png|webp|bmp|tga|psd|ai)$", re.IGNORECASE)


def is_url(text: str) -> bool:
    return URL_RE.match(text) is not None


def is_image(text: str) -> bool:
    return IMAGE_RE.search(text) is not None


def is_markdown_link(text: str) -> bool:
    return MARKDOWN_LINK_RE.match(text) is not None


def is_html_link(text: str) -> bool:
    return HTML_LINK_RE.match(text) is not None


def classify(text: str) -> LinkCandidate:
    """Return the ``LinkCandidate`` for ``text``.

    Existing links win over bare URLs, and image URLs are reported
    separately so callers can skip the title lookup for them.
    """

    if is_markdown_link(text):
        kind = LinkKind.MARKDOWN_LINK
    elif is_html_link(text):
        kind = LinkKind.HTML_LINK
    elif is_url(text):
        kind = LinkKind.IMAGE if is_image(text) else LinkKind.BARE_URL
    else:
        kind = LinkKind.PLAIN_TEXT
    return LinkCandidate(raw_text=text, kind=kind)


def extract_url(link_text: str) -> str:
    """Return the URL of a markdown or HTML link.

    Raises ``ValueError`` if ``link_text`` is not a link.
    """

    match = MARKDOWN_LINK_RE.match(link_text)
    if match:
        return match.group(2)
    match = HTML_LINK_RE.match(link_text)
    if match:
        return match.group(1)
    raise ValueError(f"Not a link: {link_text!r}")
