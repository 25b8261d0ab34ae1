"""Title clean-up applied between the fetch and the buffer commit."""

from __future__ import annotations

import logging
import re
from typing import Optional

from .config import Configuration
from .types import DomainPolicy, TemplateRule

logger = logging.getLogger(__name__)

ELLIPSIS = "..."

# Markdown control characters: * _ ` ~ \ [ ] < > |
_CONTROL_CHARS = r"[*_`~\\\[\]<>|]"
_ESCAPE_RE = re.compile(rf"({_CONTROL_CHARS})")
_UNESCAPE_RE = re.compile(rf"\\({_CONTROL_CHARS})")
_LINE_BREAKS_RE = re.compile(r"[\r\n]+")
_JS_REFERENCE_RE = re.compile(r"\$(\$|&|\d+)")


def clean_whitespace(title: str) -> str:
    """Drop line breaks and collapse runs of whitespace."""

    return re.sub(r"\s+", " ", _LINE_BREAKS_RE.sub(" ", title)).strip()


def unescape_markdown(title: str) -> str:
    return _UNESCAPE_RE.sub(r"\1", title)


def escape_markdown(title: str) -> str:
    return _ESCAPE_RE.sub(r"\\\1", title)


def _replacement_template(replace: str) -> str:
    """Translate ``$1``, ``$&`` and ``$$`` into a ``re.sub`` template.

    Backslashes in the user's text stay literal.
    """

    def reference(match: re.Match) -> str:
        token = match.group(1)
        if token == "$":
            return "$"
        if token == "&":
            return r"\g<0>"
        return rf"\g<{token}>"

    return _JS_REFERENCE_RE.sub(reference, replace.replace("\\", "\\\\"))


def apply_template(title: str, rule: Optional[TemplateRule]) -> str:
    """Apply ``rule``'s search/replace with ``$1``/``$&``/``$$`` references."""

    if rule is None:
        return title
    replacement = _replacement_template(rule.replace)
    try:
        return re.sub(rule.search, replacement, title)
    except (re.error, IndexError) as exc:
        logger.warning("Skipping title template for %s: %s", rule.domain, exc)
        return title


def truncate(title: str, max_length: int) -> str:
    """Cut ``title`` to ``max_length`` plus an ellipsis; 0 disables truncation."""

    if max_length > 0 and len(title) > max_length + len(ELLIPSIS):
        return title[:max_length] + ELLIPSIS
    return title


def process_title(
    raw: str,
    url: str,
    config: Configuration,
    policy: Optional[DomainPolicy] = None,
) -> str:
    """Run the full pipeline: whitespace, escaping, template, truncation."""

    policy = policy or config.policy()
    title = clean_whitespace(raw)
    title = escape_markdown(unescape_markdown(title))
    title = apply_template(title, policy.template_for(url))
    return truncate(title, config.max_title_length)
