"""Exceptions raised inside the title lookup and configuration layers.

None of these escape a conversion: the fetcher turns them into sentinel
titles and the config store turns them into warnings.
"""

from __future__ import annotations


class LinkTitleError(Exception):
    """Base class for link title errors."""


class NetworkFailure(LinkTitleError):
    """Raised when a page or service cannot be reached."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class ParseFailure(LinkTitleError):
    """Raised when a reachable page has no usable title."""


class PolicyRejection(LinkTitleError):
    """Raised when configured credentials are rejected before use."""

    def __init__(self, message: str, *, setting: str) -> None:
        super().__init__(message)
        self.setting = setting
