"""Editor commands and event hooks that turn URLs into titled links.

A conversion touches the buffer twice: once synchronously to write a
placeholder link, and once after the title fetch settles to swap the
placeholder for the processed title. Hosts register the commands listed in
``COMMANDS`` and forward paste/drop events to ``on_paste``/``on_drop``.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, Optional

from .buffer import ClipboardSource, TextBuffer
from .engine import placeholder
from .engine.classify import classify, extract_url
from .engine.config import ConfigStore, Configuration
from .engine.patcher import commit
from .engine.postprocess import process_title
from .engine.spans import selected_text
from .engine.types import DomainPolicy, LinkKind, Span
from .services import TitleFetcher, normalize_url, url_host

logger = logging.getLogger(__name__)

COMMANDS: Dict[str, str] = {
    "paste-url-with-title": "Paste URL and auto fetch title",
    "normal-paste": "Normal paste (no fetching behavior)",
    "enhance-url-with-title": "Enhance existing URL with link and title",
}


def render_link(title: str, url: str, config: Configuration) -> str:
    if config.html_link:
        return f'<a href="{url}">{title}</a>'
    return f"[{title}]({url})"


@dataclass
class TransferEvent:
    """Paste or drop event handed over by the host."""

    text: str
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


@dataclass
class PendingConversion:
    """A placeholder link already in the buffer, waiting for its title."""

    buffer: TextBuffer
    url: str
    token: str
    config: Configuration
    policy: DomainPolicy
    fetcher: TitleFetcher

    async def settle(self) -> Optional[Span]:
        """Fetch the title and write it over the placeholder.

        Returns the replaced span, or ``None`` if the placeholder was removed
        from the buffer in the meantime.
        """

        result = await self.fetcher.fetch(self.url, self.policy, self.config)
        if result.blacklisted:
            title = result.title
        else:
            title = process_title(result.title, self.url, self.config, self.policy)
        return commit(self.buffer, self.token, title)


class LinkTitleEngine:
    """Entry point for hosts.

    ``config_store`` is read at the start of every command so settings
    changes apply to the next conversion, never to one already in flight.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        fetcher: TitleFetcher,
        clipboard: Optional[ClipboardSource] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config_store = config_store
        self.fetcher = fetcher
        self.clipboard = clipboard
        self.rng = rng or random.Random()

    def start_conversion(
        self,
        buffer: TextBuffer,
        url: str,
        config: Optional[Configuration] = None,
    ) -> Optional[PendingConversion]:
        """Write a placeholder link for ``url`` over the selection.

        Blacklisted hosts are linked with their host name straight away and
        ``None`` is returned.
        """

        config = config or self.config_store.load()
        policy = config.policy()
        host = url_host(url)
        if policy.blocks(host):
            buffer.replace_selection(render_link(host, url, config))
            return None

        token = placeholder.generate(config.placeholder_text, config.placeholder_strategy, self.rng)
        buffer.replace_selection(render_link(token, url, config))
        return PendingConversion(
            buffer=buffer,
            url=normalize_url(url),
            token=token,
            config=config,
            policy=policy,
            fetcher=self.fetcher,
        )

    async def convert_url_to_titled_link(self, buffer: TextBuffer, url: str) -> Optional[Span]:
        pending = self.start_conversion(buffer, url)
        if pending is None:
            return None
        return await pending.settle()

    async def paste_url_with_title(self, buffer: TextBuffer) -> Optional[Span]:
        clipboard_text = await self._read_clipboard()
        if not clipboard_text:
            return None
        pending = self._handle_url_text(
            buffer,
            clipboard_text.strip(),
            self.config_store.load(),
            raw_text=clipboard_text,
        )
        if pending is None:
            return None
        return await pending.settle()

    async def normal_paste(self, buffer: TextBuffer) -> None:
        clipboard_text = await self._read_clipboard()
        if clipboard_text:
            buffer.replace_selection(clipboard_text)

    async def enhance_existing_url(self, buffer: TextBuffer) -> Optional[Span]:
        """Fetch a title for the URL or link that is selected or under the cursor."""

        text = selected_text(buffer).strip()
        candidate = classify(text)
        if candidate.kind in (LinkKind.MARKDOWN_LINK, LinkKind.HTML_LINK):
            url = extract_url(text)
        elif candidate.kind == LinkKind.BARE_URL:
            url = text
        else:
            logger.debug("Nothing to enhance under the cursor: %r", text)
            return None
        return await self.convert_url_to_titled_link(buffer, url)

    def on_paste(self, event: TransferEvent, buffer: TextBuffer) -> Optional[PendingConversion]:
        config = self.config_store.load()
        if not config.enhance_on_paste:
            return None
        return self._handle_event(event, buffer, config)

    def on_drop(self, event: TransferEvent, buffer: TextBuffer) -> Optional[PendingConversion]:
        config = self.config_store.load()
        if not config.enhance_on_drop:
            return None
        return self._handle_event(event, buffer, config)

    def _handle_event(
        self,
        event: TransferEvent,
        buffer: TextBuffer,
        config: Configuration,
    ) -> Optional[PendingConversion]:
        if event.default_prevented:
            return None
        text = (event.text or "").strip()
        if classify(text).kind != LinkKind.BARE_URL:
            return None

        # From here on the engine owns the insertion.
        event.prevent_default()
        return self._handle_url_text(buffer, text, config)

    def _handle_url_text(
        self,
        buffer: TextBuffer,
        text: str,
        config: Configuration,
        *,
        raw_text: Optional[str] = None,
    ) -> Optional[PendingConversion]:
        """Link ``text`` if it is a bare URL; non-URL text is pasted as ``raw_text`` when given."""

        if classify(text).kind != LinkKind.BARE_URL:
            buffer.replace_selection(text if raw_text is None else raw_text)
            return None

        selection = buffer.get_selection().strip()
        if selection and config.preserve_selection_as_title:
            buffer.replace_selection(render_link(selection, text, config))
            return None

        if self._after_link_opener(buffer) or self._after_quote(buffer):
            buffer.replace_selection(text)
            return None

        return self.start_conversion(buffer, text, config)

    async def _read_clipboard(self) -> str:
        if self.clipboard is None:
            return ""
        return await self.clipboard.read_text() or ""

    @staticmethod
    def _text_before_cursor(buffer: TextBuffer, length: int) -> str:
        cursor = buffer.get_cursor()
        line = buffer.get_line(cursor.line)
        return line[max(cursor.column - length, 0):cursor.column]

    def _after_link_opener(self, buffer: TextBuffer) -> bool:
        """Cursor sits right after ``](``, inside an existing markdown link."""

        return self._text_before_cursor(buffer, 2) == "]("

    def _after_quote(self, buffer: TextBuffer) -> bool:
        """Cursor follows a quote, e.g. inside ``<a href="...">``."""

        return self._text_before_cursor(buffer, 1) in ('"', "'")
