"""Network side of the engine: page scraping and the title service.

``TitleFetcher.fetch`` is the single asynchronous step of a conversion.
It checks the domain policy first, then asks the optional link-preview
service, then falls back to scraping the page. Every path returns a
:class:`TitleFetchResult`; network and parse errors become sentinel
titles instead of exceptions, so a caller awaiting the fetch never has to
clean up after a failure.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Dict, Optional, Protocol
from urllib.parse import quote, urlsplit

import httpx
from bs4 import BeautifulSoup  # type: ignore

from .engine.config import API_KEY_LENGTH, Configuration, validate_api_key
from .engine.types import DomainPolicy, HttpResponse, TitleFetchResult
from .errors import NetworkFailure, ParseFailure, PolicyRejection

logger = logging.getLogger(__name__)

SITE_UNREACHABLE = "Site Unreachable"
TITLE_UNKNOWN = "Title Unknown"
FILE_FALLBACK = "File"

LINK_PREVIEW_ENDPOINT = "https://api.linkpreview.net/"
LINK_PREVIEW_KEY_HEADER = "X-Linkpreview-Api-Key"

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
}


class NetworkClient(Protocol):
    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse: ...


class HttpxNetworkClient:
    """``NetworkClient`` built on ``httpx.AsyncClient``.

    Pass ``transport`` to route requests somewhere other than the network,
    e.g. an ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers=DEFAULT_HEADERS,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse:
        try:
            response = await self._client.request(method, url, headers=headers)
        except httpx.HTTPError as exc:
            raise NetworkFailure(f"{method} {url} failed: {exc}", url=url) from exc
        return HttpResponse(
            status=response.status_code,
            headers=dict(response.headers),
            text=response.text if method.upper() != "HEAD" else "",
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpxNetworkClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def normalize_url(url: str) -> str:
    """Prefix scheme-less URLs (``www.example.com``) with ``https://``."""

    url = url.strip()
    if not url.lower().startswith("http"):
        return "https://" + url
    return url


def url_host(url: str) -> str:
    return urlsplit(normalize_url(url)).hostname or ""


def url_final_segment(url: str) -> str:
    """Return the last non-empty path segment, or ``File`` if there is none."""

    try:
        path = urlsplit(url).path
    except ValueError:
        return FILE_FALLBACK
    segments = [segment for segment in path.split("/") if segment]
    return segments[-1] if segments else FILE_FALLBACK


def extract_title_from_html(html: str) -> str:
    """Return the text of the first ``<title>``, or its ``no-title`` attribute.

    Client-rendered pages sometimes ship an empty title with a ``no-title``
    attribute holding the real one. Raises ``ParseFailure`` when neither
    yields any text.
    """

    try:
        soup = BeautifulSoup(html, "lxml")
    except Exception:
        # Fallback to html.parser if lxml isn't installed
        soup = BeautifulSoup(html, "html.parser")

    element = soup.find("title")
    if element is None:
        raise ParseFailure("Page has no <title> element")

    title = element.get_text().strip()
    if title:
        return title
    no_title = (element.get("no-title") or "").strip()
    if no_title:
        return no_title
    raise ParseFailure("Page <title> is empty")


class LinkPreviewService:
    """Client for the linkpreview.net title lookup API."""

    def __init__(self, client: NetworkClient, api_key: str, endpoint: str = LINK_PREVIEW_ENDPOINT) -> None:
        self.client = client
        self.api_key = api_key
        self.endpoint = endpoint

    async def lookup(self, url: str) -> str:
        """Return the service's title for ``url`` (may be empty)."""

        response = await self.client.request(
            "GET",
            f"{self.endpoint}?q={quote(url, safe='')}",
            headers={LINK_PREVIEW_KEY_HEADER: self.api_key},
        )
        if not response.ok:
            raise NetworkFailure("Title service rejected the request", url=url, status=response.status)
        try:
            payload = json.loads(response.text or "{}")
        except json.JSONDecodeError as exc:
            raise ParseFailure(f"Title service returned invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            return ""
        return str(payload.get("title") or "").strip()


class TitleFetcher:
    """Produce a raw title for a URL in one attempt.

    ``notify`` is called with a user-facing message the first time an
    invalid title service key is encountered.
    """

    def __init__(
        self,
        client: NetworkClient,
        *,
        notify: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.client = client
        self.notify = notify
        self._rejection_notified = False

    async def fetch(self, url: str, policy: DomainPolicy, config: Configuration) -> TitleFetchResult:
        url = normalize_url(url)
        host = url_host(url)
        if policy.blocks(host):
            logger.debug("Skipping title fetch for blacklisted host %s", host)
            return TitleFetchResult(title=host, blacklisted=True)

        try:
            service_title = await self._lookup_with_service(url, config)
            if service_title:
                return TitleFetchResult(title=service_title)
            return await self._scrape(url)
        except ParseFailure as exc:
            logger.info("No usable title for %s: %s", url, exc)
            return TitleFetchResult(title=TITLE_UNKNOWN, sentinel=True)
        except NetworkFailure as exc:
            logger.warning("Could not reach %s: %s", url, exc)
            return TitleFetchResult(title=SITE_UNREACHABLE, sentinel=True)
        except Exception:
            logger.exception("Title fetch for %s failed", url)
            return TitleFetchResult(title=SITE_UNREACHABLE, sentinel=True)

    def _notify_rejection(self, reason: str) -> None:
        if not self._rejection_notified and self.notify is not None:
            self.notify(f"{reason}. Titles will be fetched from the page instead.")
        self._rejection_notified = True

    async def _lookup_with_service(self, url: str, config: Configuration) -> str:
        if config.title_service_key_rejected:
            # Key already cleared by the config store.
            self._notify_rejection(
                f"Title service API key must be exactly {API_KEY_LENGTH} characters"
            )
            return ""
        if not config.title_service_api_key:
            return ""
        try:
            api_key = validate_api_key(config.title_service_api_key)
        except PolicyRejection as exc:
            logger.warning("%s; falling back to page scraping", exc)
            self._notify_rejection(str(exc))
            return ""

        service = LinkPreviewService(self.client, api_key)
        try:
            return await service.lookup(url)
        except (NetworkFailure, ParseFailure) as exc:
            logger.warning("Title service lookup for %s failed: %s", url, exc)
            return ""

    async def _scrape(self, url: str) -> TitleFetchResult:
        head = await self.client.request("HEAD", url)
        if not head.ok:
            logger.info("HEAD %s returned %s", url, head.status)
            return TitleFetchResult(title=SITE_UNREACHABLE, sentinel=True)

        content_type = head.header("content-type")
        if content_type and "text/html" not in content_type.lower():
            return TitleFetchResult(title=url_final_segment(url))

        page = await self.client.request("GET", url)
        if not page.ok:
            raise NetworkFailure(f"GET {url} returned {page.status}", url=url, status=page.status)
        return TitleFetchResult(title=extract_title_from_html(page.text))
