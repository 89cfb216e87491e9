"""Concurrent documentation crawler built on httpx and lxml."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from urllib.parse import urldefrag, urljoin, urlparse

import httpx
import structlog
from lxml import etree, html

from skill_seekers.common.constants import DEFAULT_CRAWL_CONCURRENCY, DEFAULT_MAX_PAGES

logger = structlog.get_logger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "skill-seekers/0.1 (documentation crawler)",
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
}
REQUEST_TIMEOUT_SECONDS = 30.0
SKIPPED_LINK_PREFIXES = ("javascript:", "mailto:", "tel:", "#")


@dataclass(frozen=True)
class CrawlPatterns:
    """Glob patterns applied to absolute URLs of discovered links."""

    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)

    def allows(self, url: str) -> bool:
        """Return True if the URL matches an include glob and no exclude glob."""
        if self.include and not any(fnmatchcase(url, pattern) for pattern in self.include):
            return False
        return not any(fnmatchcase(url, pattern) for pattern in self.exclude)


def normalize_url(url: str) -> str:
    """Drop the fragment so anchors on one page collapse to a single URL."""
    return urldefrag(url)[0]


def discover_links(page_url: str, document: html.HtmlElement) -> list[str]:
    """Return absolute http(s) link targets in document order."""
    links = []
    for anchor in document.cssselect("a[href]"):
        href = (anchor.get("href") or "").strip()
        if not href or href.startswith(SKIPPED_LINK_PREFIXES):
            continue
        absolute = normalize_url(urljoin(page_url, href))
        if urlparse(absolute).scheme in ("http", "https"):
            links.append(absolute)
    return links


@dataclass
class CrawledPage:
    """A fetched and parsed page handed to the crawl handler."""

    url: str
    document: html.HtmlElement
    _enqueue: Callable[[Iterable[str]], int] = field(repr=False)

    async def enqueue_links(self) -> int:
        """Queue links on this page that pass the crawl patterns.

        Returns:
            Number of newly queued URLs
        """
        return self._enqueue(discover_links(self.url, self.document))


PageHandler = Callable[[CrawledPage], Awaitable[None]]


class WebCrawler:
    """Breadth-first crawler with a page budget and bounded concurrency.

    At most ``max_pages`` distinct URLs are ever requested. Page fetch and
    parse failures are logged as warnings and the crawl continues; an
    exception raised by the handler stops the crawl and is re-raised.
    """

    def __init__(
        self,
        max_pages: int = DEFAULT_MAX_PAGES,
        max_concurrency: int = DEFAULT_CRAWL_CONCURRENCY,
        rate_limit: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize crawler.

        Args:
            max_pages: Maximum number of URLs requested
            max_concurrency: Number of concurrent fetch workers
            rate_limit: Seconds each worker waits between requests
            client: Shared HTTP client; one is created per crawl if omitted
        """
        self.max_pages = max_pages
        self.max_concurrency = max(1, max_concurrency)
        self.rate_limit = rate_limit or 0
        self._client = client

    @asynccontextmanager
    async def _client_session(self):
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(
            headers=DEFAULT_HEADERS,
            timeout=httpx.Timeout(REQUEST_TIMEOUT_SECONDS),
            follow_redirects=True,
        ) as client:
            yield client

    async def crawl(
        self,
        start_urls: Iterable[str],
        patterns: CrawlPatterns,
        handler: PageHandler,
    ) -> int:
        """Crawl from the start URLs, invoking handler for every parsed page.

        Start URLs are always requested; further URLs only enter the queue
        through ``CrawledPage.enqueue_links``.

        Args:
            start_urls: Seed URLs
            patterns: Include/exclude globs for discovered links
            handler: Async callback receiving each parsed page

        Returns:
            Number of pages handed to the handler
        """
        queue: asyncio.Queue[str] = asyncio.Queue()
        seen: set[str] = set()
        handled = 0
        errors: list[BaseException] = []

        def enqueue(urls: Iterable[str], check_patterns: bool = True) -> int:
            added = 0
            for url in urls:
                url = normalize_url(url)
                if url in seen or len(seen) >= self.max_pages:
                    continue
                if check_patterns and not patterns.allows(url):
                    continue
                seen.add(url)
                queue.put_nowait(url)
                added += 1
            return added

        async def worker(client: httpx.AsyncClient) -> None:
            nonlocal handled
            while True:
                url = await queue.get()
                try:
                    if errors:
                        continue
                    document = await self._fetch(client, url)
                    if document is None:
                        continue
                    handled += 1
                    await handler(CrawledPage(url=url, document=document, _enqueue=enqueue))
                    if self.rate_limit:
                        await asyncio.sleep(self.rate_limit)
                except Exception as e:
                    logger.error("crawl_handler_failed", url=url, error=str(e), error_type=type(e).__name__)
                    errors.append(e)
                finally:
                    queue.task_done()

        enqueue(start_urls, check_patterns=False)
        logger.info("crawl_started", start_urls=list(seen), max_pages=self.max_pages)

        async with self._client_session() as client:
            workers = [asyncio.create_task(worker(client)) for _ in range(self.max_concurrency)]
            try:
                await queue.join()
            finally:
                for task in workers:
                    task.cancel()
                await asyncio.gather(*workers, return_exceptions=True)

        if errors:
            raise errors[0]

        logger.info("crawl_completed", pages=handled, requested=len(seen))
        return handled

    async def _fetch(self, client: httpx.AsyncClient, url: str) -> html.HtmlElement | None:
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("crawl_page_failed", url=url, error=str(e), error_type=type(e).__name__)
            return None

        if "html" not in response.headers.get("content-type", "html"):
            logger.debug("crawl_page_not_html", url=url, content_type=response.headers.get("content-type"))
            return None

        try:
            # Parse bytes: lxml rejects str input that carries an XML encoding declaration
            parser = html.HTMLParser(encoding=response.encoding or "utf-8")
            return html.document_fromstring(response.content, parser=parser)
        except (etree.ParserError, ValueError, LookupError) as e:
            logger.warning("crawl_page_unparseable", url=url, error=str(e))
            return None
