"""Documentation website source adapter."""

from collections.abc import Callable
from urllib.parse import urlparse

import structlog

from skill_seekers.common.constants import (
    DEFAULT_CRAWL_CONCURRENCY,
    DEFAULT_EXCLUDE_GLOBS,
    DEFAULT_MAX_PAGES,
    ESTIMATE_CONCURRENCY,
    ESTIMATE_MAX_PAGES,
    ESTIMATE_SAMPLE_SIZE,
)
from skill_seekers.extraction.html_extractor import WebPageExtractor
from skill_seekers.extraction.models import DocumentationUnit
from skill_seekers.models.job import Job, JobResult, JobType, SkillConfig, UrlPatterns
from skill_seekers.packaging.skill_builder import SkillBuilder
from skill_seekers.sources.base import ProgressCallback, build_job_result
from skill_seekers.sources.web_crawler import CrawledPage, CrawlPatterns, WebCrawler
from skill_seekers.utils.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

CrawlerFactory = Callable[..., WebCrawler]


def require_start_urls(config: SkillConfig) -> list[str]:
    """Return the crawl seeds or raise if the config names none."""
    start_urls = config.resolved_start_urls()
    if not start_urls:
        raise ConfigurationError("No start URLs provided")
    return start_urls


def generate_url_patterns(start_urls: list[str], configured: UrlPatterns | None = None) -> CrawlPatterns:
    """Derive crawl globs from the config, defaulting to the start URL paths.

    Args:
        start_urls: Crawl seeds
        configured: Patterns from the config, if any

    Returns:
        Include globs (``<origin><path>/**`` per seed unless configured) and
        exclude globs (binary files and auth pages unless configured)
    """
    include = list(configured.include) if configured and configured.include else []
    if configured and configured.exclude is not None:
        exclude = list(configured.exclude)
    else:
        exclude = list(DEFAULT_EXCLUDE_GLOBS)

    if not include:
        for url in start_urls:
            parsed = urlparse(url)
            if not parsed.scheme or not parsed.netloc:
                logger.warning("invalid_start_url", url=url)
                continue
            include.append(f"{parsed.scheme}://{parsed.netloc}{parsed.path.rstrip('/')}/**")

    return CrawlPatterns(include=include, exclude=exclude)


def scrape_progress(scraped: int, max_pages: int) -> int:
    """Progress percent while crawling, capped at 90."""
    return min(90, scraped * 85 // max_pages + 5)


class DocumentationScraper:
    """Crawls a documentation site and builds a skill from its pages."""

    def __init__(
        self,
        builder: SkillBuilder,
        crawler_factory: CrawlerFactory = WebCrawler,
        default_max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        """Initialize adapter.

        Args:
            builder: Package builder used once the crawl finishes
            crawler_factory: Creates a crawler from max_pages, max_concurrency
                and rate_limit keyword arguments
            default_max_pages: Page budget when the config sets none
        """
        self.builder = builder
        self.crawler_factory = crawler_factory
        self.default_max_pages = default_max_pages

    async def run(self, job: Job, report_progress: ProgressCallback) -> JobResult:
        """Crawl, extract and build."""
        config = job.config
        start_urls = require_start_urls(config)
        max_pages = config.max_pages or self.default_max_pages

        await report_progress(5, f"Starting scrape of {len(start_urls)} URL(s)...")

        patterns = generate_url_patterns(start_urls, config.url_patterns)
        logger.info("url_patterns_generated", job_id=job.id, include=patterns.include, exclude=patterns.exclude)

        extractor = WebPageExtractor(config.selectors, config.category_patterns())
        units: list[DocumentationUnit] = []
        scraped = 0

        async def handle_page(page: CrawledPage) -> None:
            nonlocal scraped
            scraped += 1
            await report_progress(
                scrape_progress(scraped, max_pages),
                f"Scraped {scraped}/{max_pages} pages: {page.url}",
            )

            unit = extractor.extract(page.url, page.document, config.name, len(units))
            if unit is None:
                return

            units.append(unit)
            await page.enqueue_links()

        crawler = self.crawler_factory(
            max_pages=max_pages,
            max_concurrency=DEFAULT_CRAWL_CONCURRENCY,
            rate_limit=config.rate_limit,
        )
        await crawler.crawl(start_urls, patterns, handle_page)

        await report_progress(90, f"Scraped {len(units)} pages, building skill...")

        package = await self.builder.build(
            config.name,
            config.description,
            units,
            JobType.SCRAPE_DOCS,
            config.base_url or start_urls[0],
        )

        await report_progress(100, f"Skill built successfully with {len(units)} pages")
        return build_job_result(package, len(units))

    async def estimate_page_count(self, config: SkillConfig) -> dict:
        """Discover pages without extracting them.

        Args:
            config: Web source config; max_pages caps discovery

        Returns:
            Dict with ``estimated_pages`` and up to 10 ``sample_urls``
        """
        start_urls = require_start_urls(config)
        patterns = generate_url_patterns(start_urls, config.url_patterns)
        discovered: list[str] = []

        async def handle_page(page: CrawledPage) -> None:
            discovered.append(page.url)
            await page.enqueue_links()

        crawler = self.crawler_factory(
            max_pages=min(config.max_pages or ESTIMATE_MAX_PAGES, ESTIMATE_MAX_PAGES),
            max_concurrency=ESTIMATE_CONCURRENCY,
            rate_limit=None,
        )
        await crawler.crawl(start_urls, patterns, handle_page)

        logger.info("page_count_estimated", base_url=start_urls[0], pages=len(discovered))
        return {
            "estimated_pages": len(discovered),
            "sample_urls": discovered[:ESTIMATE_SAMPLE_SIZE],
        }
