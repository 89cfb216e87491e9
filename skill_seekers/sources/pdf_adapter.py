"""PDF document source adapter."""

import asyncio
from pathlib import Path

import httpx
import structlog

from skill_seekers.extraction.models import PdfDocument
from skill_seekers.extraction.pdf_extractor import PdfExtractor, extract_sections, extract_title
from skill_seekers.models.job import Job, JobResult, JobType, SkillConfig
from skill_seekers.packaging.skill_builder import SkillBuilder
from skill_seekers.sources.base import ProgressCallback, build_job_result
from skill_seekers.sources.pdf_reader import PdfContent, PdfReader
from skill_seekers.utils.exceptions import ConfigurationError, SourceFetchError

logger = structlog.get_logger(__name__)

DOWNLOAD_TIMEOUT_SECONDS = 60.0
DEFAULT_DESCRIPTION = "Documentation extracted from PDF"


def require_pdf_source(config: SkillConfig) -> str:
    """Return the PDF locator, URL preferred over local path."""
    source = config.pdf_url or config.pdf_path
    if not source:
        raise ConfigurationError("PDF URL or path not specified")
    return source


def is_remote(source: str) -> bool:
    """Whether the locator is an HTTP(S) URL."""
    return source.startswith(("http://", "https://"))


def segment_document(content: PdfContent) -> PdfDocument:
    """Detect title and sections in decoded PDF text."""
    return PdfDocument(
        title=extract_title(content.text, content.metadata),
        content=content.text,
        pages=content.pages,
        metadata=content.metadata,
        sections=extract_sections(content.text, content.pages),
    )


class PdfScraper:
    """Loads a PDF, segments it and builds a skill from its sections."""

    def __init__(
        self,
        builder: SkillBuilder,
        reader: PdfReader | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize adapter.

        Args:
            builder: Package builder
            reader: PDF decoder
            transport: Custom HTTP transport for downloads
        """
        self.builder = builder
        self.reader = reader or PdfReader()
        self.transport = transport
        self.extractor = PdfExtractor()

    async def run(self, job: Job, report_progress: ProgressCallback) -> JobResult:
        """Load, decode, segment and build."""
        config = job.config
        source = require_pdf_source(config)

        # PDF jobs open at 10% with no separate connect step
        await report_progress(10, f"Fetching PDF: {source}...")
        data = await self.load(source)

        await report_progress(30, "Parsing PDF content...")
        content = await asyncio.to_thread(self.reader.read, data)
        document = segment_document(content)

        await report_progress(60, f"Extracted {document.pages} pages, processing sections...")
        units = self.extractor.to_units(document, config.name)

        await report_progress(80, "Building skill package...")
        package = await self.builder.build(
            config.name,
            config.description or DEFAULT_DESCRIPTION,
            units,
            JobType.SCRAPE_PDF,
            source,
        )

        await report_progress(100, f"Skill built from PDF with {len(units)} pages")
        return build_job_result(package, len(units))

    async def load(self, source: str) -> bytes:
        """Read PDF bytes from a URL or a local file.

        Raises:
            SourceFetchError: If the download or file read fails
        """
        if is_remote(source):
            try:
                async with httpx.AsyncClient(
                    timeout=httpx.Timeout(DOWNLOAD_TIMEOUT_SECONDS),
                    follow_redirects=True,
                    transport=self.transport,
                ) as client:
                    response = await client.get(source)
                    response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error("pdf_download_failed", source=source, error=str(e), error_type=type(e).__name__)
                raise SourceFetchError(f"Failed to fetch PDF: {e}", is_retryable=True) from e
            return response.content

        try:
            return await asyncio.to_thread(Path(source).read_bytes)
        except OSError as e:
            logger.error("pdf_read_failed", source=source, error=str(e))
            raise SourceFetchError(f"Failed to read PDF file {source}: {e}") from e
