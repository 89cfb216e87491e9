"""Main entry point for the Skill Seekers job server."""

import asyncio
import sys
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from skill_seekers import __version__
from skill_seekers.models.job import JobType
from skill_seekers.orchestration.job_manager import JobManager
from skill_seekers.orchestration.skill_service import SkillService
from skill_seekers.packaging.skill_builder import SkillBuilder
from skill_seekers.repositories.blob_store import BlobStore, create_blob_store
from skill_seekers.repositories.job_repository import JobRepository
from skill_seekers.repositories.skill_repository import SkillRepository
from skill_seekers.sources.base import SourceAdapter
from skill_seekers.sources.github_adapter import GitHubScraper
from skill_seekers.sources.pdf_adapter import PdfScraper
from skill_seekers.sources.web_adapter import DocumentationScraper
from skill_seekers.utils.config import Config
from skill_seekers.utils.exceptions import ConfigurationError, StorageError
from skill_seekers.utils.logger import configure_logging, get_logger


@dataclass
class Runtime:
    """Wired application components.

    Attributes:
        store: Blob store holding jobs and packages
        engine: Database engine behind the store, if any
        job_manager: Job queue with registered adapters
        service: Client-facing facade
    """

    store: BlobStore
    engine: AsyncEngine | None
    job_manager: JobManager
    service: SkillService

    async def close(self) -> None:
        """Stop running jobs and release the database."""
        await self.job_manager.shutdown()
        if self.engine is not None:
            await self.engine.dispose()


def wire_runtime(config: Config, store: BlobStore, engine: AsyncEngine | None = None) -> Runtime:
    """Build adapters, manager and service on top of an open store."""
    builder = SkillBuilder(store)
    docs_scraper = DocumentationScraper(builder, default_max_pages=config.default_max_pages)

    job_manager = JobManager(
        JobRepository(store),
        max_concurrent_jobs=config.max_concurrent_jobs,
        poll_interval=config.job_poll_interval,
    )
    adapters: dict[JobType, SourceAdapter] = {
        JobType.SCRAPE_DOCS: docs_scraper,
        JobType.SCRAPE_GITHUB: GitHubScraper(builder, default_token=config.github_token),
        JobType.SCRAPE_PDF: PdfScraper(builder),
    }
    for job_type, adapter in adapters.items():
        job_manager.register_handler(job_type, adapter.run)

    service = SkillService(job_manager, SkillRepository(store), docs_scraper)
    return Runtime(store=store, engine=engine, job_manager=job_manager, service=service)


async def build_runtime(config: Config) -> Runtime:
    """Open the configured store and wire all components.

    Raises:
        StorageError: If the database cannot be opened
    """
    store, engine = await create_blob_store(config.database_url, config.store_public_url)
    return wire_runtime(config, store, engine)


async def serve(config: Config) -> None:
    """Recover persisted jobs and sweep old ones until cancelled."""
    logger = get_logger(__name__)
    runtime = await build_runtime(config)

    try:
        requeued = await runtime.job_manager.load_existing_jobs()
        logger.info("application_started", version=__version__, requeued_jobs=requeued)
        await runtime.job_manager.run_cleanup_loop()
    finally:
        await runtime.close()
        logger.info("application_stopped")


def main() -> int:
    """Main application entry point.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    try:
        config = Config()
        configure_logging(config.log_level)
        get_logger(__name__).info("application_starting", version=__version__)

        asyncio.run(serve(config))
        return 0

    except KeyboardInterrupt:
        return 0
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        print(
            "Please check your .env file and environment variables.",
            file=sys.stderr,
        )
        return 1
    except StorageError as e:
        print(f"Storage error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
