"""Service facade exposing config generation, job submission and skill lookup."""

import re

import structlog

from skill_seekers.common.constants import DEFAULT_MAX_ISSUES, DEFAULT_MAX_PAGES, ESTIMATE_MAX_PAGES
from skill_seekers.models.job import (
    ContentSelectors,
    Job,
    JobType,
    SkillConfig,
    UrlPatterns,
)
from skill_seekers.orchestration.job_manager import JobManager
from skill_seekers.repositories.skill_repository import SkillRepository
from skill_seekers.sources.github_adapter import parse_repository
from skill_seekers.sources.pdf_adapter import DEFAULT_DESCRIPTION as PDF_DEFAULT_DESCRIPTION
from skill_seekers.sources.pdf_adapter import require_pdf_source
from skill_seekers.sources.web_adapter import DocumentationScraper, require_start_urls

logger = structlog.get_logger(__name__)

NAME_PATTERN = re.compile(r"[^a-z0-9-]")
DEFAULT_RATE_LIMIT = 0.5
GENERATED_EXCLUDE_GLOBS = ["**/login**", "**/signup**", "**/*.pdf", "**/*.zip"]
ESTIMATE_CONFIG_NAME = "estimate"


def sanitize_skill_name(name: str) -> str:
    """Lower-case a skill name and replace anything but [a-z0-9-] with '-'."""
    return NAME_PATTERN.sub("-", name.lower())


class SkillService:
    """Entry point for clients: validates requests and delegates to the job manager.

    Configuration problems are raised as ConfigurationError before any job
    is created, so an invalid request never leaves a failed job behind.
    """

    def __init__(
        self,
        job_manager: JobManager,
        skills: SkillRepository,
        docs_scraper: DocumentationScraper,
    ) -> None:
        """Initialize service.

        Args:
            job_manager: Owner of the job table
            skills: Read access to stored packages
            docs_scraper: Used for page count estimation
        """
        self.job_manager = job_manager
        self.skills = skills
        self.docs_scraper = docs_scraper

    def generate_config(
        self,
        name: str,
        url: str,
        description: str,
        max_pages: int = DEFAULT_MAX_PAGES,
        rate_limit: float = DEFAULT_RATE_LIMIT,
    ) -> SkillConfig:
        """Build a ready-to-submit documentation scrape config.

        Args:
            name: Skill name; sanitized to lower-case letters, digits and '-'
            url: Base documentation URL
            description: When to use the skill
            max_pages: Page budget
            rate_limit: Delay between requests in seconds

        Returns:
            Config with article/h1/pre code selectors and auth/binary excludes
        """
        logger.info("config_generating", name=name, url=url)
        return SkillConfig(
            name=sanitize_skill_name(name),
            description=description,
            base_url=url,
            max_pages=max_pages,
            rate_limit=rate_limit,
            selectors=ContentSelectors(main_content="article", title="h1", code_blocks="pre code"),
            url_patterns=UrlPatterns(include=[], exclude=list(GENERATED_EXCLUDE_GLOBS)),
        )

    async def estimate_pages(self, url: str, max_discovery: int = ESTIMATE_MAX_PAGES) -> dict:
        """Discover pages reachable from url without building anything.

        Returns:
            Dict with ``estimated_pages``, ``sample_urls`` and ``message``
        """
        config = SkillConfig(name=ESTIMATE_CONFIG_NAME, base_url=url, max_pages=max_discovery)
        estimate = await self.docs_scraper.estimate_page_count(config)
        estimate["message"] = f"Found approximately {estimate['estimated_pages']} pages."
        return estimate

    async def scrape_docs(self, config: SkillConfig) -> Job:
        """Submit a documentation website job.

        Raises:
            ConfigurationError: If the config has neither start URLs nor a base URL
        """
        require_start_urls(config)
        return await self._submit(JobType.SCRAPE_DOCS, config)

    async def scrape_github(
        self,
        repo: str,
        name: str | None = None,
        description: str | None = None,
        include_issues: bool = True,
        include_releases: bool = True,
        max_issues: int = DEFAULT_MAX_ISSUES,
        github_token: str | None = None,
    ) -> Job:
        """Submit a GitHub repository job.

        Args:
            repo: Repository as ``owner/repo``
            name: Skill name, defaults to the repository name
            description: Defaults to "Documentation from <repo>"
            include_issues: Fetch open and closed issues
            include_releases: Fetch releases
            max_issues: Issue fetch limit
            github_token: Token overriding the server default

        Raises:
            ConfigurationError: If repo is not ``owner/repo``
        """
        config = SkillConfig(
            name=name or "github-repo",
            description=description or f"Documentation from {repo}",
            repo=repo,
            include_issues=include_issues,
            include_releases=include_releases,
            max_issues=max_issues,
            github_token=github_token,
        )
        _, repo_name = parse_repository(config)
        if not name:
            config = config.model_copy(update={"name": repo_name})
        return await self._submit(JobType.SCRAPE_GITHUB, config)

    async def scrape_pdf(
        self,
        name: str,
        pdf_url: str | None = None,
        description: str | None = None,
        pdf_path: str | None = None,
    ) -> Job:
        """Submit a PDF job for a remote URL or a local path.

        Raises:
            ConfigurationError: If neither pdf_url nor pdf_path is given
        """
        config = SkillConfig(
            name=name,
            description=description or PDF_DEFAULT_DESCRIPTION,
            pdf_url=pdf_url,
            pdf_path=pdf_path,
        )
        require_pdf_source(config)
        return await self._submit(JobType.SCRAPE_PDF, config)

    async def get_job_status(self, job_id: str) -> Job | None:
        """Snapshot of one job, or None if unknown."""
        return await self.job_manager.get_job(job_id)

    def list_jobs(self) -> list[Job]:
        return self.job_manager.list_jobs()

    async def list_skills(self) -> list[dict]:
        return await self.skills.list_skills()

    async def get_skill(self, skill_id: str) -> dict | None:
        return await self.skills.get_skill(skill_id)

    async def _submit(self, job_type: JobType, config: SkillConfig) -> Job:
        job = await self.job_manager.create_job(job_type, config)
        logger.info("job_submitted", job_id=job.id, job_type=job_type.value, name=config.name)
        return job
