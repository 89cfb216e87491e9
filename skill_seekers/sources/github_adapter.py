"""GitHub repository source adapter."""

from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx
import structlog

from skill_seekers.common.constants import (
    CHANGELOG_FILENAMES,
    DEFAULT_MAX_ISSUES,
    GITHUB_WEB_URL,
    MAX_RELEASES,
)
from skill_seekers.extraction.models import RepositoryData, RepositoryIssue, RepositoryRelease
from skill_seekers.extraction.repository_extractor import RepositoryExtractor, build_file_tree
from skill_seekers.models.job import Job, JobResult, JobType, SkillConfig
from skill_seekers.packaging.skill_builder import SkillBuilder
from skill_seekers.sources.base import ProgressCallback, build_job_result
from skill_seekers.sources.github_client import GitHubClient
from skill_seekers.utils.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

ClientFactory = Callable[[str | None], GitHubClient]


def parse_repository(config: SkillConfig) -> tuple[str, str]:
    """Split ``owner/repo`` into its parts.

    Raises:
        ConfigurationError: If the repository is missing or malformed
    """
    if not config.repo:
        raise ConfigurationError("GitHub repository not specified")

    parts = config.repo.strip().split("/")
    if len(parts) != 2 or not all(parts):
        raise ConfigurationError("Invalid repository format. Use owner/repo")

    return parts[0], parts[1]


def parse_issue(raw: dict) -> RepositoryIssue:
    """Convert an API issue payload."""
    labels = []
    for label in raw.get("labels") or []:
        name = label if isinstance(label, str) else label.get("name")
        if name:
            labels.append(name)

    return RepositoryIssue(
        number=raw["number"],
        title=raw.get("title") or "",
        body=raw.get("body") or "",
        state=raw.get("state") or "open",
        labels=labels,
        created_at=raw.get("created_at") or "",
        updated_at=raw.get("updated_at") or "",
    )


def parse_release(raw: dict) -> RepositoryRelease:
    """Convert an API release payload."""
    return RepositoryRelease(
        tag_name=raw.get("tag_name") or "",
        name=raw.get("name") or raw.get("tag_name") or "",
        body=raw.get("body") or "",
        published_at=raw.get("published_at") or "",
        prerelease=bool(raw.get("prerelease")),
    )


class GitHubScraper:
    """Fetches repository metadata and builds a skill from it.

    Each API call is independently failable: a failure is logged as a
    warning and the corresponding field stays empty.
    """

    def __init__(
        self,
        builder: SkillBuilder,
        client_factory: ClientFactory = GitHubClient,
        default_token: str | None = None,
    ) -> None:
        """Initialize adapter.

        Args:
            builder: Package builder
            client_factory: Creates a client from an optional token
            default_token: Token used when the job config carries none
        """
        self.builder = builder
        self.client_factory = client_factory
        self.default_token = default_token
        self.extractor = RepositoryExtractor()

    async def run(self, job: Job, report_progress: ProgressCallback) -> JobResult:
        """Fetch, convert and build."""
        config = job.config
        owner, repo = parse_repository(config)
        full_name = f"{owner}/{repo}"

        await report_progress(5, f"Connecting to GitHub: {full_name}...")

        data = RepositoryData(name=repo, full_name=full_name)

        async with self.client_factory(config.github_token or self.default_token) as client:
            await report_progress(10, "Fetching repository info...")
            info = await self._attempt("repository", full_name, client.get_repository(owner, repo))
            if info:
                data.description = info.get("description") or ""
                data.stars = info.get("stargazers_count") or 0
                data.forks = info.get("forks_count") or 0
                data.language = info.get("language") or ""

            await report_progress(15, "Fetching language statistics...")
            data.languages = await self._attempt("languages", full_name, client.list_languages(owner, repo)) or {}

            await report_progress(20, "Fetching README...")
            data.readme = await self._attempt("readme", full_name, client.get_readme(owner, repo)) or ""

            await report_progress(30, "Fetching file structure...")
            tree = await self._attempt("tree", full_name, client.get_tree(owner, repo))
            data.file_tree = build_file_tree(tree or [])

            if config.include_issues:
                await report_progress(45, "Fetching issues...")
                max_issues = config.max_issues or DEFAULT_MAX_ISSUES
                issues = await self._attempt("issues", full_name, client.list_issues(owner, repo, max_issues))
                data.issues = [
                    parse_issue(issue) for issue in (issues or []) if "pull_request" not in issue
                ][:max_issues]

            if config.include_releases:
                await report_progress(60, "Fetching releases...")
                releases = await self._attempt("releases", full_name, client.list_releases(owner, repo, MAX_RELEASES))
                data.releases = [parse_release(release) for release in (releases or [])[:MAX_RELEASES]]

            if config.include_changelog:
                await report_progress(70, "Fetching CHANGELOG...")
                data.changelog = await self._fetch_changelog(client, owner, repo)

        await report_progress(80, "Building documentation pages...")
        units = self.extractor.to_units(data, config.name)

        await report_progress(90, "Building skill package...")
        package = await self.builder.build(
            config.name,
            config.description or data.description,
            units,
            JobType.SCRAPE_GITHUB,
            f"{GITHUB_WEB_URL}/{full_name}",
        )

        await report_progress(100, f"Skill built from GitHub repo with {len(units)} pages")
        return build_job_result(package, len(units))

    @staticmethod
    async def _attempt(resource: str, repo: str, fetch: Awaitable[T]) -> T | None:
        try:
            return await fetch
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "github_fetch_failed",
                resource=resource,
                repo=repo,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    @staticmethod
    async def _fetch_changelog(client: GitHubClient, owner: str, repo: str) -> str | None:
        for filename in CHANGELOG_FILENAMES:
            try:
                return await client.get_file(owner, repo, filename)
            except httpx.HTTPError:
                logger.debug("changelog_candidate_missing", repo=f"{owner}/{repo}", filename=filename)
        return None
