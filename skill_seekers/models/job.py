"""Job and scrape configuration models."""

from datetime import UTC, datetime
from enum import Enum

from cssselect import GenericTranslator, SelectorError
from pydantic import BaseModel, ConfigDict, Field, field_validator


class JobType(str, Enum):
    """Kinds of scrape jobs, one per source adapter."""

    SCRAPE_DOCS = "scrape_docs"
    SCRAPE_GITHUB = "scrape_github"
    SCRAPE_PDF = "scrape_pdf"


class JobStatus(str, Enum):
    """Job lifecycle states."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.QUEUED: frozenset({JobStatus.RUNNING}),
    JobStatus.RUNNING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}

TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


def _validate_css(selector: str) -> str:
    try:
        GenericTranslator().css_to_xpath(selector)
    except SelectorError as e:
        raise ValueError(f"invalid CSS selector '{selector}': {e}") from e
    return selector


class ContentSelectors(BaseModel):
    """CSS selectors overriding the default page extraction."""

    model_config = ConfigDict(frozen=True)

    main_content: str | None = None
    title: str | None = None
    code_blocks: str | None = None
    navigation: str | None = None
    exclude: list[str] = Field(default_factory=list)

    @field_validator("main_content", "title", "code_blocks", "navigation")
    @classmethod
    def validate_selector(cls, value: str | None) -> str | None:
        """Reject selectors that cssselect cannot translate."""
        if value:
            _validate_css(value)
        return value

    @field_validator("exclude")
    @classmethod
    def validate_exclude(cls, value: list[str]) -> list[str]:
        """Reject invalid exclusion selectors."""
        for selector in value:
            _validate_css(selector)
        return value


class UrlPatterns(BaseModel):
    """Glob patterns limiting which discovered links are crawled."""

    model_config = ConfigDict(frozen=True)

    include: list[str] = Field(default_factory=list)
    exclude: list[str] | None = None


class CategoryConfig(BaseModel):
    """URL substring patterns assigning pages to a category."""

    model_config = ConfigDict(frozen=True)

    patterns: list[str] = Field(default_factory=list)
    priority: int | None = None
    description: str | None = None


class SkillConfig(BaseModel):
    """Immutable description of the source to scrape.

    Only the fields for the job's source kind are used: web fields for
    scrape_docs, repo fields for scrape_github, pdf fields for scrape_pdf.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""

    # Documentation website
    base_url: str | None = None
    start_urls: list[str] | None = None
    max_pages: int | None = Field(default=None, ge=1)
    rate_limit: float | None = Field(default=None, ge=0)
    selectors: ContentSelectors | None = None
    url_patterns: UrlPatterns | None = None
    categories: dict[str, CategoryConfig] | None = None

    # GitHub repository
    repo: str | None = None
    github_token: str | None = Field(default=None, repr=False)
    include_issues: bool = True
    include_releases: bool = True
    include_changelog: bool = True
    max_issues: int | None = Field(default=None, ge=1)

    # PDF document
    pdf_path: str | None = None
    pdf_url: str | None = None

    def resolved_start_urls(self) -> list[str]:
        """Return explicit start URLs, else the base URL, else nothing."""
        if self.start_urls:
            return list(self.start_urls)
        return [self.base_url] if self.base_url else []

    def category_patterns(self) -> dict[str, list[str]]:
        """Flatten categories to name -> patterns, preserving order."""
        if not self.categories:
            return {}
        return {name: list(category.patterns) for name, category in self.categories.items()}


class JobResult(BaseModel):
    """Summary of a successfully built skill."""

    skill_id: str
    skill_name: str
    pages_scraped: int
    files_generated: list[str]
    download_url: str | None = None


def utc_now() -> datetime:
    """Current time, timezone-aware."""
    return datetime.now(UTC)


class Job(BaseModel):
    """One asynchronous execution of a source adapter.

    Attributes:
        id: Job identifier
        type: Which adapter runs the job
        status: Lifecycle state
        progress: Percent complete (0-100)
        message: Latest human-readable progress message
        config: Source description
        result: Set when the job completed
        error: Set when the job failed
        created_at: Creation time
        updated_at: Last mutation time
        completed_at: Time the job reached a terminal state
    """

    id: str
    type: JobType
    status: JobStatus = JobStatus.QUEUED
    progress: int = Field(default=0, ge=0, le=100)
    message: str = ""
    config: SkillConfig
    result: JobResult | None = None
    error: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        """Whether the job reached completed or failed."""
        return self.status in TERMINAL_STATUSES

    def can_transition_to(self, status: JobStatus) -> bool:
        """Whether the lifecycle allows moving to the given status."""
        return status in ALLOWED_TRANSITIONS[self.status]

    def to_record(self) -> dict:
        """Serialize for the key-value store, leaving out access tokens."""
        return self.model_dump(mode="json", exclude={"config": {"github_token"}})

    @classmethod
    def from_record(cls, record: dict) -> "Job":
        """Restore a job persisted with to_record."""
        return cls.model_validate(record)
