"""Interfaces shared by source adapters and their collaborators."""

from collections.abc import Awaitable, Callable
from typing import Protocol

from skill_seekers.models.job import Job, JobResult

ProgressCallback = Callable[[int, str], Awaitable[None]]


class SourceAdapter(Protocol):
    """Runs one scrape job and returns the built skill summary."""

    async def run(self, job: Job, report_progress: ProgressCallback) -> JobResult:
        """Collect units from the job's source and build a skill package.

        Args:
            job: Job being executed; only its config is read
            report_progress: Awaitable callback taking (percent, message)

        Returns:
            Summary of the built skill

        Raises:
            ConfigurationError: If the config names no usable source
        """
        ...


def build_job_result(package, pages_scraped: int) -> JobResult:
    """Summarize a persisted skill package for the job record."""
    return JobResult(
        skill_id=package.id,
        skill_name=package.name,
        pages_scraped=pages_scraped,
        files_generated=[skill_file.path for skill_file in package.files],
        download_url=package.download_url,
    )
