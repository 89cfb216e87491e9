"""Unit tests for JobRepository."""

import pytest

from skill_seekers.models.job import Job, JobStatus, JobType, SkillConfig
from skill_seekers.repositories.job_repository import JobRepository, job_key


def _job(job_id: str = "job-abc12345", **overrides) -> Job:
    config = SkillConfig(name="demo", repo="owner/repo", github_token="ghp_secret")
    return Job(id=job_id, type=JobType.SCRAPE_GITHUB, config=config, **overrides)


@pytest.mark.asyncio
class TestJobRepository:
    """Test suite for JobRepository."""

    async def test_save_and_load(self, job_repository: JobRepository, memory_store) -> None:
        """Test that a saved job loads back without its token."""
        job = _job(status=JobStatus.RUNNING, progress=40, message="Fetching issues...")

        assert await job_repository.save(job) is True
        loaded = await job_repository.load(job.id)

        assert job_key(job.id) in memory_store.records
        assert loaded.status is JobStatus.RUNNING
        assert loaded.progress == 40
        assert loaded.created_at == job.created_at
        assert loaded.config.repo == "owner/repo"
        assert loaded.config.github_token is None
        assert "ghp_secret" not in str(memory_store.records[job_key(job.id)])

    async def test_load_missing(self, job_repository: JobRepository) -> None:
        """Test that unknown ids load as None."""
        assert await job_repository.load("job-missing") is None

    async def test_invalid_record_is_skipped(self, job_repository: JobRepository, memory_store) -> None:
        """Test that unreadable records are ignored by load and load_all."""
        await job_repository.save(_job("job-good0001"))
        memory_store.records[job_key("job-bad00001")] = {"id": "job-bad00001", "status": "exploded"}

        assert await job_repository.load("job-bad00001") is None
        assert [job.id for job in await job_repository.load_all()] == ["job-good0001"]

    async def test_delete(self, job_repository: JobRepository, memory_store) -> None:
        """Test that deleting removes the record."""
        job = _job()
        await job_repository.save(job)

        await job_repository.delete(job.id)

        assert memory_store.records == {}

    async def test_write_failures_are_swallowed(self, failing_store) -> None:
        """Test that persistence failures are reported, not raised."""
        repository = JobRepository(failing_store)

        assert await repository.save(_job()) is False
        await repository.delete("job-abc12345")
