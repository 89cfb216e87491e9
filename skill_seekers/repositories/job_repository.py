"""Repository persisting job records in the blob store."""

import structlog
from pydantic import ValidationError as PydanticValidationError

from skill_seekers.models.job import Job
from skill_seekers.repositories.blob_store import BlobStore
from skill_seekers.utils.exceptions import StorageError

logger = structlog.get_logger(__name__)

JOB_KEY_PREFIX = "job-"


def job_key(job_id: str) -> str:
    """Store key of a job record."""
    return f"{JOB_KEY_PREFIX}{job_id}"


class JobRepository:
    """Saves, loads and deletes job records.

    Write failures are logged as warnings and swallowed: the in-memory job
    table stays authoritative for the lifetime of the process.
    """

    def __init__(self, store: BlobStore) -> None:
        """Initialize repository with a blob store.

        Args:
            store: Key-value store holding ``job-<id>`` records
        """
        self.store = store

    async def save(self, job: Job) -> bool:
        """Persist a job snapshot.

        Returns:
            True if the record was written
        """
        try:
            await self.store.put(job_key(job.id), job.to_record())
        except StorageError as e:
            logger.warning("job_persist_failed", job_id=job.id, error=str(e))
            return False
        return True

    async def load(self, job_id: str) -> Job | None:
        """Load a single job, or None if absent or unreadable."""
        try:
            record = await self.store.get(job_key(job_id))
        except StorageError as e:
            logger.warning("job_load_failed", job_id=job_id, error=str(e))
            return None

        if not isinstance(record, dict):
            return None
        return self._restore(job_id, record)

    async def load_all(self) -> list[Job]:
        """Load every readable job record.

        Raises:
            StorageError: If the keys cannot be listed
        """
        jobs = []
        async for key in self.store.iter_keys(JOB_KEY_PREFIX):
            job = await self.load(key.removeprefix(JOB_KEY_PREFIX))
            if job is not None:
                jobs.append(job)
        return jobs

    async def delete(self, job_id: str) -> None:
        """Remove a job record; failures are logged."""
        try:
            await self.store.delete(job_key(job_id))
        except StorageError as e:
            logger.warning("job_delete_failed", job_id=job_id, error=str(e))

    @staticmethod
    def _restore(job_id: str, record: dict) -> Job | None:
        try:
            return Job.from_record(record)
        except PydanticValidationError as e:
            logger.warning("job_record_invalid", job_id=job_id, error=str(e))
            return None
