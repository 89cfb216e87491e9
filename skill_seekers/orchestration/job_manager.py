"""Bounded-concurrency job queue with persisted state and restart recovery."""

import asyncio
import uuid
from collections import deque
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

import structlog

from skill_seekers.common.constants import CLEANUP_INTERVAL_SECONDS, JOB_RETENTION_HOURS
from skill_seekers.models.job import Job, JobResult, JobStatus, JobType, SkillConfig, utc_now
from skill_seekers.repositories.job_repository import JobRepository
from skill_seekers.sources.base import ProgressCallback
from skill_seekers.utils.exceptions import JobError, StorageError
from skill_seekers.utils.logger import job_context

logger = structlog.get_logger(__name__)

JobHandler = Callable[[Job, ProgressCallback], Awaitable[JobResult]]

QUEUED_MESSAGE = "Job queued, waiting to start..."
STARTED_MESSAGE = "Job started..."
COMPLETED_MESSAGE = "Job completed successfully"
REQUEUED_MESSAGE = "Job re-queued after server restart"

DEFAULT_MAX_CONCURRENT_JOBS = 3
DEFAULT_POLL_INTERVAL = 1.0
SCHEDULER_TASK_NAME = "job-scheduler"


def new_job_id() -> str:
    """Generate a short random job id."""
    return f"job-{uuid.uuid4().hex[:8]}"


def log_task_failure(task: asyncio.Task) -> None:
    """Log the exception that ended a background task, if any."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error("job_task_failed", task=task.get_name(), error=str(error) or type(error).__name__, exc_info=error)


class JobManager:
    """Owns the job table, the FIFO dispatch queue and the handler registry.

    All job mutations go through this object. A single scheduler loop admits
    queued jobs while fewer than ``max_concurrent_jobs`` are running, polling
    every ``poll_interval`` seconds when at capacity. Each admitted job runs
    in its own asyncio task; when it finishes, the scheduler loop is started
    again to pick up anything queued meanwhile.

    Attributes:
        repository: Persistence for job records
        max_concurrent_jobs: Maximum number of jobs in the running state
        poll_interval: Seconds between admission checks when at capacity
    """

    def __init__(
        self,
        repository: JobRepository,
        max_concurrent_jobs: int = DEFAULT_MAX_CONCURRENT_JOBS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Initialize job manager.

        Args:
            repository: Persistence for job records
            max_concurrent_jobs: Concurrency ceiling (at least 1)
            poll_interval: Admission polling interval in seconds
        """
        self.repository = repository
        self.max_concurrent_jobs = max(1, max_concurrent_jobs)
        self.poll_interval = poll_interval

        self._jobs: dict[str, Job] = {}
        self._queue: deque[str] = deque()
        self._handlers: dict[JobType, JobHandler] = {}
        self._tasks: set[asyncio.Task] = set()
        self._scheduler: asyncio.Task | None = None

        logger.info(
            "job_manager_initialized",
            max_concurrent_jobs=self.max_concurrent_jobs,
            poll_interval=self.poll_interval,
        )

    def register_handler(self, job_type: JobType, handler: JobHandler) -> None:
        """Register the coroutine executing jobs of a type."""
        self._handlers[job_type] = handler
        logger.info("job_handler_registered", job_type=job_type.value)

    async def create_job(self, job_type: JobType, config: SkillConfig) -> Job:
        """Create a queued job, persist it and start the scheduler.

        Args:
            job_type: Which handler runs the job
            config: Source description

        Returns:
            Snapshot of the created job
        """
        job = Job(id=new_job_id(), type=job_type, config=config, message=QUEUED_MESSAGE)

        self._jobs[job.id] = job
        await self.repository.save(job)
        self._queue.append(job.id)

        logger.info("job_created", job_id=job.id, job_type=job_type.value)
        self._kick()
        return job.model_copy(deep=True)

    async def get_job(self, job_id: str) -> Job | None:
        """Return a job snapshot from memory, falling back to the store."""
        job = self._jobs.get(job_id)
        if job is None:
            job = await self.repository.load(job_id)
            if job is None:
                return None
            self._jobs[job.id] = job
        return job.model_copy(deep=True)

    def list_jobs(self) -> list[Job]:
        """Return snapshots of all known jobs, newest first."""
        jobs = sorted(self._jobs.values(), key=lambda job: job.created_at, reverse=True)
        return [job.model_copy(deep=True) for job in jobs]

    async def update_progress(self, job_id: str, progress: int, message: str) -> None:
        """Record progress of a running job without changing its status.

        Progress is clamped to [0, 100]. Updates for unknown or terminal
        jobs are ignored.
        """
        job = self._jobs.get(job_id)
        if job is None or job.is_terminal:
            logger.debug("job_progress_ignored", job_id=job_id, progress=progress)
            return

        job.progress = min(100, max(0, int(progress)))
        job.message = message
        job.updated_at = utc_now()
        await self.repository.save(job)

        logger.info("job_progress", job_id=job_id, progress=job.progress, message=message)

    async def complete_job(self, job_id: str, result: JobResult) -> None:
        """Move a running job to completed with its result.

        Raises:
            JobError: If the job is unknown or not running
        """
        job = self._transition(job_id, JobStatus.COMPLETED)
        job.progress = 100
        job.message = COMPLETED_MESSAGE
        job.result = result
        job.completed_at = job.updated_at
        await self.repository.save(job)

        logger.info("job_completed", job_id=job_id, skill_id=result.skill_id, pages_scraped=result.pages_scraped)

    async def fail_job(self, job_id: str, error: str) -> None:
        """Move a running job to failed with a human-readable error.

        Raises:
            JobError: If the job is unknown or not running
        """
        job = self._transition(job_id, JobStatus.FAILED)
        job.message = f"Job failed: {error}"
        job.error = error
        job.completed_at = job.updated_at
        await self.repository.save(job)

        logger.error("job_failed", job_id=job_id, error=error)

    async def load_existing_jobs(self) -> int:
        """Restore persisted jobs and re-queue unfinished ones.

        Jobs found queued or running are forced back to queued and
        dispatched again, so they run at least once more after a restart.

        Returns:
            Number of re-queued jobs
        """
        try:
            jobs = await self.repository.load_all()
        except StorageError as e:
            logger.warning("job_recovery_failed", error=str(e))
            return 0

        requeued = 0
        for job in sorted(jobs, key=lambda job: job.created_at):
            if job.id in self._jobs:
                continue

            self._jobs[job.id] = job
            if job.status in (JobStatus.QUEUED, JobStatus.RUNNING):
                job.status = JobStatus.QUEUED
                job.message = REQUEUED_MESSAGE
                job.updated_at = utc_now()
                await self.repository.save(job)
                self._queue.append(job.id)
                requeued += 1

        logger.info("existing_jobs_loaded", jobs=len(jobs), requeued=requeued)
        if self._queue:
            self._kick()
        return requeued

    async def cleanup_old_jobs(self, now: datetime | None = None) -> int:
        """Remove terminal jobs completed more than the retention window ago.

        Returns:
            Number of removed jobs
        """
        cutoff = (now or utc_now()) - timedelta(hours=JOB_RETENTION_HOURS)
        expired = [
            job_id
            for job_id, job in self._jobs.items()
            if job.is_terminal and job.completed_at is not None and job.completed_at < cutoff
        ]

        for job_id in expired:
            del self._jobs[job_id]
            await self.repository.delete(job_id)

        if expired:
            logger.info("old_jobs_cleaned_up", removed=len(expired))
        return len(expired)

    async def run_cleanup_loop(self, interval: float = CLEANUP_INTERVAL_SECONDS) -> None:
        """Sweep expired jobs every interval seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            await self.cleanup_old_jobs()

    async def wait_until_idle(self) -> None:
        """Wait until the queue is empty and no job or scheduler is active."""
        while True:
            pending = [task for task in self._active_tasks() if task is not asyncio.current_task()]
            if pending:
                await asyncio.wait(pending)
            elif self._queue:
                self._kick()
                await asyncio.sleep(0)
            else:
                return

    async def shutdown(self) -> None:
        """Cancel the scheduler and running executions.

        Cancelled jobs stay ``running`` in the store and are re-queued by
        load_existing_jobs on the next start.
        """
        tasks = self._active_tasks()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("job_manager_shutdown", cancelled=len(tasks))

    def _active_tasks(self) -> list[asyncio.Task]:
        tasks = [task for task in self._tasks if not task.done()]
        if self._scheduler is not None and not self._scheduler.done():
            tasks.append(self._scheduler)
        return tasks

    def _running_count(self) -> int:
        return sum(1 for job in self._jobs.values() if job.status is JobStatus.RUNNING)

    def _transition(self, job_id: str, status: JobStatus) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobError(f"Job {job_id} not found")
        if not job.can_transition_to(status):
            raise JobError(f"Job {job_id} cannot move from {job.status.value} to {status.value}")
        job.status = status
        job.updated_at = utc_now()
        return job

    def _kick(self) -> None:
        """Start the scheduler loop unless one is already active."""
        if self._scheduler is not None and not self._scheduler.done():
            return
        self._scheduler = asyncio.create_task(self._process_queue(), name=SCHEDULER_TASK_NAME)
        self._scheduler.add_done_callback(log_task_failure)

    async def _process_queue(self) -> None:
        while self._queue:
            if self._running_count() >= self.max_concurrent_jobs:
                await asyncio.sleep(self.poll_interval)
                continue

            job_id = self._queue.popleft()
            job = self._jobs.get(job_id)
            if job is None or job.status is not JobStatus.QUEUED:
                logger.debug("job_dequeue_skipped", job_id=job_id)
                continue

            self._transition(job_id, JobStatus.RUNNING)
            job.message = STARTED_MESSAGE
            await self.repository.save(job)

            task = asyncio.create_task(self._execute(job), name=job.id)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            task.add_done_callback(log_task_failure)

    async def _execute(self, job: Job) -> None:
        handler = self._handlers.get(job.type)
        log = logger.bind(job_id=job.id, job_type=job.type.value)

        if handler is None:
            await self.fail_job(job.id, f"No handler registered for job type: {job.type.value}")
        else:
            log.info("job_started")

            async def report_progress(progress: int, message: str) -> None:
                await self.update_progress(job.id, progress, message)

            try:
                with job_context(job.id, job.type.value):
                    result = await handler(job.model_copy(deep=True), report_progress)
            except Exception as e:
                log.debug("job_handler_raised", error_type=type(e).__name__, exc_info=True)
                await self.fail_job(job.id, str(e) or type(e).__name__)
            else:
                await self.complete_job(job.id, result)

        self._kick()
