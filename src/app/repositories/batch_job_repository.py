"""Batch Job Repository Interface

Durable work queue for billing batch processing, stored in the database.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Dict, Any
from src.domain.batch_job import BatchJob, JobState


class BatchJobRepository(ABC):
    """
    Repository interface for the batch job queue

    Queue guarantees:
    - Enqueue is idempotent by job_key
    - A job is claimed by at most one worker
    - No job is claimed while another job of the same batch is active
    - Failed attempts are rescheduled with exponential backoff until
      max_attempts is reached, then the job is failed
    """

    @abstractmethod
    async def enqueue(
        self,
        job_key: str,
        batch_id: int,
        payload: Dict[str, Any],
        attempts: int = 3,
        backoff_delay_ms: int = 2000,
        state: JobState = JobState.WAITING,
    ) -> BatchJob:
        """
        Add a job to the queue

        Args:
            job_key: Unique job key
            batch_id: Batch the job processes
            payload: Job payload
            attempts: Maximum number of attempts
            backoff_delay_ms: Base delay for exponential backoff
            state: Initial state (ACTIVE when the caller runs the job inline)

        Returns:
            The new job, or the existing job with the same key
        """
        pass

    @abstractmethod
    async def get_by_key(self, job_key: str) -> Optional[BatchJob]:
        """Retrieve a job by key"""
        pass

    @abstractmethod
    async def get_latest_for_batch(self, batch_id: int) -> Optional[BatchJob]:
        """Most recently created job of a batch"""
        pass

    @abstractmethod
    async def stats(self) -> Dict[str, int]:
        """
        Count jobs per state

        Returns:
            Dict with waiting, active, completed, failed and delayed counts
        """
        pass

    @abstractmethod
    async def claim_next(self, now: Optional[datetime] = None) -> Optional[BatchJob]:
        """
        Claim the oldest due job

        A job is due when WAITING, or DELAYED with run_at <= now. The claimed
        job becomes ACTIVE and its attempts_made is incremented.

        Returns:
            The claimed job, or None when nothing can be claimed
        """
        pass

    @abstractmethod
    async def complete(self, job: BatchJob, result: Optional[Dict[str, Any]] = None) -> BatchJob:
        """Mark an active job as completed"""
        pass

    @abstractmethod
    async def fail(self, job: BatchJob, reason: str, now: Optional[datetime] = None) -> BatchJob:
        """
        Record a failed attempt

        The job becomes DELAYED with run_at pushed by the backoff when
        attempts remain, FAILED otherwise.
        """
        pass

    @abstractmethod
    async def report_progress(self, job_id: int, progress: int) -> None:
        """Store the progress (0-100) of the current attempt"""
        pass

    @abstractmethod
    async def discard_unfinished(self, batch_id: int, reason: str) -> int:
        """
        Fail every WAITING, DELAYED or ACTIVE job of a batch

        Only call when no attempt of the batch can still be running (the
        batch is in ERROR).

        Returns:
            Number of discarded jobs
        """
        pass
