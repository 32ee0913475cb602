"""SQLAlchemy Batch Job Repository Implementation

Database-backed job queue. Claims use a conditional UPDATE on the job
state so that concurrent workers never claim the same job.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from sqlalchemy import update, or_, and_
from sqlalchemy.orm import aliased
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.batch_job_repository import BatchJobRepository
from src.domain.batch_job import BatchJob, JobState

logger = logging.getLogger(__name__)

CLAIMABLE_STATES = [JobState.WAITING, JobState.DELAYED]
UNFINISHED_STATES = CLAIMABLE_STATES + [JobState.ACTIVE]


class SqlAlchemyBatchJobRepository(BatchJobRepository):
    """
    SQLAlchemy implementation of BatchJobRepository

    Uses async session for database operations. Like the other
    repositories it only flushes; the caller commits.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

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
        Add a job to the queue (idempotent by job_key)

        Args:
            job_key: Unique job key
            batch_id: Batch the job processes
            payload: Job payload
            attempts: Maximum number of attempts
            backoff_delay_ms: Base delay for exponential backoff
            state: Initial state

        Returns:
            The new job, or the existing job with the same key
        """
        existing = await self.get_by_key(job_key)
        if existing is not None:
            logger.info(f"Job {job_key} already queued (state={existing.state.value})")
            return existing

        now = datetime.utcnow()
        job = BatchJob(
            job_key=job_key,
            batch_id=batch_id,
            payload=payload,
            state=state,
            max_attempts=attempts,
            backoff_delay_ms=backoff_delay_ms,
            run_at=now,
        )
        if state == JobState.ACTIVE:
            job.attempts_made = 1
            job.started_at = now

        self.session.add(job)
        await self.session.flush()
        await self.session.refresh(job)
        return job

    async def get_by_key(self, job_key: str) -> Optional[BatchJob]:
        statement = select(BatchJob).where(BatchJob.job_key == job_key).execution_options(
            populate_existing=True
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_latest_for_batch(self, batch_id: int) -> Optional[BatchJob]:
        statement = (
            select(BatchJob)
            .where(BatchJob.batch_id == batch_id)
            .order_by(BatchJob.created_at.desc(), BatchJob.id.desc())
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def stats(self) -> Dict[str, int]:
        statement = select(BatchJob.state, func.count(BatchJob.id)).group_by(BatchJob.state)
        result = await self.session.execute(statement)
        counts = {state.value: 0 for state in JobState}
        for state, count in result.all():
            counts[JobState(state).value] = count
        return counts

    async def claim_next(self, now: Optional[datetime] = None) -> Optional[BatchJob]:
        """
        Claim the oldest due job

        Jobs whose batch already has an active job are skipped, which keeps
        a single in-flight job per batch.

        Returns:
            The claimed job, or None when nothing can be claimed
        """
        now = now or datetime.utcnow()
        active = aliased(BatchJob)
        busy_batches = select(active.batch_id).where(active.state == JobState.ACTIVE)

        statement = (
            select(BatchJob)
            .where(
                or_(
                    BatchJob.state == JobState.WAITING,
                    and_(BatchJob.state == JobState.DELAYED, BatchJob.run_at <= now),
                )
            )
            .where(BatchJob.batch_id.not_in(busy_batches))
            .order_by(BatchJob.run_at.asc(), BatchJob.id.asc())
            .limit(1)
        )
        result = await self.session.execute(statement)
        candidate = result.scalar_one_or_none()
        if candidate is None:
            return None

        claim = (
            update(BatchJob)
            .where(BatchJob.id == candidate.id)
            .where(BatchJob.state.in_(CLAIMABLE_STATES))
            .values(
                state=JobState.ACTIVE,
                attempts_made=BatchJob.attempts_made + 1,
                progress=0,
                started_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        claimed = await self.session.execute(claim)
        if claimed.rowcount != 1:
            # Another worker won the race
            return None

        await self.session.refresh(candidate)
        return candidate

    async def complete(self, job: BatchJob, result: Optional[Dict[str, Any]] = None) -> BatchJob:
        now = datetime.utcnow()
        job.state = JobState.COMPLETED
        job.progress = 100
        job.result = result
        job.failed_reason = None
        job.finished_at = now
        job.updated_at = now
        self.session.add(job)
        await self.session.flush()
        await self.session.refresh(job)
        return job

    async def fail(self, job: BatchJob, reason: str, now: Optional[datetime] = None) -> BatchJob:
        """
        Record a failed attempt

        Reschedules with exponential backoff while attempts remain,
        otherwise marks the job FAILED.
        """
        now = now or datetime.utcnow()
        job.failed_reason = reason
        job.updated_at = now

        if job.has_attempts_left():
            delay_ms = job.next_backoff_ms()
            job.state = JobState.DELAYED
            job.run_at = now + timedelta(milliseconds=delay_ms)
            logger.info(
                f"Job {job.job_key} attempt {job.attempts_made}/{job.max_attempts} failed, "
                f"retrying in {delay_ms}ms"
            )
        else:
            job.state = JobState.FAILED
            job.finished_at = now
            logger.warning(
                f"Job {job.job_key} failed after {job.attempts_made} attempts: {reason}"
            )

        self.session.add(job)
        await self.session.flush()
        await self.session.refresh(job)
        return job

    async def report_progress(self, job_id: int, progress: int) -> None:
        statement = (
            update(BatchJob)
            .where(BatchJob.id == job_id)
            .values(progress=max(0, min(100, progress)), updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(statement)

    async def discard_unfinished(self, batch_id: int, reason: str) -> int:
        now = datetime.utcnow()
        statement = (
            update(BatchJob)
            .where(BatchJob.batch_id == batch_id)
            .where(BatchJob.state.in_(UNFINISHED_STATES))
            .values(
                state=JobState.FAILED,
                failed_reason=reason,
                finished_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return result.rowcount
