"""Billing Batch Background Worker

Consumes the batch job queue: claims due jobs and processes their billing
batches. Failed attempts are rescheduled with exponential backoff by the
queue until the job runs out of attempts.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
import time
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.batch_job_repository import SqlAlchemyBatchJobRepository
from src.adapter.repositories.billing_batch_repository import SqlAlchemyBillingBatchRepository
from src.adapter.repositories.billing_pending_repository import SqlAlchemyBillingPendingRepository
from src.adapter.repositories.service_repository import SqlAlchemyServiceRepository
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.receipt_book_repository import SqlAlchemyReceiptBookRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.billing_batches import (
    ProcessBillingBatch,
    RunBatchJob,
    WorkerRunResultDTO,
)
from src.domain.batch_job import BatchJob, JobState

logger = logging.getLogger(__name__)


class BillingBatchWorker:
    """
    Background worker for billing batch processing

    Features:
    - Claims due jobs (waiting, or delayed past their backoff)
    - Never runs two jobs of the same batch at once (enforced by the claim)
    - Each job runs in its own session and unit of work
    - Reports per-job progress in separate short transactions
    - Can run once or continuously

    Usage:
        # Drain up to batch_size due jobs
        worker = BillingBatchWorker()
        result = await worker.run_once()

        # Poll continuously
        worker = BillingBatchWorker()
        await worker.run_forever()
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        batch_size: Optional[int] = None,
        report_progress: Optional[bool] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            batch_size: Max jobs per cycle (defaults to ApplicationConfig.WORKER_BATCH_SIZE)
            report_progress: Write job progress while processing. Defaults to
                on, except on SQLite where a second writer would wait on the
                processing transaction's lock.
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.batch_size = batch_size or ApplicationConfig.WORKER_BATCH_SIZE

        # Create engine and session factory
        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        if report_progress is None:
            report_progress = self.engine.dialect.name != "sqlite"
        self.report_progress = report_progress

        logger.info("BillingBatchWorker initialized")

    def _progress_reporter(self, job_id: int):
        async def report(progress: int) -> None:
            async with self.async_session_factory() as session:
                await SqlAlchemyBatchJobRepository(session).report_progress(job_id, progress)
                await session.commit()

        return report

    async def _claim(self) -> Optional[BatchJob]:
        async with self.async_session_factory() as session:
            uow = SqlAlchemyUnitOfWork(session)
            try:
                job = await SqlAlchemyBatchJobRepository(session).claim_next()
                await uow.commit()
                return job
            except Exception as e:
                await uow.rollback()
                logger.error(f"Failed to claim next batch job: {e}")
                return None

    async def _process(self, job: BatchJob) -> JobState:
        """Run a claimed job and return the state it ended in"""
        async with self.async_session_factory() as session:
            uow = SqlAlchemyUnitOfWork(session)
            job_repo = SqlAlchemyBatchJobRepository(session)

            processor = ProcessBillingBatch(
                uow=uow,
                batch_repo=SqlAlchemyBillingBatchRepository(session),
                pending_repo=SqlAlchemyBillingPendingRepository(session),
                service_repo=SqlAlchemyServiceRepository(session),
                invoice_repo=SqlAlchemyInvoiceRepository(session),
                receipt_book_repo=SqlAlchemyReceiptBookRepository(session),
                progress_reporter=self._progress_reporter(job.id) if self.report_progress else None,
            )

            try:
                await RunBatchJob(uow=uow, job_repo=job_repo, processor=processor).execute(job)
            except Exception as e:
                # Raised before the job outcome could be recorded
                await uow.rollback()
                logger.error(f"Unexpected error running job {job.job_key}: {e}")
                current = await job_repo.get_by_key(job.job_key)
                await job_repo.fail(current, str(e) or type(e).__name__)
                await uow.commit()

            current = await job_repo.get_by_key(job.job_key)
            return current.state

    async def run_once(self) -> WorkerRunResultDTO:
        """
        Process up to batch_size due jobs, one after the other

        Returns:
            WorkerRunResultDTO with per-outcome counts
        """
        start_time = time.time()
        claimed = completed = failed = rescheduled = 0

        for _ in range(self.batch_size):
            job = await self._claim()
            if job is None:
                break

            claimed += 1
            logger.info(
                f"Claimed job {job.job_key} for batch {job.batch_id} "
                f"(attempt {job.attempts_made}/{job.max_attempts})"
            )

            try:
                state = await self._process(job)
            except Exception as e:
                logger.error(f"Job {job.job_key} could not be processed: {e}")
                failed += 1
                continue

            if state == JobState.COMPLETED:
                completed += 1
                logger.info(f"Job {job.job_key} completed")
            elif state == JobState.DELAYED:
                rescheduled += 1
                logger.info(f"Job {job.job_key} rescheduled after failed attempt")
            else:
                failed += 1
                logger.warning(f"Job {job.job_key} failed permanently")

        execution_time_ms = int((time.time() - start_time) * 1000)

        result = WorkerRunResultDTO(
            claimed=claimed,
            completed=completed,
            failed=failed,
            rescheduled=rescheduled,
            execution_time_ms=execution_time_ms,
        )

        if claimed:
            logger.info(
                f"Worker cycle complete: {claimed} claimed, {completed} completed, "
                f"{rescheduled} rescheduled, {failed} failed, {execution_time_ms}ms"
            )

        return result

    async def run_forever(self, poll_interval_seconds: Optional[float] = None):
        """
        Poll the queue continuously

        Args:
            poll_interval_seconds: Seconds between polling cycles
                (defaults to ApplicationConfig.WORKER_POLL_INTERVAL_SECONDS)
        """
        interval = poll_interval_seconds or ApplicationConfig.WORKER_POLL_INTERVAL_SECONDS
        logger.info(f"Starting continuous billing batch processing with {interval}s interval")

        while True:
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Worker cycle failed: {e}")

            await asyncio.sleep(interval)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("BillingBatchWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Drain due jobs once
        python -m src.worker.billing_batch_worker

        # Run continuously
        python -m src.worker.billing_batch_worker --continuous --interval 5
    """
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Billing Batch Worker")
    parser.add_argument(
        "--continuous", action="store_true", help="Run continuously"
    )
    parser.add_argument("--interval", type=float, help="Seconds between polling cycles")
    parser.add_argument("--batch-size", type=int, help="Max jobs per cycle")
    args = parser.parse_args()

    worker = BillingBatchWorker(batch_size=args.batch_size)

    try:
        if args.continuous:
            await worker.run_forever(args.interval)
        else:
            result = await worker.run_once()
            print(f"Worker cycle complete:")
            print(f"  Claimed: {result.claimed}")
            print(f"  Completed: {result.completed}")
            print(f"  Rescheduled: {result.rescheduled}")
            print(f"  Failed: {result.failed}")
            print(f"  Execution time: {result.execution_time_ms}ms")
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
