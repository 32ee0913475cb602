"""Run Batch Job Use Case

Runs one claimed queue job: processes its batch and records the outcome
on the job (completed, or failed / rescheduled with backoff).
"""

import logging
from libs.result import Result
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.batch_job_repository import BatchJobRepository
from src.domain.batch_job import BatchJob, JobState
from .dtos import ProcessBatchCommandDTO, BatchProcessingResultDTO
from .process_batch import ProcessBillingBatch

logger = logging.getLogger(__name__)


class RunBatchJob:
    """
    Use Case: Execute a claimed batch job

    The job must already be ACTIVE (claimed by the caller). Processing
    errors never escape: they are returned and recorded on the job so the
    queue can apply its retry policy.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        job_repo: BatchJobRepository,
        processor: ProcessBillingBatch,
    ):
        self.uow = uow
        self.job_repo = job_repo
        self.processor = processor

    async def execute(self, job: BatchJob) -> Result[BatchProcessingResultDTO]:
        job_key = job.job_key
        payload = job.payload or {}
        command = ProcessBatchCommandDTO(
            batch_id=job.batch_id,
            pending_ids=payload.get("pendingIds"),
        )

        logger.info(f"Running job {job_key} (attempt {job.attempts_made}/{job.max_attempts})")
        result = await self.processor.execute(command)

        try:
            job = await self.job_repo.get_by_key(job_key)
            if job.state != JobState.ACTIVE:
                # Discarded by a retry while running
                logger.warning(f"Job {job_key} is {job.state.value}, outcome not recorded")
                await self.uow.rollback()
                return result
            if result.is_ok():
                await self.job_repo.complete(job, result.value.model_dump(mode="json"))
            else:
                await self.job_repo.fail(job, result.error.reason or result.error.message)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to record outcome of job {job_key}: {e}")

        return result
