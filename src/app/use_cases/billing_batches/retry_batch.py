"""Retry Billing Batch Use Case

Re-queues a batch that ended in ERROR.
"""

import logging
import time
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.billing_batch_repository import BillingBatchRepository
from src.app.repositories.batch_job_repository import BatchJobRepository
from src.domain.billing_batch import BatchStatus
from .dtos import RetryBatchResponseDTO
from .submit_batch import batch_job_key

logger = logging.getLogger(__name__)


def retry_job_key(batch_id: int) -> str:
    return f"{batch_job_key(batch_id)}-retry-{int(time.time() * 1000)}"


class RetryBillingBatch:
    """
    Use Case: Retry a failed billing batch

    Business Rules:
    1. Only ERROR batches can be retried; any other status is rejected
       without touching the batch
    2. The batch goes back to PENDING_PROCESSING with error and processing
       timestamps cleared
    3. Every unfinished job of the batch (waiting, delayed, or active with
       an outcome that was never recorded) is discarded; the batch is
       processed by the retry job only
    4. The retry job carries the batch's originally requested pending ids;
       processing re-validates them

    Flow:
    1. Load batch and check status
    2. Reset batch
    3. Discard unfinished jobs, enqueue retry job
    4. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        batch_repo: BillingBatchRepository,
        job_repo: BatchJobRepository,
        attempts: int = 3,
        backoff_delay_ms: int = 2000,
    ):
        self.uow = uow
        self.batch_repo = batch_repo
        self.job_repo = job_repo
        self.attempts = attempts
        self.backoff_delay_ms = backoff_delay_ms

    async def execute(self, batch_id: int) -> Result[RetryBatchResponseDTO]:
        """
        Execute batch retry

        Errors:
            BATCH_NOT_FOUND: Unknown batch
            INVALID_STATE_TRANSITION: Batch is not in ERROR
            RETRY_BATCH_FAILED: Unexpected persistence failure
        """
        try:
            # Step 1: Load batch and check status
            batch = await self.batch_repo.get_by_id(batch_id, for_update=True)
            if not batch:
                return Return.err(
                    Error(
                        code="BATCH_NOT_FOUND",
                        message=f"BillingBatch with identifier '{batch_id}' not found",
                    )
                )

            if not batch.can_retry():
                return Return.err(
                    Error(
                        code="INVALID_STATE_TRANSITION",
                        message=f"Cannot retry batch in status '{batch.status.value}'. "
                                f"Only ERROR batches can be retried.",
                    )
                )

            # Step 2: Reset batch
            batch.status = BatchStatus.PENDING_PROCESSING
            batch.error_message = None
            batch.processing_started_at = None
            batch.processing_completed_at = None
            await self.batch_repo.update(batch)

            # Step 3: Replace unfinished jobs with the retry job
            discarded = await self.job_repo.discard_unfinished(batch_id, "Superseded by retry")
            job_key = retry_job_key(batch_id)
            await self.job_repo.enqueue(
                job_key=job_key,
                batch_id=batch_id,
                payload={
                    "batchId": batch_id,
                    "pendingIds": list(batch.pending_ids or []),
                    "issueDate": batch.issue_date.isoformat(),
                    "receiptBook": batch.receipt_book,
                },
                attempts=self.attempts,
                backoff_delay_ms=self.backoff_delay_ms,
            )

            # Step 4: Commit
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="RETRY_BATCH_FAILED",
                    message=f"Failed to retry billing batch {batch_id}",
                    reason=str(e),
                )
            )

        logger.info(f"Batch {batch_id} queued for retry as {job_key} ({discarded} stale jobs discarded)")

        return Return.ok(
            RetryBatchResponseDTO(
                message=f"Batch {batch_id} has been queued for retry",
                job_id=job_key,
            )
        )
