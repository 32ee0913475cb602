"""Submit Billing Batch Use Case (queued)

Validates the requested pendings, stores the batch in PENDING_PROCESSING
and queues it for the worker.
"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.billing_batch_repository import BillingBatchRepository
from src.app.repositories.billing_pending_repository import BillingPendingRepository
from src.app.repositories.receipt_book_repository import ReceiptBookRepository
from src.app.repositories.batch_job_repository import BatchJobRepository
from src.domain.billing_batch import BillingBatch, BatchStatus
from .dtos import (
    CreateBillingBatchCommandDTO,
    BatchCreationResultDTO,
    BillingBatchDTO,
    BatchSummaryDTO,
    QueueInfoDTO,
)
from .validate_pendings import ValidatePendings

logger = logging.getLogger(__name__)

EMPTY_BATCH_MESSAGE = "Cannot create a billing batch without any pending items"


def batch_job_key(batch_id: int) -> str:
    return f"batch-{batch_id}"


def empty_batch_error(reason: Optional[str] = None) -> Error:
    return Error(code="EMPTY_BATCH", message=EMPTY_BATCH_MESSAGE, reason=reason)


class SubmitBillingBatch:
    """
    Use Case: Submit a billing batch for asynchronous processing

    Business Rules:
    1. An empty pending list is rejected before anything is written
    2. If no requested pending is valid the batch is rejected (EMPTY_BATCH)
    3. Partially valid requests are accepted; rejected ids are reported
    4. The batch keeps every requested id so a retry can resubmit them
    5. The job key is batch-{id} so status polling can find it

    Flow:
    1. Validate pendings
    2. Create batch (PENDING_PROCESSING) and make sure the receipt book exists
    3. Enqueue job with the valid ids
    4. Commit and return the queued handle
    """

    def __init__(
        self,
        uow: UnitOfWork,
        batch_repo: BillingBatchRepository,
        pending_repo: BillingPendingRepository,
        receipt_book_repo: ReceiptBookRepository,
        job_repo: BatchJobRepository,
        attempts: int = 3,
        backoff_delay_ms: int = 2000,
    ):
        self.uow = uow
        self.batch_repo = batch_repo
        self.receipt_book_repo = receipt_book_repo
        self.job_repo = job_repo
        self.attempts = attempts
        self.backoff_delay_ms = backoff_delay_ms
        self.validator = ValidatePendings(pending_repo)

    async def execute(self, command: CreateBillingBatchCommandDTO) -> Result[BatchCreationResultDTO]:
        """
        Execute batch submission

        Args:
            command: CreateBillingBatchCommandDTO with issue date, receipt book and pending ids

        Returns:
            Result[BatchCreationResultDTO]: Batch, validation summary and queue handle

        Errors:
            EMPTY_BATCH: No pending ids, or none of them valid
            SUBMIT_BATCH_FAILED: Unexpected persistence failure
        """
        if not command.pending_ids:
            return Return.err(empty_batch_error())

        try:
            # Step 1: Validate pendings
            validation = await self.validator.execute(command.pending_ids)
            if not validation.valid:
                return Return.err(empty_batch_error("None of the requested pendings can be invoiced"))

            # Step 2: Create batch
            batch = await self.batch_repo.create(
                BillingBatch(
                    issue_date=command.issue_date,
                    receipt_book=command.receipt_book,
                    status=BatchStatus.PENDING_PROCESSING,
                    pending_ids=list(command.pending_ids),
                )
            )
            await self.receipt_book_repo.ensure(command.receipt_book)

            # Step 3: Enqueue job
            job = await self.job_repo.enqueue(
                job_key=batch_job_key(batch.id),
                batch_id=batch.id,
                payload={
                    "batchId": batch.id,
                    "pendingIds": validation.valid_ids,
                    "issueDate": command.issue_date.isoformat(),
                    "receiptBook": command.receipt_book,
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
                    code="SUBMIT_BATCH_FAILED",
                    message="Failed to create billing batch",
                    reason=str(e),
                )
            )

        logger.info(
            f"Batch {batch.id} queued as {job.job_key}: "
            f"{len(validation.valid)} valid, {len(validation.invalid)} rejected"
        )

        return Return.ok(
            BatchCreationResultDTO(
                batch=BillingBatchDTO.from_entity(batch),
                summary=BatchSummaryDTO(failed_pendings=validation.invalid),
                queue_info=QueueInfoDTO(
                    job_id=job.job_key,
                    status="queued",
                    message=(
                        f"Batch {batch.id} has been queued for processing. "
                        f"Check status at GET /billing-batches/{batch.id}/status"
                    ),
                ),
            )
        )
