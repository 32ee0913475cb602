"""Submit Billing Batch Use Case (synchronous)

Same validation as the queued submission, but the job is claimed by the
caller and run inline; the reply carries the final outcome.
"""

import logging
from typing import Dict, List
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.billing_batch_repository import BillingBatchRepository
from src.app.repositories.billing_pending_repository import BillingPendingRepository
from src.app.repositories.service_repository import ServiceRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.receipt_book_repository import ReceiptBookRepository
from src.app.repositories.batch_job_repository import BatchJobRepository
from src.app.use_cases.invoices.dtos import InvoiceDTO
from src.domain.batch_job import JobState
from src.domain.billing_batch import BillingBatch, BatchStatus
from .dtos import (
    CreateBillingBatchCommandDTO,
    BatchCreationResultDTO,
    BillingBatchDTO,
    BatchSummaryDTO,
    FailedPendingDTO,
)
from .process_batch import ProcessBillingBatch
from .run_batch_job import RunBatchJob
from .submit_batch import batch_job_key, empty_batch_error
from .validate_pendings import ValidatePendings

logger = logging.getLogger(__name__)


def merge_failures(*groups: List[FailedPendingDTO]) -> List[FailedPendingDTO]:
    """First reason per pending id wins"""
    merged: Dict[int, FailedPendingDTO] = {}
    for group in groups:
        for entry in group:
            merged.setdefault(entry.id, entry)
    return list(merged.values())


class SubmitBillingBatchSync:
    """
    Use Case: Submit and process a billing batch in the same request

    Business Rules:
    1. Same rejection rules as SubmitBillingBatch (EMPTY_BATCH)
    2. The job batch-{id} is created ACTIVE with a single attempt, so no
       worker picks it up and a failure is final for this job
    3. A processing failure leaves the batch in ERROR (retryable) and is
       returned to the caller as BATCH_PROCESSING_FAILED

    Flow:
    1. Validate pendings
    2. Create batch, receipt book and claimed job; commit
    3. Run the job inline (same code path as the worker)
    4. Return batch with invoices and the merged validation summary
    """

    def __init__(
        self,
        uow: UnitOfWork,
        batch_repo: BillingBatchRepository,
        pending_repo: BillingPendingRepository,
        service_repo: ServiceRepository,
        invoice_repo: InvoiceRepository,
        receipt_book_repo: ReceiptBookRepository,
        job_repo: BatchJobRepository,
    ):
        self.uow = uow
        self.batch_repo = batch_repo
        self.invoice_repo = invoice_repo
        self.receipt_book_repo = receipt_book_repo
        self.job_repo = job_repo
        self.validator = ValidatePendings(pending_repo)
        self.runner = RunBatchJob(
            uow=uow,
            job_repo=job_repo,
            processor=ProcessBillingBatch(
                uow=uow,
                batch_repo=batch_repo,
                pending_repo=pending_repo,
                service_repo=service_repo,
                invoice_repo=invoice_repo,
                receipt_book_repo=receipt_book_repo,
            ),
        )

    async def execute(self, command: CreateBillingBatchCommandDTO) -> Result[BatchCreationResultDTO]:
        """
        Execute synchronous batch submission

        Args:
            command: CreateBillingBatchCommandDTO

        Returns:
            Result[BatchCreationResultDTO]: Processed batch with invoices

        Errors:
            EMPTY_BATCH: No pending ids, or none of them valid
            BATCH_PROCESSING_FAILED: Processing failed; batch left in ERROR
            SUBMIT_BATCH_FAILED: Unexpected persistence failure
        """
        if not command.pending_ids:
            return Return.err(empty_batch_error())

        try:
            # Step 1: Validate pendings
            validation = await self.validator.execute(command.pending_ids)
            if not validation.valid:
                return Return.err(empty_batch_error("None of the requested pendings can be invoiced"))

            # Step 2: Create batch and claimed job
            batch = await self.batch_repo.create(
                BillingBatch(
                    issue_date=command.issue_date,
                    receipt_book=command.receipt_book,
                    status=BatchStatus.PENDING_PROCESSING,
                    pending_ids=list(command.pending_ids),
                )
            )
            batch_id = batch.id
            await self.receipt_book_repo.ensure(command.receipt_book)
            job = await self.job_repo.enqueue(
                job_key=batch_job_key(batch_id),
                batch_id=batch_id,
                payload={
                    "batchId": batch_id,
                    "pendingIds": validation.valid_ids,
                    "issueDate": command.issue_date.isoformat(),
                    "receiptBook": command.receipt_book,
                },
                attempts=1,
                state=JobState.ACTIVE,
            )
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

        # Step 3: Run inline
        result = await self.runner.execute(job)
        if result.is_err():
            return Return.err(result.error)

        # Step 4: Build response from the committed state
        processed = result.value
        batch = await self.batch_repo.get_by_id(batch_id)
        invoices = await self.invoice_repo.list_by_batch(batch_id)

        return Return.ok(
            BatchCreationResultDTO(
                batch=BillingBatchDTO.from_entity(
                    batch, [InvoiceDTO.from_detail(detail) for detail in invoices]
                ),
                summary=BatchSummaryDTO(
                    total_invoices=processed.total_invoices,
                    total_amount=processed.total_amount,
                    successful_pendings=processed.successful_pendings,
                    failed_pendings=merge_failures(validation.invalid, processed.failed_pendings),
                ),
                queue_info=None,
            )
        )
