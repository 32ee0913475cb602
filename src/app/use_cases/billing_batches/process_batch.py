"""Process Billing Batch Use Case

Turns the valid pendings of a batch into invoices in one atomic unit of
work. Shared by the queue worker and by synchronous submission.
"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Awaitable, Callable, List, Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.billing_batch_repository import BillingBatchRepository
from src.app.repositories.billing_pending_repository import BillingPendingRepository
from src.app.repositories.service_repository import ServiceRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.receipt_book_repository import ReceiptBookRepository
from src.domain.billing_batch import BatchStatus
from src.domain.billing_pending import PendingStatus
from src.domain.invoice import Invoice
from src.domain.service import ServiceStatus
from .dtos import ProcessBatchCommandDTO, BatchProcessingResultDTO
from .invoice_numbers import InvoiceNumberAllocator, format_invoice_number, generate_cae
from .validate_pendings import ValidatePendings

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

ProgressReporter = Callable[[int], Awaitable[None]]


class BatchProcessingError(Exception):
    """Processing cannot go on; the unit of work must be rolled back"""


class ProcessBillingBatch:
    """
    Use Case: Invoice the pendings of a billing batch

    Business Rules:
    1. Only PENDING_PROCESSING or ERROR batches are processed; a PROCESSED
       batch is left untouched (duplicate deliveries never double-invoice)
    2. Pendings are re-validated inside the transaction; if none is valid
       the batch fails with "No valid pendings to process"
    3. Invoice numbers follow the order of the valid pendings and are
       allocated while holding the receipt book lock
    4. All invoices, pending and service transitions and the batch totals
       are committed together or not at all
    5. On failure the batch is left in ERROR with the error detail

    Flow:
    1. Load batch, move it to IN_PROCESS (committed on its own)
    2. Ensure the receipt book row exists (committed), then lock it
    3. Re-validate pendings with row locks
    4. Read the starting sequence, then for each valid pending create the
       invoice and flip pending and service to INVOICED
    5. Mark batch PROCESSED with totals and commit
    6. On any error: roll back, then record ERROR in a new transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        batch_repo: BillingBatchRepository,
        pending_repo: BillingPendingRepository,
        service_repo: ServiceRepository,
        invoice_repo: InvoiceRepository,
        receipt_book_repo: ReceiptBookRepository,
        progress_reporter: Optional[ProgressReporter] = None,
    ):
        self.uow = uow
        self.batch_repo = batch_repo
        self.pending_repo = pending_repo
        self.service_repo = service_repo
        self.invoice_repo = invoice_repo
        self.receipt_book_repo = receipt_book_repo
        self.progress_reporter = progress_reporter
        self.validator = ValidatePendings(pending_repo)
        self.allocator = InvoiceNumberAllocator(invoice_repo)

    async def execute(self, command: ProcessBatchCommandDTO) -> Result[BatchProcessingResultDTO]:
        """
        Execute batch processing

        Args:
            command: ProcessBatchCommandDTO with batch_id and optional pending_ids

        Returns:
            Result[BatchProcessingResultDTO]: Success with totals or error

        Errors:
            BATCH_NOT_FOUND: Unknown batch
            INVALID_STATE_TRANSITION: Batch is already being processed
            BATCH_PROCESSING_FAILED: Processing failed and was rolled back
        """
        batch_id = command.batch_id

        # Step 1: Load batch and move it to IN_PROCESS
        batch = await self.batch_repo.get_by_id(batch_id)
        if not batch:
            return Return.err(
                Error(
                    code="BATCH_NOT_FOUND",
                    message=f"BillingBatch with identifier '{batch_id}' not found",
                )
            )

        if batch.status == BatchStatus.PROCESSED:
            logger.info(f"Batch {batch_id} already processed, nothing to do")
            return Return.ok(
                BatchProcessingResultDTO(
                    batch_id=batch_id,
                    status=batch.status.value,
                    total_invoices=batch.total_invoices,
                    total_amount=batch.total_amount,
                )
            )

        receipt_book = batch.receipt_book
        issue_date = batch.issue_date
        pending_ids = (
            list(command.pending_ids) if command.pending_ids is not None else list(batch.pending_ids)
        )

        if not await self.batch_repo.mark_in_process(batch_id, datetime.utcnow()):
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="INVALID_STATE_TRANSITION",
                    message=f"Batch {batch_id} is in status '{batch.status.value}' and cannot be processed",
                )
            )
        await self.uow.commit()
        logger.info(f"Processing batch {batch_id} ({len(pending_ids)} pendings, book {receipt_book})")

        try:
            # Step 2: Receipt book row exists before the unit starts
            await self.receipt_book_repo.ensure(receipt_book)
            await self.uow.commit()

            # Serialize number allocation for this receipt book
            if await self.receipt_book_repo.lock(receipt_book) is None:
                raise BatchProcessingError(f"Receipt book '{receipt_book}' could not be locked")

            # Step 3: Re-validate, state may have changed since submission
            validation = await self.validator.execute(pending_ids, for_update=True)
            if not validation.valid:
                raise BatchProcessingError("No valid pendings to process")

            # Step 4: Allocate numbers and create invoices
            sequence = await self.allocator.next_sequence(receipt_book)
            total_amount = Decimal("0.00")
            invoice_numbers: List[str] = []
            count = len(validation.valid)

            for index, (pending, service) in enumerate(validation.valid):
                invoice = Invoice(
                    invoice_number=format_invoice_number(receipt_book, sequence),
                    cae=generate_cae(),
                    issue_date=issue_date,
                    amount=service.amount,
                    batch_id=batch_id,
                    pending_id=pending.id,
                )
                invoice = await self.invoice_repo.create(invoice)

                pending.status = PendingStatus.INVOICED
                await self.pending_repo.update(pending)

                service.status = ServiceStatus.INVOICED
                await self.service_repo.update(service)

                total_amount += service.amount
                invoice_numbers.append(invoice.invoice_number)
                sequence += 1

                await self._report_progress(round((index + 1) / count * 100))

            # Step 5: Mark batch PROCESSED and commit everything
            batch = await self.batch_repo.get_by_id(batch_id)
            batch.status = BatchStatus.PROCESSED
            batch.processing_completed_at = datetime.utcnow()
            batch.total_invoices = len(invoice_numbers)
            batch.total_amount = total_amount.quantize(CENTS, rounding=ROUND_HALF_UP)
            batch.error_message = None
            await self.batch_repo.update(batch)

            await self.uow.commit()

        except Exception as e:
            # Step 6: Roll back every write of the unit, then record the failure
            await self.uow.rollback()
            reason = str(e) or type(e).__name__
            logger.error(f"Batch {batch_id} processing failed: {reason}")
            await self._mark_error(batch_id, reason)
            return Return.err(
                Error(
                    code="BATCH_PROCESSING_FAILED",
                    message=f"Failed to process billing batch {batch_id}",
                    reason=reason,
                )
            )

        logger.info(
            f"Batch {batch_id} processed: {len(invoice_numbers)} invoices, "
            f"{invoice_numbers[0]}..{invoice_numbers[-1]}, total {batch.total_amount}"
        )

        return Return.ok(
            BatchProcessingResultDTO(
                batch_id=batch_id,
                status=BatchStatus.PROCESSED.value,
                total_invoices=len(invoice_numbers),
                total_amount=batch.total_amount,
                invoice_numbers=invoice_numbers,
                successful_pendings=validation.valid_ids,
                failed_pendings=validation.invalid,
            )
        )

    async def _report_progress(self, progress: int) -> None:
        if self.progress_reporter is None:
            return
        try:
            await self.progress_reporter(progress)
        except Exception as e:
            # Progress is informational only
            logger.warning(f"Failed to report progress {progress}%: {e}")

    async def _mark_error(self, batch_id: int, reason: str) -> None:
        try:
            batch = await self.batch_repo.get_by_id(batch_id)
            if batch is None:
                return
            batch.status = BatchStatus.ERROR
            batch.processing_completed_at = datetime.utcnow()
            batch.error_message = reason
            await self.batch_repo.update(batch)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Could not record ERROR status for batch {batch_id}: {e}")
