"""Billing Batch API Routes

FastAPI routes for submitting, tracking and retrying billing batches.
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.billing_request import CreateBillingBatchRequestSchema
from src.app.use_cases.billing_batches.dtos import (
    CreateBillingBatchCommandDTO,
    BatchCreationResultDTO,
    BatchStatusDTO,
    BillingBatchDTO,
    BatchFilterDTO,
    PaginatedBatchesDTO,
    QueueStatsDTO,
    NextInvoiceNumberDTO,
    RetryBatchResponseDTO,
)
from src.app.use_cases.billing_batches.submit_batch import SubmitBillingBatch
from src.app.use_cases.billing_batches.submit_batch_sync import SubmitBillingBatchSync
from src.app.use_cases.billing_batches.get_batch_status import GetBatchStatus
from src.app.use_cases.billing_batches.retry_batch import RetryBillingBatch
from src.app.use_cases.billing_batches.get_queue_stats import GetQueueStats
from src.app.use_cases.billing_batches.list_receipt_books import ListReceiptBooks
from src.app.use_cases.billing_batches.get_next_invoice_number import GetNextInvoiceNumber
from src.app.use_cases.billing_batches.list_batches import ListBillingBatches
from src.app.use_cases.billing_batches.get_batch import GetBillingBatch
from src.adapter.repositories.billing_batch_repository import SqlAlchemyBillingBatchRepository
from src.adapter.repositories.billing_pending_repository import SqlAlchemyBillingPendingRepository
from src.adapter.repositories.service_repository import SqlAlchemyServiceRepository
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.receipt_book_repository import SqlAlchemyReceiptBookRepository
from src.adapter.repositories.batch_job_repository import SqlAlchemyBatchJobRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.billing_batch import BatchStatus
from src.depends import get_session
from src.api.error import ClientError

router = APIRouter(prefix="/billing-batches", tags=["Billing Batches"])

BATCH_NOT_FOUND_RESPONSE = {
    404: {
        "description": "Batch not found",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "BATCH_NOT_FOUND",
                        "message": "BillingBatch with identifier '99' not found"
                    }
                }
            }
        }
    }
}


@router.post(
    "",
    response_model=BatchCreationResultDTO,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        400: {
            "description": "Empty batch",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "EMPTY_BATCH",
                            "message": "Cannot create a billing batch without any pending items"
                        }
                    }
                }
            }
        }
    }
)
async def submit_billing_batch(
    request: CreateBillingBatchRequestSchema,
    session: AsyncSession = Depends(get_session)
):
    """
    Submit a billing batch for background processing.

    Pendings are validated immediately; invalid ones are reported in
    `summary.failed_pendings` and left out of the job. The batch is created
    in `PENDING_PROCESSING` and processed by the billing batch worker.

    **Returns:**
    - 202: Batch queued (poll `GET /billing-batches/{id}/status`)
    - 400: No pending ids, or none of them can be invoiced
    """
    uow = SqlAlchemyUnitOfWork(session)

    command = CreateBillingBatchCommandDTO(
        issue_date=request.issue_date,
        receipt_book=request.receipt_book,
        pending_ids=request.pending_ids,
    )

    use_case = SubmitBillingBatch(
        uow=uow,
        batch_repo=SqlAlchemyBillingBatchRepository(session),
        pending_repo=SqlAlchemyBillingPendingRepository(session),
        receipt_book_repo=SqlAlchemyReceiptBookRepository(session),
        job_repo=SqlAlchemyBatchJobRepository(session),
        attempts=ApplicationConfig.BATCH_JOB_ATTEMPTS,
        backoff_delay_ms=ApplicationConfig.BATCH_JOB_BACKOFF_MS,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/sync",
    response_model=BatchCreationResultDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        500: {
            "description": "Processing failed, batch left in ERROR",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "BATCH_PROCESSING_FAILED",
                            "message": "Failed to process billing batch 1",
                            "reason": "No valid pendings to process"
                        }
                    }
                }
            }
        }
    }
)
async def submit_billing_batch_sync(
    request: CreateBillingBatchRequestSchema,
    session: AsyncSession = Depends(get_session)
):
    """
    Submit and process a billing batch in the same request.

    **Returns:**
    - 201: Batch processed, with its invoices
    - 400: No pending ids, or none of them can be invoiced
    - 500: Processing failed (batch is left in `ERROR` and can be retried)
    """
    uow = SqlAlchemyUnitOfWork(session)

    command = CreateBillingBatchCommandDTO(
        issue_date=request.issue_date,
        receipt_book=request.receipt_book,
        pending_ids=request.pending_ids,
    )

    use_case = SubmitBillingBatchSync(
        uow=uow,
        batch_repo=SqlAlchemyBillingBatchRepository(session),
        pending_repo=SqlAlchemyBillingPendingRepository(session),
        service_repo=SqlAlchemyServiceRepository(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        receipt_book_repo=SqlAlchemyReceiptBookRepository(session),
        job_repo=SqlAlchemyBatchJobRepository(session),
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/queue/stats", response_model=QueueStatsDTO)
async def get_queue_stats(session: AsyncSession = Depends(get_session)):
    """Number of batch jobs per queue state."""
    result = await GetQueueStats(SqlAlchemyBatchJobRepository(session)).execute()
    return result.value


@router.get("/receipt-books", response_model=List[str])
async def list_receipt_books(session: AsyncSession = Depends(get_session)):
    """Receipt books used by any batch, in ascending order."""
    result = await ListReceiptBooks(SqlAlchemyBillingBatchRepository(session)).execute()
    return result.value


@router.get(
    "/next-invoice-number/{receipt_book}",
    response_model=NextInvoiceNumberDTO,
)
async def get_next_invoice_number(
    receipt_book: str,
    session: AsyncSession = Depends(get_session)
):
    """
    Preview the next invoice number of a receipt book.

    Nothing is reserved: the same number is returned until an invoice is
    issued on the book.
    """
    use_case = GetNextInvoiceNumber(SqlAlchemyInvoiceRepository(session))
    result = await use_case.execute(receipt_book)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("", response_model=PaginatedBatchesDTO)
async def list_billing_batches(
    batch_status: Optional[BatchStatus] = Query(default=None, alias="status"),
    receipt_book: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    session: AsyncSession = Depends(get_session)
):
    """List batches, newest first. The date range applies to the issue date."""
    query = BatchFilterDTO(
        status=batch_status,
        receipt_book=receipt_book,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    result = await ListBillingBatches(SqlAlchemyBillingBatchRepository(session)).execute(query)
    return result.value


@router.get("/{batch_id}", response_model=BillingBatchDTO, responses=BATCH_NOT_FOUND_RESPONSE)
async def get_billing_batch(
    batch_id: int,
    session: AsyncSession = Depends(get_session)
):
    """Batch detail with its invoices."""
    use_case = GetBillingBatch(
        SqlAlchemyBillingBatchRepository(session),
        SqlAlchemyInvoiceRepository(session),
    )
    result = await use_case.execute(batch_id)

    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_404_NOT_FOUND)

    return result.value


@router.get("/{batch_id}/status", response_model=BatchStatusDTO, responses=BATCH_NOT_FOUND_RESPONSE)
async def get_batch_status(
    batch_id: int,
    session: AsyncSession = Depends(get_session)
):
    """
    Processing status of a batch.

    `job_info` describes the most recent job of the batch (the retry job
    after a retry) and is null when the batch never had a job.
    """
    use_case = GetBatchStatus(
        batch_repo=SqlAlchemyBillingBatchRepository(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        job_repo=SqlAlchemyBatchJobRepository(session),
    )
    result = await use_case.execute(batch_id)

    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_404_NOT_FOUND)

    return result.value


@router.post(
    "/{batch_id}/retry",
    response_model=RetryBatchResponseDTO,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        **BATCH_NOT_FOUND_RESPONSE,
        400: {
            "description": "Batch is not in ERROR",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVALID_STATE_TRANSITION",
                            "message": "Cannot retry batch in status 'PROCESSED'. "
                                       "Only ERROR batches can be retried."
                        }
                    }
                }
            }
        }
    }
)
async def retry_billing_batch(
    batch_id: int,
    session: AsyncSession = Depends(get_session)
):
    """
    Queue a failed batch again.

    The batch goes back to `PENDING_PROCESSING` and its originally requested
    pendings are re-validated when the retry job runs.
    """
    use_case = RetryBillingBatch(
        uow=SqlAlchemyUnitOfWork(session),
        batch_repo=SqlAlchemyBillingBatchRepository(session),
        job_repo=SqlAlchemyBatchJobRepository(session),
        attempts=ApplicationConfig.BATCH_JOB_ATTEMPTS,
        backoff_delay_ms=ApplicationConfig.BATCH_JOB_BACKOFF_MS,
    )
    result = await use_case.execute(batch_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
