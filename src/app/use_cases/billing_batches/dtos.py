"""Data Transfer Objects for Billing Batch Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field
from src.app.use_cases.invoices.dtos import InvoiceDTO
from src.domain.billing_batch import BillingBatch, BatchStatus


class CreateBillingBatchCommandDTO(BaseModel):
    """
    Command DTO for submitting a billing batch

    Used as input to SubmitBillingBatch and SubmitBillingBatchSync.
    """

    issue_date: date = Field(
        ...,
        description="Issue date of the invoices"
    )

    receipt_book: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Receipt book (invoice number prefix)"
    )

    pending_ids: List[int] = Field(
        default_factory=list,
        description="Billing pending IDs to invoice"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "issue_date": "2024-01-31",
                "receipt_book": "A-0001",
                "pending_ids": [1, 2, 3]
            }
        }


class FailedPendingDTO(BaseModel):
    """A requested pending that was rejected, with the reason"""

    id: int
    reason: str


class BillingBatchDTO(BaseModel):
    """
    Response DTO for a billing batch

    invoices is only filled by detail views.
    """

    id: int
    issue_date: date
    receipt_book: str
    status: str
    error_message: Optional[str] = None
    pending_ids: List[int]
    processing_started_at: Optional[datetime] = None
    processing_completed_at: Optional[datetime] = None
    total_invoices: int
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime
    invoices: List[InvoiceDTO] = Field(default_factory=list)

    @classmethod
    def from_entity(
        cls, batch: BillingBatch, invoices: Optional[List[InvoiceDTO]] = None
    ) -> "BillingBatchDTO":
        return cls(
            id=batch.id,
            issue_date=batch.issue_date,
            receipt_book=batch.receipt_book,
            status=batch.status.value,
            error_message=batch.error_message,
            pending_ids=list(batch.pending_ids or []),
            processing_started_at=batch.processing_started_at,
            processing_completed_at=batch.processing_completed_at,
            total_invoices=batch.total_invoices,
            total_amount=batch.total_amount,
            created_at=batch.created_at,
            updated_at=batch.updated_at,
            invoices=invoices or [],
        )


class BatchSummaryDTO(BaseModel):
    """Outcome of a submission"""

    total_invoices: int = 0
    total_amount: Decimal = Decimal("0.00")
    successful_pendings: List[int] = Field(default_factory=list)
    failed_pendings: List[FailedPendingDTO] = Field(default_factory=list)


class QueueInfoDTO(BaseModel):
    """Handle of the queued job returned by asynchronous submission"""

    job_id: str
    status: str
    message: str


class BatchCreationResultDTO(BaseModel):
    """
    Response DTO for batch submission

    For queued submissions the summary is empty until the worker finishes;
    callers poll GET /billing-batches/{id}/status.
    """

    batch: BillingBatchDTO
    summary: BatchSummaryDTO
    queue_info: Optional[QueueInfoDTO] = None

    class Config:
        json_schema_extra = {
            "example": {
                "batch": {
                    "id": 1,
                    "issue_date": "2024-01-31",
                    "receipt_book": "A-0001",
                    "status": "PENDING_PROCESSING",
                    "pending_ids": [1, 2, 3],
                    "total_invoices": 0,
                    "total_amount": "0.00",
                    "invoices": []
                },
                "summary": {
                    "total_invoices": 0,
                    "total_amount": "0.00",
                    "successful_pendings": [],
                    "failed_pendings": [{"id": 2, "reason": "Pending is already in status 'INVOICED'"}]
                },
                "queue_info": {
                    "job_id": "batch-1",
                    "status": "queued",
                    "message": "Batch 1 has been queued for processing. "
                               "Check status at GET /billing-batches/1/status"
                }
            }
        }


class ProcessBatchCommandDTO(BaseModel):
    """
    Command DTO for processing a batch

    pending_ids defaults to the batch's originally requested ids.
    """

    batch_id: int
    pending_ids: Optional[List[int]] = None


class BatchProcessingResultDTO(BaseModel):
    """Outcome of one processing attempt"""

    batch_id: int
    status: str
    total_invoices: int
    total_amount: Decimal
    invoice_numbers: List[str] = Field(default_factory=list)
    successful_pendings: List[int] = Field(default_factory=list)
    failed_pendings: List[FailedPendingDTO] = Field(default_factory=list)


class JobInfoDTO(BaseModel):
    """Queue view of a batch job"""

    job_id: str
    status: str
    progress: int
    attempts_made: int
    failed_reason: Optional[str] = None


class BatchStatusDTO(BaseModel):
    """Response DTO for batch status polling"""

    batch: BillingBatchDTO
    job_info: Optional[JobInfoDTO] = None


class RetryBatchResponseDTO(BaseModel):
    message: str
    job_id: str


class QueueStatsDTO(BaseModel):
    """Number of jobs per queue state"""

    waiting: int = 0
    active: int = 0
    completed: int = 0
    failed: int = 0
    delayed: int = 0


class NextInvoiceNumberDTO(BaseModel):
    receipt_book: str
    next_invoice_number: str


class BatchFilterDTO(BaseModel):
    """Filters for listing batches"""

    status: Optional[BatchStatus] = None
    receipt_book: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class PaginatedBatchesDTO(BaseModel):
    data: List[BillingBatchDTO]
    total: int
    page: int
    limit: int
    total_pages: int


class WorkerRunResultDTO(BaseModel):
    """Summary of one worker polling cycle"""

    claimed: int = 0
    completed: int = 0
    failed: int = 0
    rescheduled: int = 0
    execution_time_ms: int = 0
