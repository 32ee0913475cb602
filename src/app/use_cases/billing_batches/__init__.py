"""Billing batch use cases"""
from .validate_pendings import ValidatePendings, PendingValidation
from .invoice_numbers import InvoiceNumberAllocator, format_invoice_number, generate_cae
from .process_batch import ProcessBillingBatch
from .run_batch_job import RunBatchJob
from .submit_batch import SubmitBillingBatch
from .submit_batch_sync import SubmitBillingBatchSync
from .get_batch_status import GetBatchStatus
from .retry_batch import RetryBillingBatch
from .get_queue_stats import GetQueueStats
from .list_receipt_books import ListReceiptBooks
from .get_next_invoice_number import GetNextInvoiceNumber
from .list_batches import ListBillingBatches
from .get_batch import GetBillingBatch
from .dtos import (
    CreateBillingBatchCommandDTO,
    FailedPendingDTO,
    BillingBatchDTO,
    BatchSummaryDTO,
    QueueInfoDTO,
    BatchCreationResultDTO,
    ProcessBatchCommandDTO,
    BatchProcessingResultDTO,
    JobInfoDTO,
    BatchStatusDTO,
    RetryBatchResponseDTO,
    QueueStatsDTO,
    NextInvoiceNumberDTO,
    BatchFilterDTO,
    PaginatedBatchesDTO,
    WorkerRunResultDTO,
)

__all__ = [
    "ValidatePendings",
    "PendingValidation",
    "InvoiceNumberAllocator",
    "format_invoice_number",
    "generate_cae",
    "ProcessBillingBatch",
    "RunBatchJob",
    "SubmitBillingBatch",
    "SubmitBillingBatchSync",
    "GetBatchStatus",
    "RetryBillingBatch",
    "GetQueueStats",
    "ListReceiptBooks",
    "GetNextInvoiceNumber",
    "ListBillingBatches",
    "GetBillingBatch",
    "CreateBillingBatchCommandDTO",
    "FailedPendingDTO",
    "BillingBatchDTO",
    "BatchSummaryDTO",
    "QueueInfoDTO",
    "BatchCreationResultDTO",
    "ProcessBatchCommandDTO",
    "BatchProcessingResultDTO",
    "JobInfoDTO",
    "BatchStatusDTO",
    "RetryBatchResponseDTO",
    "QueueStatsDTO",
    "NextInvoiceNumberDTO",
    "BatchFilterDTO",
    "PaginatedBatchesDTO",
    "WorkerRunResultDTO",
]
