from .base import BaseModel
from .service import Service, ServiceStatus
from .billing_pending import BillingPending, PendingStatus
from .billing_batch import BillingBatch, BatchStatus
from .invoice import Invoice
from .receipt_book import ReceiptBook
from .batch_job import BatchJob, JobState
from .erp_sync import ErpSyncRecord, ErpSyncStatus

__all__ = [
    "BaseModel",
    "Service",
    "ServiceStatus",
    "BillingPending",
    "PendingStatus",
    "BillingBatch",
    "BatchStatus",
    "Invoice",
    "ReceiptBook",
    "BatchJob",
    "JobState",
    "ErpSyncRecord",
    "ErpSyncStatus",
]
