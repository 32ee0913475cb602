from .service_repository import ServiceRepository
from .billing_pending_repository import BillingPendingRepository, PendingWithService
from .billing_batch_repository import BillingBatchRepository
from .invoice_repository import InvoiceRepository, InvoiceDetail
from .receipt_book_repository import ReceiptBookRepository
from .batch_job_repository import BatchJobRepository

__all__ = [
    "ServiceRepository",
    "BillingPendingRepository",
    "PendingWithService",
    "BillingBatchRepository",
    "InvoiceRepository",
    "InvoiceDetail",
    "ReceiptBookRepository",
    "BatchJobRepository",
]
