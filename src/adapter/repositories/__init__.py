from .service_repository import SqlAlchemyServiceRepository
from .billing_pending_repository import SqlAlchemyBillingPendingRepository
from .billing_batch_repository import SqlAlchemyBillingBatchRepository
from .invoice_repository import SqlAlchemyInvoiceRepository
from .receipt_book_repository import SqlAlchemyReceiptBookRepository
from .batch_job_repository import SqlAlchemyBatchJobRepository

__all__ = [
    "SqlAlchemyServiceRepository",
    "SqlAlchemyBillingPendingRepository",
    "SqlAlchemyBillingBatchRepository",
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyReceiptBookRepository",
    "SqlAlchemyBatchJobRepository",
]
