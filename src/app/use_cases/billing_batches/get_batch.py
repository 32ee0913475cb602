"""Get Billing Batch Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.billing_batch_repository import BillingBatchRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.use_cases.invoices.dtos import InvoiceDTO
from .dtos import BillingBatchDTO


class GetBillingBatch:
    """Use Case: Batch detail with its invoices"""

    def __init__(self, batch_repo: BillingBatchRepository, invoice_repo: InvoiceRepository):
        self.batch_repo = batch_repo
        self.invoice_repo = invoice_repo

    async def execute(self, batch_id: int) -> Result[BillingBatchDTO]:
        batch = await self.batch_repo.get_by_id(batch_id)
        if not batch:
            return Return.err(
                Error(
                    code="BATCH_NOT_FOUND",
                    message=f"BillingBatch with identifier '{batch_id}' not found",
                )
            )

        invoices = await self.invoice_repo.list_by_batch(batch_id)
        return Return.ok(
            BillingBatchDTO.from_entity(batch, [InvoiceDTO.from_detail(detail) for detail in invoices])
        )
