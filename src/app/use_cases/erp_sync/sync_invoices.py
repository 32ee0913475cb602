"""Sync Invoices Use Cases

Sends invoices to the ERP and records the attempt in the sync history.
"""

import logging
from typing import List
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.billing_batch_repository import BillingBatchRepository
from src.app.services.erp_gateway import ErpGateway
from src.app.services.erp_sync_history import ErpSyncHistoryStore
from src.domain.erp_sync import ErpSyncStatus
from .dtos import ErpSyncResponseDTO, ErpSyncSummaryDTO, ErpInvoiceDataDTO
from .erp_format import to_erp_record, total_of

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Data successfully sent to ERP system"


def invoices_not_found(invoice_ids: List[int]) -> Error:
    return Error(
        code="INVOICE_NOT_FOUND",
        message=f"Invoices with identifier '{', '.join(str(i) for i in invoice_ids)}' not found",
    )


class PreviewSync:
    """Use Case: ERP records that a sync of the invoices would send"""

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self, invoice_ids: List[int]) -> Result[List[ErpInvoiceDataDTO]]:
        details = await self.invoice_repo.get_details_by_ids(invoice_ids)
        if not details:
            return Return.err(invoices_not_found(invoice_ids))
        return Return.ok([to_erp_record(detail) for detail in details])


class SyncInvoices:
    """
    Use Case: Send invoices to the ERP

    Business Rules:
    1. At least one of the requested invoices must exist
    2. Every attempt is recorded: SENT on delivery, ERROR otherwise
    3. A failed delivery is still a successful call; the outcome is in the
       response status and summary

    Flow:
    1. Load invoices with service and receipt book
    2. Convert to ERP records
    3. Deliver through the gateway
    4. Append to history
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        gateway: ErpGateway,
        history: ErpSyncHistoryStore,
    ):
        self.invoice_repo = invoice_repo
        self.gateway = gateway
        self.history = history

    async def execute(self, invoice_ids: List[int]) -> Result[ErpSyncResponseDTO]:
        logger.info(f"Starting ERP sync for invoices: {invoice_ids}")

        # Step 1: Load invoices
        details = await self.invoice_repo.get_details_by_ids(invoice_ids)
        if not details:
            return Return.err(invoices_not_found(invoice_ids))

        # Step 2: Convert
        records = [to_erp_record(detail) for detail in details]
        total_amount = total_of(records)

        # Step 3: Deliver
        delivery = await self.gateway.send([record.model_dump(mode="json") for record in records])

        # Step 4: Record
        entry = self.history.append(
            status=ErpSyncStatus.SENT if delivery.success else ErpSyncStatus.ERROR,
            invoice_ids=[detail.invoice.id for detail in details],
            total_amount=total_amount,
            error_message=None if delivery.success else delivery.error,
        )

        if delivery.success:
            logger.info(f"ERP sync completed: SUCCESS - {entry.sync_id}")
        else:
            logger.warning(f"ERP sync completed: ERROR - {entry.sync_id}: {delivery.error}")

        return Return.ok(
            ErpSyncResponseDTO(
                sync_id=entry.sync_id,
                status=entry.status,
                timestamp=entry.timestamp,
                data=records,
                summary=ErpSyncSummaryDTO(
                    total_invoices=len(records),
                    total_amount=total_amount,
                    success=delivery.success,
                    message=SUCCESS_MESSAGE if delivery.success else f"Sync failed: {delivery.error}",
                ),
            )
        )


class SyncBatch:
    """Use Case: Send every invoice of a batch to the ERP"""

    def __init__(
        self,
        batch_repo: BillingBatchRepository,
        invoice_repo: InvoiceRepository,
        gateway: ErpGateway,
        history: ErpSyncHistoryStore,
    ):
        self.batch_repo = batch_repo
        self.invoice_repo = invoice_repo
        self.sync_invoices = SyncInvoices(invoice_repo, gateway, history)

    async def execute(self, batch_id: int) -> Result[ErpSyncResponseDTO]:
        batch = await self.batch_repo.get_by_id(batch_id)
        if not batch:
            return Return.err(
                Error(
                    code="BATCH_NOT_FOUND",
                    message=f"BillingBatch with identifier '{batch_id}' not found",
                )
            )

        invoices = await self.invoice_repo.list_by_batch(batch_id)
        if not invoices:
            return Return.err(
                Error(
                    code="ERP_SYNC_FAILED",
                    message="Batch has no invoices to sync",
                )
            )

        return await self.sync_invoices.execute([detail.invoice.id for detail in invoices])
