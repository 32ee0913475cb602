"""Sync History Use Cases"""

import logging
import math
from datetime import datetime, time
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.erp_sync_history import ErpSyncHistoryStore
from src.domain.erp_sync import ErpSyncStatus
from .dtos import (
    ErpSyncHistoryFilterDTO,
    ErpSyncHistoryItemDTO,
    PaginatedSyncHistoryDTO,
    ErpSyncResponseDTO,
    ErpSyncSummaryDTO,
    ConfirmSyncResponseDTO,
)
from .erp_format import to_erp_record
from .sync_invoices import SUCCESS_MESSAGE

logger = logging.getLogger(__name__)


def sync_not_found(sync_id: str) -> Error:
    return Error(
        code="SYNC_NOT_FOUND",
        message=f"SyncHistory with identifier '{sync_id}' not found",
    )


class GetSyncHistory:
    """Use Case: Paginated sync history, most recent first"""

    def __init__(self, history: ErpSyncHistoryStore):
        self.history = history

    async def execute(self, query: ErpSyncHistoryFilterDTO) -> Result[PaginatedSyncHistoryDTO]:
        records, total = self.history.list(
            status=query.status,
            date_from=datetime.combine(query.date_from, time.min) if query.date_from else None,
            date_to=datetime.combine(query.date_to, time.max) if query.date_to else None,
            limit=query.limit,
            offset=(query.page - 1) * query.limit,
        )

        return Return.ok(
            PaginatedSyncHistoryDTO(
                data=[ErpSyncHistoryItemDTO.from_record(record) for record in records],
                total=total,
                page=query.page,
                limit=query.limit,
                total_pages=math.ceil(total / query.limit),
            )
        )


class GetSyncDetail:
    """
    Use Case: A recorded sync with its invoices in ERP format

    Invoices are re-read, so the data reflects their current state.
    """

    def __init__(self, invoice_repo: InvoiceRepository, history: ErpSyncHistoryStore):
        self.invoice_repo = invoice_repo
        self.history = history

    async def execute(self, sync_id: str) -> Result[ErpSyncResponseDTO]:
        record = self.history.get(sync_id)
        if not record:
            return Return.err(sync_not_found(sync_id))

        details = await self.invoice_repo.get_details_by_ids(record.invoice_ids)
        failed = record.status == ErpSyncStatus.ERROR

        return Return.ok(
            ErpSyncResponseDTO(
                sync_id=record.sync_id,
                status=record.status,
                timestamp=record.timestamp,
                data=[to_erp_record(detail) for detail in details],
                summary=ErpSyncSummaryDTO(
                    total_invoices=len(details),
                    total_amount=record.total_amount,
                    success=not failed,
                    message=(record.error_message or "Sync failed") if failed else SUCCESS_MESSAGE,
                ),
            )
        )


class ConfirmSync:
    """
    Use Case: Acknowledge that the ERP accepted a sync

    Business Rules:
    1. Only SENT syncs can be confirmed
    """

    def __init__(self, history: ErpSyncHistoryStore):
        self.history = history

    async def execute(self, sync_id: str) -> Result[ConfirmSyncResponseDTO]:
        record = self.history.get(sync_id)
        if not record:
            return Return.err(sync_not_found(sync_id))

        if record.status != ErpSyncStatus.SENT:
            return Return.err(
                Error(
                    code="ERP_SYNC_FAILED",
                    message=f"Cannot confirm sync with status '{record.status.value}'. "
                            f"Only 'SENT' syncs can be confirmed.",
                )
            )

        self.history.set_status(sync_id, ErpSyncStatus.CONFIRMED)
        logger.info(f"Sync {sync_id} confirmed")
        return Return.ok(ConfirmSyncResponseDTO(sync_id=sync_id, status=ErpSyncStatus.CONFIRMED))
