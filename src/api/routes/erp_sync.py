"""ERP Sync API Routes

Export of invoices to the accounting system (simulated by default).
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.billing_request import SyncInvoicesRequestSchema, SyncBatchRequestSchema
from src.app.services.erp_gateway import ErpGateway
from src.app.services.erp_sync_history import ErpSyncHistoryStore
from src.app.use_cases.erp_sync.dtos import (
    ErpInvoiceDataDTO,
    ErpSyncResponseDTO,
    ErpSyncHistoryFilterDTO,
    PaginatedSyncHistoryDTO,
    ConfirmSyncResponseDTO,
)
from src.app.use_cases.erp_sync.sync_invoices import SyncInvoices, SyncBatch, PreviewSync
from src.app.use_cases.erp_sync.sync_history import GetSyncHistory, GetSyncDetail, ConfirmSync
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.billing_batch_repository import SqlAlchemyBillingBatchRepository
from src.domain.erp_sync import ErpSyncStatus
from src.depends import get_session, get_erp_gateway, get_erp_history
from src.api.error import ClientError

router = APIRouter(prefix="/erp-sync", tags=["ERP Sync"])

ERP_SYNC_FAILED_RESPONSE = {
    503: {
        "description": "ERP sync rejected",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "ERP_SYNC_FAILED",
                        "message": "Batch has no invoices to sync"
                    }
                }
            }
        }
    }
}


@router.post("/invoices", response_model=ErpSyncResponseDTO)
async def sync_invoices(
    request: SyncInvoicesRequestSchema,
    session: AsyncSession = Depends(get_session),
    gateway: ErpGateway = Depends(get_erp_gateway),
    history: ErpSyncHistoryStore = Depends(get_erp_history),
):
    """
    Send invoices to the ERP.

    A failed delivery is recorded with status `ERROR` and reported in the
    response summary; the call itself succeeds.
    """
    use_case = SyncInvoices(SqlAlchemyInvoiceRepository(session), gateway, history)
    result = await use_case.execute(request.invoice_ids)

    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_404_NOT_FOUND)

    return result.value


@router.post("/batch", response_model=ErpSyncResponseDTO, responses=ERP_SYNC_FAILED_RESPONSE)
async def sync_batch(
    request: SyncBatchRequestSchema,
    session: AsyncSession = Depends(get_session),
    gateway: ErpGateway = Depends(get_erp_gateway),
    history: ErpSyncHistoryStore = Depends(get_erp_history),
):
    """Send every invoice of a batch to the ERP."""
    use_case = SyncBatch(
        batch_repo=SqlAlchemyBillingBatchRepository(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        gateway=gateway,
        history=history,
    )
    result = await use_case.execute(request.batch_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/preview", response_model=List[ErpInvoiceDataDTO])
async def preview_sync(
    request: SyncInvoicesRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """ERP records that a sync of the invoices would send. Nothing is sent or recorded."""
    result = await PreviewSync(SqlAlchemyInvoiceRepository(session)).execute(request.invoice_ids)

    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_404_NOT_FOUND)

    return result.value


@router.get("/history", response_model=PaginatedSyncHistoryDTO)
async def get_sync_history(
    sync_status: Optional[ErpSyncStatus] = Query(default=None, alias="status"),
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    history: ErpSyncHistoryStore = Depends(get_erp_history),
):
    """Recorded sync operations, most recent first."""
    query = ErpSyncHistoryFilterDTO(
        status=sync_status,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    result = await GetSyncHistory(history).execute(query)
    return result.value


@router.get("/history/{sync_id}", response_model=ErpSyncResponseDTO)
async def get_sync_detail(
    sync_id: str,
    session: AsyncSession = Depends(get_session),
    history: ErpSyncHistoryStore = Depends(get_erp_history),
):
    result = await GetSyncDetail(SqlAlchemyInvoiceRepository(session), history).execute(sync_id)

    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_404_NOT_FOUND)

    return result.value


@router.post(
    "/confirm/{sync_id}",
    response_model=ConfirmSyncResponseDTO,
    responses=ERP_SYNC_FAILED_RESPONSE,
)
async def confirm_sync(
    sync_id: str,
    history: ErpSyncHistoryStore = Depends(get_erp_history),
):
    """Acknowledge that the ERP accepted a sync. Only `SENT` syncs can be confirmed."""
    result = await ConfirmSync(history).execute(sync_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
