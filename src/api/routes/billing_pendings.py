"""Billing Pending API Routes"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.use_cases.pendings.dtos import (
    BillingPendingDTO,
    PendingFilterDTO,
    PaginatedPendingsDTO,
    PendingSummaryDTO,
)
from src.app.use_cases.pendings.list_pendings import ListBillingPendings, ListAvailablePendings
from src.app.use_cases.pendings.get_pending import GetBillingPending
from src.app.use_cases.pendings.cancel_pending import CancelBillingPending
from src.app.use_cases.pendings.get_summary import GetPendingSummary
from src.adapter.repositories.billing_pending_repository import SqlAlchemyBillingPendingRepository
from src.adapter.repositories.service_repository import SqlAlchemyServiceRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.billing_pending import PendingStatus
from src.depends import get_session
from src.api.error import ClientError

router = APIRouter(prefix="/billing-pendings", tags=["Billing Pendings"])


@router.get("", response_model=PaginatedPendingsDTO)
async def list_billing_pendings(
    pending_status: Optional[PendingStatus] = Query(default=None, alias="status"),
    customer_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    session: AsyncSession = Depends(get_session)
):
    """
    List pendings with their services, newest first.

    `customer_id` and the date range filter on the service.
    """
    query = PendingFilterDTO(
        status=pending_status,
        customer_id=customer_id,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    result = await ListBillingPendings(SqlAlchemyBillingPendingRepository(session)).execute(query)
    return result.value


@router.get("/summary", response_model=PendingSummaryDTO)
async def get_pending_summary(session: AsyncSession = Depends(get_session)):
    """Count and amount of the pendings waiting to be invoiced, per customer."""
    result = await GetPendingSummary(SqlAlchemyBillingPendingRepository(session)).execute()
    return result.value


@router.get("/available", response_model=List[BillingPendingDTO])
async def list_available_pendings(session: AsyncSession = Depends(get_session)):
    """Pendings that can be put in a batch, oldest first."""
    result = await ListAvailablePendings(SqlAlchemyBillingPendingRepository(session)).execute()
    return result.value


@router.get("/{pending_id}", response_model=BillingPendingDTO)
async def get_billing_pending(
    pending_id: int,
    session: AsyncSession = Depends(get_session)
):
    result = await GetBillingPending(SqlAlchemyBillingPendingRepository(session)).execute(pending_id)

    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_404_NOT_FOUND)

    return result.value


@router.delete(
    "/{pending_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        409: {
            "description": "Pending already invoiced",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "PENDING_ALREADY_INVOICED",
                            "message": "Billing pending with ID 1 has already been invoiced"
                        }
                    }
                }
            }
        }
    }
)
async def cancel_billing_pending(
    pending_id: int,
    session: AsyncSession = Depends(get_session)
):
    """Cancel a pending; its service goes back to `CREATED`."""
    use_case = CancelBillingPending(
        uow=SqlAlchemyUnitOfWork(session),
        pending_repo=SqlAlchemyBillingPendingRepository(session),
        service_repo=SqlAlchemyServiceRepository(session),
    )
    result = await use_case.execute(pending_id)

    if result.is_err():
        raise ClientError(result.error)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
