"""Service API Routes

FastAPI routes for registering services and sending them to billing.
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.billing_request import (
    CreateServiceRequestSchema,
    UpdateServiceRequestSchema,
    SendToBillingRequestSchema,
)
from src.app.use_cases.services.dtos import (
    CreateServiceCommandDTO,
    UpdateServiceCommandDTO,
    SendToBillingCommandDTO,
    ServiceDTO,
    ServiceFilterDTO,
    PaginatedServicesDTO,
    SendToBillingResultDTO,
)
from src.app.use_cases.services.create_service import CreateService
from src.app.use_cases.services.get_service import GetService
from src.app.use_cases.services.list_services import (
    ListServices,
    ListServicesByStatus,
    ListServicesByCustomer,
)
from src.app.use_cases.services.update_service import UpdateService, DeleteService
from src.app.use_cases.services.send_to_billing import SendServicesToBilling
from src.adapter.repositories.service_repository import SqlAlchemyServiceRepository
from src.adapter.repositories.billing_pending_repository import SqlAlchemyBillingPendingRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.service import ServiceStatus
from src.depends import get_session
from src.api.error import ClientError

router = APIRouter(prefix="/services", tags=["Services"])

SERVICE_NOT_EDITABLE_RESPONSE = {
    400: {
        "description": "Service is no longer editable",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "BUSINESS_RULE_VIOLATION",
                        "message": "Cannot update service in status 'SENT_TO_BILL'. "
                                   "Only services with status 'CREATED' can be updated."
                    }
                }
            }
        }
    }
}


@router.post("", response_model=ServiceDTO, status_code=status.HTTP_201_CREATED)
async def create_service(
    request: CreateServiceRequestSchema,
    session: AsyncSession = Depends(get_session)
):
    """Register a service rendered to a customer. New services start in `CREATED`."""
    command = CreateServiceCommandDTO(
        service_date=request.service_date,
        customer_id=request.customer_id,
        amount=request.amount,
    )

    use_case = CreateService(SqlAlchemyUnitOfWork(session), SqlAlchemyServiceRepository(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("", response_model=PaginatedServicesDTO)
async def list_services(
    customer_id: Optional[int] = None,
    service_status: Optional[ServiceStatus] = Query(default=None, alias="status"),
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    session: AsyncSession = Depends(get_session)
):
    """List services, newest first. The date range applies to the service date."""
    query = ServiceFilterDTO(
        customer_id=customer_id,
        status=service_status,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    result = await ListServices(SqlAlchemyServiceRepository(session)).execute(query)
    return result.value


@router.post("/send-to-billing", response_model=SendToBillingResultDTO)
async def send_services_to_billing(
    request: SendToBillingRequestSchema,
    session: AsyncSession = Depends(get_session)
):
    """
    Create a billing pending for each eligible service.

    Services that are missing, not `CREATED`, or already pending are reported
    in `failed` with a reason; the others move to `SENT_TO_BILL`.
    """
    use_case = SendServicesToBilling(
        uow=SqlAlchemyUnitOfWork(session),
        service_repo=SqlAlchemyServiceRepository(session),
        pending_repo=SqlAlchemyBillingPendingRepository(session),
    )
    result = await use_case.execute(SendToBillingCommandDTO(service_ids=request.service_ids))

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/by-status/{service_status}", response_model=List[ServiceDTO])
async def list_services_by_status(
    service_status: ServiceStatus,
    session: AsyncSession = Depends(get_session)
):
    """Services in a status, oldest first."""
    result = await ListServicesByStatus(SqlAlchemyServiceRepository(session)).execute(service_status)
    return result.value


@router.get("/by-customer/{customer_id}", response_model=List[ServiceDTO])
async def list_services_by_customer(
    customer_id: int,
    session: AsyncSession = Depends(get_session)
):
    """Services of a customer, most recent service date first."""
    result = await ListServicesByCustomer(SqlAlchemyServiceRepository(session)).execute(customer_id)
    return result.value


@router.get("/{service_id}", response_model=ServiceDTO)
async def get_service(
    service_id: int,
    session: AsyncSession = Depends(get_session)
):
    result = await GetService(SqlAlchemyServiceRepository(session)).execute(service_id)

    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_404_NOT_FOUND)

    return result.value


@router.patch("/{service_id}", response_model=ServiceDTO, responses=SERVICE_NOT_EDITABLE_RESPONSE)
async def update_service(
    service_id: int,
    request: UpdateServiceRequestSchema,
    session: AsyncSession = Depends(get_session)
):
    """Edit a service. Only `CREATED` services can be updated."""
    command = UpdateServiceCommandDTO(**request.model_dump(exclude_unset=True))

    use_case = UpdateService(SqlAlchemyUnitOfWork(session), SqlAlchemyServiceRepository(session))
    result = await use_case.execute(service_id, command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.delete(
    "/{service_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=SERVICE_NOT_EDITABLE_RESPONSE,
)
async def delete_service(
    service_id: int,
    session: AsyncSession = Depends(get_session)
):
    """Delete a service. Only `CREATED` services can be deleted."""
    use_case = DeleteService(SqlAlchemyUnitOfWork(session), SqlAlchemyServiceRepository(session))
    result = await use_case.execute(service_id)

    if result.is_err():
        raise ClientError(result.error)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
