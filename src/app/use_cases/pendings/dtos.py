"""Data Transfer Objects for Billing Pending Use Cases

Pydantic models for query inputs and response outputs.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field
from src.app.repositories.billing_pending_repository import PendingWithService
from src.domain.billing_pending import BillingPending, PendingStatus
from src.domain.service import Service


class PendingServiceDTO(BaseModel):
    """The service a pending bills"""

    id: int
    service_date: date
    customer_id: int
    amount: Decimal
    status: str

    @classmethod
    def from_entity(cls, service: Service) -> "PendingServiceDTO":
        return cls(
            id=service.id,
            service_date=service.service_date,
            customer_id=service.customer_id,
            amount=service.amount,
            status=service.status.value,
        )


class BillingPendingDTO(BaseModel):
    """
    Response DTO for a billing pending

    service is filled when the pending was read together with its service.
    """

    id: int
    service_id: int
    status: str
    created_at: datetime
    updated_at: datetime
    service: Optional[PendingServiceDTO] = None

    class Config:
        json_schema_extra = {
            "example": {
                "id": 1,
                "service_id": 1,
                "status": "PENDING",
                "created_at": "2024-01-16T09:00:00Z",
                "updated_at": "2024-01-16T09:00:00Z",
                "service": {
                    "id": 1,
                    "service_date": "2024-01-15",
                    "customer_id": 1,
                    "amount": "1500.50",
                    "status": "SENT_TO_BILL"
                }
            }
        }

    @classmethod
    def from_entity(
        cls, pending: BillingPending, service: Optional[Service] = None
    ) -> "BillingPendingDTO":
        return cls(
            id=pending.id,
            service_id=pending.service_id,
            status=pending.status.value,
            created_at=pending.created_at,
            updated_at=pending.updated_at,
            service=PendingServiceDTO.from_entity(service) if service else None,
        )

    @classmethod
    def from_joined(cls, item: PendingWithService) -> "BillingPendingDTO":
        return cls.from_entity(item.pending, item.service)


class PendingFilterDTO(BaseModel):
    """Filters for listing pendings; customer and dates apply to the service"""

    status: Optional[PendingStatus] = None
    customer_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class PaginatedPendingsDTO(BaseModel):
    data: List[BillingPendingDTO]
    total: int
    page: int
    limit: int
    total_pages: int


class CustomerPendingSummaryDTO(BaseModel):
    customer_id: int
    count: int
    total_amount: Decimal


class PendingSummaryDTO(BaseModel):
    """Totals of the pendings still waiting to be invoiced"""

    total_pending: int
    total_amount: Decimal
    by_customer: List[CustomerPendingSummaryDTO]
