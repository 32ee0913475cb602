"""Data Transfer Objects for Service Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field
from src.app.use_cases.pendings.dtos import BillingPendingDTO
from src.domain.service import Service, ServiceStatus


class CreateServiceCommandDTO(BaseModel):
    """
    Command DTO for registering a service

    Used as input to CreateService use case.
    """

    service_date: date = Field(
        ...,
        description="Date the service was performed"
    )

    customer_id: int = Field(
        ...,
        gt=0,
        description="Customer identifier"
    )

    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=10,
        decimal_places=2,
        description="Service amount"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "service_date": "2024-01-15",
                "customer_id": 1,
                "amount": "1500.50"
            }
        }


class UpdateServiceCommandDTO(BaseModel):
    """Partial update; only the given fields change"""

    service_date: Optional[date] = None
    customer_id: Optional[int] = Field(default=None, gt=0)
    amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)


class ServiceDTO(BaseModel):
    """Response DTO for a service"""

    id: int
    service_date: date
    customer_id: int
    amount: Decimal
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, service: Service) -> "ServiceDTO":
        return cls(
            id=service.id,
            service_date=service.service_date,
            customer_id=service.customer_id,
            amount=service.amount,
            status=service.status.value,
            created_at=service.created_at,
            updated_at=service.updated_at,
        )


class ServiceFilterDTO(BaseModel):
    """Filters for listing services; the date range applies to service_date"""

    customer_id: Optional[int] = None
    status: Optional[ServiceStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class PaginatedServicesDTO(BaseModel):
    data: List[ServiceDTO]
    total: int
    page: int
    limit: int
    total_pages: int


class SendToBillingCommandDTO(BaseModel):
    service_ids: List[int] = Field(..., min_length=1, description="Services to send to billing")

    class Config:
        json_schema_extra = {
            "example": {
                "service_ids": [1, 2, 3]
            }
        }


class FailedServiceDTO(BaseModel):
    id: int
    reason: str


class SendToBillingResultDTO(BaseModel):
    """Per-service outcome of sending services to billing"""

    success: List[int] = Field(default_factory=list)
    failed: List[FailedServiceDTO] = Field(default_factory=list)
    pendings: List[BillingPendingDTO] = Field(default_factory=list)
