"""Service Domain Entity

A service rendered to a customer that will eventually be invoiced.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, Date, Integer
from src.domain.base import BaseModel, IdType


class ServiceStatus(str, Enum):
    """Service lifecycle states (forward only)"""
    CREATED = "CREATED"
    SENT_TO_BILL = "SENT_TO_BILL"
    INVOICED = "INVOICED"


class Service(BaseModel, table=True):
    """
    Service - Work rendered to a customer

    Domain Rules:
    - amount is a positive currency value (2 decimals)
    - Status moves forward only: CREATED -> SENT_TO_BILL -> INVOICED
    - Only CREATED services can be edited or deleted
    - A service has at most one billing pending
    """

    __tablename__ = "services"
    __table_args__ = (
        Index('ix_services_customer_id', 'customer_id'),
        Index('ix_services_status', 'status'),
    )

    id: int = Field(
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique service identifier (auto-increment)"
    )

    service_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Date the service was performed"
    )

    customer_id: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Customer identifier"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Service amount (precision: 10,2)"
    )

    status: ServiceStatus = Field(
        default=ServiceStatus.CREATED,
        description="Service status (CREATED, SENT_TO_BILL, INVOICED)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    def is_editable(self) -> bool:
        return self.status == ServiceStatus.CREATED

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "service_date": "2024-01-15",
                "customer_id": 1,
                "amount": "1500.50",
                "status": "CREATED",
                "created_at": "2024-01-15T10:00:00Z",
                "updated_at": "2024-01-15T10:00:00Z"
            }
        }
