"""Billing Pending Domain Entity

Marks a service as ready to be included in a billing batch.
"""

from datetime import datetime
from enum import Enum
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey
from src.domain.base import BaseModel, IdType


class PendingStatus(str, Enum):
    """Billing pending states"""
    PENDING = "PENDING"
    INVOICED = "INVOICED"


class BillingPending(BaseModel, table=True):
    """
    BillingPending - A service waiting to be invoiced

    Domain Rules:
    - Exactly one owning service; service_id is unique
    - Can only be cancelled (deleted) while PENDING
    - Moves to INVOICED only through batch processing, never back
    """

    __tablename__ = "billing_pendings"
    __table_args__ = (
        Index('ix_billing_pendings_status', 'status'),
    )

    id: int = Field(
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique pending identifier (auto-increment)"
    )

    service_id: int = Field(
        sa_column=Column(
            IdType,
            ForeignKey("services.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        description="Foreign key to Service (one pending per service)"
    )

    status: PendingStatus = Field(
        default=PendingStatus.PENDING,
        description="Pending status (PENDING, INVOICED)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )
