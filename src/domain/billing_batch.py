"""Billing Batch Domain Entity

Groups billing pendings that are invoiced together under one receipt book.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, List
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, Date, Integer, Text, JSON
from src.domain.base import BaseModel, IdType


class BatchStatus(str, Enum):
    """Billing batch processing states"""
    PENDING_PROCESSING = "PENDING_PROCESSING"
    IN_PROCESS = "IN_PROCESS"
    PROCESSED = "PROCESSED"
    ERROR = "ERROR"


class BillingBatch(BaseModel, table=True):
    """
    BillingBatch - A set of pendings invoiced as one unit

    Domain Rules:
    - PENDING_PROCESSING -> IN_PROCESS -> PROCESSED | ERROR
    - ERROR -> PENDING_PROCESSING is the only external transition (retry)
    - pending_ids keeps the originally requested ids so a retry can resubmit them
    - Once PROCESSED, total_amount equals the sum of its invoice amounts
    """

    __tablename__ = "billing_batches"
    __table_args__ = (
        Index('ix_billing_batches_status', 'status'),
        Index('ix_billing_batches_receipt_book', 'receipt_book'),
    )

    id: int = Field(
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique batch identifier (auto-increment)"
    )

    issue_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Issue date printed on every invoice of the batch"
    )

    receipt_book: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Receipt book (invoice number prefix), e.g. A-0001"
    )

    status: BatchStatus = Field(
        default=BatchStatus.PENDING_PROCESSING,
        description="Batch status"
    )

    error_message: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Last processing error, if any"
    )

    pending_ids: List[int] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Originally requested billing pending ids"
    )

    processing_started_at: Optional[datetime] = Field(
        default=None,
        description="When processing of the current attempt started"
    )

    processing_completed_at: Optional[datetime] = Field(
        default=None,
        description="When the last attempt finished (success or error)"
    )

    total_invoices: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Number of invoices produced"
    )

    total_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(10, 2), nullable=False, default=0),
        description="Sum of invoice amounts (precision: 10,2)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    def can_retry(self) -> bool:
        return self.status == BatchStatus.ERROR

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "issue_date": "2024-01-31",
                "receipt_book": "A-0001",
                "status": "PROCESSED",
                "error_message": None,
                "pending_ids": [1, 2, 3],
                "total_invoices": 3,
                "total_amount": "4501.50",
            }
        }
