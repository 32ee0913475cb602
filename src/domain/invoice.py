"""Invoice Domain Entity

Invoices are issued by batch processing and never modified afterwards.
"""

from datetime import datetime, date
from decimal import Decimal
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Numeric, String, Date
from src.domain.base import BaseModel, IdType


class Invoice(BaseModel, table=True):
    """
    Invoice - Issued invoice for one billing pending

    Domain Rules:
    - invoice_number is unique, format {receipt_book}-{8 digit sequence}
    - One invoice per billing pending, ever (pending_id is unique)
    - Append-only: never updated or deleted by the application
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index('ix_invoices_batch_id', 'batch_id'),
        Index('ix_invoices_issue_date', 'issue_date'),
    )

    id: int = Field(
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique invoice identifier (auto-increment)"
    )

    invoice_number: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True),
        description="Unique invoice number (e.g., A-0001-00000001)"
    )

    cae: str = Field(
        sa_column=Column(String(14), nullable=False),
        description="Simulated electronic authorization code (14 digits)"
    )

    issue_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Invoice issue date"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Invoice amount (precision: 10,2)"
    )

    batch_id: int = Field(
        sa_column=Column(IdType, ForeignKey("billing_batches.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to BillingBatch"
    )

    pending_id: int = Field(
        sa_column=Column(
            IdType,
            ForeignKey("billing_pendings.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        description="Foreign key to BillingPending (one invoice per pending)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "invoice_number": "A-0001-00000001",
                "cae": "17061234567890",
                "issue_date": "2024-01-31",
                "amount": "1500.50",
                "batch_id": 1,
                "pending_id": 1,
            }
        }
