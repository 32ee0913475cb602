"""Data Transfer Objects for Invoice Use Cases

Pydantic models for query inputs and response outputs.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field
from src.app.repositories.invoice_repository import InvoiceDetail


class InvoiceDTO(BaseModel):
    """
    Response DTO for an invoice

    customer_id, service_id, service_date and receipt_book come from the
    billed service and the batch.
    """

    id: int
    invoice_number: str
    cae: str
    issue_date: date
    amount: Decimal
    batch_id: int
    pending_id: int
    service_id: Optional[int] = None
    customer_id: Optional[int] = None
    service_date: Optional[date] = None
    receipt_book: Optional[str] = None
    created_at: datetime

    class Config:
        json_schema_extra = {
            "example": {
                "id": 1,
                "invoice_number": "A-0001-00000001",
                "cae": "17061234567890",
                "issue_date": "2024-01-31",
                "amount": "1500.50",
                "batch_id": 1,
                "pending_id": 1,
                "service_id": 1,
                "customer_id": 1,
                "service_date": "2024-01-15",
                "receipt_book": "A-0001",
                "created_at": "2024-01-31T15:30:00Z"
            }
        }

    @classmethod
    def from_detail(cls, detail: InvoiceDetail) -> "InvoiceDTO":
        invoice, service = detail.invoice, detail.service
        return cls(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            cae=invoice.cae,
            issue_date=invoice.issue_date,
            amount=invoice.amount,
            batch_id=invoice.batch_id,
            pending_id=invoice.pending_id,
            service_id=service.id if service else None,
            customer_id=service.customer_id if service else None,
            service_date=service.service_date if service else None,
            receipt_book=detail.receipt_book,
            created_at=invoice.created_at,
        )


class InvoiceFilterDTO(BaseModel):
    """Filters for listing invoices"""

    batch_id: Optional[int] = None
    customer_id: Optional[int] = None
    invoice_number: Optional[str] = Field(default=None, description="Substring of the invoice number")
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    min_amount: Optional[Decimal] = Field(default=None, ge=0)
    max_amount: Optional[Decimal] = Field(default=None, ge=0)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class PaginatedInvoicesDTO(BaseModel):
    """Paginated invoice list"""

    data: List[InvoiceDTO]
    total: int
    page: int
    limit: int
    total_pages: int


class MonthlyInvoiceStatsDTO(BaseModel):
    month: str = Field(..., description="YYYY-MM")
    count: int
    total_amount: Decimal


class CustomerInvoiceStatsDTO(BaseModel):
    customer_id: int
    count: int
    total_amount: Decimal


class InvoiceStatisticsDTO(BaseModel):
    """Aggregated invoice figures"""

    total_invoices: int
    total_amount: Decimal
    average_amount: Decimal
    by_month: List[MonthlyInvoiceStatsDTO]
    by_customer: List[CustomerInvoiceStatsDTO]
