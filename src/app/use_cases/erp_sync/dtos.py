"""Data Transfer Objects for ERP Sync Use Cases

Pydantic models for query inputs and response outputs.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field
from src.domain.erp_sync import ErpSyncRecord, ErpSyncStatus


class AccountingEntryDTO(BaseModel):
    account_code: str
    account_name: str
    debit: Decimal
    credit: Decimal


class ErpInvoiceDataDTO(BaseModel):
    """
    Invoice in the format expected by the ERP

    customer_id is 0 and service_date None when the billed service is gone.
    """

    invoice_number: str
    cae: str
    issue_date: date
    amount: Decimal
    customer_id: int
    service_date: Optional[date] = None
    receipt_book: str
    batch_id: int
    accounting_entries: List[AccountingEntryDTO]


class ErpSyncSummaryDTO(BaseModel):
    total_invoices: int
    total_amount: Decimal
    success: bool
    message: str


class ErpSyncResponseDTO(BaseModel):
    """Response DTO for a sync operation and for sync detail"""

    sync_id: str
    status: ErpSyncStatus
    timestamp: datetime
    data: List[ErpInvoiceDataDTO]
    summary: ErpSyncSummaryDTO

    class Config:
        json_schema_extra = {
            "example": {
                "sync_id": "SYNC-2024-000001",
                "status": "SENT",
                "timestamp": "2024-01-31T15:30:00Z",
                "data": [],
                "summary": {
                    "total_invoices": 5,
                    "total_amount": "7502.50",
                    "success": True,
                    "message": "Data successfully sent to ERP system"
                }
            }
        }


class ErpSyncHistoryFilterDTO(BaseModel):
    """Filters for the sync history; date_to includes the whole day"""

    status: Optional[ErpSyncStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class ErpSyncHistoryItemDTO(BaseModel):
    sync_id: str
    status: ErpSyncStatus
    timestamp: datetime
    invoice_count: int
    total_amount: Decimal
    error_message: Optional[str] = None

    @classmethod
    def from_record(cls, record: ErpSyncRecord) -> "ErpSyncHistoryItemDTO":
        return cls(
            sync_id=record.sync_id,
            status=record.status,
            timestamp=record.timestamp,
            invoice_count=len(record.invoice_ids),
            total_amount=record.total_amount,
            error_message=record.error_message,
        )


class PaginatedSyncHistoryDTO(BaseModel):
    data: List[ErpSyncHistoryItemDTO]
    total: int
    page: int
    limit: int
    total_pages: int


class ConfirmSyncResponseDTO(BaseModel):
    sync_id: str
    status: ErpSyncStatus
