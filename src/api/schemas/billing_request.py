"""Request schemas for the Billing API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator


class CreateBillingBatchRequestSchema(BaseModel):
    """
    Request schema for submitting a billing batch

    Used for POST /billing-batches and POST /billing-batches/sync.
    An empty pending_ids list is accepted here and rejected by the use
    case as EMPTY_BATCH.
    """

    issue_date: date = Field(
        ...,
        description="Issue date of the invoices"
    )

    receipt_book: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Receipt book (invoice number prefix, 1-50 characters)"
    )

    pending_ids: List[int] = Field(
        default_factory=list,
        description="Billing pending IDs to invoice"
    )

    @field_validator('receipt_book')
    @classmethod
    def validate_receipt_book(cls, v):
        """Reject blank receipt books"""
        if not v.strip():
            raise ValueError("Receipt book must not be blank")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "issue_date": "2024-01-31",
                "receipt_book": "A-0001",
                "pending_ids": [1, 2, 3]
            }
        }


class CreateServiceRequestSchema(BaseModel):
    """
    Request schema for registering a service

    Used for POST /services endpoint.
    """

    service_date: date = Field(
        ...,
        description="Date the service was performed"
    )

    customer_id: int = Field(
        ...,
        gt=0,
        description="Customer identifier (must be > 0)"
    )

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Service amount (must be > 0)"
    )

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        """Amounts are stored with 2 decimals"""
        if v.as_tuple().exponent < -2:
            raise ValueError("Amount must have at most 2 decimal places")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "service_date": "2024-01-15",
                "customer_id": 1,
                "amount": "1500.50"
            }
        }


class UpdateServiceRequestSchema(BaseModel):
    """
    Request schema for editing a service

    Used for PATCH /services/{id}; omitted fields are left unchanged.
    """

    service_date: Optional[date] = None
    customer_id: Optional[int] = Field(default=None, gt=0)
    amount: Optional[Decimal] = Field(default=None, gt=0)

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        if v is not None and v.as_tuple().exponent < -2:
            raise ValueError("Amount must have at most 2 decimal places")
        return v


class SendToBillingRequestSchema(BaseModel):
    """Request schema for POST /services/send-to-billing"""

    service_ids: List[int] = Field(
        ...,
        min_length=1,
        description="Services to send to billing (non-empty)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "service_ids": [1, 2, 3]
            }
        }


class SyncInvoicesRequestSchema(BaseModel):
    """Request schema for POST /erp-sync/invoices and /erp-sync/preview"""

    invoice_ids: List[int] = Field(
        ...,
        min_length=1,
        description="Invoices to send to the ERP (non-empty)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_ids": [1, 2, 3]
            }
        }


class SyncBatchRequestSchema(BaseModel):
    """Request schema for POST /erp-sync/batch"""

    batch_id: int = Field(
        ...,
        gt=0,
        description="Batch whose invoices are sent to the ERP"
    )
