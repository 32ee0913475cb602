"""Invoice API Routes

Read-only access to issued invoices.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.use_cases.invoices.dtos import (
    InvoiceDTO,
    InvoiceFilterDTO,
    PaginatedInvoicesDTO,
    InvoiceStatisticsDTO,
)
from src.app.use_cases.invoices.list_invoices import (
    ListInvoices,
    ListInvoicesByCustomer,
    ListInvoicesByBatch,
)
from src.app.use_cases.invoices.get_invoice import GetInvoice, GetInvoiceByNumber
from src.app.use_cases.invoices.get_statistics import GetInvoiceStatistics
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.depends import get_session
from src.api.error import ClientError

router = APIRouter(prefix="/invoices", tags=["Invoices"])

INVOICE_NOT_FOUND_RESPONSE = {
    404: {
        "description": "Invoice not found",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INVOICE_NOT_FOUND",
                        "message": "Invoice with identifier 'A-0001-00000099' not found"
                    }
                }
            }
        }
    }
}


@router.get("", response_model=PaginatedInvoicesDTO)
async def list_invoices(
    batch_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    invoice_number: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    min_amount: Optional[Decimal] = Query(default=None, ge=0),
    max_amount: Optional[Decimal] = Query(default=None, ge=0),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    session: AsyncSession = Depends(get_session)
):
    """
    List invoices, newest first.

    `invoice_number` matches any part of the number; the date range applies
    to the issue date.
    """
    query = InvoiceFilterDTO(
        batch_id=batch_id,
        customer_id=customer_id,
        invoice_number=invoice_number,
        date_from=date_from,
        date_to=date_to,
        min_amount=min_amount,
        max_amount=max_amount,
        page=page,
        limit=limit,
    )
    result = await ListInvoices(SqlAlchemyInvoiceRepository(session)).execute(query)
    return result.value


@router.get("/statistics", response_model=InvoiceStatisticsDTO)
async def get_invoice_statistics(session: AsyncSession = Depends(get_session)):
    """Invoice totals overall, per month (latest first) and per customer (largest first)."""
    result = await GetInvoiceStatistics(SqlAlchemyInvoiceRepository(session)).execute()
    return result.value


@router.get("/by-customer/{customer_id}", response_model=List[InvoiceDTO])
async def list_invoices_by_customer(
    customer_id: int,
    session: AsyncSession = Depends(get_session)
):
    result = await ListInvoicesByCustomer(SqlAlchemyInvoiceRepository(session)).execute(customer_id)
    return result.value


@router.get("/by-batch/{batch_id}", response_model=List[InvoiceDTO])
async def list_invoices_by_batch(
    batch_id: int,
    session: AsyncSession = Depends(get_session)
):
    result = await ListInvoicesByBatch(SqlAlchemyInvoiceRepository(session)).execute(batch_id)
    return result.value


@router.get("/number/{invoice_number}", response_model=InvoiceDTO, responses=INVOICE_NOT_FOUND_RESPONSE)
async def get_invoice_by_number(
    invoice_number: str,
    session: AsyncSession = Depends(get_session)
):
    result = await GetInvoiceByNumber(SqlAlchemyInvoiceRepository(session)).execute(invoice_number)

    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_404_NOT_FOUND)

    return result.value


@router.get("/{invoice_id}", response_model=InvoiceDTO, responses=INVOICE_NOT_FOUND_RESPONSE)
async def get_invoice(
    invoice_id: int,
    session: AsyncSession = Depends(get_session)
):
    result = await GetInvoice(SqlAlchemyInvoiceRepository(session)).execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_404_NOT_FOUND)

    return result.value
