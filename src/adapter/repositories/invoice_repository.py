"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, List, Tuple
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_repository import InvoiceRepository, InvoiceDetail
from src.domain.billing_batch import BillingBatch
from src.domain.billing_pending import BillingPending
from src.domain.invoice import Invoice
from src.domain.service import Service

# One "_" per zero-padded sequence digit
SEQUENCE_PATTERN = "_" * 8


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Detail reads join invoice -> pending -> service and invoice -> batch.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _detailed(self):
        return (
            select(Invoice, Service, BillingBatch.receipt_book)
            .outerjoin(BillingPending, BillingPending.id == Invoice.pending_id)
            .outerjoin(Service, Service.id == BillingPending.service_id)
            .outerjoin(BillingBatch, BillingBatch.id == Invoice.batch_id)
        )

    async def _fetch_details(self, statement) -> List[InvoiceDetail]:
        result = await self.session.execute(statement)
        return [
            InvoiceDetail(invoice=row[0], service=row[1], receipt_book=row[2])
            for row in result.all()
        ]

    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID
        """
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        statement = select(Invoice).where(Invoice.id == invoice_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_detail_by_id(self, invoice_id: int) -> Optional[InvoiceDetail]:
        details = await self._fetch_details(self._detailed().where(Invoice.id == invoice_id))
        return details[0] if details else None

    async def get_detail_by_number(self, invoice_number: str) -> Optional[InvoiceDetail]:
        details = await self._fetch_details(
            self._detailed().where(Invoice.invoice_number == invoice_number)
        )
        return details[0] if details else None

    async def get_details_by_ids(self, invoice_ids: List[int]) -> List[InvoiceDetail]:
        if not invoice_ids:
            return []
        statement = (
            self._detailed()
            .where(Invoice.id.in_(invoice_ids))
            .order_by(Invoice.invoice_number.asc())
        )
        return await self._fetch_details(statement)

    async def get_last_invoice_number(self, prefix: str) -> Optional[str]:
        """
        Lexicographically greatest invoice number starting with prefix

        Only numbers with exactly eight characters after the prefix match, so
        book "A" never picks up numbers of book "A-0001". Zero padding makes
        lexicographic order equal numeric order.

        Args:
            prefix: Invoice number prefix (e.g., "A-0001-")

        Returns:
            The greatest invoice number, or None
        """
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        statement = (
            select(func.max(Invoice.invoice_number))
            .where(Invoice.invoice_number.like(f"{escaped}{SEQUENCE_PATTERN}", escape="\\"))
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list(
        self,
        batch_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        invoice_number: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        min_amount: Optional[Decimal] = None,
        max_amount: Optional[Decimal] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[InvoiceDetail], int]:
        """
        List invoices with optional filters, newest first

        Returns:
            Tuple of (page, total matching count)
        """
        conditions = []
        if batch_id is not None:
            conditions.append(Invoice.batch_id == batch_id)
        if customer_id is not None:
            conditions.append(Service.customer_id == customer_id)
        if invoice_number:
            conditions.append(Invoice.invoice_number.like(f"%{invoice_number}%"))
        if date_from:
            conditions.append(Invoice.issue_date >= date_from)
        if date_to:
            conditions.append(Invoice.issue_date <= date_to)
        if min_amount is not None:
            conditions.append(Invoice.amount >= min_amount)
        if max_amount is not None:
            conditions.append(Invoice.amount <= max_amount)

        count_statement = (
            select(func.count(Invoice.id))
            .select_from(Invoice)
            .outerjoin(BillingPending, BillingPending.id == Invoice.pending_id)
            .outerjoin(Service, Service.id == BillingPending.service_id)
            .where(*conditions)
        )
        total = (await self.session.execute(count_statement)).scalar_one()

        statement = (
            self._detailed()
            .where(*conditions)
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return await self._fetch_details(statement), total

    async def list_all(self) -> List[InvoiceDetail]:
        return await self._fetch_details(self._detailed().order_by(Invoice.id))

    async def list_by_batch(self, batch_id: int) -> List[InvoiceDetail]:
        statement = (
            self._detailed()
            .where(Invoice.batch_id == batch_id)
            .order_by(Invoice.invoice_number.asc())
        )
        return await self._fetch_details(statement)

    async def list_by_customer(self, customer_id: int) -> List[InvoiceDetail]:
        statement = (
            self._detailed()
            .where(Service.customer_id == customer_id)
            .order_by(Invoice.issue_date.desc(), Invoice.id.desc())
        )
        return await self._fetch_details(statement)
