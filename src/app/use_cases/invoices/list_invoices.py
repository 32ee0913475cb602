"""List Invoices Use Cases"""

import math
from typing import List
from libs.result import Result, Return
from src.app.repositories.invoice_repository import InvoiceRepository
from .dtos import InvoiceDTO, InvoiceFilterDTO, PaginatedInvoicesDTO


class ListInvoices:
    """Use Case: Paginated invoice listing, newest first"""

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self, query: InvoiceFilterDTO) -> Result[PaginatedInvoicesDTO]:
        details, total = await self.invoice_repo.list(
            batch_id=query.batch_id,
            customer_id=query.customer_id,
            invoice_number=query.invoice_number,
            date_from=query.date_from,
            date_to=query.date_to,
            min_amount=query.min_amount,
            max_amount=query.max_amount,
            limit=query.limit,
            offset=(query.page - 1) * query.limit,
        )

        return Return.ok(
            PaginatedInvoicesDTO(
                data=[InvoiceDTO.from_detail(detail) for detail in details],
                total=total,
                page=query.page,
                limit=query.limit,
                total_pages=math.ceil(total / query.limit),
            )
        )


class ListInvoicesByCustomer:
    """Use Case: Invoices of a customer, most recent issue date first"""

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self, customer_id: int) -> Result[List[InvoiceDTO]]:
        details = await self.invoice_repo.list_by_customer(customer_id)
        return Return.ok([InvoiceDTO.from_detail(detail) for detail in details])


class ListInvoicesByBatch:
    """Use Case: Invoices of a batch in number order"""

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self, batch_id: int) -> Result[List[InvoiceDTO]]:
        details = await self.invoice_repo.list_by_batch(batch_id)
        return Return.ok([InvoiceDTO.from_detail(detail) for detail in details])
