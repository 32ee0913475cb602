"""Get Invoice Use Cases"""

from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from .dtos import InvoiceDTO


def invoice_not_found(identifier) -> Error:
    return Error(
        code="INVOICE_NOT_FOUND",
        message=f"Invoice with identifier '{identifier}' not found",
    )


class GetInvoice:
    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self, invoice_id: int) -> Result[InvoiceDTO]:
        detail = await self.invoice_repo.get_detail_by_id(invoice_id)
        if not detail:
            return Return.err(invoice_not_found(invoice_id))
        return Return.ok(InvoiceDTO.from_detail(detail))


class GetInvoiceByNumber:
    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self, invoice_number: str) -> Result[InvoiceDTO]:
        detail = await self.invoice_repo.get_detail_by_number(invoice_number)
        if not detail:
            return Return.err(invoice_not_found(invoice_number))
        return Return.ok(InvoiceDTO.from_detail(detail))
