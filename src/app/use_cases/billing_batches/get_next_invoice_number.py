"""Get Next Invoice Number Use Case

Read-only preview of the number the next invoice of a receipt book would
get. Nothing is reserved, so repeated calls return the same number until
an invoice is created.
"""

from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from .dtos import NextInvoiceNumberDTO
from .invoice_numbers import InvoiceNumberAllocator

MAX_RECEIPT_BOOK_LENGTH = 50


class GetNextInvoiceNumber:
    """Use Case: Preview the next invoice number of a receipt book"""

    def __init__(self, invoice_repo: InvoiceRepository):
        self.allocator = InvoiceNumberAllocator(invoice_repo)

    async def execute(self, receipt_book: str) -> Result[NextInvoiceNumberDTO]:
        if not receipt_book or len(receipt_book) > MAX_RECEIPT_BOOK_LENGTH:
            return Return.err(
                Error(
                    code="VALIDATION_ERROR",
                    message=f"Receipt book must be between 1 and {MAX_RECEIPT_BOOK_LENGTH} characters",
                )
            )

        number = await self.allocator.next_number(receipt_book)
        return Return.ok(NextInvoiceNumberDTO(receipt_book=receipt_book, next_invoice_number=number))
