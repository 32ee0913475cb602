"""Invoice Number Allocator

Invoice numbers have the form {receipt_book}-{sequence:08d} and are
strictly sequential per receipt book.
"""

import random
import time
from typing import Callable, Optional
from src.app.repositories.invoice_repository import InvoiceRepository

SEQUENCE_DIGITS = 8
CAE_LENGTH = 14


def format_invoice_number(receipt_book: str, sequence: int) -> str:
    return f"{receipt_book}-{sequence:0{SEQUENCE_DIGITS}d}"


def parse_sequence(invoice_number: Optional[str]) -> Optional[int]:
    """Numeric suffix after the last '-', or None if absent or not numeric"""
    if not invoice_number:
        return None
    suffix = invoice_number.rsplit("-", 1)[-1]
    if not suffix.isdigit():
        return None
    return int(suffix)


def generate_cae(
    clock: Callable[[], float] = time.time,
    randint: Callable[[int, int], int] = random.randint,
) -> str:
    """
    Simulated electronic authorization code

    Millisecond timestamp followed by 4 random digits, cut to 14 characters.
    """
    timestamp_ms = int(clock() * 1000)
    return f"{timestamp_ms}{randint(0, 9999):04d}"[:CAE_LENGTH]


class InvoiceNumberAllocator:
    """
    Computes the next invoice number of a receipt book

    Reads the greatest issued number with the book's prefix. Callers that
    create invoices must hold the receipt book lock for the whole
    transaction and advance an in-memory counter per invoice instead of
    asking again.
    """

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def next_sequence(self, receipt_book: str) -> int:
        last_number = await self.invoice_repo.get_last_invoice_number(f"{receipt_book}-")
        last_sequence = parse_sequence(last_number)
        return (last_sequence or 0) + 1

    async def next_number(self, receipt_book: str) -> str:
        sequence = await self.next_sequence(receipt_book)
        return format_invoice_number(receipt_book, sequence)
