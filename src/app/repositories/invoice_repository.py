"""Invoice Repository Interface

Defines the contract for invoice persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional, List, Tuple, NamedTuple
from src.domain.invoice import Invoice
from src.domain.service import Service


class InvoiceDetail(NamedTuple):
    """An invoice with the service it bills and the receipt book of its batch"""
    invoice: Invoice
    service: Optional[Service]
    receipt_book: Optional[str]


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Invoices are append-only; there is no update or delete.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        """
        Retrieve invoice by ID

        Args:
            invoice_id: Invoice ID

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_detail_by_id(self, invoice_id: int) -> Optional[InvoiceDetail]:
        """Retrieve invoice with its service and receipt book by ID"""
        pass

    @abstractmethod
    async def get_detail_by_number(self, invoice_number: str) -> Optional[InvoiceDetail]:
        """Retrieve invoice with its service and receipt book by invoice number"""
        pass

    @abstractmethod
    async def get_details_by_ids(self, invoice_ids: List[int]) -> List[InvoiceDetail]:
        """Retrieve several invoices with context in one query, ordered by invoice number"""
        pass

    @abstractmethod
    async def get_last_invoice_number(self, prefix: str) -> Optional[str]:
        """
        Lexicographically greatest invoice number of the form {prefix}{8 digits}

        Args:
            prefix: Invoice number prefix (e.g., "A-0001-")

        Returns:
            The greatest invoice number, or None if no invoice has the prefix
        """
        pass

    @abstractmethod
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

        invoice_number matches as a substring; the date range filters on issue_date.

        Returns:
            Tuple of (page, total matching count)
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[InvoiceDetail]:
        """All invoices with context (used for statistics)"""
        pass

    @abstractmethod
    async def list_by_batch(self, batch_id: int) -> List[InvoiceDetail]:
        """Invoices of a batch ordered by invoice number"""
        pass

    @abstractmethod
    async def list_by_customer(self, customer_id: int) -> List[InvoiceDetail]:
        """Invoices of a customer, most recent issue date first"""
        pass
