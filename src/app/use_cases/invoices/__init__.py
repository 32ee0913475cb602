"""Invoice use cases"""
from .list_invoices import ListInvoices, ListInvoicesByCustomer, ListInvoicesByBatch
from .get_invoice import GetInvoice, GetInvoiceByNumber
from .get_statistics import GetInvoiceStatistics
from .dtos import (
    InvoiceDTO,
    InvoiceFilterDTO,
    PaginatedInvoicesDTO,
    MonthlyInvoiceStatsDTO,
    CustomerInvoiceStatsDTO,
    InvoiceStatisticsDTO,
)

__all__ = [
    "ListInvoices",
    "ListInvoicesByCustomer",
    "ListInvoicesByBatch",
    "GetInvoice",
    "GetInvoiceByNumber",
    "GetInvoiceStatistics",
    "InvoiceDTO",
    "InvoiceFilterDTO",
    "PaginatedInvoicesDTO",
    "MonthlyInvoiceStatsDTO",
    "CustomerInvoiceStatsDTO",
    "InvoiceStatisticsDTO",
]
