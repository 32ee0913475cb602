"""ERP sync use cases"""
from .sync_invoices import SyncInvoices, SyncBatch, PreviewSync
from .sync_history import GetSyncHistory, GetSyncDetail, ConfirmSync
from .erp_format import to_erp_record, accounting_entries
from .dtos import (
    AccountingEntryDTO,
    ErpInvoiceDataDTO,
    ErpSyncSummaryDTO,
    ErpSyncResponseDTO,
    ErpSyncHistoryFilterDTO,
    ErpSyncHistoryItemDTO,
    PaginatedSyncHistoryDTO,
    ConfirmSyncResponseDTO,
)

__all__ = [
    "SyncInvoices",
    "SyncBatch",
    "PreviewSync",
    "GetSyncHistory",
    "GetSyncDetail",
    "ConfirmSync",
    "to_erp_record",
    "accounting_entries",
    "AccountingEntryDTO",
    "ErpInvoiceDataDTO",
    "ErpSyncSummaryDTO",
    "ErpSyncResponseDTO",
    "ErpSyncHistoryFilterDTO",
    "ErpSyncHistoryItemDTO",
    "PaginatedSyncHistoryDTO",
    "ConfirmSyncResponseDTO",
]
