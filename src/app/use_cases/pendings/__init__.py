"""Billing pending use cases"""
from .list_pendings import ListBillingPendings, ListAvailablePendings
from .get_pending import GetBillingPending
from .cancel_pending import CancelBillingPending
from .get_summary import GetPendingSummary
from .dtos import (
    PendingServiceDTO,
    BillingPendingDTO,
    PendingFilterDTO,
    PaginatedPendingsDTO,
    CustomerPendingSummaryDTO,
    PendingSummaryDTO,
)

__all__ = [
    "ListBillingPendings",
    "ListAvailablePendings",
    "GetBillingPending",
    "CancelBillingPending",
    "GetPendingSummary",
    "PendingServiceDTO",
    "BillingPendingDTO",
    "PendingFilterDTO",
    "PaginatedPendingsDTO",
    "CustomerPendingSummaryDTO",
    "PendingSummaryDTO",
]
