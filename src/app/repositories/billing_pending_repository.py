"""Billing Pending Repository Interface

Defines the contract for billing pending persistence operations.
Reads return the pending together with its owning service, since every
caller needs the service amount or customer.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, List, Tuple, NamedTuple
from src.domain.billing_pending import BillingPending, PendingStatus
from src.domain.service import Service


class PendingWithService(NamedTuple):
    """A billing pending joined with its service (None if the link is broken)"""
    pending: BillingPending
    service: Optional[Service]


class BillingPendingRepository(ABC):
    """
    Repository interface for BillingPending persistence
    """

    @abstractmethod
    async def create(self, pending: BillingPending) -> BillingPending:
        """
        Create a new billing pending

        Args:
            pending: BillingPending entity to persist

        Returns:
            Created BillingPending with generated ID
        """
        pass

    @abstractmethod
    async def get_with_service(
        self, pending_id: int, for_update: bool = False
    ) -> Optional[PendingWithService]:
        """
        Retrieve a pending and its service by pending ID

        Args:
            pending_id: Pending ID
            for_update: Lock the pending row until the transaction ends

        Returns:
            PendingWithService if the pending exists, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_ids_with_service(
        self, pending_ids: List[int], for_update: bool = False
    ) -> List[PendingWithService]:
        """
        Retrieve pendings and their services in one batched read

        Args:
            pending_ids: Pending IDs to look up
            for_update: Lock the pending rows until the transaction ends

        Returns:
            Found pendings (missing IDs are absent), ordered by ID
        """
        pass

    @abstractmethod
    async def get_by_service_id(self, service_id: int) -> Optional[BillingPending]:
        """Retrieve the pending owned by a service, if any"""
        pass

    @abstractmethod
    async def list(
        self,
        status: Optional[PendingStatus] = None,
        customer_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[PendingWithService], int]:
        """
        List pendings with optional filters, newest first

        customer_id and the date range filter on the owning service.

        Returns:
            Tuple of (page, total matching count)
        """
        pass

    @abstractmethod
    async def list_available(self) -> List[PendingWithService]:
        """List PENDING pendings with their services, oldest first"""
        pass

    @abstractmethod
    async def update(self, pending: BillingPending) -> BillingPending:
        """
        Update an existing pending

        Args:
            pending: BillingPending with updated values

        Returns:
            Updated BillingPending
        """
        pass

    @abstractmethod
    async def delete_if_pending(self, pending_id: int) -> bool:
        """
        Delete a pending only while it is still PENDING

        The status check and the delete are one statement, so a pending
        invoiced concurrently is never removed.

        Returns:
            True if the row was deleted
        """
        pass
