"""ERP Sync History Store Interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from src.domain.erp_sync import ErpSyncRecord, ErpSyncStatus


class ErpSyncHistoryStore(ABC):
    """
    Append-only history of ERP sync operations

    The store owns the monotonic counter used for sync ids, so each
    application instance gets its own store and its own sequence.
    """

    @abstractmethod
    def append(
        self,
        status: ErpSyncStatus,
        invoice_ids: List[int],
        total_amount: Decimal,
        error_message: Optional[str] = None,
    ) -> ErpSyncRecord:
        """
        Record a sync operation under a new sync id

        Returns:
            The stored record
        """
        pass

    @abstractmethod
    def get(self, sync_id: str) -> Optional[ErpSyncRecord]:
        """Look up a record by sync id"""
        pass

    @abstractmethod
    def list(
        self,
        status: Optional[ErpSyncStatus] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[ErpSyncRecord], int]:
        """
        Filtered records, most recent first

        Returns:
            Tuple of (page, total matching count)
        """
        pass

    @abstractmethod
    def set_status(self, sync_id: str, status: ErpSyncStatus) -> Optional[ErpSyncRecord]:
        """Change the status of a record; None if the sync id is unknown"""
        pass
