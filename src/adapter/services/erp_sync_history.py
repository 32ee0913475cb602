"""In-memory ERP sync history store"""

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Tuple
from src.app.services.erp_sync_history import ErpSyncHistoryStore
from src.domain.erp_sync import ErpSyncRecord, ErpSyncStatus

logger = logging.getLogger(__name__)


def _copy(record: ErpSyncRecord) -> ErpSyncRecord:
    return replace(record, invoice_ids=list(record.invoice_ids))


class InMemoryErpSyncHistoryStore(ErpSyncHistoryStore):
    """
    Keeps sync records in process memory

    One instance per application; the history is lost on restart.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._records: List[ErpSyncRecord] = []
        self._counter = 0
        self._clock = clock or datetime.utcnow

    def _next_sync_id(self, now: datetime) -> str:
        self._counter += 1
        return f"SYNC-{now.year}-{self._counter:06d}"

    def append(
        self,
        status: ErpSyncStatus,
        invoice_ids: List[int],
        total_amount: Decimal,
        error_message: Optional[str] = None,
    ) -> ErpSyncRecord:
        now = self._clock()
        record = ErpSyncRecord(
            sync_id=self._next_sync_id(now),
            status=status,
            timestamp=now,
            invoice_ids=list(invoice_ids),
            total_amount=total_amount,
            error_message=error_message,
        )
        self._records.append(record)
        return _copy(record)

    def get(self, sync_id: str) -> Optional[ErpSyncRecord]:
        for record in self._records:
            if record.sync_id == sync_id:
                return _copy(record)
        return None

    def list(
        self,
        status: Optional[ErpSyncStatus] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[ErpSyncRecord], int]:
        records = [
            r for r in self._records
            if (status is None or r.status == status)
            and (date_from is None or r.timestamp >= date_from)
            and (date_to is None or r.timestamp <= date_to)
        ]
        # Counter order breaks ties between records with the same timestamp
        records.sort(key=lambda r: (r.timestamp, r.sync_id), reverse=True)
        page = records[offset:offset + limit]
        return [_copy(r) for r in page], len(records)

    def set_status(self, sync_id: str, status: ErpSyncStatus) -> Optional[ErpSyncRecord]:
        for record in self._records:
            if record.sync_id == sync_id:
                record.status = status
                logger.info(f"Sync {sync_id} moved to {status.value}")
                return _copy(record)
        return None
