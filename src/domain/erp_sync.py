"""ERP Sync Domain Types

Records of invoice exports to the external accounting system.
The history is kept by an ErpSyncHistoryStore, not in the database.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class ErpSyncStatus(str, Enum):
    """ERP sync states"""
    PENDING = "PENDING"
    SENT = "SENT"
    CONFIRMED = "CONFIRMED"
    ERROR = "ERROR"


@dataclass
class ErpSyncRecord:
    """
    One sync operation sent to the ERP

    Domain Rules:
    - sync_id is unique and assigned by the history store
    - Only SENT records can be confirmed
    """

    sync_id: str
    status: ErpSyncStatus
    timestamp: datetime
    invoice_ids: List[int]
    total_amount: Decimal
    error_message: Optional[str] = None
