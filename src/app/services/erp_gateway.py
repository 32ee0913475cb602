"""ERP Gateway Interface

Defines the contract for delivering invoice data to the ERP system.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class ErpDeliveryResult:
    """Outcome of one delivery to the ERP"""
    success: bool
    error: Optional[str] = None


class ErpGateway(ABC):
    """
    Abstract ERP gateway

    Implementations can deliver via:
    - Simulation (development default)
    - HTTP POST to an ERP endpoint
    """

    @abstractmethod
    async def send(self, records: List[Dict[str, Any]]) -> ErpDeliveryResult:
        """
        Deliver invoice records to the ERP

        Args:
            records: Invoice records in ERP format (JSON-compatible)

        Returns:
            ErpDeliveryResult; delivery failures are reported, not raised
        """
        pass
