"""ERP Gateway Implementations

Provides concrete implementations for delivering invoices to the ERP.
"""

import asyncio
import logging
import random
from typing import Any, Callable, Dict, List, Optional
import httpx
from src.app.services.erp_gateway import ErpGateway, ErpDeliveryResult

logger = logging.getLogger(__name__)


class SimulatedErpGateway(ErpGateway):
    """
    ERP gateway that simulates network latency and random failures

    Useful for development and demos where no ERP is available.
    """

    def __init__(
        self,
        success_rate: float = 0.9,
        latency_seconds: float = 0.1,
        random_source: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize simulated gateway

        Args:
            success_rate: Probability that a delivery succeeds (0.0 - 1.0)
            latency_seconds: Simulated network latency
            random_source: Callable returning floats in [0, 1) (defaults to random.random)
        """
        self.success_rate = success_rate
        self.latency_seconds = latency_seconds
        self.random_source = random_source or random.random

    async def send(self, records: List[Dict[str, Any]]) -> ErpDeliveryResult:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)

        if self.random_source() >= self.success_rate:
            return ErpDeliveryResult(success=False, error="Simulated ERP connection timeout")

        logger.info(f"Simulated ERP received {len(records)} invoices")
        return ErpDeliveryResult(success=True)


class HttpErpGateway(ErpGateway):
    """
    ERP gateway that POSTs invoice records as JSON

    Any non-2xx response or transport error is reported as a failed delivery.
    """

    def __init__(self, url: str, timeout: float = 10.0):
        """
        Initialize HTTP gateway

        Args:
            url: ERP endpoint receiving the invoices
            timeout: Request timeout in seconds
        """
        self.url = url
        self.timeout = timeout

    async def send(self, records: List[Dict[str, Any]]) -> ErpDeliveryResult:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.url,
                    json={"invoices": records},
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to deliver {len(records)} invoices to ERP at {self.url}: {e}")
            return ErpDeliveryResult(success=False, error=str(e) or type(e).__name__)

        logger.info(f"Delivered {len(records)} invoices to ERP at {self.url}")
        return ErpDeliveryResult(success=True)


def create_erp_gateway(
    mode: str = "simulated",
    url: Optional[str] = None,
    timeout: float = 10.0,
    success_rate: float = 0.9,
    latency_seconds: float = 0.1,
) -> ErpGateway:
    """
    Factory function to create the configured ERP gateway

    Args:
        mode: "simulated" or "http"
        url: ERP endpoint (required for "http")
        timeout: HTTP timeout in seconds
        success_rate: Success probability of the simulation
        latency_seconds: Latency of the simulation

    Returns:
        Configured ErpGateway
    """
    if mode == "http":
        if not url:
            raise ValueError("ERP_URL is required when ERP_MODE is 'http'")
        return HttpErpGateway(url, timeout=timeout)

    return SimulatedErpGateway(success_rate=success_rate, latency_seconds=latency_seconds)
