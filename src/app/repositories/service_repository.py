"""Service Repository Interface

Defines the contract for service persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, List, Tuple
from src.domain.service import Service, ServiceStatus


class ServiceRepository(ABC):
    """
    Repository interface for Service persistence
    """

    @abstractmethod
    async def create(self, service: Service) -> Service:
        """
        Create a new service

        Args:
            service: Service entity to persist

        Returns:
            Created Service with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, service_id: int) -> Optional[Service]:
        """
        Retrieve service by ID

        Args:
            service_id: Service ID

        Returns:
            Service if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_ids(self, service_ids: List[int]) -> List[Service]:
        """
        Retrieve all services whose ID is in service_ids (one query)

        Missing IDs are simply absent from the result.
        """
        pass

    @abstractmethod
    async def list(
        self,
        customer_id: Optional[int] = None,
        status: Optional[ServiceStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Service], int]:
        """
        List services with optional filters, newest first

        Returns:
            Tuple of (services page, total matching count)
        """
        pass

    @abstractmethod
    async def list_by_status(self, status: ServiceStatus) -> List[Service]:
        """List services in a status, oldest first"""
        pass

    @abstractmethod
    async def list_by_customer(self, customer_id: int) -> List[Service]:
        """List services of a customer, most recent service_date first"""
        pass

    @abstractmethod
    async def update(self, service: Service) -> Service:
        """
        Update an existing service

        Args:
            service: Service entity with updated values

        Returns:
            Updated Service
        """
        pass

    @abstractmethod
    async def delete(self, service: Service) -> None:
        """Delete a service"""
        pass
