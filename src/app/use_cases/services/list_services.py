"""List Services Use Cases"""

import math
from typing import List
from libs.result import Result, Return
from src.app.repositories.service_repository import ServiceRepository
from src.domain.service import ServiceStatus
from .dtos import ServiceFilterDTO, PaginatedServicesDTO, ServiceDTO


class ListServices:
    """Use Case: Paginated service listing, newest first"""

    def __init__(self, service_repo: ServiceRepository):
        self.service_repo = service_repo

    async def execute(self, query: ServiceFilterDTO) -> Result[PaginatedServicesDTO]:
        services, total = await self.service_repo.list(
            customer_id=query.customer_id,
            status=query.status,
            date_from=query.date_from,
            date_to=query.date_to,
            limit=query.limit,
            offset=(query.page - 1) * query.limit,
        )

        return Return.ok(
            PaginatedServicesDTO(
                data=[ServiceDTO.from_entity(service) for service in services],
                total=total,
                page=query.page,
                limit=query.limit,
                total_pages=math.ceil(total / query.limit),
            )
        )


class ListServicesByStatus:
    """Use Case: Services in a status, oldest first"""

    def __init__(self, service_repo: ServiceRepository):
        self.service_repo = service_repo

    async def execute(self, status: ServiceStatus) -> Result[List[ServiceDTO]]:
        services = await self.service_repo.list_by_status(status)
        return Return.ok([ServiceDTO.from_entity(service) for service in services])


class ListServicesByCustomer:
    """Use Case: Services of a customer, most recent service_date first"""

    def __init__(self, service_repo: ServiceRepository):
        self.service_repo = service_repo

    async def execute(self, customer_id: int) -> Result[List[ServiceDTO]]:
        services = await self.service_repo.list_by_customer(customer_id)
        return Return.ok([ServiceDTO.from_entity(service) for service in services])
