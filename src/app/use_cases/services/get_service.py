"""Get Service Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.service_repository import ServiceRepository
from .dtos import ServiceDTO


def service_not_found(service_id: int) -> Error:
    return Error(
        code="SERVICE_NOT_FOUND",
        message=f"Service with identifier '{service_id}' not found",
    )


class GetService:
    def __init__(self, service_repo: ServiceRepository):
        self.service_repo = service_repo

    async def execute(self, service_id: int) -> Result[ServiceDTO]:
        service = await self.service_repo.get_by_id(service_id)
        if not service:
            return Return.err(service_not_found(service_id))
        return Return.ok(ServiceDTO.from_entity(service))
