"""Update and Delete Service Use Cases

Services can only change while nothing downstream depends on them.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.service_repository import ServiceRepository
from src.domain.service import Service, ServiceStatus
from .dtos import UpdateServiceCommandDTO, ServiceDTO
from .get_service import service_not_found

logger = logging.getLogger(__name__)


def not_editable(service: Service, action: str) -> Error:
    return Error(
        code="BUSINESS_RULE_VIOLATION",
        message=f"Cannot {action} service in status '{service.status.value}'. "
                f"Only services with status '{ServiceStatus.CREATED.value}' can be {action}d.",
    )


class UpdateService:
    """
    Use Case: Edit a service

    Business Rules:
    1. Only CREATED services can be updated
    2. Fields not present in the command keep their value
    """

    def __init__(self, uow: UnitOfWork, service_repo: ServiceRepository):
        self.uow = uow
        self.service_repo = service_repo

    async def execute(self, service_id: int, command: UpdateServiceCommandDTO) -> Result[ServiceDTO]:
        try:
            service = await self.service_repo.get_by_id(service_id)
            if not service:
                return Return.err(service_not_found(service_id))

            if not service.is_editable():
                return Return.err(not_editable(service, "update"))

            for field, value in command.model_dump(exclude_none=True).items():
                setattr(service, field, value)

            service = await self.service_repo.update(service)
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_SERVICE_FAILED",
                    message=f"Failed to update service {service_id}",
                    reason=str(e),
                )
            )

        logger.info(f"Service {service_id} updated")
        return Return.ok(ServiceDTO.from_entity(service))


class DeleteService:
    """
    Use Case: Remove a service

    Business Rules:
    1. Only CREATED services can be deleted
    """

    def __init__(self, uow: UnitOfWork, service_repo: ServiceRepository):
        self.uow = uow
        self.service_repo = service_repo

    async def execute(self, service_id: int) -> Result[None]:
        try:
            service = await self.service_repo.get_by_id(service_id)
            if not service:
                return Return.err(service_not_found(service_id))

            if not service.is_editable():
                return Return.err(not_editable(service, "delete"))

            await self.service_repo.delete(service)
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DELETE_SERVICE_FAILED",
                    message=f"Failed to delete service {service_id}",
                    reason=str(e),
                )
            )

        logger.info(f"Service {service_id} deleted")
        return Return.ok(None)
