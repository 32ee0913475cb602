"""Create Service Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.service_repository import ServiceRepository
from src.domain.service import Service, ServiceStatus
from .dtos import CreateServiceCommandDTO, ServiceDTO

logger = logging.getLogger(__name__)


class CreateService:
    """
    Use Case: Register a service rendered to a customer

    Business Rules:
    1. New services start in CREATED
    2. customer_id and amount are positive (checked by the command DTO)
    """

    def __init__(self, uow: UnitOfWork, service_repo: ServiceRepository):
        self.uow = uow
        self.service_repo = service_repo

    async def execute(self, command: CreateServiceCommandDTO) -> Result[ServiceDTO]:
        try:
            service = await self.service_repo.create(
                Service(
                    service_date=command.service_date,
                    customer_id=command.customer_id,
                    amount=command.amount,
                    status=ServiceStatus.CREATED,
                )
            )
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_SERVICE_FAILED",
                    message="Failed to create service",
                    reason=str(e),
                )
            )

        logger.info(f"Service created with ID: {service.id}")
        return Return.ok(ServiceDTO.from_entity(service))
