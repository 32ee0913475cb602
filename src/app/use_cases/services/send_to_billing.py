"""Send Services To Billing Use Case

Creates a billing pending for each eligible service.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.service_repository import ServiceRepository
from src.app.repositories.billing_pending_repository import BillingPendingRepository
from src.app.use_cases.pendings.dtos import BillingPendingDTO
from src.domain.billing_pending import BillingPending, PendingStatus
from src.domain.service import ServiceStatus
from .dtos import SendToBillingCommandDTO, SendToBillingResultDTO, FailedServiceDTO

logger = logging.getLogger(__name__)


class SendServicesToBilling:
    """
    Use Case: Send services to billing

    Business Rules:
    1. Unknown services are reported, not fatal
    2. Only CREATED services can be sent
    3. A service never gets a second pending
    4. Each accepted service moves to SENT_TO_BILL with a PENDING pending

    Flow:
    1. Load all requested services in one read
    2. Report missing ones
    3. For each found service check status and existing pending, then
       create the pending and move the service
    4. Commit once for the whole request
    """

    def __init__(
        self,
        uow: UnitOfWork,
        service_repo: ServiceRepository,
        pending_repo: BillingPendingRepository,
    ):
        self.uow = uow
        self.service_repo = service_repo
        self.pending_repo = pending_repo

    async def execute(self, command: SendToBillingCommandDTO) -> Result[SendToBillingResultDTO]:
        result = SendToBillingResultDTO()
        requested = list(dict.fromkeys(command.service_ids))

        try:
            # Step 1: Load services
            services = {service.id: service for service in await self.service_repo.get_by_ids(requested)}

            for service_id in requested:
                service = services.get(service_id)

                # Step 2: Missing service
                if service is None:
                    result.failed.append(FailedServiceDTO(id=service_id, reason="Service not found"))
                    continue

                # Step 3: Eligibility
                if service.status != ServiceStatus.CREATED:
                    result.failed.append(
                        FailedServiceDTO(
                            id=service_id,
                            reason=f"Service is in status '{service.status.value}'. Only services "
                                   f"with status '{ServiceStatus.CREATED.value}' can be sent to billing.",
                        )
                    )
                    continue

                if await self.pending_repo.get_by_service_id(service_id):
                    result.failed.append(
                        FailedServiceDTO(id=service_id, reason="Service already has a billing pending")
                    )
                    continue

                pending = await self.pending_repo.create(
                    BillingPending(service_id=service_id, status=PendingStatus.PENDING)
                )
                service.status = ServiceStatus.SENT_TO_BILL
                await self.service_repo.update(service)

                result.success.append(service_id)
                result.pendings.append(BillingPendingDTO.from_entity(pending, service))

            # Step 4: Commit
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="SEND_TO_BILLING_FAILED",
                    message="Failed to send services to billing",
                    reason=str(e),
                )
            )

        logger.info(
            f"Send to billing completed: {len(result.success)} successful, {len(result.failed)} failed"
        )
        return Return.ok(result)
