"""Cancel Billing Pending Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.billing_pending_repository import BillingPendingRepository
from src.app.repositories.service_repository import ServiceRepository
from src.domain.billing_pending import PendingStatus
from src.domain.service import ServiceStatus
from .get_pending import pending_not_found

logger = logging.getLogger(__name__)


def already_invoiced(pending_id: int) -> Error:
    return Error(
        code="PENDING_ALREADY_INVOICED",
        message=f"Billing pending with ID {pending_id} has already been invoiced",
    )


class CancelBillingPending:
    """
    Use Case: Withdraw a service from billing

    Business Rules:
    1. Only PENDING pendings can be cancelled; a pending invoiced by a
       batch running at the same time is never cancelled
    2. The owning service goes back to CREATED
    3. The pending row is deleted

    Flow:
    1. Load pending with its service, row locked
    2. Check status
    3. Delete pending if still PENDING, then revert service
    4. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        pending_repo: BillingPendingRepository,
        service_repo: ServiceRepository,
    ):
        self.uow = uow
        self.pending_repo = pending_repo
        self.service_repo = service_repo

    async def execute(self, pending_id: int) -> Result[None]:
        """
        Errors:
            PENDING_NOT_FOUND: Unknown pending
            PENDING_ALREADY_INVOICED: Pending is not PENDING
            CANCEL_PENDING_FAILED: Unexpected persistence failure
        """
        try:
            # Step 1: Load pending
            item = await self.pending_repo.get_with_service(pending_id, for_update=True)
            if not item:
                await self.uow.rollback()
                return Return.err(pending_not_found(pending_id))

            # Step 2: Check status
            if item.pending.status != PendingStatus.PENDING:
                await self.uow.rollback()
                return Return.err(already_invoiced(pending_id))

            # Step 3: Delete pending, then revert service
            if not await self.pending_repo.delete_if_pending(pending_id):
                await self.uow.rollback()
                logger.warning(f"Billing pending {pending_id} was invoiced while being cancelled")
                return Return.err(already_invoiced(pending_id))

            if item.service:
                item.service.status = ServiceStatus.CREATED
                await self.service_repo.update(item.service)

            # Step 4: Commit
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CANCEL_PENDING_FAILED",
                    message=f"Failed to cancel billing pending {pending_id}",
                    reason=str(e),
                )
            )

        logger.info(f"Billing pending {pending_id} cancelled")
        return Return.ok(None)
