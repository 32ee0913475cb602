"""Get Billing Pending Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.billing_pending_repository import BillingPendingRepository
from .dtos import BillingPendingDTO


def pending_not_found(pending_id: int) -> Error:
    return Error(
        code="PENDING_NOT_FOUND",
        message=f"BillingPending with identifier '{pending_id}' not found",
    )


class GetBillingPending:
    """Use Case: Pending detail with its service"""

    def __init__(self, pending_repo: BillingPendingRepository):
        self.pending_repo = pending_repo

    async def execute(self, pending_id: int) -> Result[BillingPendingDTO]:
        item = await self.pending_repo.get_with_service(pending_id)
        if not item:
            return Return.err(pending_not_found(pending_id))
        return Return.ok(BillingPendingDTO.from_joined(item))
