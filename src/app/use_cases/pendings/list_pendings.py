"""List Billing Pendings Use Cases"""

import math
from typing import List
from libs.result import Result, Return
from src.app.repositories.billing_pending_repository import BillingPendingRepository
from .dtos import PendingFilterDTO, PaginatedPendingsDTO, BillingPendingDTO


class ListBillingPendings:
    """Use Case: Paginated pending listing joined with services, newest first"""

    def __init__(self, pending_repo: BillingPendingRepository):
        self.pending_repo = pending_repo

    async def execute(self, query: PendingFilterDTO) -> Result[PaginatedPendingsDTO]:
        items, total = await self.pending_repo.list(
            status=query.status,
            customer_id=query.customer_id,
            date_from=query.date_from,
            date_to=query.date_to,
            limit=query.limit,
            offset=(query.page - 1) * query.limit,
        )

        return Return.ok(
            PaginatedPendingsDTO(
                data=[BillingPendingDTO.from_joined(item) for item in items],
                total=total,
                page=query.page,
                limit=query.limit,
                total_pages=math.ceil(total / query.limit),
            )
        )


class ListAvailablePendings:
    """Use Case: Pendings that can go into a batch, oldest first"""

    def __init__(self, pending_repo: BillingPendingRepository):
        self.pending_repo = pending_repo

    async def execute(self) -> Result[List[BillingPendingDTO]]:
        items = await self.pending_repo.list_available()
        return Return.ok([BillingPendingDTO.from_joined(item) for item in items])
