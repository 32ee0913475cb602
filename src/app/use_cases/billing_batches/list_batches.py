"""List Billing Batches Use Case"""

import math
from libs.result import Result, Return
from src.app.repositories.billing_batch_repository import BillingBatchRepository
from .dtos import BatchFilterDTO, BillingBatchDTO, PaginatedBatchesDTO


class ListBillingBatches:
    """
    Use Case: Paginated batch listing, newest first

    Items do not embed invoices; use GetBillingBatch for the detail.
    """

    def __init__(self, batch_repo: BillingBatchRepository):
        self.batch_repo = batch_repo

    async def execute(self, query: BatchFilterDTO) -> Result[PaginatedBatchesDTO]:
        batches, total = await self.batch_repo.list(
            status=query.status,
            receipt_book=query.receipt_book,
            date_from=query.date_from,
            date_to=query.date_to,
            limit=query.limit,
            offset=(query.page - 1) * query.limit,
        )

        return Return.ok(
            PaginatedBatchesDTO(
                data=[BillingBatchDTO.from_entity(batch) for batch in batches],
                total=total,
                page=query.page,
                limit=query.limit,
                total_pages=math.ceil(total / query.limit),
            )
        )
