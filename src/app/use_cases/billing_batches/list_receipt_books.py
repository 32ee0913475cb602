"""List Receipt Books Use Case"""

from typing import List
from libs.result import Result, Return
from src.app.repositories.billing_batch_repository import BillingBatchRepository


class ListReceiptBooks:
    """Use Case: Distinct receipt books used by batches, ascending"""

    def __init__(self, batch_repo: BillingBatchRepository):
        self.batch_repo = batch_repo

    async def execute(self) -> Result[List[str]]:
        return Return.ok(await self.batch_repo.list_receipt_books())
