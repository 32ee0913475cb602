"""Get Pending Summary Use Case"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List
from libs.result import Result, Return
from src.app.repositories.billing_pending_repository import BillingPendingRepository
from .dtos import PendingSummaryDTO, CustomerPendingSummaryDTO

CENTS = Decimal("0.01")


class GetPendingSummary:
    """
    Use Case: Count and total of the PENDING pendings

    Pendings without a service are counted but add no amount and no
    customer group.
    """

    def __init__(self, pending_repo: BillingPendingRepository):
        self.pending_repo = pending_repo

    async def execute(self) -> Result[PendingSummaryDTO]:
        items = await self.pending_repo.list_available()

        total_amount = Decimal("0.00")
        by_customer: Dict[int, List] = {}

        for item in items:
            if item.service is None:
                continue
            total_amount += item.service.amount
            group = by_customer.setdefault(item.service.customer_id, [0, Decimal("0.00")])
            group[0] += 1
            group[1] += item.service.amount

        return Return.ok(
            PendingSummaryDTO(
                total_pending=len(items),
                total_amount=total_amount.quantize(CENTS, rounding=ROUND_HALF_UP),
                by_customer=[
                    CustomerPendingSummaryDTO(
                        customer_id=customer_id,
                        count=count,
                        total_amount=amount.quantize(CENTS, rounding=ROUND_HALF_UP),
                    )
                    for customer_id, (count, amount) in by_customer.items()
                ],
            )
        )
