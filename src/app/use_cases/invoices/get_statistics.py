"""Get Invoice Statistics Use Case

Aggregates are computed in memory over all invoices.
"""

from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List
from libs.result import Result, Return
from src.app.repositories.invoice_repository import InvoiceRepository
from .dtos import InvoiceStatisticsDTO, MonthlyInvoiceStatsDTO, CustomerInvoiceStatsDTO

CENTS = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class GetInvoiceStatistics:
    """
    Use Case: Invoice totals overall, per month and per customer

    Business Rules:
    1. Months are keyed by issue_date as YYYY-MM, most recent first
    2. Customers are ordered by invoiced amount, largest first
    3. Invoices whose service is missing count only in the totals and months
    """

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self) -> Result[InvoiceStatisticsDTO]:
        details = await self.invoice_repo.list_all()

        total_amount = Decimal("0.00")
        months: Dict[str, List] = defaultdict(lambda: [0, Decimal("0.00")])
        customers: Dict[int, List] = defaultdict(lambda: [0, Decimal("0.00")])

        for detail in details:
            amount = detail.invoice.amount
            total_amount += amount

            month = months[detail.invoice.issue_date.strftime("%Y-%m")]
            month[0] += 1
            month[1] += amount

            if detail.service is not None:
                customer = customers[detail.service.customer_id]
                customer[0] += 1
                customer[1] += amount

        count = len(details)
        average = total_amount / count if count else Decimal("0.00")

        by_month = [
            MonthlyInvoiceStatsDTO(month=key, count=value[0], total_amount=_money(value[1]))
            for key, value in sorted(months.items(), reverse=True)
        ]
        by_customer = sorted(
            (
                CustomerInvoiceStatsDTO(customer_id=key, count=value[0], total_amount=_money(value[1]))
                for key, value in customers.items()
            ),
            key=lambda stats: stats.total_amount,
            reverse=True,
        )

        return Return.ok(
            InvoiceStatisticsDTO(
                total_invoices=count,
                total_amount=_money(total_amount),
                average_amount=_money(average),
                by_month=by_month,
                by_customer=by_customer,
            )
        )
