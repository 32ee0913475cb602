"""Conversion of invoices to ERP records

Amounts are VAT inclusive; the accounting entries split them with a 21%
rate: receivable debit for the full amount, net sales and VAT credits.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List
from src.app.repositories.invoice_repository import InvoiceDetail
from .dtos import AccountingEntryDTO, ErpInvoiceDataDTO

VAT_FACTOR = Decimal("1.21")
CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

RECEIVABLES = ("1.1.3.01", "Cuentas por Cobrar")
SERVICE_SALES = ("4.1.1.01", "Ventas de Servicios")
VAT_PAYABLE = ("2.1.5.01", "IVA Débito Fiscal")


def accounting_entries(amount: Decimal) -> List[AccountingEntryDTO]:
    net = amount / VAT_FACTOR
    return [
        AccountingEntryDTO(
            account_code=RECEIVABLES[0], account_name=RECEIVABLES[1], debit=amount, credit=ZERO
        ),
        AccountingEntryDTO(
            account_code=SERVICE_SALES[0],
            account_name=SERVICE_SALES[1],
            debit=ZERO,
            credit=net.quantize(CENTS, rounding=ROUND_HALF_UP),
        ),
        AccountingEntryDTO(
            account_code=VAT_PAYABLE[0],
            account_name=VAT_PAYABLE[1],
            debit=ZERO,
            credit=(amount - net).quantize(CENTS, rounding=ROUND_HALF_UP),
        ),
    ]


def to_erp_record(detail: InvoiceDetail) -> ErpInvoiceDataDTO:
    invoice, service = detail.invoice, detail.service
    return ErpInvoiceDataDTO(
        invoice_number=invoice.invoice_number,
        cae=invoice.cae,
        issue_date=invoice.issue_date,
        amount=invoice.amount,
        customer_id=service.customer_id if service else 0,
        service_date=service.service_date if service else None,
        receipt_book=detail.receipt_book or "",
        batch_id=invoice.batch_id,
        accounting_entries=accounting_entries(invoice.amount),
    )


def total_of(records: List[ErpInvoiceDataDTO]) -> Decimal:
    return sum((record.amount for record in records), ZERO).quantize(CENTS, rounding=ROUND_HALF_UP)
