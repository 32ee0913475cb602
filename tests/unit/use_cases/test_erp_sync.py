"""Unit tests for ERP sync use cases"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from src.adapter.services.erp_gateway import SimulatedErpGateway
from src.adapter.services.erp_sync_history import InMemoryErpSyncHistoryStore
from src.app.repositories.invoice_repository import InvoiceDetail
from src.app.services.erp_gateway import ErpDeliveryResult
from src.app.use_cases.erp_sync import (
    SyncInvoices,
    SyncBatch,
    PreviewSync,
    ConfirmSync,
    GetSyncDetail,
    GetSyncHistory,
    ErpSyncHistoryFilterDTO,
    accounting_entries,
    to_erp_record,
)
from src.domain.billing_batch import BillingBatch, BatchStatus
from src.domain.erp_sync import ErpSyncStatus
from src.domain.invoice import Invoice
from src.domain.service import Service, ServiceStatus


def detail(invoice_id, amount="121.00", with_service=True):
    return InvoiceDetail(
        invoice=Invoice(
            id=invoice_id,
            invoice_number=f"A-0001-{invoice_id:08d}",
            cae="17061234567890",
            issue_date=date(2024, 1, 31),
            amount=Decimal(amount),
            batch_id=1,
            pending_id=invoice_id,
        ),
        service=Service(
            id=invoice_id,
            service_date=date(2024, 1, 15),
            customer_id=5,
            amount=Decimal(amount),
            status=ServiceStatus.INVOICED,
        ) if with_service else None,
        receipt_book="A-0001",
    )


@pytest.fixture
def mock_invoice_repo():
    repo = MagicMock()
    repo.get_details_by_ids = AsyncMock(return_value=[detail(1), detail(2, "100.00")])
    repo.list_by_batch = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def history():
    return InMemoryErpSyncHistoryStore(clock=lambda: datetime(2024, 1, 31, 15, 30))


class TestErpFormat:

    def test_accounting_entries_split_vat(self):
        entries = accounting_entries(Decimal("121.00"))

        assert [(e.account_code, e.debit, e.credit) for e in entries] == [
            ("1.1.3.01", Decimal("121.00"), Decimal("0.00")),
            ("4.1.1.01", Decimal("0.00"), Decimal("100.00")),
            ("2.1.5.01", Decimal("0.00"), Decimal("21.00")),
        ]

    def test_credits_balance_debit_after_rounding(self):
        entries = accounting_entries(Decimal("100.00"))

        assert entries[1].credit == Decimal("82.64")
        assert entries[2].credit == Decimal("17.36")
        assert entries[1].credit + entries[2].credit == entries[0].debit

    def test_record_without_service(self):
        record = to_erp_record(detail(3, with_service=False))

        assert record.customer_id == 0
        assert record.service_date is None
        assert record.receipt_book == "A-0001"


@pytest.mark.asyncio
class TestSyncInvoices:

    async def test_successful_sync_is_recorded_as_sent(self, mock_invoice_repo, history):
        """
        Given: Two invoices and an ERP that accepts them
        When: Syncing
        Then: The ERP receives both records and the history holds a SENT entry
        """
        # Arrange
        gateway = MagicMock()
        gateway.send = AsyncMock(return_value=ErpDeliveryResult(success=True))

        # Act
        result = await SyncInvoices(mock_invoice_repo, gateway, history).execute([1, 2])

        # Assert
        assert result.is_ok()
        response = result.value
        assert response.sync_id == "SYNC-2024-000001"
        assert response.status == ErpSyncStatus.SENT
        assert response.summary.total_invoices == 2
        assert response.summary.total_amount == Decimal("221.00")
        assert response.summary.success is True
        assert response.summary.message == "Data successfully sent to ERP system"

        sent = gateway.send.call_args.args[0]
        assert [record["invoice_number"] for record in sent] == ["A-0001-00000001", "A-0001-00000002"]
        assert history.get("SYNC-2024-000001").status == ErpSyncStatus.SENT

    async def test_failed_delivery_is_recorded_as_error(self, mock_invoice_repo, history):
        gateway = SimulatedErpGateway(success_rate=0.9, latency_seconds=0, random_source=lambda: 0.95)

        result = await SyncInvoices(mock_invoice_repo, gateway, history).execute([1, 2])

        assert result.is_ok()
        assert result.value.status == ErpSyncStatus.ERROR
        assert result.value.summary.success is False
        assert result.value.summary.message == "Sync failed: Simulated ERP connection timeout"
        assert history.get(result.value.sync_id).error_message == "Simulated ERP connection timeout"

    async def test_unknown_invoices(self, mock_invoice_repo, history):
        mock_invoice_repo.get_details_by_ids.return_value = []
        gateway = MagicMock()
        gateway.send = AsyncMock()

        result = await SyncInvoices(mock_invoice_repo, gateway, history).execute([98, 99])

        assert result.error.code == "INVOICE_NOT_FOUND"
        gateway.send.assert_not_called()

    async def test_preview_does_not_record(self, mock_invoice_repo, history):
        result = await PreviewSync(mock_invoice_repo).execute([1, 2])

        assert len(result.value) == 2
        assert history.list() == ([], 0)


@pytest.mark.asyncio
class TestSyncBatch:

    async def test_batch_without_invoices(self, mock_invoice_repo, history):
        batch_repo = MagicMock()
        batch_repo.get_by_id = AsyncMock(
            return_value=BillingBatch(
                id=1, issue_date=date(2024, 1, 31), receipt_book="A-0001", status=BatchStatus.ERROR
            )
        )

        result = await SyncBatch(batch_repo, mock_invoice_repo, MagicMock(), history).execute(1)

        assert result.error.code == "ERP_SYNC_FAILED"
        assert result.error.message == "Batch has no invoices to sync"

    async def test_unknown_batch(self, mock_invoice_repo, history):
        batch_repo = MagicMock()
        batch_repo.get_by_id = AsyncMock(return_value=None)

        result = await SyncBatch(batch_repo, mock_invoice_repo, MagicMock(), history).execute(1)

        assert result.error.code == "BATCH_NOT_FOUND"


@pytest.mark.asyncio
class TestSyncHistory:

    async def test_confirm_sent_sync(self, history):
        record = history.append(ErpSyncStatus.SENT, [1], Decimal("121.00"))

        result = await ConfirmSync(history).execute(record.sync_id)

        assert result.value.status == ErpSyncStatus.CONFIRMED
        assert history.get(record.sync_id).status == ErpSyncStatus.CONFIRMED

    async def test_error_sync_cannot_be_confirmed(self, history):
        record = history.append(ErpSyncStatus.ERROR, [1], Decimal("121.00"), "timeout")

        result = await ConfirmSync(history).execute(record.sync_id)

        assert result.error.code == "ERP_SYNC_FAILED"
        assert "Only 'SENT' syncs can be confirmed" in result.error.message

    async def test_confirmed_sync_cannot_be_confirmed_again(self, history):
        record = history.append(ErpSyncStatus.SENT, [1], Decimal("121.00"))
        await ConfirmSync(history).execute(record.sync_id)

        result = await ConfirmSync(history).execute(record.sync_id)

        assert result.is_err()

    async def test_unknown_sync(self, history, mock_invoice_repo):
        assert (await ConfirmSync(history).execute("SYNC-2024-999999")).error.code == "SYNC_NOT_FOUND"
        assert (await GetSyncDetail(mock_invoice_repo, history).execute("nope")).error.code == "SYNC_NOT_FOUND"

    async def test_detail_of_failed_sync(self, history, mock_invoice_repo):
        record = history.append(ErpSyncStatus.ERROR, [1, 2], Decimal("221.00"), "timeout")

        result = await GetSyncDetail(mock_invoice_repo, history).execute(record.sync_id)

        assert result.value.summary.success is False
        assert result.value.summary.message == "timeout"
        assert len(result.value.data) == 2

    async def test_history_filters_and_paginates(self, history):
        for _ in range(3):
            history.append(ErpSyncStatus.SENT, [1], Decimal("1.00"))
        history.append(ErpSyncStatus.ERROR, [1], Decimal("1.00"), "timeout")

        result = await GetSyncHistory(history).execute(
            ErpSyncHistoryFilterDTO(status=ErpSyncStatus.SENT, page=1, limit=2)
        )

        page = result.value
        assert page.total == 3
        assert page.total_pages == 2
        assert [item.sync_id for item in page.data] == ["SYNC-2024-000003", "SYNC-2024-000002"]

    async def test_history_date_range_includes_whole_day(self, history):
        history.append(ErpSyncStatus.SENT, [1], Decimal("1.00"))

        result = await GetSyncHistory(history).execute(
            ErpSyncHistoryFilterDTO(date_from=date(2024, 1, 31), date_to=date(2024, 1, 31))
        )

        assert result.value.total == 1
