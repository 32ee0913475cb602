"""Unit tests for ProcessBillingBatch"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from src.app.repositories.billing_pending_repository import PendingWithService
from src.app.use_cases.billing_batches import ProcessBillingBatch, ProcessBatchCommandDTO
from src.domain.billing_batch import BillingBatch, BatchStatus
from src.domain.billing_pending import BillingPending, PendingStatus
from src.domain.receipt_book import ReceiptBook
from src.domain.service import Service, ServiceStatus


def pending_item(pending_id, amount):
    return PendingWithService(
        pending=BillingPending(id=pending_id, service_id=pending_id, status=PendingStatus.PENDING),
        service=Service(
            id=pending_id,
            service_date=date(2024, 1, 10),
            customer_id=1,
            amount=Decimal(amount),
            status=ServiceStatus.SENT_TO_BILL,
        ),
    )


@pytest.fixture
def batch():
    return BillingBatch(
        id=1,
        issue_date=date(2024, 1, 31),
        receipt_book="A-0001",
        status=BatchStatus.PENDING_PROCESSING,
        pending_ids=[1, 2],
    )


@pytest.fixture
def repos(batch):
    batch_repo = MagicMock()
    batch_repo.get_by_id = AsyncMock(return_value=batch)
    batch_repo.mark_in_process = AsyncMock(return_value=True)
    batch_repo.update = AsyncMock(side_effect=lambda b: b)

    pending_repo = MagicMock()
    pending_repo.get_by_ids_with_service = AsyncMock(
        return_value=[pending_item(1, "100.50"), pending_item(2, "200.25")]
    )
    pending_repo.update = AsyncMock(side_effect=lambda p: p)

    service_repo = MagicMock()
    service_repo.update = AsyncMock(side_effect=lambda s: s)

    invoice_repo = MagicMock()
    invoice_repo.get_last_invoice_number = AsyncMock(return_value="A-0001-00000007")
    invoice_repo.create = AsyncMock(side_effect=lambda i: i)

    receipt_book_repo = MagicMock()
    receipt_book_repo.ensure = AsyncMock()
    receipt_book_repo.lock = AsyncMock(return_value=ReceiptBook(id=1, code="A-0001"))

    return {
        "batch_repo": batch_repo,
        "pending_repo": pending_repo,
        "service_repo": service_repo,
        "invoice_repo": invoice_repo,
        "receipt_book_repo": receipt_book_repo,
    }


@pytest.mark.asyncio
class TestProcessBillingBatch:

    async def test_success_invoices_all_valid_pendings(self, mock_uow, repos, batch):
        """
        Given: A batch with two valid pendings and last number A-0001-00000007
        When: Processing the batch
        Then: Two consecutive invoices are created and the batch is PROCESSED
        """
        # Arrange
        use_case = ProcessBillingBatch(uow=mock_uow, **repos)

        # Act
        result = await use_case.execute(ProcessBatchCommandDTO(batch_id=1))

        # Assert
        assert result.is_ok()
        assert result.value.invoice_numbers == ["A-0001-00000008", "A-0001-00000009"]
        assert result.value.total_invoices == 2
        assert result.value.total_amount == Decimal("300.75")
        assert result.value.successful_pendings == [1, 2]

        assert batch.status == BatchStatus.PROCESSED
        assert batch.total_invoices == 2
        assert batch.total_amount == Decimal("300.75")
        assert batch.processing_completed_at is not None

        created = [call.args[0] for call in repos["invoice_repo"].create.call_args_list]
        assert [invoice.pending_id for invoice in created] == [1, 2]
        assert all(invoice.issue_date == date(2024, 1, 31) for invoice in created)
        assert all(len(invoice.cae) == 14 for invoice in created)

        updated_pendings = [call.args[0] for call in repos["pending_repo"].update.call_args_list]
        assert all(p.status == PendingStatus.INVOICED for p in updated_pendings)
        updated_services = [call.args[0] for call in repos["service_repo"].update.call_args_list]
        assert all(s.status == ServiceStatus.INVOICED for s in updated_services)

        repos["receipt_book_repo"].lock.assert_called_once_with("A-0001")
        assert mock_uow.commit.call_count == 3
        mock_uow.rollback.assert_not_called()

    async def test_failure_rolls_back_and_marks_error(self, mock_uow, repos, batch):
        """
        Given: The second invoice insert fails
        When: Processing the batch
        Then: The unit is rolled back and the batch is left in ERROR
        """
        # Arrange
        calls = {"count": 0}

        async def failing_create(invoice):
            calls["count"] += 1
            if calls["count"] == 2:
                raise RuntimeError("duplicate invoice number")
            return invoice

        repos["invoice_repo"].create = AsyncMock(side_effect=failing_create)
        use_case = ProcessBillingBatch(uow=mock_uow, **repos)

        # Act
        result = await use_case.execute(ProcessBatchCommandDTO(batch_id=1))

        # Assert
        assert result.is_err()
        assert result.error.code == "BATCH_PROCESSING_FAILED"
        assert result.error.reason == "duplicate invoice number"
        mock_uow.rollback.assert_called_once()
        assert batch.status == BatchStatus.ERROR
        assert batch.error_message == "duplicate invoice number"

    async def test_no_valid_pendings_fails_batch(self, mock_uow, repos, batch):
        repos["pending_repo"].get_by_ids_with_service.return_value = []
        use_case = ProcessBillingBatch(uow=mock_uow, **repos)

        result = await use_case.execute(ProcessBatchCommandDTO(batch_id=1))

        assert result.is_err()
        assert result.error.reason == "No valid pendings to process"
        assert batch.status == BatchStatus.ERROR
        repos["invoice_repo"].create.assert_not_called()

    async def test_explicit_pending_ids_override_batch(self, mock_uow, repos):
        use_case = ProcessBillingBatch(uow=mock_uow, **repos)

        await use_case.execute(ProcessBatchCommandDTO(batch_id=1, pending_ids=[2]))

        repos["pending_repo"].get_by_ids_with_service.assert_called_once_with([2], for_update=True)

    async def test_receipt_book_is_committed_before_locking(self, mock_uow, repos):
        """
        Given: A batch on a receipt book
        When: Processing the batch
        Then: The receipt book row is ensured and committed before the lock is taken
        """
        # Arrange
        order = MagicMock()
        order.attach_mock(repos["receipt_book_repo"].ensure, "ensure")
        order.attach_mock(mock_uow.commit, "commit")
        order.attach_mock(repos["receipt_book_repo"].lock, "lock")
        use_case = ProcessBillingBatch(uow=mock_uow, **repos)

        # Act
        await use_case.execute(ProcessBatchCommandDTO(batch_id=1))

        # Assert
        names = [c[0] for c in order.mock_calls]
        ensure_at = names.index("ensure")
        assert names[ensure_at:ensure_at + 3] == ["ensure", "commit", "lock"]

    async def test_processed_batch_is_left_untouched(self, mock_uow, repos, batch):
        """
        Given: A batch already PROCESSED
        When: The same job is delivered again
        Then: Nothing is written and the stored totals are returned
        """
        batch.status = BatchStatus.PROCESSED
        batch.total_invoices = 2
        batch.total_amount = Decimal("300.75")
        use_case = ProcessBillingBatch(uow=mock_uow, **repos)

        result = await use_case.execute(ProcessBatchCommandDTO(batch_id=1))

        assert result.is_ok()
        assert result.value.status == "PROCESSED"
        assert result.value.total_invoices == 2
        repos["batch_repo"].mark_in_process.assert_not_called()
        repos["invoice_repo"].create.assert_not_called()

    async def test_batch_not_found(self, mock_uow, repos):
        repos["batch_repo"].get_by_id.return_value = None
        use_case = ProcessBillingBatch(uow=mock_uow, **repos)

        result = await use_case.execute(ProcessBatchCommandDTO(batch_id=404))

        assert result.is_err()
        assert result.error.code == "BATCH_NOT_FOUND"

    async def test_batch_in_process_is_rejected(self, mock_uow, repos, batch):
        batch.status = BatchStatus.IN_PROCESS
        repos["batch_repo"].mark_in_process.return_value = False
        use_case = ProcessBillingBatch(uow=mock_uow, **repos)

        result = await use_case.execute(ProcessBatchCommandDTO(batch_id=1))

        assert result.is_err()
        assert result.error.code == "INVALID_STATE_TRANSITION"
        repos["invoice_repo"].create.assert_not_called()

    async def test_progress_is_reported_per_invoice(self, mock_uow, repos):
        reported = []

        async def reporter(progress):
            reported.append(progress)

        use_case = ProcessBillingBatch(uow=mock_uow, progress_reporter=reporter, **repos)

        await use_case.execute(ProcessBatchCommandDTO(batch_id=1))

        assert reported == [50, 100]

    async def test_progress_errors_do_not_fail_processing(self, mock_uow, repos):
        reporter = AsyncMock(side_effect=RuntimeError("database is locked"))
        use_case = ProcessBillingBatch(uow=mock_uow, progress_reporter=reporter, **repos)

        result = await use_case.execute(ProcessBatchCommandDTO(batch_id=1))

        assert result.is_ok()
