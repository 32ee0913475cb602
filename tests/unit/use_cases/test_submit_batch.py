"""Unit tests for SubmitBillingBatch and SubmitBillingBatchSync"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch
from libs.result import Return, Error
from src.app.repositories.billing_pending_repository import PendingWithService
from src.app.use_cases.billing_batches import (
    SubmitBillingBatch,
    SubmitBillingBatchSync,
    CreateBillingBatchCommandDTO,
    BatchProcessingResultDTO,
    FailedPendingDTO,
)
from src.app.use_cases.billing_batches.submit_batch_sync import merge_failures
from src.domain.batch_job import BatchJob, JobState
from src.domain.billing_batch import BatchStatus
from src.domain.billing_pending import BillingPending, PendingStatus
from src.domain.service import Service, ServiceStatus


def pending_item(pending_id, status=PendingStatus.PENDING):
    return PendingWithService(
        pending=BillingPending(id=pending_id, service_id=pending_id, status=status),
        service=Service(
            id=pending_id,
            service_date=date(2024, 1, 10),
            customer_id=1,
            amount=Decimal("100.00"),
            status=ServiceStatus.SENT_TO_BILL,
        ),
    )


def assign_id(batch):
    batch.id = 7
    return batch


@pytest.fixture
def mock_repos():
    batch_repo = MagicMock()
    batch_repo.create = AsyncMock(side_effect=assign_id)
    batch_repo.get_by_id = AsyncMock()

    pending_repo = MagicMock()
    pending_repo.get_by_ids_with_service = AsyncMock(
        return_value=[pending_item(1), pending_item(2, status=PendingStatus.INVOICED)]
    )

    receipt_book_repo = MagicMock()
    receipt_book_repo.ensure = AsyncMock()

    job_repo = MagicMock()
    job_repo.enqueue = AsyncMock(
        side_effect=lambda **kw: BatchJob(
            id=1,
            job_key=kw["job_key"],
            batch_id=kw["batch_id"],
            payload=kw["payload"],
            state=kw.get("state", JobState.WAITING),
            max_attempts=kw["attempts"],
        )
    )
    return batch_repo, pending_repo, receipt_book_repo, job_repo


def command(pending_ids):
    return CreateBillingBatchCommandDTO(
        issue_date=date(2024, 1, 31),
        receipt_book="A-0001",
        pending_ids=pending_ids,
    )


@pytest.mark.asyncio
class TestSubmitBillingBatch:

    async def test_partially_valid_batch_is_queued(self, mock_uow, mock_repos):
        """
        Given: Pending 1 is PENDING and pending 2 is INVOICED
        When: Submitting [1, 2]
        Then: The batch is created and queued with only pending 1
        And: Pending 2 is reported as failed
        """
        # Arrange
        batch_repo, pending_repo, receipt_book_repo, job_repo = mock_repos
        use_case = SubmitBillingBatch(
            uow=mock_uow,
            batch_repo=batch_repo,
            pending_repo=pending_repo,
            receipt_book_repo=receipt_book_repo,
            job_repo=job_repo,
        )

        # Act
        result = await use_case.execute(command([1, 2]))

        # Assert
        assert result.is_ok()
        response = result.value
        assert response.batch.id == 7
        assert response.batch.status == "PENDING_PROCESSING"
        assert response.batch.pending_ids == [1, 2]
        assert response.queue_info.job_id == "batch-7"
        assert response.queue_info.status == "queued"
        assert "GET /billing-batches/7/status" in response.queue_info.message
        assert [entry.id for entry in response.summary.failed_pendings] == [2]

        enqueue_kwargs = job_repo.enqueue.call_args.kwargs
        assert enqueue_kwargs["payload"] == {
            "batchId": 7,
            "pendingIds": [1],
            "issueDate": "2024-01-31",
            "receiptBook": "A-0001",
        }
        assert enqueue_kwargs["attempts"] == 3
        assert enqueue_kwargs["backoff_delay_ms"] == 2000
        receipt_book_repo.ensure.assert_called_once_with("A-0001")
        mock_uow.commit.assert_called_once()

    async def test_empty_list_is_rejected_without_writes(self, mock_uow, mock_repos):
        batch_repo, pending_repo, receipt_book_repo, job_repo = mock_repos
        use_case = SubmitBillingBatch(mock_uow, batch_repo, pending_repo, receipt_book_repo, job_repo)

        result = await use_case.execute(command([]))

        assert result.is_err()
        assert result.error.code == "EMPTY_BATCH"
        pending_repo.get_by_ids_with_service.assert_not_called()
        batch_repo.create.assert_not_called()

    async def test_no_valid_pending_creates_nothing(self, mock_uow, mock_repos):
        """
        Given: Every requested pending is already INVOICED
        When: Submitting
        Then: EMPTY_BATCH is returned and no batch or job is created
        """
        batch_repo, pending_repo, receipt_book_repo, job_repo = mock_repos
        pending_repo.get_by_ids_with_service.return_value = [
            pending_item(2, status=PendingStatus.INVOICED)
        ]
        use_case = SubmitBillingBatch(mock_uow, batch_repo, pending_repo, receipt_book_repo, job_repo)

        result = await use_case.execute(command([2]))

        assert result.is_err()
        assert result.error.code == "EMPTY_BATCH"
        batch_repo.create.assert_not_called()
        job_repo.enqueue.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_persistence_error_rolls_back(self, mock_uow, mock_repos):
        batch_repo, pending_repo, receipt_book_repo, job_repo = mock_repos
        job_repo.enqueue.side_effect = RuntimeError("connection lost")
        use_case = SubmitBillingBatch(mock_uow, batch_repo, pending_repo, receipt_book_repo, job_repo)

        result = await use_case.execute(command([1]))

        assert result.is_err()
        assert result.error.code == "SUBMIT_BATCH_FAILED"
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()


class TestMergeFailures:

    def test_first_reason_per_id_wins(self):
        merged = merge_failures(
            [FailedPendingDTO(id=2, reason="Billing pending not found")],
            [
                FailedPendingDTO(id=2, reason="Pending is already in status 'INVOICED'"),
                FailedPendingDTO(id=3, reason="Service not found for pending"),
            ],
        )

        assert [(entry.id, entry.reason) for entry in merged] == [
            (2, "Billing pending not found"),
            (3, "Service not found for pending"),
        ]


@pytest.mark.asyncio
class TestSubmitBillingBatchSync:

    def build(self, mock_uow, mock_repos):
        batch_repo, pending_repo, receipt_book_repo, job_repo = mock_repos
        invoice_repo = MagicMock()
        invoice_repo.list_by_batch = AsyncMock(return_value=[])
        return SubmitBillingBatchSync(
            uow=mock_uow,
            batch_repo=batch_repo,
            pending_repo=pending_repo,
            service_repo=MagicMock(),
            invoice_repo=invoice_repo,
            receipt_book_repo=receipt_book_repo,
            job_repo=job_repo,
        )

    async def test_job_is_claimed_and_run_inline(self, mock_uow, mock_repos):
        """
        Given: A partially valid submission
        When: Submitting synchronously
        Then: The job is created ACTIVE with a single attempt
        And: The response carries the processed totals with merged failures
        """
        # Arrange
        batch_repo, _, _, job_repo = mock_repos
        use_case = self.build(mock_uow, mock_repos)
        processed = BatchProcessingResultDTO(
            batch_id=7,
            status="PROCESSED",
            total_invoices=1,
            total_amount=Decimal("100.00"),
            invoice_numbers=["A-0001-00000001"],
            successful_pendings=[1],
        )
        use_case.runner.execute = AsyncMock(return_value=Return.ok(processed))

        async def processed_batch(batch_id, for_update=False):
            batch = batch_repo.create.call_args.args[0]
            batch.status = BatchStatus.PROCESSED
            batch.total_invoices = 1
            batch.total_amount = Decimal("100.00")
            return batch

        batch_repo.get_by_id.side_effect = processed_batch

        # Act
        result = await use_case.execute(command([1, 2]))

        # Assert
        assert result.is_ok()
        enqueue_kwargs = job_repo.enqueue.call_args.kwargs
        assert enqueue_kwargs["attempts"] == 1
        assert enqueue_kwargs["state"] == JobState.ACTIVE
        assert result.value.queue_info is None
        assert result.value.batch.status == "PROCESSED"
        assert result.value.summary.total_invoices == 1
        assert result.value.summary.successful_pendings == [1]
        assert [entry.id for entry in result.value.summary.failed_pendings] == [2]

    async def test_processing_failure_is_returned(self, mock_uow, mock_repos):
        use_case = self.build(mock_uow, mock_repos)
        use_case.runner.execute = AsyncMock(
            return_value=Return.err(
                Error(code="BATCH_PROCESSING_FAILED", message="Failed to process billing batch 7", reason="boom")
            )
        )

        result = await use_case.execute(command([1]))

        assert result.is_err()
        assert result.error.code == "BATCH_PROCESSING_FAILED"
        assert result.error.reason == "boom"

    async def test_empty_batch(self, mock_uow, mock_repos):
        use_case = self.build(mock_uow, mock_repos)

        result = await use_case.execute(command([]))

        assert result.error.code == "EMPTY_BATCH"
