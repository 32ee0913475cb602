"""Integration tests for billing batch submission and processing

Tests cover:
- Partially valid submissions
- Empty submissions leave no batch behind
- Concurrent batches on the same receipt book get distinct consecutive numbers
- A failure mid-batch rolls back every invoice and state change
- Retry after a pending was cancelled
"""

import asyncio
import pytest
from datetime import date
from decimal import Decimal
from sqlmodel import select, func

from src.adapter.repositories import (
    SqlAlchemyBatchJobRepository,
    SqlAlchemyBillingBatchRepository,
    SqlAlchemyBillingPendingRepository,
    SqlAlchemyInvoiceRepository,
    SqlAlchemyReceiptBookRepository,
    SqlAlchemyServiceRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.billing_batches import (
    CreateBillingBatchCommandDTO,
    ProcessBatchCommandDTO,
    ProcessBillingBatch,
    RetryBillingBatch,
    SubmitBillingBatch,
    SubmitBillingBatchSync,
)
from src.app.use_cases.pendings import CancelBillingPending
from src.domain.batch_job import BatchJob, JobState
from src.domain.billing_batch import BillingBatch, BatchStatus
from src.domain.billing_pending import BillingPending, PendingStatus
from src.domain.invoice import Invoice
from src.domain.service import Service, ServiceStatus
from src.worker.billing_batch_worker import BillingBatchWorker
from tests.integration.factories import create_pendings


class FailingInvoiceRepository(SqlAlchemyInvoiceRepository):
    """Raises on the n-th invoice insert"""

    def __init__(self, session, fail_on: int = 2):
        super().__init__(session)
        self.fail_on = fail_on
        self.created = 0

    async def create(self, invoice):
        self.created += 1
        if self.created == self.fail_on:
            raise RuntimeError("simulated insert failure")
        return await super().create(invoice)


class UnrecordableJobRepository(SqlAlchemyBatchJobRepository):
    """Cannot record a failed attempt"""

    async def fail(self, job, reason, now=None):
        raise RuntimeError("job store unavailable")


def sync_use_case(session, invoice_repo=None, job_repo=None):
    return SubmitBillingBatchSync(
        uow=SqlAlchemyUnitOfWork(session),
        batch_repo=SqlAlchemyBillingBatchRepository(session),
        pending_repo=SqlAlchemyBillingPendingRepository(session),
        service_repo=SqlAlchemyServiceRepository(session),
        invoice_repo=invoice_repo or SqlAlchemyInvoiceRepository(session),
        receipt_book_repo=SqlAlchemyReceiptBookRepository(session),
        job_repo=job_repo or SqlAlchemyBatchJobRepository(session),
    )


def processor(session):
    return ProcessBillingBatch(
        uow=SqlAlchemyUnitOfWork(session),
        batch_repo=SqlAlchemyBillingBatchRepository(session),
        pending_repo=SqlAlchemyBillingPendingRepository(session),
        service_repo=SqlAlchemyServiceRepository(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        receipt_book_repo=SqlAlchemyReceiptBookRepository(session),
    )


def command(pending_ids, receipt_book="A-0001"):
    return CreateBillingBatchCommandDTO(
        issue_date=date(2024, 1, 31),
        receipt_book=receipt_book,
        pending_ids=pending_ids,
    )


async def count(session, model):
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestSubmitAndProcess:

    @pytest.mark.asyncio
    async def test_partially_valid_batch_invoices_valid_pendings(self, db_session, session_factory):
        """
        Given: Three pendings, the second already INVOICED
        When: The batch is submitted synchronously
        Then: Two invoices are issued with consecutive numbers
        And: The INVOICED pending is reported as failed
        """
        # Arrange
        p1, p2, p3 = await create_pendings(db_session, ["100.00", "250.50", "49.50"])
        pending = await db_session.get(BillingPending, p2)
        pending.status = PendingStatus.INVOICED
        db_session.add(pending)
        await db_session.commit()

        # Act
        result = await sync_use_case(db_session).execute(command([p1, p2, p3]))

        # Assert
        assert result.is_ok()
        response = result.value
        assert response.batch.status == "PROCESSED"
        assert [i.invoice_number for i in response.batch.invoices] == [
            "A-0001-00000001",
            "A-0001-00000002",
        ]
        assert response.summary.total_invoices == 2
        assert response.summary.total_amount == Decimal("149.50")
        assert response.summary.successful_pendings == [p1, p3]
        assert [(f.id, f.reason) for f in response.summary.failed_pendings] == [
            (p2, "Pending is already in status 'INVOICED'")
        ]

        async with session_factory() as fresh:
            statuses = (await fresh.execute(select(Service.status))).scalars().all()
            assert statuses.count(ServiceStatus.INVOICED) == 2
            job = (await fresh.execute(select(BatchJob))).scalar_one()
            assert job.job_key == f"batch-{response.batch.id}"
            assert job.state == JobState.COMPLETED

    @pytest.mark.asyncio
    async def test_empty_and_fully_invalid_batches_create_nothing(self, db_session):
        """
        Given: No pending ids, then only unknown pending ids
        When: Submitting either batch
        Then: EMPTY_BATCH is returned and no batch row exists
        """
        empty = await sync_use_case(db_session).execute(command([]))
        unknown = await sync_use_case(db_session).execute(command([404, 405]))

        assert empty.error.code == "EMPTY_BATCH"
        assert unknown.error.code == "EMPTY_BATCH"
        assert await count(db_session, BillingBatch) == 0
        assert await count(db_session, BatchJob) == 0

    @pytest.mark.asyncio
    async def test_next_batch_continues_the_sequence(self, db_session):
        first = await create_pendings(db_session, ["10.00", "20.00"])
        second = await create_pendings(db_session, ["30.00"])

        await sync_use_case(db_session).execute(command(first))
        result = await sync_use_case(db_session).execute(command(second))

        assert [i.invoice_number for i in result.value.batch.invoices] == ["A-0001-00000003"]

    @pytest.mark.asyncio
    async def test_concurrent_batches_get_distinct_consecutive_numbers(self, db_session, session_factory):
        """
        Given: Two queued batches on receipt book A-0001
        When: Both are processed at the same time in separate sessions
        Then: All invoice numbers are distinct and each batch's run is consecutive
        """
        # Arrange
        first = await create_pendings(db_session, ["10.00", "20.00", "30.00"])
        second = await create_pendings(db_session, ["40.00", "50.00"])
        batch_ids = []
        for pending_ids in (first, second):
            submit = SubmitBillingBatch(
                uow=SqlAlchemyUnitOfWork(db_session),
                batch_repo=SqlAlchemyBillingBatchRepository(db_session),
                pending_repo=SqlAlchemyBillingPendingRepository(db_session),
                receipt_book_repo=SqlAlchemyReceiptBookRepository(db_session),
                job_repo=SqlAlchemyBatchJobRepository(db_session),
            )
            batch_ids.append((await submit.execute(command(pending_ids))).value.batch.id)

        async def process(batch_id):
            async with session_factory() as session:
                return await processor(session).execute(ProcessBatchCommandDTO(batch_id=batch_id))

        # Act
        results = await asyncio.gather(*(process(batch_id) for batch_id in batch_ids))

        # Assert
        assert all(result.is_ok() for result in results)
        numbers = [n for result in results for n in result.value.invoice_numbers]
        assert sorted(numbers) == [f"A-0001-{seq:08d}" for seq in range(1, 6)]
        for result in results:
            sequences = [int(n.rsplit("-", 1)[1]) for n in result.value.invoice_numbers]
            assert sequences == list(range(sequences[0], sequences[0] + len(sequences)))

    @pytest.mark.asyncio
    async def test_failure_mid_batch_rolls_back_everything(self, db_session, session_factory):
        """
        Given: Three valid pendings and an invoice insert that fails on the second invoice
        When: The batch is processed
        Then: No invoice exists, pendings stay PENDING and the batch is in ERROR
        """
        # Arrange
        pending_ids = await create_pendings(db_session, ["10.00", "20.00", "30.00"])
        failing_repo = FailingInvoiceRepository(db_session, fail_on=2)

        # Act
        result = await sync_use_case(db_session, invoice_repo=failing_repo).execute(command(pending_ids))

        # Assert
        assert result.is_err()
        assert result.error.code == "BATCH_PROCESSING_FAILED"
        assert result.error.reason == "simulated insert failure"

        async with session_factory() as fresh:
            assert await count(fresh, Invoice) == 0
            pendings = (await fresh.execute(select(BillingPending))).scalars().all()
            assert {p.status for p in pendings} == {PendingStatus.PENDING}
            services = (await fresh.execute(select(Service))).scalars().all()
            assert {s.status for s in services} == {ServiceStatus.SENT_TO_BILL}
            batch = (await fresh.execute(select(BillingBatch))).scalar_one()
            assert batch.status == BatchStatus.ERROR
            assert batch.error_message == "simulated insert failure"
            assert batch.total_invoices == 0

        # The sequence is untouched: the next batch starts at 1
        retry_ids = await create_pendings(db_session, ["5.00"])
        next_result = await sync_use_case(db_session).execute(command(retry_ids))
        assert next_result.value.batch.invoices[0].invoice_number == "A-0001-00000001"

    @pytest.mark.asyncio
    async def test_retry_after_cancelled_pending(self, engine, db_session, session_factory):
        """
        Given: A batch in ERROR whose second pending was then cancelled
        When: The batch is retried and the worker runs
        Then: The batch is PROCESSED with the two remaining pendings
        """
        # Arrange
        p1, p2, p3 = await create_pendings(db_session, ["10.00", "20.00", "30.00"])
        failed = await sync_use_case(
            db_session, invoice_repo=FailingInvoiceRepository(db_session, fail_on=1)
        ).execute(command([p1, p2, p3]))
        assert failed.error.code == "BATCH_PROCESSING_FAILED"

        async with session_factory() as session:
            batch_id = (await session.execute(select(BillingBatch.id))).scalar_one()
            cancelled = await CancelBillingPending(
                uow=SqlAlchemyUnitOfWork(session),
                pending_repo=SqlAlchemyBillingPendingRepository(session),
                service_repo=SqlAlchemyServiceRepository(session),
            ).execute(p2)
            assert cancelled.is_ok()

            retried = await RetryBillingBatch(
                uow=SqlAlchemyUnitOfWork(session),
                batch_repo=SqlAlchemyBillingBatchRepository(session),
                job_repo=SqlAlchemyBatchJobRepository(session),
            ).execute(batch_id)
            assert retried.is_ok()

        worker = BillingBatchWorker(db_uri=engine.url.render_as_string(hide_password=False))

        # Act
        try:
            run = await worker.run_once()
        finally:
            await worker.shutdown()

        # Assert
        assert run.claimed == 1
        assert run.completed == 1

        async with session_factory() as fresh:
            batch = await fresh.get(BillingBatch, batch_id)
            assert batch.status == BatchStatus.PROCESSED
            assert batch.total_invoices == 2
            assert batch.total_amount == Decimal("40.00")
            assert batch.error_message is None

            job = await SqlAlchemyBatchJobRepository(fresh).get_latest_for_batch(batch_id)
            assert job.job_key == retried.value.job_id
            assert job.state == JobState.COMPLETED
            assert job.result["failed_pendings"] == [{"id": p2, "reason": "Billing pending not found"}]

            service_statuses = (await fresh.execute(select(Service.status))).scalars().all()
            assert sorted(s.value for s in service_statuses) == ["CREATED", "INVOICED", "INVOICED"]

    @pytest.mark.asyncio
    async def test_retry_rejected_for_processed_batch(self, db_session):
        pending_ids = await create_pendings(db_session, ["10.00"])
        processed = await sync_use_case(db_session).execute(command(pending_ids))

        result = await RetryBillingBatch(
            uow=SqlAlchemyUnitOfWork(db_session),
            batch_repo=SqlAlchemyBillingBatchRepository(db_session),
            job_repo=SqlAlchemyBatchJobRepository(db_session),
        ).execute(processed.value.batch.id)

        assert result.error.code == "INVALID_STATE_TRANSITION"
        assert result.error.message == (
            "Cannot retry batch in status 'PROCESSED'. Only ERROR batches can be retried."
        )


class PendingRepositoryWithHook(SqlAlchemyBillingPendingRepository):
    """Runs a coroutine right after a pending has been read"""

    def __init__(self, session, after_read):
        super().__init__(session)
        self.after_read = after_read

    async def get_with_service(self, pending_id, for_update=False):
        item = await super().get_with_service(pending_id, for_update=for_update)
        await self.after_read()
        return item


class TestCancelDuringProcessing:

    @pytest.mark.asyncio
    async def test_pending_invoiced_while_cancel_runs_is_kept(self, db_session, session_factory):
        """
        Given: A queued batch with one pending
        When: A cancel reads the pending as PENDING and the batch invoices it before the cancel writes
        Then: The cancel is rejected with PENDING_ALREADY_INVOICED
        And: The pending, its service and the invoice stay INVOICED
        """
        # Arrange
        (pending_id,) = await create_pendings(db_session, ["75.00"])
        submit = SubmitBillingBatch(
            uow=SqlAlchemyUnitOfWork(db_session),
            batch_repo=SqlAlchemyBillingBatchRepository(db_session),
            pending_repo=SqlAlchemyBillingPendingRepository(db_session),
            receipt_book_repo=SqlAlchemyReceiptBookRepository(db_session),
            job_repo=SqlAlchemyBatchJobRepository(db_session),
        )
        batch_id = (await submit.execute(command([pending_id]))).value.batch.id
        processed = []

        async def process_batch():
            async with session_factory() as session:
                processed.append(
                    await processor(session).execute(ProcessBatchCommandDTO(batch_id=batch_id))
                )

        # Act
        async with session_factory() as session:
            cancel = CancelBillingPending(
                uow=SqlAlchemyUnitOfWork(session),
                pending_repo=PendingRepositoryWithHook(session, process_batch),
                service_repo=SqlAlchemyServiceRepository(session),
            )
            cancelled = await cancel.execute(pending_id)

        # Assert
        assert processed[0].is_ok()
        assert processed[0].value.invoice_numbers == ["A-0001-00000001"]
        assert cancelled.is_err()
        assert cancelled.error.code == "PENDING_ALREADY_INVOICED"

        async with session_factory() as fresh:
            pending = await fresh.get(BillingPending, pending_id)
            assert pending is not None
            assert pending.status == PendingStatus.INVOICED
            service = await fresh.get(Service, pending.service_id)
            assert service.status == ServiceStatus.INVOICED
            invoices = (await fresh.execute(select(Invoice))).scalars().all()
            assert [i.pending_id for i in invoices] == [pending_id]


class TestRetryRecovery:

    @pytest.mark.asyncio
    async def test_retry_recovers_batch_whose_job_stayed_active(self, engine, db_session, session_factory):
        """
        Given: A batch in ERROR whose job stayed active because its failure could not be recorded
        When: The batch is retried and the worker runs
        Then: The stale job is failed, the retry job is claimed and the batch is PROCESSED
        """
        # Arrange
        pending_ids = await create_pendings(db_session, ["10.00", "20.00"])
        failed = await sync_use_case(
            db_session,
            invoice_repo=FailingInvoiceRepository(db_session, fail_on=1),
            job_repo=UnrecordableJobRepository(db_session),
        ).execute(command(pending_ids))
        assert failed.error.code == "BATCH_PROCESSING_FAILED"

        async with session_factory() as session:
            batch_id = (await session.execute(select(BillingBatch.id))).scalar_one()
            stale = await SqlAlchemyBatchJobRepository(session).get_by_key(f"batch-{batch_id}")
            assert stale.state == JobState.ACTIVE

            retried = await RetryBillingBatch(
                uow=SqlAlchemyUnitOfWork(session),
                batch_repo=SqlAlchemyBillingBatchRepository(session),
                job_repo=SqlAlchemyBatchJobRepository(session),
            ).execute(batch_id)
            assert retried.is_ok()

        worker = BillingBatchWorker(db_uri=engine.url.render_as_string(hide_password=False))

        # Act
        try:
            run = await worker.run_once()
        finally:
            await worker.shutdown()

        # Assert
        assert run.claimed == 1
        assert run.completed == 1

        async with session_factory() as fresh:
            batch = await fresh.get(BillingBatch, batch_id)
            assert batch.status == BatchStatus.PROCESSED
            assert batch.total_invoices == 2

            jobs = (await fresh.execute(select(BatchJob).order_by(BatchJob.id))).scalars().all()
            assert [(j.job_key, j.state) for j in jobs] == [
                (f"batch-{batch_id}", JobState.FAILED),
                (retried.value.job_id, JobState.COMPLETED),
            ]
            assert jobs[0].failed_reason == "Superseded by retry"
