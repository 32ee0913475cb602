"""Get Batch Status Use Case

Reports a batch together with the queue view of its latest job.
"""

from libs.result import Result, Return, Error
from src.app.repositories.billing_batch_repository import BillingBatchRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.batch_job_repository import BatchJobRepository
from src.app.use_cases.invoices.dtos import InvoiceDTO
from .dtos import BatchStatusDTO, BillingBatchDTO, JobInfoDTO


class GetBatchStatus:
    """
    Use Case: Poll the processing status of a batch

    The reported job is the most recent one of the batch, so after a retry
    the retry job is shown instead of the original batch-{id} job.
    """

    def __init__(
        self,
        batch_repo: BillingBatchRepository,
        invoice_repo: InvoiceRepository,
        job_repo: BatchJobRepository,
    ):
        self.batch_repo = batch_repo
        self.invoice_repo = invoice_repo
        self.job_repo = job_repo

    async def execute(self, batch_id: int) -> Result[BatchStatusDTO]:
        batch = await self.batch_repo.get_by_id(batch_id)
        if not batch:
            return Return.err(
                Error(
                    code="BATCH_NOT_FOUND",
                    message=f"BillingBatch with identifier '{batch_id}' not found",
                )
            )

        invoices = await self.invoice_repo.list_by_batch(batch_id)
        job = await self.job_repo.get_latest_for_batch(batch_id)

        job_info = None
        if job:
            job_info = JobInfoDTO(
                job_id=job.job_key,
                status=job.state.value,
                progress=job.progress,
                attempts_made=job.attempts_made,
                failed_reason=job.failed_reason,
            )

        return Return.ok(
            BatchStatusDTO(
                batch=BillingBatchDTO.from_entity(
                    batch, [InvoiceDTO.from_detail(detail) for detail in invoices]
                ),
                job_info=job_info,
            )
        )
