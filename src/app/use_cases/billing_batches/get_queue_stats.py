"""Get Queue Stats Use Case"""

from libs.result import Result, Return
from src.app.repositories.batch_job_repository import BatchJobRepository
from .dtos import QueueStatsDTO


class GetQueueStats:
    """Use Case: Count batch jobs per queue state"""

    def __init__(self, job_repo: BatchJobRepository):
        self.job_repo = job_repo

    async def execute(self) -> Result[QueueStatsDTO]:
        counts = await self.job_repo.stats()
        return Return.ok(QueueStatsDTO(**counts))
