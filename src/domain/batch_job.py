"""Batch Job Domain Entity

Durable queue entry for asynchronous billing batch processing.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, String, Integer, Text, JSON
from src.domain.base import BaseModel, IdType


class JobState(str, Enum):
    """Queue job states"""
    WAITING = "waiting"      # Ready to be claimed
    ACTIVE = "active"        # Claimed by a worker
    COMPLETED = "completed"  # Finished successfully
    FAILED = "failed"        # Attempts exhausted (or discarded)
    DELAYED = "delayed"      # Waiting for backoff before the next attempt


class BatchJob(BaseModel, table=True):
    """
    BatchJob - Queued processing request for a billing batch

    Domain Rules:
    - job_key is unique: batch-{id} for the first submission,
      batch-{id}-retry-{epoch_ms} for manual retries
    - At most one ACTIVE job per batch at any time
    - attempts_made never exceeds max_attempts
    - After a failed attempt the job is DELAYED for
      backoff_delay_ms * 2 ** (attempts_made - 1), or FAILED when exhausted
    """

    __tablename__ = "batch_jobs"
    __table_args__ = (
        Index('ix_batch_jobs_state_run_at', 'state', 'run_at'),
        Index('ix_batch_jobs_batch_id', 'batch_id'),
    )

    id: int = Field(
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique job identifier (auto-increment)"
    )

    job_key: str = Field(
        sa_column=Column(String(100), nullable=False, unique=True),
        description="Deterministic job key (e.g., batch-1)"
    )

    batch_id: int = Field(
        sa_column=Column(IdType, ForeignKey("billing_batches.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to BillingBatch"
    )

    payload: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="Job payload (batchId, pendingIds, issueDate, receiptBook)"
    )

    state: JobState = Field(
        default=JobState.WAITING,
        description="Job state"
    )

    attempts_made: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Number of attempts started so far"
    )

    max_attempts: int = Field(
        default=3,
        sa_column=Column(Integer, nullable=False, default=3),
        description="Maximum number of attempts"
    )

    backoff_delay_ms: int = Field(
        default=2000,
        sa_column=Column(Integer, nullable=False, default=2000),
        description="Base delay for exponential backoff in milliseconds"
    )

    run_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Earliest time the job may be claimed"
    )

    progress: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Progress of the current attempt (0-100)"
    )

    failed_reason: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Reason of the last failed attempt"
    )

    result: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Result summary of the successful attempt"
    )

    started_at: Optional[datetime] = Field(
        default=None,
        description="When the current attempt was claimed"
    )

    finished_at: Optional[datetime] = Field(
        default=None,
        description="When the job reached completed or failed"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    def has_attempts_left(self) -> bool:
        return self.attempts_made < self.max_attempts

    def next_backoff_ms(self) -> int:
        """Exponential backoff for the attempt that just failed"""
        return self.backoff_delay_ms * (2 ** max(self.attempts_made - 1, 0))
