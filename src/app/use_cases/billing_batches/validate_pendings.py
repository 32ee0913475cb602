"""Validate Pendings

Partitions requested billing pending ids into those that can be invoiced
and those rejected with a reason.
"""

import logging
from typing import List, NamedTuple
from src.app.repositories.billing_pending_repository import (
    BillingPendingRepository,
    PendingWithService,
)
from src.domain.billing_pending import PendingStatus
from .dtos import FailedPendingDTO

logger = logging.getLogger(__name__)

PENDING_NOT_FOUND = "Billing pending not found"
SERVICE_NOT_FOUND = "Service not found for pending"


class PendingValidation(NamedTuple):
    valid: List[PendingWithService]
    invalid: List[FailedPendingDTO]

    @property
    def valid_ids(self) -> List[int]:
        return [item.pending.id for item in self.valid]


class ValidatePendings:
    """
    Pending Validator

    Business Rules:
    1. Unknown ids are invalid ("Billing pending not found")
    2. Pendings not in PENDING status are invalid, naming the current status
    3. Pendings whose service link is missing are invalid, not fatal
    4. Valid pendings keep the order in which they were requested
    5. Duplicate ids are considered once

    Reads only. Called at submission for immediate feedback and again
    inside the processing transaction (with row locks) because state may
    have changed in between.
    """

    def __init__(self, pending_repo: BillingPendingRepository):
        self.pending_repo = pending_repo

    async def execute(self, pending_ids: List[int], for_update: bool = False) -> PendingValidation:
        """
        Validate pendings for invoicing

        Args:
            pending_ids: Requested pending ids
            for_update: Lock the found pending rows (inside a transaction)

        Returns:
            PendingValidation with valid pendings and rejected ids
        """
        requested = list(dict.fromkeys(pending_ids))
        found = await self.pending_repo.get_by_ids_with_service(requested, for_update=for_update)
        by_id = {item.pending.id: item for item in found}

        valid: List[PendingWithService] = []
        invalid: List[FailedPendingDTO] = []

        for pending_id in requested:
            item = by_id.get(pending_id)
            if item is None:
                invalid.append(FailedPendingDTO(id=pending_id, reason=PENDING_NOT_FOUND))
            elif item.pending.status != PendingStatus.PENDING:
                invalid.append(
                    FailedPendingDTO(
                        id=pending_id,
                        reason=f"Pending is already in status '{item.pending.status.value}'",
                    )
                )
            elif item.service is None:
                invalid.append(FailedPendingDTO(id=pending_id, reason=SERVICE_NOT_FOUND))
            else:
                valid.append(item)

        if invalid:
            logger.warning(
                f"Rejected {len(invalid)} of {len(requested)} pendings: "
                f"{[entry.id for entry in invalid]}"
            )

        return PendingValidation(valid=valid, invalid=invalid)
