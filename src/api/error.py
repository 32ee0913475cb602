"""API error types

Use case errors are raised as ClientError and rendered by the app as
{"error": {"code", "message", "reason"?}}.
"""

from fastapi import HTTPException, status
from libs.result import Error

STATUS_BY_CODE = {
    "EMPTY_BATCH": status.HTTP_400_BAD_REQUEST,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "INVALID_STATE_TRANSITION": status.HTTP_400_BAD_REQUEST,
    "BUSINESS_RULE_VIOLATION": status.HTTP_400_BAD_REQUEST,
    "PENDING_ALREADY_INVOICED": status.HTTP_409_CONFLICT,
    "BATCH_PROCESSING_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "ERP_SYNC_FAILED": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(error: Error) -> int:
    if error.code in STATUS_BY_CODE:
        return STATUS_BY_CODE[error.code]
    if error.code.endswith("_NOT_FOUND"):
        return status.HTTP_404_NOT_FOUND
    if error.code.endswith("_FAILED"):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


class ClientError(HTTPException):
    """HTTP error carrying a use case Error"""

    def __init__(self, error: Error, status_code: int = None):
        self.error = error
        super().__init__(
            status_code=status_code or status_for(error),
            detail=error.to_dict(),
        )
