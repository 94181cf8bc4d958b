"""Domain errors raised by the scheduling, directory and prescription services.

Each error carries a user-facing ``detail`` and the HTTP status the API layer
answers with, so a client can tell "slot taken" from "not allowed" from
"not found" without parsing messages.
"""

from fastapi import HTTPException, status


class SchedulerError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Request could not be completed.'

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(SchedulerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request.'


class AccessDenied(SchedulerError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied.'


class NotFound(SchedulerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'


class SlotConflict(SchedulerError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This time slot is already booked.'


class StoreError(SchedulerError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'The service is temporarily unavailable.'


def to_http_exception(exc: SchedulerError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.detail)
