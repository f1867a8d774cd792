# accounting/api/errors.py

"""
DOMAIN ERROR -> HTTP RESPONSE

One place that maps AccountingServiceError subclasses to status codes.
Payload: {"detail", "code", "retryable", ...error specific fields}
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import (
    AccountingServiceError,
    ConcurrentModificationError,
    InvalidStateTransitionError,
    RecordNotFoundError,
)

STATUS_BY_ERROR = (
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStateTransitionError, status.HTTP_409_CONFLICT),
    (ConcurrentModificationError, status.HTTP_409_CONFLICT),
)


def error_response(exc: AccountingServiceError) -> Response:
    http_status = status.HTTP_400_BAD_REQUEST
    for error_cls, code in STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            http_status = code
            break
    return Response(exc.as_dict(), status=http_status)
