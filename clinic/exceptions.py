"""
Domain errors raised by the front-office managers and the unified API
exception handler that turns them into JSON responses.

Managers validate before they apply anything, so every error below is
recoverable: the caller may simply re-prompt the user.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ClinicError(Exception):
    """Base exception for all front-office domain errors."""
    code = 'clinic_error'
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = {'code': self.code, 'message': self.message}
        if self.field:
            result['field'] = self.field
        return result


class ValidationError(ClinicError):
    """Malformed or missing required input."""
    code = 'validation_error'
    http_status = status.HTTP_400_BAD_REQUEST


class NotFoundError(ClinicError):
    """A referenced id does not exist."""
    code = 'not_found'
    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, kind: str, object_id: str):
        self.kind = kind
        self.object_id = object_id
        super().__init__(f'{kind} {object_id!r} not found')


class InvalidTransitionError(ClinicError):
    """The requested state change is not allowed by the state machine."""
    code = 'invalid_transition'
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, kind: str, object_id: str, current: str, requested: str):
        self.kind = kind
        self.object_id = object_id
        self.current = current
        self.requested = requested
        super().__init__(f'cannot move {kind} {object_id!r} from {current} to {requested}')

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result['from'] = self.current
        result['to'] = self.requested
        return result


def api_exception_handler(exc, context):
    if isinstance(exc, ClinicError):
        return Response({'ok': False, 'error': exc.to_dict()}, status=exc.http_status)
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.error('Unhandled error in %s', context.get('view'), exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    return Response({'ok': False, 'error': {'code': 'api_error', 'message': detail}}, status=resp.status_code)
