"""
Error taxonomy shared by the messaging and job chat services.

Every error carries a ``kind`` that is rendered next to the message, so
clients can branch on it without parsing text.
"""

import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class MessagingError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Messaging request failed.'
    default_code = 'messaging_error'
    kind = 'messaging_error'


class ValidationError(MessagingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request.'
    default_code = 'validation_error'
    kind = 'validation_error'


class AuthorizationError(MessagingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You are not allowed to do this.'
    default_code = 'authorization_error'
    kind = 'authorization_error'


class NotFoundError(MessagingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'
    kind = 'not_found'


class ConflictError(MessagingError):
    """Unique identity collision; resolved internally by re-reading."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflicting write.'
    default_code = 'conflict'
    kind = 'conflict'


class TransientIOError(MessagingError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Storage is temporarily unavailable. Please retry.'
    default_code = 'transient_io_error'
    kind = 'transient_io_error'


def _error_body(message, kind):
    return {'error': message, 'kind': kind}


def messaging_exception_handler(exc, context):
    """
    DRF exception handler rendering ``{"error": ..., "kind": ...}``.

    Database failures become ``transient_io_error`` responses instead of
    reaching the transport as raw exceptions.
    """
    if isinstance(exc, DatabaseError):
        view = context.get('view')
        logger.exception(
            "Database error in %s: %s",
            view.__class__.__name__ if view else 'unknown view',
            exc,
        )
        exc = TransientIOError()

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, MessagingError):
        response.data = _error_body(str(exc.detail), exc.kind)
        return response

    detail = response.data.get('detail') if isinstance(response.data, dict) else None
    if detail is not None:
        kind = getattr(detail, 'code', None) or 'error'
        return Response(_error_body(str(detail), kind), status=response.status_code,
                        headers=_copy_headers(response))

    # Serializer field errors
    return Response(
        {'error': 'Invalid request.', 'kind': 'validation_error', 'fields': response.data},
        status=response.status_code,
        headers=_copy_headers(response),
    )


def _copy_headers(response):
    return {key: value for key, value in response.items()}
