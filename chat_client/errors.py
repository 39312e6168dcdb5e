"""
Errors raised by the chat client runtime.

Each error carries the server's ``kind`` so callers can branch on it the same
way the API does. Network failures surface as :class:`TransientIOError`.
"""


class ChatClientError(Exception):
    kind = 'error'

    def __init__(self, message='', status=None, kind=None):
        super().__init__(message)
        self.message = message
        self.status = status
        if kind:
            self.kind = kind

    def __str__(self):
        return self.message or self.kind


class ValidationError(ChatClientError):
    kind = 'validation_error'


class AuthenticationError(ChatClientError):
    kind = 'authentication_error'


class AuthorizationError(ChatClientError):
    kind = 'authorization_error'


class NotFoundError(ChatClientError):
    kind = 'not_found'


class TransientIOError(ChatClientError):
    kind = 'transient_io_error'


ERRORS_BY_KIND = {
    error_class.kind: error_class
    for error_class in (ValidationError, AuthenticationError, AuthorizationError, NotFoundError, TransientIOError)
}

ERRORS_BY_STATUS = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
}


def error_from_response(status, body):
    """Build the client error for a failed HTTP response."""
    message = ''
    kind = None
    if isinstance(body, dict):
        message = str(body.get('error') or body.get('detail') or '')
        kind = body.get('kind')

    error_class = ERRORS_BY_KIND.get(kind)
    if error_class is None:
        if status >= 500:
            error_class = TransientIOError
        else:
            error_class = ERRORS_BY_STATUS.get(status, ChatClientError)
    return error_class(message or f"Request failed with status {status}", status=status, kind=kind)
