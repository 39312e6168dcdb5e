import logging

import jwt
from django.http import JsonResponse

from users.models import User
from workchat.jwt_utils import validate_jwt_token

logger = logging.getLogger(__name__)


class JWTAuthMiddleware:
    """
    Resolve the calling participant from a ``Bearer`` token.

    On success the request carries ``user_id``, ``user_name``, ``user_role``,
    ``user_region`` and the ``participant`` record. Requests to exempt path
    prefixes pass through untouched; everything else without a valid token
    gets a 401 JSON response.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.exempt_urls = [
            '/ping/',
            '/admin/',
            '/static/',
        ]

    def __call__(self, request):
        request.user_id = None
        request.is_authenticated = False

        if self._is_exempt_url(request.path):
            return self.get_response(request)

        auth_header = request.META.get('HTTP_AUTHORIZATION', '')
        parts = auth_header.split(' ')
        if len(parts) != 2 or parts[0] != 'Bearer' or not parts[1]:
            return self._unauthorized('Missing or invalid Authorization header')

        try:
            payload = validate_jwt_token(parts[1])
        except jwt.InvalidTokenError as e:
            logger.info("Rejected bearer token: %s", e)
            return self._unauthorized(str(e))

        participant = User.objects.filter(user_id=payload['sub'], is_active=True).first()
        if participant is None:
            return self._unauthorized('Unknown or inactive user')

        request.participant = participant
        request.user_id = participant.user_id
        request.user_name = participant.display_name
        request.user_role = participant.role
        request.user_region = participant.region
        request.is_authenticated = True

        return self.get_response(request)

    def _is_exempt_url(self, path):
        for exempt_url in self.exempt_urls:
            if path.startswith(exempt_url):
                return True
        return False

    def _unauthorized(self, message):
        return JsonResponse({'error': message, 'kind': 'authentication_error'}, status=401)
