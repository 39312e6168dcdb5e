"""
JWT utilities for workchat.

Tokens only carry the caller's id in the ``sub`` claim; everything else about
the caller (name, role, region) is looked up in the participant directory by
the authentication middleware.
"""

import time

import jwt
from django.conf import settings


class JWTManager:
    """Signs and validates bearer tokens."""

    def __init__(self):
        self._secret = None
        self._algorithm = None
        self._public_key = None

    def _get_secret(self):
        if self._secret is None:
            self._secret = getattr(settings, 'JWT_TEST_SECRET', 'test_jwt_secret_key')
        return self._secret

    def _get_algorithm(self):
        if self._algorithm is None:
            self._algorithm = getattr(settings, 'JWT_ALGORITHM', 'HS256')
        return self._algorithm

    def _get_public_key(self):
        if self._public_key is None:
            if self._get_algorithm() == 'HS256':
                self._public_key = self._get_secret()
            else:
                self._public_key = getattr(settings, 'JWT_PUBLIC_KEY', self._get_secret())
        return self._public_key

    def generate_token(self, user_id, expires_in_hours=24):
        """
        Generate a signed token for ``user_id``.

        Args:
            user_id (str): Participant id placed in the ``sub`` claim
            expires_in_hours (int): Lifetime of the token

        Returns:
            str: Encoded JWT
        """
        now = int(time.time())
        payload = {
            'sub': str(user_id),
            'iat': now,
            'exp': now + (expires_in_hours * 3600),
        }
        return jwt.encode(payload, self._get_secret(), algorithm=self._get_algorithm())

    def validate_token(self, token):
        """
        Validate ``token`` and return its payload.

        Raises:
            jwt.InvalidTokenError: If the token is expired, malformed or
                has no subject.
        """
        try:
            payload = jwt.decode(
                token,
                self._get_public_key(),
                algorithms=[self._get_algorithm()],
            )
        except jwt.ExpiredSignatureError:
            raise jwt.InvalidTokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise jwt.InvalidTokenError(f"Invalid token: {str(e)}")

        if not payload.get('sub'):
            raise jwt.InvalidTokenError("Invalid token: missing subject")
        return payload

    def extract_user_id(self, token):
        """Return the ``sub`` claim of ``token`` or None when it is invalid."""
        try:
            return self.validate_token(token).get('sub')
        except jwt.InvalidTokenError:
            return None


_jwt_manager = None


def _get_jwt_manager():
    global _jwt_manager
    if _jwt_manager is None:
        _jwt_manager = JWTManager()
    return _jwt_manager


def generate_test_token(user_id, expires_in_hours=24):
    """Generate a token for ``user_id`` (tests and local tooling)."""
    return _get_jwt_manager().generate_token(user_id, expires_in_hours)


def validate_jwt_token(token):
    """Validate a token and return the payload."""
    return _get_jwt_manager().validate_token(token)


def get_user_id_from_token(token):
    """Extract the user id from a token, None when invalid."""
    return _get_jwt_manager().extract_user_id(token)
