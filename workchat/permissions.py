from django.conf import settings
from rest_framework.permissions import BasePermission


def role_whitelist_predicate(allowed_roles=None):
    """
    Build the capability predicate deciding who may use general messaging.

    ``allowed_roles`` defaults to ``settings.CHAT_ALLOWED_ROLES``.
    """
    if allowed_roles is None:
        allowed_roles = getattr(settings, 'CHAT_ALLOWED_ROLES', [])
    allowed = frozenset(allowed_roles)

    def can_message(role):
        return role in allowed

    return can_message


class IsAuthenticatedParticipant(BasePermission):
    message = 'Authentication required'
    code = 'authentication_error'

    def has_permission(self, request, view):
        return bool(getattr(request, 'is_authenticated', False) and getattr(request, 'user_id', None))


class MessagingRolePermission(BasePermission):
    """Only staff roles may use general (non job) messaging."""

    message = 'Your role is not allowed to use staff messaging.'
    code = 'authorization_error'

    def has_permission(self, request, view):
        if not getattr(request, 'is_authenticated', False):
            return False
        can_message = role_whitelist_predicate()
        return can_message(getattr(request, 'user_role', None))
