"""
Read-only access to the participant directory.

These are the only ways messaging looks at accounts: resolve one
participant, resolve a batch, and list who may be messaged.
"""

from typing import Dict, Iterable, Optional

from .models import User


def get_participant(user_id) -> Optional[User]:
    if not user_id:
        return None
    return User.objects.filter(user_id=str(user_id), is_active=True).first()


def get_participants(user_ids: Iterable) -> Dict[str, User]:
    """Map each known, active id in ``user_ids`` to its participant."""
    ids = {str(user_id) for user_id in user_ids if user_id}
    if not ids:
        return {}
    return {user.user_id: user for user in User.objects.filter(user_id__in=ids, is_active=True)}


def list_messageable(exclude_user_id, can_message):
    """Active participants passing ``can_message(role)``, minus the caller, by name."""
    candidates = User.objects.filter(is_active=True).exclude(
        user_id=exclude_user_id
    ).order_by('user_name', 'user_id')
    return [user for user in candidates if can_message(user.role)]


def format_participant(user):
    """Participant summary used in contacts and thread listings."""
    return {
        'id': user.user_id,
        'name': user.display_name,
        'email': user.email,
        'role': user.role,
        'avatar': user.avatar_url or None,
    }
