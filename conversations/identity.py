"""
Participant identity for staff conversations.

A conversation is identified by its participant set, not by who opened it:
the ids are normalised, de-duplicated, sorted by ordinal comparison and
joined with ``IDENTITY_SEPARATOR``. The result is stored with a unique
constraint, so the same people always land in the same thread.
"""

from workchat.exceptions import ValidationError

IDENTITY_SEPARATOR = ":"
MAX_PARTICIPANT_ID_LENGTH = 100
MIN_PARTICIPANTS = 2


def normalize_participant_id(value):
    """Canonical string form of one participant id."""
    if value is None or isinstance(value, (bool, list, dict, tuple, set)):
        raise ValidationError("Malformed participant id.")
    participant_id = str(value).strip()
    if not participant_id:
        raise ValidationError("Participant ids cannot be empty.")
    if IDENTITY_SEPARATOR in participant_id or any(ch.isspace() for ch in participant_id):
        raise ValidationError(f"Malformed participant id: {participant_id!r}.")
    if len(participant_id) > MAX_PARTICIPANT_ID_LENGTH:
        raise ValidationError("Participant id is too long.")
    return participant_id


def normalize_participant_ids(values):
    """Normalise and de-duplicate ids, keeping first-seen order."""
    if isinstance(values, (str, bytes)) or not hasattr(values, '__iter__'):
        raise ValidationError("Participants must be a list of ids.")
    seen = []
    for value in values:
        participant_id = normalize_participant_id(value)
        if participant_id not in seen:
            seen.append(participant_id)
    return seen


def resolve_participant_identity(values):
    """
    Order independent identity of a participant set.

    Raises:
        ValidationError: On a malformed id or fewer than two distinct ids.
    """
    participant_ids = normalize_participant_ids(values)
    if len(participant_ids) < MIN_PARTICIPANTS:
        raise ValidationError("A conversation requires at least two participants.")
    return IDENTITY_SEPARATOR.join(sorted(participant_ids))


def split_identity(identity):
    return identity.split(IDENTITY_SEPARATOR) if identity else []
