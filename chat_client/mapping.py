from datetime import datetime, timezone

from .models import ConfirmedMessage, Participant, Thread


def parse_timestamp(value):
    """Parse an API timestamp into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def message_from_payload(data):
    return ConfirmedMessage(
        id=str(data['id']),
        sender_id=data.get('sender_id'),
        sender_name=data.get('sender_name') or data.get('sender_id') or '',
        content=data.get('content') or '',
        timestamp=parse_timestamp(data['timestamp']),
        attachments=list(data.get('attachments') or []),
        sender_role=data.get('sender_role'),
    )


def participant_from_payload(data):
    return Participant(
        id=data['id'],
        name=data.get('name') or data['id'],
        role=data.get('role'),
        email=data.get('email'),
        avatar=data.get('avatar'),
    )


def thread_from_payload(data):
    updated_at = data.get('updated_at')
    return Thread(
        id=data['id'],
        title=data.get('title') or '',
        participants=[participant_from_payload(p) for p in data.get('participants') or []],
        last_message=data.get('last_message'),
        unread_count=data.get('unread_count') or 0,
        updated_at=parse_timestamp(updated_at) if updated_at else None,
    )
