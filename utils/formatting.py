import html
from datetime import datetime, timezone as dt_timezone

import bleach
from django.utils import timezone
from django.utils.dateparse import parse_datetime

PREVIEW_LENGTH = 100


def sanitize_content(content):
    """
    Strip markup from message text and trim surrounding whitespace.

    Content is stored as plain text, so the entities bleach escapes are
    turned back into characters.
    """
    if content is None:
        return ""
    sanitized = bleach.clean(
        str(content),
        tags=[],
        attributes={},
        strip=True,
    )
    return html.unescape(sanitized).strip()


def last_message_preview(content, attachments):
    """Text stored in a thread's last message snapshot."""
    if content:
        return content
    if attachments:
        return f"Attachment: {attachments[0].get('name')}"
    return ""


def truncate_preview(content, length=PREVIEW_LENGTH):
    if content and len(content) > length:
        return content[:length] + '...'
    return content


def parse_before(value):
    """
    Parse the ``before`` pagination cursor.

    Returns an aware datetime, or None when the value is missing or not an
    ISO-8601 timestamp.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = parse_datetime(str(value).strip().replace(' ', '+'))
        except ValueError:
            return None
    if parsed is None:
        return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def clamp_limit(value, default, maximum):
    """Page size from a query parameter: invalid -> default, capped at maximum."""
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default
    if limit <= 0:
        return default
    return min(limit, maximum)


def isoformat(value):
    return value.isoformat() if value else None
