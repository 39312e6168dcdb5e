"""
Attachment metadata handling shared by staff messaging and job chat.

Attachments travel as metadata only: ``{name, type, url, size}``. The url is
either a storage url or an inline ``data:`` url produced by the client.
"""

import base64
import binascii
import mimetypes
from urllib.parse import urlparse

from workchat.exceptions import ValidationError

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def classify_attachment(content_type):
    """Map a MIME type onto the coarse kind used for rendering."""
    content_type = (content_type or "").lower()
    if "image" in content_type:
        return "image"
    elif "video" in content_type:
        return "video"
    elif "audio" in content_type:
        return "audio"
    return "file"


def parse_data_url(url):
    """
    Split a ``data:<mime>;base64,<payload>`` url.

    Returns ``(content_type, decoded_size)`` or ``(None, None)`` when ``url``
    is not a base64 data url.
    """
    if not isinstance(url, str) or not url.startswith("data:"):
        return None, None
    header, sep, payload = url[5:].partition(",")
    if not sep or not header.endswith(";base64"):
        return None, None
    content_type = header[: -len(";base64")] or DEFAULT_CONTENT_TYPE
    try:
        size = len(base64.b64decode(payload, validate=True))
    except (binascii.Error, ValueError):
        return None, None
    return content_type, size


def _from_url(url, index):
    content_type, size = parse_data_url(url)
    if content_type is not None:
        extension = mimetypes.guess_extension(content_type) or ""
        return {
            "name": f"attachment-{index + 1}{extension}",
            "type": content_type,
            "url": url,
            "size": size,
        }
    path = urlparse(url).path
    name = path.rsplit("/", 1)[-1] or f"attachment-{index + 1}"
    return {
        "name": name,
        "type": mimetypes.guess_type(name)[0] or DEFAULT_CONTENT_TYPE,
        "url": url,
        "size": None,
    }


def _coerce_size(value):
    if value is None or value == "":
        return None
    try:
        size = int(value)
    except (TypeError, ValueError):
        return None
    return size if size >= 0 else None


def normalize_attachments(raw, limit=None):
    """
    Normalise client supplied attachments to ordered metadata dicts.

    Accepts dicts with ``name``/``url`` (``type`` and ``size`` optional) or
    bare url strings. Entries without a name or url are dropped. When
    ``limit`` is given, only the first ``limit`` valid entries are kept.

    Raises:
        ValidationError: If ``raw`` is not a list.
    """
    if raw in (None, ""):
        return []
    if not isinstance(raw, (list, tuple)):
        raise ValidationError("Attachments must be a list.")

    normalized = []
    for index, item in enumerate(raw):
        if isinstance(item, str):
            if not item.strip():
                continue
            entry = _from_url(item.strip(), index)
        elif isinstance(item, dict):
            name = str(item.get("name") or "").strip()
            url = str(item.get("url") or "").strip()
            if not name or not url:
                continue
            content_type = item.get("type") or parse_data_url(url)[0] \
                or mimetypes.guess_type(name)[0] or DEFAULT_CONTENT_TYPE
            entry = {
                "name": name,
                "type": str(content_type),
                "url": url,
                "size": _coerce_size(item.get("size")),
            }
        else:
            continue
        normalized.append(entry)
        if limit is not None and len(normalized) >= limit:
            break
    return normalized


def format_attachment(attachment, owner_id, index):
    """Render stored attachment metadata for API responses."""
    return {
        "id": f"{owner_id}-{index}",
        "name": attachment.get("name"),
        "type": attachment.get("type") or DEFAULT_CONTENT_TYPE,
        "url": attachment.get("url"),
        "size": attachment.get("size"),
        "attachment_type": classify_attachment(attachment.get("type")),
    }
