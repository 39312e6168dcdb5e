import logging
import uuid

from django.db import transaction
from django.utils import timezone

from users.directory import get_participants
from utils.formatting import isoformat, parse_before
from utils.message_log import LoggedMessage, MessageLog, newest_page
from workchat.exceptions import NotFoundError

from .models import Job

logger = logging.getLogger(__name__)


class JobMessageLog(MessageLog):
    """Messages embedded in a job record, addressed by job id."""

    def append(self, scope_key, draft):
        entry = {
            'id': uuid.uuid4().hex,
            'sender_id': draft.sender_id,
            'content': draft.content,
            'sent_at': isoformat(timezone.now()),
            'attachments': draft.attachments,
        }
        with transaction.atomic():
            job = Job.objects.select_for_update().filter(pk=scope_key).first()
            if job is None:
                raise NotFoundError("Job not found.")
            job.messages = list(job.messages or []) + [entry]
            job.save(update_fields=['messages', 'updated_at'])

        logger.debug("Appended message %s to job %s", entry['id'], scope_key)
        return self._to_logged([entry], scope_key)[0]

    def list(self, scope_key, before=None, limit=None):
        job = Job.objects.filter(pk=scope_key).only('id', 'messages').first()
        if job is None:
            raise NotFoundError("Job not found.")
        messages = self._to_logged(job.messages or [], scope_key)
        return newest_page(messages, before=before, limit=limit)

    def _to_logged(self, entries, scope_key):
        senders = get_participants(entry.get('sender_id') for entry in entries)
        messages = []
        for entry in entries:
            sender_id = entry.get('sender_id')
            sender = senders.get(sender_id)
            messages.append(LoggedMessage(
                id=str(entry.get('id')),
                scope_key=str(scope_key),
                sender_id=sender_id,
                sender_name=sender.display_name if sender else sender_id,
                content=entry.get('content') or '',
                attachments=list(entry.get('attachments') or []),
                timestamp=parse_before(entry.get('sent_at')),
                sender_role=sender.role if sender else None,
                sender_avatar=(sender.avatar_url or None) if sender else None,
            ))
        return messages
