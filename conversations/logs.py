import logging

from django.db import transaction

from users.directory import get_participants
from utils.message_log import LoggedMessage, MessageLog
from workchat.exceptions import NotFoundError

from .models import Conversation, ConversationMessage

logger = logging.getLogger(__name__)


class ConversationMessageLog(MessageLog):
    """Message rows of one conversation, addressed by participant identity."""

    def append(self, scope_key, draft):
        with transaction.atomic():
            conversation = Conversation.objects.select_for_update().filter(
                participant_identity=scope_key
            ).first()
            if conversation is None:
                raise NotFoundError("Conversation not found.")

            message = ConversationMessage.objects.create(
                conversation=conversation,
                sender_id=draft.sender_id,
                sender_name=draft.sender_name,
                content=draft.content,
                attachments=draft.attachments,
                read_by=[draft.sender_id],
            )

            conversation.append_last_message(message)

        logger.debug("Appended message %s to %s", message.pk, conversation.conversation_id)
        return self._to_logged([message], scope_key)[0]

    def list(self, scope_key, before=None, limit=None):
        queryset = ConversationMessage.objects.filter(
            conversation__participant_identity=scope_key
        )
        if before is not None:
            queryset = queryset.filter(created_at__lt=before)

        queryset = queryset.order_by('-created_at', '-id')
        if limit is not None:
            queryset = queryset[:max(0, limit)]

        rows = list(queryset)
        rows.reverse()
        return self._to_logged(rows, scope_key)

    def _to_logged(self, rows, scope_key):
        senders = get_participants(row.sender_id for row in rows)
        messages = []
        for row in rows:
            sender = senders.get(row.sender_id)
            messages.append(LoggedMessage(
                id=str(row.pk),
                scope_key=scope_key,
                sender_id=row.sender_id,
                sender_name=sender.display_name if sender else (row.sender_name or row.sender_id),
                content=row.content,
                attachments=list(row.attachments or []),
                timestamp=row.created_at,
                sender_role=sender.role if sender else None,
                sender_avatar=(sender.avatar_url or None) if sender else None,
                read_by=list(row.read_by or []),
            ))
        return messages
