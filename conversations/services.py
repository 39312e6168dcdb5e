import logging
import uuid
from typing import Callable, Dict, List, Optional, Tuple

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from users.directory import get_participant, get_participants, list_messageable
from utils.attachments import normalize_attachments
from utils.formatting import clamp_limit, parse_before, sanitize_content
from utils.message_log import LoggedMessage, MessageDraft
from workchat.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from workchat.permissions import role_whitelist_predicate

from .identity import normalize_participant_id, normalize_participant_ids, resolve_participant_identity
from .logs import ConversationMessageLog
from .models import Conversation, ConversationMessage, ConversationParticipant

logger = logging.getLogger(__name__)


class ConversationService:
    """
    Staff messaging: contacts, threads, messages and read state.

    Who may take part is decided by ``can_message(role)``; by default the
    role whitelist in ``settings.CHAT_ALLOWED_ROLES``.
    """

    def __init__(self, can_message: Optional[Callable[[str], bool]] = None,
                 message_log: Optional[ConversationMessageLog] = None,
                 page_size: Optional[int] = None, page_max: Optional[int] = None):
        self.can_message = can_message or role_whitelist_predicate()
        self.message_log = message_log or ConversationMessageLog()
        self.page_size = page_size or getattr(settings, 'CHAT_MESSAGE_PAGE_SIZE', 50)
        self.page_max = page_max or getattr(settings, 'CHAT_MESSAGE_PAGE_MAX', 200)

    # Contacts

    def list_contacts(self, user_id: str):
        """Everyone the caller may message, by name, never the caller."""
        return list_messageable(user_id, self.can_message)

    # Threads

    def list_conversations(self, user_id: str):
        """Threads the caller takes part in and has not archived, newest activity first."""
        return Conversation.objects.filter(
            memberships__user_id=user_id,
            memberships__archived=False,
        ).order_by(
            F('last_message_at').desc(nulls_last=True),
            '-updated_at',
            '-id',
        )

    list_for_participant = list_conversations

    def create_conversation(self, user_id: str, participant_ids, title: Optional[str] = None):
        return self.find_or_create(participant_ids, user_id, title=title)

    def find_or_create(self, participant_ids, creator_id: str,
                       title: Optional[str] = None) -> Tuple[Conversation, bool]:
        """
        Return the thread for ``participant_ids`` plus the creator.

        An existing thread is reused and un-archived for the creator.
        Returns ``(conversation, created)``.
        """
        if participant_ids is None:
            participant_ids = []
        creator_id = normalize_participant_id(creator_id)
        ids = normalize_participant_ids(list(participant_ids) + [creator_id])
        identity = resolve_participant_identity(ids)

        existing = Conversation.objects.filter(participant_identity=identity).first()
        if existing is not None:
            return self._reactivate(existing, creator_id), False

        participants = self._check_participants(ids)
        try:
            conversation = self._create(identity, ids, participants, creator_id, title)
        except ConflictError:
            # Concurrent create won; read its row back
            existing = Conversation.objects.filter(participant_identity=identity).first()
            if existing is None:
                raise
            logger.info("Conversation %s created concurrently, reusing it", existing.conversation_id)
            return self._reactivate(existing, creator_id), False

        logger.info(
            "Conversation %s created by %s with %d participants",
            conversation.conversation_id, creator_id, len(ids),
        )
        return conversation, True

    def archive(self, conversation_id: str, user_id: str) -> Conversation:
        """Hide a thread for ``user_id`` only."""
        conversation, membership = self._get_membership(conversation_id, user_id)
        if not membership.archived:
            membership.archived = True
            membership.save(update_fields=['archived'])
            logger.info("Conversation %s archived by %s", conversation.conversation_id, user_id)
        return conversation

    def get_conversation(self, conversation_id: str, user_id: str) -> Conversation:
        conversation, _ = self._get_membership(conversation_id, user_id)
        return conversation

    # Messages

    def list_messages(self, conversation_id: str, user_id: str, before=None,
                      limit=None) -> Tuple[List[LoggedMessage], bool]:
        """
        Newest page of a thread in ascending order.

        ``before`` and ``limit`` may be raw query values: an unparsable
        ``before`` is ignored and ``limit`` is clamped to the page maximum.
        Returns ``(messages, has_more)``.
        """
        conversation = self.get_conversation(conversation_id, user_id)
        limit = clamp_limit(limit, self.page_size, self.page_max)
        page = self.message_log.list(
            conversation.participant_identity,
            before=parse_before(before),
            limit=limit + 1,
        )
        has_more = len(page) > limit
        return page[-limit:], has_more

    def send_message(self, conversation_id: str, sender_id: str, content=None,
                     attachments=None) -> LoggedMessage:
        """
        Append a message from ``sender_id``.

        Content is sanitised and trimmed; attachments without a name or url
        are dropped. A message needs text or at least one attachment.
        """
        conversation = self.get_conversation(conversation_id, sender_id)
        content = sanitize_content(content)
        attachments = normalize_attachments(attachments)
        if not content and not attachments:
            raise ValidationError("Message content or attachment is required.")

        sender = get_participant(sender_id)
        if sender is None:
            raise AuthorizationError("Sender is not an active participant.")

        message = self.message_log.append(
            conversation.participant_identity,
            MessageDraft(
                sender_id=sender.user_id,
                sender_name=sender.display_name,
                content=content,
                attachments=attachments,
            ),
        )
        logger.info(
            "Message %s sent to %s by %s (%d attachments)",
            message.id, conversation.conversation_id, sender_id, len(attachments),
        )
        return message

    def mark_read(self, conversation_id: str, user_id: str) -> int:
        """Add ``user_id`` to ``read_by`` of every message in the thread."""
        conversation, membership = self._get_membership(conversation_id, user_id)
        with transaction.atomic():
            unread = [
                message
                for message in conversation.messages.exclude(sender_id=user_id).only('id', 'read_by')
                if user_id not in (message.read_by or [])
            ]
            for message in unread:
                message.read_by = list(message.read_by or []) + [user_id]
            if unread:
                ConversationMessage.objects.bulk_update(unread, ['read_by'])
            membership.last_read_at = timezone.now()
            membership.save(update_fields=['last_read_at'])
        return len(unread)

    def unread_count(self, conversation: Conversation, user_id: str) -> int:
        return sum(
            1
            for read_by in conversation.messages.exclude(sender_id=user_id).values_list('read_by', flat=True)
            if user_id not in (read_by or [])
        )

    def unread_counts(self, conversations, user_id: str) -> Dict[int, int]:
        counts = {conversation.pk: 0 for conversation in conversations}
        rows = ConversationMessage.objects.filter(
            conversation_id__in=list(counts),
        ).exclude(sender_id=user_id).values_list('conversation_id', 'read_by')
        for conversation_pk, read_by in rows:
            if user_id not in (read_by or []):
                counts[conversation_pk] += 1
        return counts

    # Internals

    def _check_participants(self, ids):
        participants = get_participants(ids)
        missing = [participant_id for participant_id in ids if participant_id not in participants]
        if missing:
            raise ValidationError("One or more participants are invalid.")
        disallowed = [user.user_id for user in participants.values() if not self.can_message(user.role)]
        if disallowed:
            raise AuthorizationError("One or more participants cannot use messaging.")
        return participants

    def _create(self, identity, ids, participants, creator_id, title):
        try:
            with transaction.atomic():
                conversation = Conversation.objects.create(
                    conversation_id=f"conv_{uuid.uuid4().hex[:12]}",
                    participant_identity=identity,
                    participants=sorted(ids),
                    title=(title or '').strip()[:255],
                    created_by=creator_id,
                )
                ConversationParticipant.objects.bulk_create([
                    ConversationParticipant(
                        conversation=conversation,
                        user_id=participant_id,
                        role=participants[participant_id].role,
                    )
                    for participant_id in sorted(ids)
                ])
        except IntegrityError as e:
            raise ConflictError(f"Conversation for {identity} already exists.") from e
        return conversation

    def _reactivate(self, conversation, user_id):
        updated = ConversationParticipant.objects.filter(
            conversation=conversation, user_id=user_id, archived=True,
        ).update(archived=False)
        if updated:
            logger.info("Conversation %s restored for %s", conversation.conversation_id, user_id)
        return conversation

    def _get_membership(self, conversation_id, user_id):
        conversation = Conversation.objects.filter(conversation_id=conversation_id).first()
        if conversation is None:
            raise NotFoundError("Conversation not found.")
        membership = conversation.memberships.filter(user_id=user_id).first()
        if membership is None:
            raise AuthorizationError("You are not a participant of this conversation.")
        return conversation, membership


def get_conversation_service():
    """Service configured from current settings."""
    return ConversationService()
