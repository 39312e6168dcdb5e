from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from utils.formatting import last_message_preview


class Conversation(models.Model):
    conversation_id = models.CharField(max_length=100, unique=True)
    # Sorted participant ids joined with ":"; one conversation per participant set
    participant_identity = models.CharField(max_length=2000, unique=True)
    participants = models.JSONField(default=list)  # List of user_ids, sorted
    title = models.CharField(max_length=255, blank=True, default='')
    created_by = models.CharField(max_length=100)
    last_message_content = models.TextField(blank=True, default='')
    last_message_sender_id = models.CharField(max_length=100, null=True, blank=True)
    last_message_sender_name = models.CharField(max_length=255, null=True, blank=True)
    last_message_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'conversations_conversation'
        indexes = [
            models.Index(fields=['-last_message_at', '-updated_at'], name='conv_last_message_idx'),
        ]

    def __str__(self):
        return f"Conversation {self.conversation_id}"

    def append_last_message(self, message):
        """Point the thread snapshot at ``message``; call inside the send transaction."""
        self.last_message_content = last_message_preview(message.content, message.attachments)
        self.last_message_sender_id = message.sender_id
        self.last_message_sender_name = message.sender_name
        self.last_message_at = message.created_at
        self.save(update_fields=[
            'last_message_content',
            'last_message_sender_id',
            'last_message_sender_name',
            'last_message_at',
            'updated_at',
        ])

    @property
    def last_message(self):
        if self.last_message_at is None:
            return None
        return {
            'content': self.last_message_content,
            'sender_id': self.last_message_sender_id,
            'sender_name': self.last_message_sender_name,
            'timestamp': self.last_message_at,
        }


class ConversationParticipant(models.Model):
    conversation = models.ForeignKey(Conversation, on_delete=models.CASCADE, related_name='memberships')
    user_id = models.CharField(max_length=100)
    role = models.CharField(max_length=20)
    # Archival is per participant; the thread stays active for everyone else
    archived = models.BooleanField(default=False)
    last_read_at = models.DateTimeField(null=True, blank=True)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'conversations_participant'
        unique_together = ('conversation', 'user_id')
        indexes = [
            models.Index(fields=['user_id', 'archived'], name='conv_participant_user_idx'),
        ]

    def __str__(self):
        return f"{self.user_id} in {self.conversation.conversation_id}"


class ConversationMessage(models.Model):
    conversation = models.ForeignKey(Conversation, on_delete=models.CASCADE, related_name='messages')
    sender_id = models.CharField(max_length=100)
    sender_name = models.CharField(max_length=255, blank=True, default='')
    content = models.TextField(blank=True)
    attachments = models.JSONField(default=list, blank=True)  # [{name, type, url, size}]
    read_by = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'conversations_conversationmessage'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['conversation', 'created_at', 'id'], name='conv_message_order_idx'),
        ]

    def __str__(self):
        return f"{self.sender_id}: {self.content[:30]}..."

    def clean(self):
        if not (self.content or '').strip() and not self.attachments:
            raise ValidationError("A message must include text or an attachment.")

    def is_read_by(self, user_id):
        return user_id == self.sender_id or user_id in (self.read_by or [])
