from rest_framework import serializers

from users.directory import format_participant
from utils.formatting import truncate_preview

from .models import Conversation


class ConversationCreateSerializer(serializers.Serializer):
    participant_ids = serializers.ListField(
        child=serializers.CharField(max_length=100, trim_whitespace=True),
        required=False,
        default=list,
    )
    title = serializers.CharField(required=False, allow_blank=True, max_length=255, default='')


class ConversationSerializer(serializers.ModelSerializer):
    """
    Thread as seen by one participant.

    Expects ``user_id`` in the context, plus optional ``participants``
    (id -> User) and ``unread_counts`` (pk -> int) to avoid per-row queries.
    """

    id = serializers.CharField(source='conversation_id', read_only=True)
    participants = serializers.SerializerMethodField()
    last_message = serializers.SerializerMethodField()
    unread_count = serializers.SerializerMethodField()

    class Meta:
        model = Conversation
        fields = ['id', 'title', 'participants', 'created_by', 'created_at', 'updated_at',
                  'last_message_at', 'last_message', 'unread_count']

    def get_participants(self, obj):
        directory = self.context.get('participants') or {}
        summaries = []
        for participant_id in obj.participants:
            user = directory.get(participant_id)
            if user is not None:
                summaries.append(format_participant(user))
            else:
                summaries.append({'id': participant_id, 'name': participant_id, 'email': None,
                                  'role': None, 'avatar': None})
        return summaries

    def get_last_message(self, obj):
        """Get only the last message preview (not full message)"""
        last_message = obj.last_message
        if last_message is None:
            return None
        return {
            'sender_id': last_message['sender_id'],
            'sender_name': last_message['sender_name'],
            'content': truncate_preview(last_message['content']),
            'timestamp': serializers.DateTimeField().to_representation(last_message['timestamp']),
        }

    def get_unread_count(self, obj):
        counts = self.context.get('unread_counts')
        if counts is not None:
            return counts.get(obj.pk, 0)
        service = self.context.get('service')
        user_id = self.context.get('user_id')
        if service is not None and user_id:
            return service.unread_count(obj, user_id)
        return 0
