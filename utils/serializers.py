from rest_framework import serializers

from .attachments import format_attachment


class WhitespaceAllowedCharField(serializers.CharField):
    """Custom CharField that allows whitespace-only content"""

    def __init__(self, **kwargs):
        kwargs.setdefault('allow_blank', True)
        kwargs.setdefault('trim_whitespace', False)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if data is None:
            raise serializers.ValidationError("This field may not be null.")
        return str(data)


class MessageCreateSerializer(serializers.Serializer):
    """Shape check only; content and attachment rules live in the services."""

    content = WhitespaceAllowedCharField(required=False, default='')
    attachments = serializers.ListField(
        child=serializers.JSONField(), required=False, default=list
    )


class LoggedMessageSerializer(serializers.Serializer):
    id = serializers.CharField()
    sender_id = serializers.CharField()
    sender_name = serializers.CharField()
    sender_role = serializers.CharField(allow_null=True)
    sender_avatar = serializers.CharField(allow_null=True)
    content = serializers.CharField()
    timestamp = serializers.DateTimeField()
    attachments = serializers.SerializerMethodField()
    read_by = serializers.SerializerMethodField()
    is_mine = serializers.SerializerMethodField()

    def get_attachments(self, obj):
        return [
            format_attachment(attachment, obj.id, index)
            for index, attachment in enumerate(obj.attachments or [])
        ]

    def get_read_by(self, obj):
        return list(obj.read_by or [])

    def get_is_mine(self, obj):
        return obj.sender_id == self.context.get('user_id')
