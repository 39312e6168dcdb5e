from django.contrib import admin
from .models import Conversation, ConversationMessage, ConversationParticipant


class ConversationParticipantInline(admin.TabularInline):
    model = ConversationParticipant
    extra = 0
    readonly_fields = ['joined_at']


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ['conversation_id', 'title', 'participant_identity', 'created_by', 'last_message_at']
    list_filter = ['created_at', 'updated_at']
    search_fields = ['conversation_id', 'participant_identity', 'title']
    readonly_fields = ['conversation_id', 'participant_identity', 'created_at', 'updated_at']
    inlines = [ConversationParticipantInline]


@admin.register(ConversationMessage)
class ConversationMessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'conversation', 'sender_id', 'content_preview', 'created_at']
    list_filter = ['created_at', 'sender_id']
    search_fields = ['content', 'sender_id', 'conversation__conversation_id']
    readonly_fields = ['created_at']

    @admin.display(description='Content Preview')
    def content_preview(self, obj):
        return obj.content[:50] + "..." if len(obj.content) > 50 else obj.content
