import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from users.directory import format_participant, get_participants
from utils.serializers import LoggedMessageSerializer, MessageCreateSerializer
from workchat.permissions import IsAuthenticatedParticipant, MessagingRolePermission

from .serializers import ConversationCreateSerializer, ConversationSerializer
from .services import get_conversation_service

logger = logging.getLogger(__name__)


class MessagingView(APIView):
    permission_classes = [IsAuthenticatedParticipant, MessagingRolePermission]

    def get_service(self):
        return get_conversation_service()

    def conversation_context(self, request, service, conversations):
        ids = {participant_id for conversation in conversations for participant_id in conversation.participants}
        return {
            'request': request,
            'user_id': request.user_id,
            'service': service,
            'participants': get_participants(ids),
        }


class ContactListView(MessagingView):
    """People the caller may start a conversation with"""

    def get(self, request):
        contacts = self.get_service().list_contacts(request.user_id)
        return Response({
            'results': [format_participant(user) for user in contacts],
            'total_count': len(contacts),
        })


class ConversationListView(MessagingView):
    """List the caller's active conversations and open new ones"""

    def get(self, request):
        service = self.get_service()
        conversations = list(service.list_conversations(request.user_id))
        context = self.conversation_context(request, service, conversations)
        context['unread_counts'] = service.unread_counts(conversations, request.user_id)

        serializer = ConversationSerializer(conversations, many=True, context=context)
        return Response({
            'user_id': request.user_id,
            'results': serializer.data,
            'total_count': len(conversations),
        })

    def post(self, request):
        """Create or find the conversation between the caller and participant_ids"""
        serializer = ConversationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        service = self.get_service()
        conversation, created = service.create_conversation(
            request.user_id,
            serializer.validated_data['participant_ids'],
            title=serializer.validated_data.get('title'),
        )
        context = self.conversation_context(request, service, [conversation])
        return Response({
            'message': 'Conversation created successfully' if created else 'Conversation found',
            'conversation': ConversationSerializer(conversation, context=context).data,
            'is_new': created,
        }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class ConversationMessagesView(MessagingView):
    """Page through a conversation and post to it"""

    def get(self, request, conversation_id):
        messages, has_more = self.get_service().list_messages(
            conversation_id,
            request.user_id,
            before=request.query_params.get('before'),
            limit=request.query_params.get('limit'),
        )
        serializer = LoggedMessageSerializer(messages, many=True, context={'user_id': request.user_id})
        return Response({
            'conversation_id': conversation_id,
            'messages': serializer.data,
            'has_more': has_more,
        })

    def post(self, request, conversation_id):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = self.get_service().send_message(
            conversation_id,
            request.user_id,
            content=serializer.validated_data['content'],
            attachments=serializer.validated_data['attachments'],
        )
        data = LoggedMessageSerializer(message, context={'user_id': request.user_id}).data
        return Response(data, status=status.HTTP_201_CREATED)


class ConversationArchiveView(MessagingView):

    def post(self, request, conversation_id):
        self.get_service().archive(conversation_id, request.user_id)
        return Response({'conversation_id': conversation_id, 'archived': True})


class ConversationReadView(MessagingView):

    def post(self, request, conversation_id):
        marked = self.get_service().mark_read(conversation_id, request.user_id)
        return Response({'conversation_id': conversation_id, 'messages_marked_read': marked})
