from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from utils.serializers import LoggedMessageSerializer, MessageCreateSerializer
from workchat.permissions import IsAuthenticatedParticipant

from .services import get_job_chat_service


class JobMessagesView(APIView):
    """Chat thread of one job, for its client, worker or area manager"""

    permission_classes = [IsAuthenticatedParticipant]

    def get(self, request, job_id):
        messages = get_job_chat_service().get_job_messages(
            job_id,
            request.participant,
            before=request.query_params.get('before'),
            limit=request.query_params.get('limit'),
        )
        serializer = LoggedMessageSerializer(messages, many=True, context={'user_id': request.user_id})
        return Response({
            'job_id': job_id,
            'messages': serializer.data,
        })

    def post(self, request, job_id):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = get_job_chat_service().send_job_message(
            job_id,
            request.participant,
            content=serializer.validated_data['content'],
            attachments=serializer.validated_data['attachments'],
        )
        data = LoggedMessageSerializer(message, context={'user_id': request.user_id}).data
        return Response(data, status=status.HTTP_201_CREATED)
