from unittest.mock import patch

from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from conversations.models import Conversation
from conversations.services import ConversationService
from users.models import User
from workchat.jwt_utils import generate_test_token


class MessagingAPITestCase(APITestCase):
    def setUp(self):
        self.hr = User.objects.create(user_id="hr_1", user_name="Hannah", role="admin_hr",
                                      email="hannah@example.com")
        self.admin = User.objects.create(user_id="admin_2", user_name="Adam", role="super_admin")
        self.ops = User.objects.create(user_id="ops_3", user_name="Olga", role="admin_outsource")
        self.worker = User.objects.create(user_id="worker_4", user_name="Walter", role="worker")
        self.authenticate("hr_1")

        self.list_url = reverse('conversations:conversation-list')
        self.contacts_url = reverse('conversations:contact-list')

    def authenticate(self, user_id):
        token = generate_test_token(user_id)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    def messages_url(self, conversation_id):
        return reverse('conversations:conversation-messages', kwargs={'conversation_id': conversation_id})

    def create_conversation(self, participant_ids):
        response = self.client.post(self.list_url, {"participant_ids": participant_ids}, format="json")
        return response


class ConversationEndpointsTestCase(MessagingAPITestCase):

    def test_missing_token_is_rejected(self):
        self.client.credentials()
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()["kind"], "authentication_error")

    def test_contacts_exclude_caller_and_disallowed_roles(self):
        response = self.client.get(self.contacts_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [contact["id"] for contact in response.data["results"]]
        self.assertEqual(ids, ["admin_2", "ops_3"])
        self.assertEqual(response.data["results"][0]["name"], "Adam")

    def test_worker_cannot_use_staff_messaging(self):
        self.authenticate("worker_4")
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["kind"], "authorization_error")

    def test_create_then_reuse_conversation(self):
        response = self.create_conversation(["admin_2"])

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["is_new"])
        conversation = response.data["conversation"]
        self.assertEqual([p["id"] for p in conversation["participants"]], ["admin_2", "hr_1"])
        self.assertIsNone(conversation["last_message"])

        self.authenticate("admin_2")
        response = self.create_conversation(["hr_1"])

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["is_new"])
        self.assertEqual(response.data["conversation"]["id"], conversation["id"])
        self.assertEqual(Conversation.objects.count(), 1)

    def test_create_with_disallowed_participant(self):
        response = self.create_conversation(["worker_4"])

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {
            "error": "One or more participants cannot use messaging.",
            "kind": "authorization_error",
        })
        self.assertEqual(Conversation.objects.count(), 0)

    def test_create_with_only_self(self):
        response = self.create_conversation(["hr_1"])

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["kind"], "validation_error")

    def test_list_conversations_with_unread_counts(self):
        conversation_id = self.create_conversation(["admin_2", "ops_3"]).data["conversation"]["id"]
        self.authenticate("admin_2")
        self.client.post(self.messages_url(conversation_id), {"content": "Morning"}, format="json")
        self.authenticate("hr_1")

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_count"], 1)
        listed = response.data["results"][0]
        self.assertEqual(listed["id"], conversation_id)
        self.assertEqual(listed["unread_count"], 1)
        self.assertEqual(listed["last_message"]["content"], "Morning")
        self.assertEqual(listed["last_message"]["sender_name"], "Adam")

    def test_storage_failure_is_reported_as_transient(self):
        with patch.object(ConversationService, "list_conversations", side_effect=DatabaseError("locked")):
            with self.assertLogs("workchat.exceptions", level="ERROR") as logs:
                response = self.client.get(self.list_url)

        self.assertIsNotNone(logs.records[0].exc_info)

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data["kind"], "transient_io_error")


class MessageEndpointsTestCase(MessagingAPITestCase):
    def setUp(self):
        super().setUp()
        self.conversation_id = self.create_conversation(["admin_2"]).data["conversation"]["id"]

    def test_send_and_list_messages(self):
        response = self.client.post(
            self.messages_url(self.conversation_id),
            {
                "content": "Shift plan attached",
                "attachments": [
                    {"name": "plan.png", "type": "image/png", "url": "https://files.example.com/plan.png"},
                ],
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["sender_name"], "Hannah")
        self.assertEqual(response.data["sender_role"], "admin_hr")
        self.assertTrue(response.data["is_mine"])
        attachment = response.data["attachments"][0]
        self.assertEqual(attachment["attachment_type"], "image")
        self.assertEqual(attachment["id"], f"{response.data['id']}-0")

        self.authenticate("admin_2")
        response = self.client.get(self.messages_url(self.conversation_id))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["messages"]), 1)
        self.assertFalse(response.data["messages"][0]["is_mine"])
        self.assertFalse(response.data["has_more"])

    def test_empty_message_is_rejected(self):
        response = self.client.post(self.messages_url(self.conversation_id), {"content": "  "}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["kind"], "validation_error")

    def test_unknown_conversation(self):
        response = self.client.get(self.messages_url("conv_missing"))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["kind"], "not_found")

    def test_non_participant_is_forbidden(self):
        self.authenticate("ops_3")
        response = self.client.get(self.messages_url(self.conversation_id))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["kind"], "authorization_error")

    def test_limit_query_parameter(self):
        for index in range(3):
            self.client.post(self.messages_url(self.conversation_id), {"content": f"m{index}"}, format="json")

        response = self.client.get(self.messages_url(self.conversation_id), {"limit": 2})

        self.assertEqual([m["content"] for m in response.data["messages"]], ["m1", "m2"])
        self.assertTrue(response.data["has_more"])

    def test_archive_hides_thread_until_reopened(self):
        url = reverse('conversations:conversation-archive', kwargs={'conversation_id': self.conversation_id})
        response = self.client.post(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(self.list_url).data["total_count"], 0)

        self.create_conversation(["admin_2"])
        self.assertEqual(self.client.get(self.list_url).data["total_count"], 1)

    def test_mark_read(self):
        self.authenticate("admin_2")
        self.client.post(self.messages_url(self.conversation_id), {"content": "Hi"}, format="json")
        self.authenticate("hr_1")

        url = reverse('conversations:conversation-read', kwargs={'conversation_id': self.conversation_id})
        response = self.client.post(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["messages_marked_read"], 1)
        self.assertEqual(self.client.get(self.list_url).data["results"][0]["unread_count"], 0)
