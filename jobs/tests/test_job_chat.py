from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from jobs.models import Job
from jobs.services import JobChatService
from users.models import User
from workchat.exceptions import NotFoundError, ValidationError
from workchat.jwt_utils import generate_test_token


class JobChatServiceTestCase(TestCase):
    def setUp(self):
        self.client_user = User.objects.create(user_id="client_1", user_name="Cleo", role="client")
        self.worker = User.objects.create(user_id="worker_2", user_name="Walter", role="worker")
        self.manager = User.objects.create(user_id="am_3", user_name="Mona", role="area_manager", region="north")
        self.far_manager = User.objects.create(user_id="am_4", user_name="Fred", role="area_manager", region="south")
        self.stranger = User.objects.create(user_id="worker_5", user_name="Sam", role="worker", region="north")
        self.job = Job.objects.create(
            title="Warehouse shift",
            client_id="client_1",
            worker_id="worker_2",
            region="north",
            status="in_progress",
        )
        self.service = JobChatService()

    def test_client_worker_and_area_manager_can_read(self):
        self.service.send_job_message(self.job.pk, self.client_user, content="Start at 8")

        for caller in (self.client_user, self.worker, self.manager):
            with self.subTest(caller=caller.user_id):
                messages = self.service.get_job_messages(self.job.pk, caller)
                self.assertEqual([m.content for m in messages], ["Start at 8"])

    def test_other_callers_get_not_found(self):
        for caller in (self.far_manager, self.stranger):
            with self.subTest(caller=caller.user_id):
                with self.assertRaises(NotFoundError):
                    self.service.get_job_messages(self.job.pk, caller)
                with self.assertRaises(NotFoundError):
                    self.service.send_job_message(self.job.pk, caller, content="Hi")

        self.job.refresh_from_db()
        self.assertEqual(self.job.messages, [])

    def test_missing_job_looks_the_same_as_hidden_job(self):
        with self.assertRaises(NotFoundError):
            self.service.get_job_messages(self.job.pk + 100, self.client_user)

    def test_messages_keep_append_order_with_sender_details(self):
        self.service.send_job_message(self.job.pk, self.client_user, content="First")
        self.service.send_job_message(self.job.pk, self.worker, content="Second")
        self.service.send_job_message(self.job.pk, self.manager, content="Third")

        messages = self.service.get_job_messages(self.job.pk, self.worker)

        self.assertEqual([m.content for m in messages], ["First", "Second", "Third"])
        self.assertEqual(messages[1].sender_name, "Walter")
        self.assertEqual(messages[1].sender_role, "worker")
        self.assertIsNone(messages[0].read_by)

    def test_attachments_capped_at_five(self):
        attachments = [f"https://files.example.com/photo-{index}.jpg" for index in range(8)]

        message = self.service.send_job_message(self.job.pk, self.worker, attachments=attachments)

        self.assertEqual(len(message.attachments), 5)
        self.assertEqual(message.attachments[0]["name"], "photo-0.jpg")
        self.assertEqual(message.attachments[0]["type"], "image/jpeg")
        self.job.refresh_from_db()
        self.assertEqual(len(self.job.messages[0]["attachments"]), 5)

    def test_empty_message_rejected(self):
        with self.assertRaises(ValidationError):
            self.service.send_job_message(self.job.pk, self.worker, content=" ", attachments=[])

    def test_paging_through_job_chat(self):
        for index in range(4):
            self.service.send_job_message(self.job.pk, self.client_user, content=f"m{index}")

        newest = self.service.get_job_messages(self.job.pk, self.worker, limit=2)
        self.assertEqual([m.content for m in newest], ["m2", "m3"])

        older = self.service.get_job_messages(
            self.job.pk, self.worker, before=newest[0].timestamp.isoformat(), limit=2
        )
        self.assertEqual([m.content for m in older], ["m0", "m1"])

    def test_stored_entry_shape(self):
        self.service.send_job_message(self.job.pk, self.client_user, content="Stored")
        self.job.refresh_from_db()

        entry = self.job.messages[0]
        self.assertEqual(set(entry), {"id", "sender_id", "content", "sent_at", "attachments"})
        self.assertEqual(entry["sender_id"], "client_1")


class JobChatEndpointsTestCase(APITestCase):
    def setUp(self):
        User.objects.create(user_id="client_1", user_name="Cleo", role="client")
        User.objects.create(user_id="worker_5", user_name="Sam", role="worker")
        self.job = Job.objects.create(title="Audit", client_id="client_1", region="east")
        self.url = reverse('jobs:job-messages', kwargs={'job_id': self.job.pk})

    def authenticate(self, user_id):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {generate_test_token(user_id)}")

    def test_client_posts_and_reads(self):
        self.authenticate("client_1")

        response = self.client.post(self.url, {"content": "Any update?"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["sender_role"], "client")

        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["messages"][0]["content"], "Any update?")
        self.assertEqual(response.data["messages"][0]["read_by"], [])

    def test_unrelated_worker_gets_404(self):
        self.authenticate("worker_5")

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["kind"], "not_found")

    def test_empty_post_is_rejected(self):
        self.authenticate("client_1")

        response = self.client.post(self.url, {"content": ""}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["kind"], "validation_error")
