from django.test import TestCase

from users.directory import format_participant, get_participant, get_participants, list_messageable
from users.models import User


class DirectoryTestCase(TestCase):
    def setUp(self):
        self.zoe = User.objects.create(user_id="hr_1", user_name="Zoe", role="admin_hr",
                                       avatar_url="https://cdn.example.com/zoe.png")
        self.amir = User.objects.create(user_id="admin_2", user_name="Amir", role="super_admin")
        self.walter = User.objects.create(user_id="worker_3", user_name="Walter", role="worker")
        self.gone = User.objects.create(user_id="hr_4", user_name="Gone", role="admin_hr", is_active=False)

    def test_get_participant_skips_inactive(self):
        self.assertEqual(get_participant("hr_1"), self.zoe)
        self.assertIsNone(get_participant("hr_4"))
        self.assertIsNone(get_participant(""))

    def test_get_participants_maps_known_ids(self):
        found = get_participants(["hr_1", "worker_3", "missing", "hr_4"])
        self.assertEqual(set(found), {"hr_1", "worker_3"})

    def test_list_messageable_filters_and_orders(self):
        contacts = list_messageable("admin_2", lambda role: role != "worker")
        self.assertEqual([user.user_id for user in contacts], ["hr_1"])

        contacts = list_messageable("worker_3", lambda role: True)
        self.assertEqual([user.user_name for user in contacts], ["Amir", "Zoe"])

    def test_format_participant(self):
        self.assertEqual(format_participant(self.zoe), {
            "id": "hr_1",
            "name": "Zoe",
            "email": None,
            "role": "admin_hr",
            "avatar": "https://cdn.example.com/zoe.png",
        })

    def test_display_name_falls_back(self):
        user = User(user_id="x_9", user_name="", email="x@example.com")
        self.assertEqual(user.display_name, "x@example.com")
