from django.core.exceptions import ValidationError as ModelValidationError
from django.test import SimpleTestCase, TestCase

from conversations.identity import resolve_participant_identity, split_identity
from conversations.models import Conversation, ConversationMessage
from workchat.exceptions import ValidationError


class ParticipantIdentityTestCase(SimpleTestCase):

    def test_identity_is_order_independent(self):
        self.assertEqual(
            resolve_participant_identity(["hr_1", "admin_2", "ops_3"]),
            resolve_participant_identity(["ops_3", "hr_1", "admin_2"]),
        )

    def test_identity_is_sorted_and_joined(self):
        self.assertEqual(resolve_participant_identity(["b", "a"]), "a:b")
        self.assertEqual(split_identity("a:b"), ["a", "b"])

    def test_duplicates_collapse(self):
        self.assertEqual(resolve_participant_identity(["a", "b", "a", " b "]), "a:b")

    def test_sort_is_ordinal(self):
        # Uppercase sorts before lowercase by code point
        self.assertEqual(resolve_participant_identity(["b", "B", "a"]), "B:a:b")

    def test_ids_are_normalised_to_strings(self):
        self.assertEqual(resolve_participant_identity([12, "3"]), "12:3")

    def test_fewer_than_two_distinct_ids_rejected(self):
        with self.assertRaises(ValidationError):
            resolve_participant_identity(["a"])
        with self.assertRaises(ValidationError):
            resolve_participant_identity(["a", "a"])
        with self.assertRaises(ValidationError):
            resolve_participant_identity([])

    def test_malformed_ids_rejected(self):
        for bad in (["a", ""], ["a", "   "], ["a", "b:c"], ["a", None], ["a", "x y"]):
            with self.subTest(ids=bad):
                with self.assertRaises(ValidationError):
                    resolve_participant_identity(bad)

    def test_non_list_rejected(self):
        with self.assertRaises(ValidationError):
            resolve_participant_identity("a:b")


class ConversationModelTestCase(TestCase):
    def setUp(self):
        self.conversation = Conversation.objects.create(
            conversation_id="conv_test123",
            participant_identity="hr_1:ops_2",
            participants=["hr_1", "ops_2"],
            created_by="hr_1",
        )

    def test_conversation_str(self):
        self.assertEqual(str(self.conversation), "Conversation conv_test123")

    def test_last_message_is_none_without_messages(self):
        self.assertIsNone(self.conversation.last_message)

    def test_append_last_message_updates_snapshot(self):
        message = ConversationMessage.objects.create(
            conversation=self.conversation,
            sender_id="hr_1",
            sender_name="Hannah",
            content="",
            attachments=[{"name": "contract.pdf", "url": "https://files.example.com/contract.pdf"}],
        )
        self.conversation.append_last_message(message)
        self.conversation.refresh_from_db()

        self.assertEqual(self.conversation.last_message_content, "Attachment: contract.pdf")
        self.assertEqual(self.conversation.last_message_sender_id, "hr_1")
        self.assertEqual(self.conversation.last_message_at, message.created_at)
        self.assertEqual(self.conversation.last_message["sender_name"], "Hannah")

    def test_message_requires_text_or_attachment(self):
        message = ConversationMessage(conversation=self.conversation, sender_id="hr_1", content="   ")
        with self.assertRaises(ModelValidationError):
            message.clean()

        message.attachments = [{"name": "a.png", "url": "https://files.example.com/a.png"}]
        message.clean()

    def test_is_read_by(self):
        message = ConversationMessage.objects.create(
            conversation=self.conversation,
            sender_id="hr_1",
            content="Hello",
            read_by=["hr_1"],
        )
        self.assertTrue(message.is_read_by("hr_1"))
        self.assertFalse(message.is_read_by("ops_2"))
