from datetime import datetime, timezone

from django.test import SimpleTestCase

from utils.attachments import classify_attachment, format_attachment, normalize_attachments, parse_data_url
from utils.formatting import clamp_limit, last_message_preview, parse_before, sanitize_content
from utils.message_log import LoggedMessage, newest_page
from workchat.exceptions import ValidationError


class AttachmentNormalisationTestCase(SimpleTestCase):

    def test_entries_without_name_or_url_are_dropped(self):
        attachments = normalize_attachments([
            {"name": "plan.pdf", "url": "https://files.example.com/plan.pdf"},
            {"name": "", "url": "https://files.example.com/x.pdf"},
            {"name": "orphan.png"},
            42,
        ])
        self.assertEqual(attachments, [{
            "name": "plan.pdf",
            "type": "application/pdf",
            "url": "https://files.example.com/plan.pdf",
            "size": None,
        }])

    def test_data_urls_are_measured(self):
        self.assertEqual(parse_data_url("data:image/png;base64,aGVsbG8="), ("image/png", 5))
        self.assertEqual(parse_data_url("data:image/png,plain"), (None, None))
        self.assertEqual(parse_data_url("https://example.com/a.png"), (None, None))

        attachments = normalize_attachments(["data:image/png;base64,aGVsbG8="])
        self.assertEqual(attachments[0]["name"], "attachment-1.png")
        self.assertEqual(attachments[0]["size"], 5)

    def test_limit_keeps_first_valid_entries(self):
        raw = [{"name": ""}] + [f"https://files.example.com/{index}.jpg" for index in range(7)]
        attachments = normalize_attachments(raw, limit=5)
        self.assertEqual([a["name"] for a in attachments], ["0.jpg", "1.jpg", "2.jpg", "3.jpg", "4.jpg"])

    def test_non_list_is_rejected(self):
        with self.assertRaises(ValidationError):
            normalize_attachments({"name": "a.png", "url": "https://files.example.com/a.png"})
        self.assertEqual(normalize_attachments(None), [])

    def test_format_attachment(self):
        formatted = format_attachment({"name": "clip.mp4", "type": "video/mp4", "url": "u", "size": 9}, "17", 0)
        self.assertEqual(formatted["id"], "17-0")
        self.assertEqual(formatted["attachment_type"], "video")
        self.assertEqual(classify_attachment("audio/ogg"), "audio")
        self.assertEqual(classify_attachment(None), "file")


class FormattingTestCase(SimpleTestCase):

    def test_sanitize_content(self):
        self.assertEqual(sanitize_content("  <i>hi</i> there "), "hi there")
        self.assertEqual(sanitize_content(None), "")
        self.assertEqual(sanitize_content("Tom & Jerry <3"), "Tom & Jerry <3")

    def test_last_message_preview(self):
        self.assertEqual(last_message_preview("Hello", []), "Hello")
        self.assertEqual(last_message_preview("", [{"name": "a.pdf"}]), "Attachment: a.pdf")

    def test_parse_before(self):
        self.assertEqual(
            parse_before("2026-03-02T09:00:00 00:00"),
            datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
        )
        self.assertEqual(parse_before("2026-03-02T09:00:00").tzinfo, timezone.utc)
        self.assertIsNone(parse_before("not a date"))
        self.assertIsNone(parse_before(""))

    def test_clamp_limit(self):
        self.assertEqual(clamp_limit(None, 50, 200), 50)
        self.assertEqual(clamp_limit("20", 50, 200), 20)
        self.assertEqual(clamp_limit("999", 50, 200), 200)
        self.assertEqual(clamp_limit("0", 50, 200), 50)
        self.assertEqual(clamp_limit("x", 50, 200), 50)


class NewestPageTestCase(SimpleTestCase):

    def test_newest_page(self):
        messages = [
            LoggedMessage(id=str(i), scope_key="7", sender_id="a", sender_name="A", content=str(i),
                          attachments=[], timestamp=datetime(2026, 1, 1, 9, i, tzinfo=timezone.utc))
            for i in range(5)
        ]
        self.assertEqual([m.id for m in newest_page(messages, limit=2)], ["3", "4"])
        before = datetime(2026, 1, 1, 9, 3, tzinfo=timezone.utc)
        self.assertEqual([m.id for m in newest_page(messages, before=before, limit=2)], ["1", "2"])
        self.assertEqual(newest_page(messages, limit=0), [])
