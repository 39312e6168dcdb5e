from unittest import IsolatedAsyncioTestCase

from chat_client.attachments import LocalFile
from chat_client.composer import Composer
from chat_client.errors import TransientIOError, ValidationError
from chat_client.models import JobScope, SessionState
from chat_client.session import ChatSession

from .fakes import ME, FakeTransport, at


class ComposerTestCase(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.transport = FakeTransport()
        self.session = ChatSession(self.transport, ME, poll_interval=60, clock=lambda: at(10))
        await self.session.open()
        await self.session.select(JobScope(42))
        self.composer = Composer(self.session)

    async def asyncTearDown(self):
        await self.session.close()

    async def test_enter_sends_and_clears_draft(self):
        self.composer.type("Arrived on site")

        message = await self.composer.handle_key("Enter")

        self.assertEqual(message.content, "Arrived on site")
        self.assertEqual(self.composer.draft, "")
        self.assertTrue(self.composer.focused)
        self.assertEqual(len(self.transport.sent), 1)

    async def test_shift_enter_inserts_newline(self):
        self.composer.type("Line one")

        result = await self.composer.handle_key("Enter", shift=True)
        self.composer.type("Line two")

        self.assertIsNone(result)
        self.assertEqual(self.composer.draft, "Line one\nLine two")
        self.assertEqual(self.transport.sent, [])

    async def test_enter_on_empty_draft_does_nothing(self):
        self.composer.type("   ")

        self.assertIsNone(await self.composer.handle_key("Enter"))
        self.assertEqual(self.transport.sent, [])

    async def test_failed_send_restores_draft_and_files(self):
        self.transport.send_error = TransientIOError("offline")
        photo = LocalFile(name="meter.jpg", data=b"jpeg")
        self.composer.type("Meter reading")
        self.composer.stage(photo)
        self.composer.blur()

        with self.assertRaises(TransientIOError):
            await self.composer.handle_key("Enter")

        self.assertEqual(self.composer.draft, "Meter reading")
        self.assertEqual(self.composer.files, [photo])
        self.assertTrue(self.composer.focused)

    async def test_escape_closes_session(self):
        await self.composer.handle_key("Escape")

        self.assertEqual(self.session.state, SessionState.CLOSED)
        self.assertFalse(self.composer.focused)

    async def test_at_most_five_files(self):
        for index in range(5):
            self.composer.stage(LocalFile(name=f"{index}.png", data=b"x"))

        with self.assertRaises(ValidationError):
            self.composer.stage(LocalFile(name="6.png", data=b"x"))

        self.composer.unstage(0)
        self.composer.stage(LocalFile(name="6.png", data=b"x"))
        self.assertEqual(len(self.composer.files), 5)
