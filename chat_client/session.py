"""
Client-side chat session: optimistic send, reconciliation and polling.

A :class:`ChatSession` is opened when the chat UI opens and closed when it
goes away. While a thread or job chat is selected it owns one polling task.
Sent messages appear immediately as :class:`PendingMessage` entries and are
replaced in place by the server's :class:`ConfirmedMessage` once the send
succeeds, or removed if it fails.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone

from .attachments import PreviewRegistry, encode_files
from .errors import ChatClientError, ValidationError
from .mapping import message_from_payload, participant_from_payload, thread_from_payload
from .models import PendingMessage, SessionState, ThreadScope
from .progress import READ_START, UploadProgress

logger = logging.getLogger(__name__)

POLL_INTERVAL = 4.0
PAGE_SIZE = 50


def merge_messages(confirmed, pending):
    """
    Union of confirmed and pending messages ordered by timestamp.

    The sort is stable and confirmed messages go first on equal timestamps,
    so the server's order among confirmed messages is kept.
    """
    combined = [(message.timestamp, 0, message) for message in confirmed]
    combined += [(message.timestamp, 1, message) for message in pending]
    combined.sort(key=lambda item: (item[0], item[1]))
    return [message for _, _, message in combined]


def _utcnow():
    return datetime.now(timezone.utc)


class ChatSession:

    def __init__(self, transport, current_user, poll_interval=POLL_INTERVAL, page_size=PAGE_SIZE, clock=None):
        self.transport = transport
        self.current_user = current_user
        self.poll_interval = poll_interval
        self.page_size = page_size
        self.clock = clock or _utcnow

        self.state = SessionState.CLOSED
        self.scope = None
        self.messages = []
        self.contacts = []
        self.threads = []
        self.has_older = False
        self.previews = PreviewRegistry()

        self._confirmed = []
        self._pending = {}
        self._poll_task = None

    @property
    def sending(self):
        return bool(self._pending)

    @property
    def is_open(self):
        return self.state is not SessionState.CLOSED

    # Lifecycle

    async def open(self):
        if self.state is SessionState.CLOSED:
            self.state = SessionState.IDLE
            logger.debug("Chat session opened for %s", self.current_user.id)
        return self

    async def close(self):
        await self._stop_polling()
        self.state = SessionState.CLOSED
        self.scope = None
        self.messages = []
        self._confirmed = []
        self._pending.clear()
        self.previews.revoke_all()
        logger.debug("Chat session closed for %s", self.current_user.id)

    async def __aenter__(self):
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # Selection

    async def select(self, scope):
        """Show ``scope``: load its newest page and start polling it."""
        self._require_open()
        await self._stop_polling()

        self.scope = scope
        self.state = SessionState.LOADING
        self.messages = []
        self._confirmed = []
        self.has_older = False

        try:
            page = await self.transport.list_messages(scope, limit=self.page_size)
        except ChatClientError:
            if self.scope == scope:
                self.scope = None
                self.state = SessionState.IDLE
            raise

        if self.scope != scope or not self.is_open:
            return
        self._absorb([message_from_payload(data) for data in page])
        self.has_older = len(page) >= self.page_size
        self.state = SessionState.READY
        self._poll_task = asyncio.create_task(self._poll_loop(scope), name=f"chat_poll_{scope}")

    async def refresh_contacts(self):
        self._require_open()
        self.contacts = [participant_from_payload(data) for data in await self.transport.list_contacts()]
        return self.contacts

    async def refresh_threads(self):
        self._require_open()
        self.threads = [thread_from_payload(data) for data in await self.transport.list_threads()]
        return self.threads

    async def start_thread(self, participant_ids, title=None):
        """Open (or reuse) the thread with ``participant_ids`` and select it."""
        self._require_open()
        thread = thread_from_payload(await self.transport.open_thread(participant_ids, title=title))
        self.threads = [thread] + [existing for existing in self.threads if existing.id != thread.id]
        await self.select(ThreadScope(thread.id))
        return thread

    # Messages

    async def send(self, content, files=()):
        """
        Send a message to the selected scope.

        The message is shown as pending right away. Returns the confirmed
        message, or None when there was nothing to send. On failure the
        pending entry is removed and the error is raised.
        """
        text = (content or '').strip()
        files = list(files)
        if not text and not files:
            return None
        self._require_open()
        if self.scope is None:
            raise ValidationError("No conversation selected.")

        scope = self.scope
        previews = [self.previews.create(local_file) for local_file in files]
        pending = PendingMessage(
            temp_id=f"pending-{uuid.uuid4().hex}",
            sender_id=self.current_user.id,
            sender_name=self.current_user.name,
            content=text,
            timestamp=self.clock(),
            attachments=[
                {'name': f.name, 'type': f.content_type, 'url': url, 'size': f.size}
                for f, url in zip(files, previews)
            ],
            upload_progress=READ_START if files else None,
            scope=scope,
        )
        self._pending[pending.temp_id] = pending
        self.messages.append(pending)

        try:
            on_progress = None
            payload = []
            if files:
                progress = UploadProgress(len(files), on_change=lambda value: self._set_progress(pending, value))
                payload = await encode_files(files, progress)
                if self.transport.supports_upload_progress:
                    on_progress = progress.transmitted
                else:
                    progress.high_water()
            data = await self.transport.send_message(scope, text, payload, on_progress=on_progress)
            confirmed = message_from_payload(data)
        except (Exception, asyncio.CancelledError):
            self._discard_pending(pending)
            logger.info("Send %s to %s failed, pending message removed", pending.temp_id, scope)
            raise
        finally:
            for url in previews:
                self.previews.revoke(url)

        self._confirm(pending, confirmed)
        return confirmed

    async def poll_once(self):
        """
        Fetch the newest page of the selected scope and merge it.

        Returns False when the result was discarded because the selection
        changed while the request was in flight.
        """
        scope = self.scope
        if scope is None:
            return False
        page = await self.transport.list_messages(scope, limit=self.page_size)
        if self.scope != scope or not self.is_open:
            logger.debug("Discarding poll result for %s", scope)
            return False
        self._absorb([message_from_payload(data) for data in page])
        return True

    async def load_older(self):
        """Fetch the page before the oldest confirmed message."""
        scope = self.scope
        if scope is None or not self._confirmed:
            return []
        oldest = self._confirmed[0]
        page = await self.transport.list_messages(scope, before=oldest.timestamp, limit=self.page_size)
        if self.scope != scope or not self.is_open:
            return []
        known = {message.id for message in self._confirmed}
        older = [message_from_payload(data) for data in page]
        self.has_older = len(page) >= self.page_size
        self._absorb(older)
        return [message for message in older if message.id not in known]

    # Internals

    def _require_open(self):
        if not self.is_open:
            raise ChatClientError("Chat session is closed.")

    def _scope_pending(self):
        return [pending for pending in self._pending.values() if pending.scope == self.scope]

    def _absorb(self, page):
        # Messages loaded earlier stay; the page replaces entries with the same id
        # and its order wins for equal timestamps
        page_ids = {message.id for message in page}
        kept = [message for message in self._confirmed if message.id not in page_ids]
        self._confirmed = sorted(kept + list(page), key=lambda message: message.timestamp)
        self.messages = merge_messages(self._confirmed, self._scope_pending())

    def _set_progress(self, pending, value):
        if pending.temp_id in self._pending:
            pending.upload_progress = value

    def _discard_pending(self, pending):
        self._pending.pop(pending.temp_id, None)
        self.messages = [
            message for message in self.messages
            if not (isinstance(message, PendingMessage) and message.temp_id == pending.temp_id)
        ]

    def _confirm(self, pending, confirmed):
        self._pending.pop(pending.temp_id, None)
        if pending.scope != self.scope:
            return

        already_delivered = any(message.id == confirmed.id for message in self._confirmed)
        if not already_delivered:
            self._confirmed.append(confirmed)
            self._confirmed.sort(key=lambda message: message.timestamp)

        for index, message in enumerate(self.messages):
            if isinstance(message, PendingMessage) and message.temp_id == pending.temp_id:
                if already_delivered:
                    del self.messages[index]
                else:
                    self.messages[index] = confirmed
                break

    async def _poll_loop(self, scope):
        while True:
            await asyncio.sleep(self.poll_interval)
            if self.scope != scope:
                return
            try:
                await self.poll_once()
            except ChatClientError as e:
                logger.warning("Polling %s failed: %s", scope, e)
            except Exception:
                logger.exception("Polling %s failed", scope)

    async def _stop_polling(self):
        task, self._poll_task = self._poll_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
