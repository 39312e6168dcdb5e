import asyncio
import logging
from abc import ABC, abstractmethod

import requests

from .errors import TransientIOError, error_from_response
from .models import JobScope, ThreadScope

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15


class ChatTransport(ABC):
    """What the chat session needs from the server."""

    #: Whether ``send_message`` calls ``on_progress`` while uploading.
    supports_upload_progress = False

    @abstractmethod
    async def list_contacts(self):
        """Participant payloads the caller may message."""

    @abstractmethod
    async def list_threads(self):
        """Thread payloads of the caller, most recent first."""

    @abstractmethod
    async def open_thread(self, participant_ids, title=None):
        """Find or create the thread with ``participant_ids``; returns its payload."""

    @abstractmethod
    async def list_messages(self, scope, before=None, limit=None):
        """Message payloads of ``scope`` in ascending order."""

    @abstractmethod
    async def send_message(self, scope, content, attachments, on_progress=None):
        """Send a message to ``scope``; returns the stored message payload."""


class HttpChatTransport(ChatTransport):
    """
    :class:`ChatTransport` over the workchat REST API.

    ``requests`` is blocking, so each call runs in a worker thread.
    """

    def __init__(self, base_url, token, timeout=DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_headers(self):
        return {
            'Authorization': f"Bearer {self.token}",
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }

    def _messages_path(self, scope):
        if isinstance(scope, ThreadScope):
            return f"/conversations/{scope.conversation_id}/messages/"
        if isinstance(scope, JobScope):
            return f"/jobs/{scope.job_id}/messages/"
        raise TypeError(f"Unsupported scope: {scope!r}")

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, headers=self._get_headers(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise TransientIOError(str(e)) from e

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            raise error_from_response(response.status_code, body)

        try:
            return response.json()
        except ValueError as e:
            raise TransientIOError(f"Invalid JSON from {path}", status=response.status_code) from e

    async def _call(self, method, path, **kwargs):
        return await asyncio.to_thread(self._request, method, path, **kwargs)

    async def list_contacts(self):
        data = await self._call('GET', '/conversations/contacts/')
        return data.get('results', [])

    async def list_threads(self):
        data = await self._call('GET', '/conversations/')
        return data.get('results', [])

    async def open_thread(self, participant_ids, title=None):
        body = {'participant_ids': list(participant_ids)}
        if title:
            body['title'] = title
        data = await self._call('POST', '/conversations/', json=body)
        return data['conversation']

    async def list_messages(self, scope, before=None, limit=None):
        params = {}
        if before is not None:
            params['before'] = before.isoformat() if hasattr(before, 'isoformat') else str(before)
        if limit is not None:
            params['limit'] = limit
        data = await self._call('GET', self._messages_path(scope), params=params)
        return data.get('messages', [])

    async def send_message(self, scope, content, attachments, on_progress=None):
        return await self._call(
            'POST',
            self._messages_path(scope),
            json={'content': content, 'attachments': list(attachments)},
        )
