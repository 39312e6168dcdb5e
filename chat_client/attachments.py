import asyncio
import base64
import mimetypes
import os
import uuid
from dataclasses import dataclass
from typing import Optional

DEFAULT_CONTENT_TYPE = 'application/octet-stream'
# Multiple of 3 so chunks encode without padding
CHUNK_SIZE = 3 * 16 * 1024


@dataclass
class LocalFile:
    """A file picked by the user, held in memory until it is sent."""

    name: str
    data: bytes
    content_type: Optional[str] = None

    def __post_init__(self):
        if not self.content_type:
            self.content_type = mimetypes.guess_type(self.name)[0] or DEFAULT_CONTENT_TYPE

    @property
    def size(self):
        return len(self.data)

    @classmethod
    def from_path(cls, path, content_type=None):
        with open(path, 'rb') as handle:
            data = handle.read()
        return cls(name=os.path.basename(path), data=data, content_type=content_type)


class PreviewRegistry:
    """
    Transient preview urls for files shown in pending messages.

    Every url handed out must be revoked once its message settles.
    """

    SCHEME = 'preview://'

    def __init__(self):
        self._files = {}

    def create(self, local_file):
        url = f"{self.SCHEME}{uuid.uuid4().hex}"
        self._files[url] = local_file
        return url

    def resolve(self, url):
        return self._files.get(url)

    def revoke(self, url):
        self._files.pop(url, None)

    def revoke_all(self):
        self._files.clear()

    def __contains__(self, url):
        return url in self._files

    def __len__(self):
        return len(self._files)


async def encode_file(local_file, on_progress=None):
    """Encode ``local_file`` as a base64 data url, reporting the read fraction."""
    data = local_file.data
    total = len(data)
    parts = []
    for offset in range(0, total, CHUNK_SIZE):
        parts.append(base64.b64encode(data[offset:offset + CHUNK_SIZE]).decode('ascii'))
        if on_progress is not None:
            on_progress(min(offset + CHUNK_SIZE, total) / total)
        # Let the event loop breathe between chunks
        await asyncio.sleep(0)
    if on_progress is not None and total == 0:
        on_progress(1.0)
    return f"data:{local_file.content_type};base64,{''.join(parts)}"


async def encode_files(files, progress=None):
    """
    Encode ``files`` one after another into attachment payloads.

    ``progress`` is an :class:`~chat_client.progress.UploadProgress` advanced
    through the read phase.
    """
    payload = []
    for index, local_file in enumerate(files):
        def report(fraction, index=index):
            if progress is not None:
                progress.file_read(index, fraction)

        url = await encode_file(local_file, report)
        payload.append({
            'name': local_file.name,
            'type': local_file.content_type,
            'url': url,
            'size': local_file.size,
        })
    if progress is not None:
        progress.read_done()
    return payload
