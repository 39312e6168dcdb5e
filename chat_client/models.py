from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union


class SessionState(Enum):
    CLOSED = 'closed'
    IDLE = 'idle'
    LOADING = 'loading'
    READY = 'ready'


@dataclass(frozen=True)
class ThreadScope:
    """A staff conversation."""

    conversation_id: str


@dataclass(frozen=True)
class JobScope:
    """The chat of one job."""

    job_id: int


Scope = Union[ThreadScope, JobScope]


@dataclass
class Participant:
    id: str
    name: str
    role: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None


@dataclass
class Thread:
    id: str
    title: str
    participants: List[Participant]
    last_message: Optional[dict] = None
    unread_count: int = 0
    updated_at: Optional[datetime] = None


@dataclass
class ConfirmedMessage:
    """A message the server has stored."""

    id: str
    sender_id: str
    sender_name: str
    content: str
    timestamp: datetime
    attachments: List[dict] = field(default_factory=list)
    sender_role: Optional[str] = None
    kind: str = field(default='confirmed', init=False)


@dataclass
class PendingMessage:
    """
    A message shown before the server has confirmed it.

    ``attachments`` point at local preview urls until the send settles.
    ``upload_progress`` is None for text-only messages.
    """

    temp_id: str
    sender_id: str
    sender_name: str
    content: str
    timestamp: datetime
    attachments: List[dict] = field(default_factory=list)
    upload_progress: Optional[int] = None
    scope: Optional[Scope] = field(default=None, repr=False, compare=False)
    kind: str = field(default='pending', init=False)


ChatMessage = Union[ConfirmedMessage, PendingMessage]
