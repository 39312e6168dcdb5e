"""
Ordered, scoped message logs.

Staff conversations and job chat are two storage shapes of the same idea:
an append-only, ordered list of messages addressed by a scope key. Staff
conversations keep messages as rows keyed by the thread's participant
identity; job chat embeds them in the job record keyed by the job id. Both
implement :class:`MessageLog` so the services above them read the same way.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class MessageDraft:
    """A validated message about to be appended."""

    sender_id: str
    sender_name: str
    content: str
    attachments: List[dict] = field(default_factory=list)


@dataclass
class LoggedMessage:
    """A message as stored in a log, with the sender resolved."""

    id: str
    scope_key: str
    sender_id: str
    sender_name: str
    content: str
    attachments: List[dict]
    timestamp: datetime
    sender_role: Optional[str] = None
    sender_avatar: Optional[str] = None
    read_by: Optional[List[str]] = None


class MessageLog(ABC):
    """Append-only ordered message storage for one kind of scope."""

    @abstractmethod
    def append(self, scope_key: str, draft: MessageDraft) -> LoggedMessage:
        """Append ``draft`` to the log addressed by ``scope_key``."""

    @abstractmethod
    def list(self, scope_key: str, before: Optional[datetime] = None,
             limit: Optional[int] = None) -> List[LoggedMessage]:
        """
        Return messages of ``scope_key`` in ascending order.

        With ``before``, only messages strictly older than it are considered.
        With ``limit``, only the newest ``limit`` of those are returned.
        """


def newest_page(messages, before=None, limit=None):
    """
    Select the newest ``limit`` messages older than ``before``, ascending.

    ``messages`` must already be in ascending log order.
    """
    if before is not None:
        messages = [message for message in messages if message.timestamp < before]
    if limit is not None:
        messages = messages[-limit:] if limit > 0 else []
    return list(messages)
