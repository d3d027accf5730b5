"""Transient user notices emitted by workflows.

Workflows push typed :class:`Notice` entries onto a :class:`NoticeQueue`; a
renderer in the UI layer drains pending notices and owns the display effect,
including removal after ``ttl_s``. The queue keeps nothing once drained, and
a newer notice never cancels an older one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

ERROR_TTL_S = 5.0
SUCCESS_TTL_S = 3.0


class NoticeKind(str, Enum):
    ERROR = "error"
    SUCCESS = "success"


_DEFAULT_TTL = {
    NoticeKind.ERROR: ERROR_TTL_S,
    NoticeKind.SUCCESS: SUCCESS_TTL_S,
}


@dataclass(frozen=True)
class Notice:
    kind: NoticeKind
    message: str
    ttl_s: float


@dataclass
class NoticeQueue:
    """Notices waiting for the renderer, oldest first."""

    _pending: List[Notice] = field(default_factory=list)

    def emit(self, kind: NoticeKind, message: str) -> Notice:
        kind = NoticeKind(kind)
        notice = Notice(kind=kind, message=str(message), ttl_s=_DEFAULT_TTL[kind])
        self._pending.append(notice)
        return notice

    def error(self, message: str) -> Notice:
        return self.emit(NoticeKind.ERROR, message)

    def success(self, message: str) -> Notice:
        return self.emit(NoticeKind.SUCCESS, message)

    def drain(self) -> List[Notice]:
        """Return notices not yet handed to a renderer and forget them."""
        pending, self._pending = self._pending, []
        return pending


__all__ = [
    "ERROR_TTL_S",
    "SUCCESS_TTL_S",
    "Notice",
    "NoticeKind",
    "NoticeQueue",
]
