"""Domain value objects for pipelines, boxes, linked emails and activities.

Rows arrive from the list store keyed by the store's field names
(``ID``, ``Title``, ``PipelineId`` ...). ``from_row`` builders normalize them
into frozen dataclasses so adapters, use cases and view models share one
typed vocabulary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Mapping, Optional

from .time_utils import parse_store_datetime

TITLE_MAX_LENGTH = 255
UNKNOWN_AUTHOR = "Unknown"


def _row_id(row: Mapping[str, Any]) -> int:
    raw = row.get("ID", row.get("Id"))
    value = _as_int(raw)
    if value is None:
        raise ValueError(f"List row has no usable ID: {raw!r}")
    return value


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def truncate_title(text: str, limit: int = TITLE_MAX_LENGTH) -> str:
    """Clip text to the store's single-line title limit."""
    return (text or "")[:limit]


class ActivityType(str, Enum):
    """Choice values of the activities list ``ActivityType`` column."""

    EMAIL = "Email"
    NOTE = "Note"
    STAGE_CHANGE = "Stage Change"
    CREATED = "Created"
    UPDATED = "Updated"

    @classmethod
    def parse(cls, value: Any) -> "ActivityType":
        if isinstance(value, ActivityType):
            return value
        text = str(value or "").strip()
        compact = text.replace(" ", "").lower()
        for member in cls:
            if member.value.replace(" ", "").lower() == compact:
                return member
        raise ValueError(f"Unknown activity type: {text!r}")


@dataclass(frozen=True)
class Pipeline:
    id: int
    title: str
    description: str = ""
    created: Optional[datetime] = None
    modified: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Pipeline":
        return cls(
            id=_row_id(row),
            title=_as_text(row.get("Title")),
            description=_as_text(row.get("Description")),
            created=parse_store_datetime(row.get("Created")),
            modified=parse_store_datetime(row.get("Modified")),
        )


@dataclass(frozen=True)
class Stage:
    """Ordered step of one pipeline."""

    id: int
    title: str
    order: int
    pipeline_id: int

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Stage":
        return cls(
            id=_row_id(row),
            title=_as_text(row.get("Title")),
            order=_as_int(row.get("StageOrder")) or 0,
            pipeline_id=_as_int(row.get("PipelineId")) or 0,
        )


@dataclass(frozen=True)
class Box:
    """CRM deal record tracked through the stages of one pipeline."""

    id: int
    title: str
    pipeline_id: int
    stage_id: int
    value: float = 0.0
    contact_email: str = ""
    contact_name: str = ""
    notes: str = ""
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Box":
        return cls(
            id=_row_id(row),
            title=_as_text(row.get("Title")),
            pipeline_id=_as_int(row.get("PipelineId")) or 0,
            stage_id=_as_int(row.get("StageId")) or 0,
            value=_as_float(row.get("BoxValue")),
            contact_email=_as_text(row.get("ContactEmail")),
            contact_name=_as_text(row.get("ContactName")),
            notes=_as_text(row.get("Notes")),
            created_at=parse_store_datetime(row.get("Created")),
            modified_at=parse_store_datetime(row.get("Modified")),
        )


@dataclass(frozen=True)
class EmailLink:
    """Association of one email message with one box."""

    id: int
    title: str
    subject: str
    sender: str
    recipients: str
    date: Optional[datetime]
    message_id: str
    box_id: int

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "EmailLink":
        return cls(
            id=_row_id(row),
            title=_as_text(row.get("Title")),
            subject=_as_text(row.get("EmailSubject")),
            sender=_as_text(row.get("EmailFrom")),
            recipients=_as_text(row.get("EmailTo")),
            date=parse_store_datetime(row.get("EmailDate")),
            message_id=_as_text(row.get("EmailMessageId")),
            box_id=_as_int(row.get("BoxId")) or 0,
        )


@dataclass(frozen=True)
class Activity:
    """Append-only log entry on a box."""

    id: int
    type: ActivityType
    text: str
    box_id: int
    author: str = UNKNOWN_AUTHOR
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Activity":
        author = row.get("Author")
        author_name = ""
        if isinstance(author, Mapping):
            author_name = _as_text(author.get("Title")).strip()
        try:
            activity_type = ActivityType.parse(row.get("ActivityType"))
        except ValueError:
            # Free-text choices added by list admins are shown as notes.
            activity_type = ActivityType.NOTE
        return cls(
            id=_row_id(row),
            type=activity_type,
            text=_as_text(row.get("ActivityText")),
            box_id=_as_int(row.get("BoxId")) or 0,
            author=author_name or UNKNOWN_AUTHOR,
            created_at=parse_store_datetime(row.get("Created")),
        )


@dataclass(frozen=True)
class EmailDescriptor:
    """Metadata of the message currently open in the mailbox host."""

    subject: str
    message_id: str
    sender: str = "Unknown"
    sender_name: str = "Unknown"
    recipients: str = ""
    date: Optional[datetime] = None

    @property
    def sender_label(self) -> str:
        return f"{self.sender_name} <{self.sender}>"

    @classmethod
    def from_host_item(cls, item: Mapping[str, Any]) -> "EmailDescriptor":
        """Build a descriptor from a mailbox host item payload.

        The item follows the host's field names: ``subject``,
        ``internetMessageId`` (falls back to ``itemId``), ``from`` with
        ``emailAddress``/``displayName``, ``to`` as a list of recipients and
        ``dateTimeCreated``.
        """
        sender = item.get("from")
        if isinstance(sender, Mapping) and sender:
            address = _as_text(sender.get("emailAddress")) or "Unknown"
            display = _as_text(sender.get("displayName")) or "Unknown"
        else:
            address = display = "Unknown"

        recipients: List[str] = []
        for entry in item.get("to") or []:
            if isinstance(entry, Mapping):
                text = _as_text(entry.get("emailAddress")).strip()
            else:
                text = _as_text(entry).strip()
            if text:
                recipients.append(text)

        message_id = _as_text(item.get("internetMessageId") or item.get("itemId"))
        return cls(
            subject=_as_text(item.get("subject")),
            message_id=message_id,
            sender=address,
            sender_name=display,
            recipients=", ".join(recipients),
            date=parse_store_datetime(item.get("dateTimeCreated")),
        )


@dataclass(frozen=True)
class BoxDraft:
    """Fields supplied when creating a box."""

    title: str
    pipeline_id: Optional[int]
    stage_id: Optional[int]
    value: Optional[float] = None
    contact_email: str = ""
    contact_name: str = ""
    notes: str = ""

    def missing_fields(self) -> List[str]:
        missing: List[str] = []
        if not (self.title or "").strip():
            missing.append("title")
        if not self.pipeline_id:
            missing.append("pipeline")
        if not self.stage_id:
            missing.append("stage")
        return missing

    @property
    def effective_value(self) -> float:
        return float(self.value) if self.value is not None else 0.0


@dataclass(frozen=True)
class BoxChanges:
    """Partial box update; ``None`` leaves the stored field untouched."""

    title: Optional[str] = None
    stage_id: Optional[int] = None
    value: Optional[float] = None
    contact_email: Optional[str] = None
    contact_name: Optional[str] = None
    notes: Optional[str] = None

    def is_empty(self) -> bool:
        return all(
            getattr(self, name) is None
            for name in ("title", "stage_id", "value", "contact_email", "contact_name", "notes")
        )


@dataclass(frozen=True)
class BoxDetails:
    """Box with its activity history and linked emails."""

    box: Box
    activities: List[Activity] = field(default_factory=list)
    emails: List[EmailLink] = field(default_factory=list)


__all__ = [
    "Activity",
    "ActivityType",
    "Box",
    "BoxChanges",
    "BoxDetails",
    "BoxDraft",
    "EmailDescriptor",
    "EmailLink",
    "Pipeline",
    "Stage",
    "TITLE_MAX_LENGTH",
    "UNKNOWN_AUTHOR",
    "truncate_title",
]
