"""Domain package exports for value objects, ports and session state."""

from .entities import (
    Activity,
    ActivityType,
    Box,
    BoxChanges,
    BoxDetails,
    BoxDraft,
    EmailDescriptor,
    EmailLink,
    Pipeline,
    Stage,
)
from .errors import ValidationError
from .filters import Filter, QueryOptions
from .notices import Notice, NoticeKind, NoticeQueue
from .ports import ListStorePort, MailboxPort, StoragePort, UseCaseError
from .session import SessionState
from .workflow import StepResult, WorkflowResult

__all__ = [
    "Activity",
    "ActivityType",
    "Box",
    "BoxChanges",
    "BoxDetails",
    "BoxDraft",
    "EmailDescriptor",
    "EmailLink",
    "Filter",
    "ListStorePort",
    "MailboxPort",
    "Notice",
    "NoticeKind",
    "NoticeQueue",
    "Pipeline",
    "QueryOptions",
    "SessionState",
    "Stage",
    "StepResult",
    "StoragePort",
    "UseCaseError",
    "ValidationError",
    "WorkflowResult",
]
