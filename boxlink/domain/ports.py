from __future__ import annotations
from typing import Any, Dict, List, Optional, Protocol

from .entities import (
    Activity,
    ActivityType,
    Box,
    BoxChanges,
    BoxDraft,
    EmailDescriptor,
    EmailLink,
    Pipeline,
    Stage,
)

PipelineId = int
BoxId = int


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str, *, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta or {}


# ---- Ports (Hexagonal boundaries) ----
class ListStorePort(Protocol):
    """Typed operations over the remote pipeline/box/email/activity lists."""

    def list_pipelines(self) -> List[Pipeline]: ...  # title ascending
    def create_pipeline(self, title: str, description: str = "") -> Pipeline: ...
    def list_stages(self, pipeline_id: PipelineId) -> List[Stage]: ...  # order ascending
    def create_stage(self, pipeline_id: PipelineId, title: str, order: int) -> Stage: ...
    def list_boxes(self, pipeline_id: PipelineId) -> List[Box]: ...  # modified desc
    def get_box(self, box_id: BoxId) -> Box: ...
    def create_box(self, draft: BoxDraft) -> Box: ...
    def update_box(self, box_id: BoxId, changes: BoxChanges) -> bool: ...
    def list_emails_for_box(self, box_id: BoxId) -> List[EmailLink]: ...
    def find_boxes_by_message_id(self, message_id: str) -> List[Box]: ...  # unique ids
    def link_email(self, email: EmailDescriptor, box_id: BoxId) -> EmailLink: ...
    def list_activities_for_box(self, box_id: BoxId) -> List[Activity]: ...  # newest first
    def recent_activities(self, limit: int = 20) -> List[Activity]: ...
    def create_activity(
        self, box_id: BoxId, activity_type: ActivityType, text: str
    ) -> Activity: ...


class MailboxPort(Protocol):
    """Read-only access to the message open in the mailbox host."""

    def current_email(self) -> Optional[EmailDescriptor]: ...


class StoragePort(Protocol):
    """Persistence for user preferences."""

    def save_user_prefs(self, prefs: Dict) -> None: ...
    def load_user_prefs(self) -> Dict: ...
