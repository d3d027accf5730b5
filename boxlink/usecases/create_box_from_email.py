"""Use case creating a box from the open email.

Validation happens before any store call. The store calls then run as an
ordered, non-transactional sequence: ``create_box`` -> ``link_email`` ->
``log_activity``. Steps already committed stay committed when a later one
fails.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from boxlink.domain.entities import ActivityType, BoxDraft, EmailDescriptor
from boxlink.domain.errors import ValidationError
from boxlink.domain.ports import ListStorePort
from boxlink.domain.workflow import WorkflowResult
from boxlink.usecases.workflow_steps import run_step

STEP_CREATE = "create_box"
STEP_LINK = "link_email"
STEP_ACTIVITY = "log_activity"


def box_created_text(email: EmailDescriptor) -> str:
    return f"Box created from email: {email.subject}"


@dataclass
class CreateBoxFromEmail:
    store: ListStorePort

    def __call__(self, *, email: Optional[EmailDescriptor], draft: BoxDraft) -> WorkflowResult:
        missing = draft.missing_fields()
        if missing:
            raise ValidationError("Please fill in all required fields", fields=missing)
        if draft.value is not None and draft.value < 0:
            raise ValidationError("Value must be zero or positive.", fields=["value"])
        if email is None:
            raise ValidationError("No email is open.", fields=["email"])

        # Contact defaults come from the sender of the open email.
        draft = replace(
            draft,
            title=draft.title.strip(),
            contact_email=draft.contact_email or email.sender,
            contact_name=draft.contact_name or email.sender_name,
        )

        result = WorkflowResult(name="create_box_from_email")
        ok, box = run_step(
            result,
            STEP_CREATE,
            lambda: self.store.create_box(draft),
            default_code="CREATE_FAILED",
            default_message="Failed to create box",
        )
        if not ok:
            return result
        ok, _ = run_step(
            result,
            STEP_LINK,
            lambda: self.store.link_email(email, box.id),
            default_code="LINK_FAILED",
            default_message="Box created, but linking the email failed",
        )
        if not ok:
            return result
        run_step(
            result,
            STEP_ACTIVITY,
            lambda: self.store.create_activity(box.id, ActivityType.CREATED, box_created_text(email)),
            default_code="ACTIVITY_FAILED",
            default_message="Box created, but the activity entry failed",
        )
        return result


__all__ = [
    "CreateBoxFromEmail",
    "STEP_ACTIVITY",
    "STEP_CREATE",
    "STEP_LINK",
    "box_created_text",
]
