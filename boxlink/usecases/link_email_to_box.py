"""Use case linking the open email to an existing box.

Steps run in order and stop at the first failure:

1. ``link_email``: create the email link row.
2. ``log_activity``: append an ``Email`` activity to the box.

A failure in step 2 leaves the link from step 1 in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from boxlink.domain.entities import ActivityType, EmailDescriptor
from boxlink.domain.errors import ValidationError
from boxlink.domain.ports import BoxId, ListStorePort
from boxlink.domain.workflow import WorkflowResult
from boxlink.usecases.workflow_steps import run_step

STEP_LINK = "link_email"
STEP_ACTIVITY = "log_activity"


def email_linked_text(email: EmailDescriptor) -> str:
    return f"Email linked: {email.subject}"


@dataclass
class LinkEmailToBox:
    store: ListStorePort

    def __call__(self, *, email: Optional[EmailDescriptor], box_id: Optional[BoxId]) -> WorkflowResult:
        if not box_id:
            raise ValidationError("Please select a box", fields=["box"])
        if email is None:
            raise ValidationError("No email is open.", fields=["email"])

        result = WorkflowResult(name="link_email_to_box")
        ok, _ = run_step(
            result,
            STEP_LINK,
            lambda: self.store.link_email(email, box_id),
            default_code="LINK_FAILED",
            default_message="Failed to link email to box",
        )
        if not ok:
            return result
        run_step(
            result,
            STEP_ACTIVITY,
            lambda: self.store.create_activity(box_id, ActivityType.EMAIL, email_linked_text(email)),
            default_code="ACTIVITY_FAILED",
            default_message="Email linked, but the activity entry failed",
        )
        return result


__all__ = ["LinkEmailToBox", "STEP_ACTIVITY", "STEP_LINK", "email_linked_text"]
