"""Use case applying a partial box update and logging it."""

from __future__ import annotations

from dataclasses import dataclass, fields

from boxlink.domain.entities import ActivityType, BoxChanges
from boxlink.domain.errors import ValidationError
from boxlink.domain.ports import BoxId, ListStorePort
from boxlink.domain.workflow import WorkflowResult
from boxlink.usecases.workflow_steps import run_step

STEP_UPDATE = "update_box"
STEP_ACTIVITY = "log_activity"


def changed_field_names(changes: BoxChanges) -> list[str]:
    return [item.name for item in fields(changes) if getattr(changes, item.name) is not None]


@dataclass
class UpdateBoxDetails:
    """Overwrite only the supplied fields, then append an activity entry."""

    store: ListStorePort

    def __call__(self, *, box_id: BoxId, changes: BoxChanges) -> WorkflowResult:
        if not box_id:
            raise ValidationError("Please select a box", fields=["box"])
        if changes.stage_id is not None:
            raise ValidationError("Moving a box to another stage is not supported.", fields=["stage"])
        if changes.is_empty():
            raise ValidationError("Nothing to update.", fields=[])
        if changes.title is not None and not changes.title.strip():
            raise ValidationError("Title must not be empty.", fields=["title"])
        if changes.value is not None and changes.value < 0:
            raise ValidationError("Value must be zero or positive.", fields=["value"])

        result = WorkflowResult(name="update_box_details")
        ok, _ = run_step(
            result,
            STEP_UPDATE,
            lambda: self.store.update_box(box_id, changes),
            default_code="UPDATE_FAILED",
            default_message="Failed to update box",
        )
        if not ok:
            return result

        text = f"Box updated: {', '.join(changed_field_names(changes))}"
        run_step(
            result,
            STEP_ACTIVITY,
            lambda: self.store.create_activity(box_id, ActivityType.UPDATED, text),
            default_code="ACTIVITY_FAILED",
            default_message="Box updated, but the activity entry failed",
        )
        return result


__all__ = ["STEP_ACTIVITY", "STEP_UPDATE", "UpdateBoxDetails", "changed_field_names"]
