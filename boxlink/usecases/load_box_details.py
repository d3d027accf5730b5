"""Use case for the box detail view: box, activity history and linked emails."""

from __future__ import annotations

from dataclasses import dataclass

from boxlink.domain.entities import BoxDetails
from boxlink.domain.errors import ValidationError
from boxlink.domain.ports import BoxId, ListStorePort, UseCaseError
from boxlink.usecases.error_mapping import map_api_error


@dataclass
class LoadBoxDetails:
    store: ListStorePort

    def __call__(self, *, box_id: BoxId) -> BoxDetails:
        if not box_id:
            raise ValidationError("Please select a box", fields=["box"])
        try:
            box = self.store.get_box(box_id)
            activities = self.store.list_activities_for_box(box_id)
            emails = self.store.list_emails_for_box(box_id)
        except UseCaseError:
            raise
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="BOX_DETAILS_FAILED",
                default_message="Failed to load box details.",
            ) from exc
        return BoxDetails(box=box, activities=list(activities), emails=list(emails))


__all__ = ["LoadBoxDetails"]
