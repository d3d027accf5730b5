"""Use case for listing the boxes an email is already linked to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from boxlink.domain.entities import Box, EmailDescriptor
from boxlink.domain.ports import ListStorePort, UseCaseError
from boxlink.usecases.error_mapping import map_api_error


@dataclass
class FindLinkedBoxes:
    store: ListStorePort

    def __call__(self, *, email: Optional[EmailDescriptor]) -> List[Box]:
        """Return linked boxes without duplicates; no email means no boxes."""
        if email is None or not email.message_id:
            return []
        try:
            boxes = self.store.find_boxes_by_message_id(email.message_id)
        except UseCaseError:
            raise
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="LINKS_LOAD_FAILED",
                default_message="Failed to check email links.",
            ) from exc
        unique: List[Box] = []
        seen = set()
        for box in boxes:
            if box.id in seen:
                continue
            seen.add(box.id)
            unique.append(box)
        return unique


__all__ = ["FindLinkedBoxes"]
