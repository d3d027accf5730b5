"""Use case for loading the boxes of one pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from boxlink.domain.entities import Box
from boxlink.domain.errors import ValidationError
from boxlink.domain.ports import ListStorePort, PipelineId, UseCaseError
from boxlink.usecases.error_mapping import map_api_error


@dataclass
class LoadBoxes:
    """Fetch boxes of a pipeline, most recently modified first."""

    store: ListStorePort

    def __call__(self, *, pipeline_id: PipelineId) -> List[Box]:
        if not pipeline_id:
            raise ValidationError("Select a pipeline first.", fields=["pipeline"])
        try:
            return list(self.store.list_boxes(pipeline_id))
        except UseCaseError:
            raise
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="BOXES_LOAD_FAILED",
                default_message="Failed to load boxes.",
            ) from exc


__all__ = ["LoadBoxes"]
