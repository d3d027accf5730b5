"""Use case for loading the stages of one pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from boxlink.domain.entities import Stage
from boxlink.domain.errors import ValidationError
from boxlink.domain.ports import ListStorePort, PipelineId, UseCaseError
from boxlink.usecases.error_mapping import map_api_error


@dataclass
class LoadStages:
    store: ListStorePort

    def __call__(self, *, pipeline_id: PipelineId) -> List[Stage]:
        if not pipeline_id:
            raise ValidationError("Select a pipeline first.", fields=["pipeline"])
        try:
            stages = self.store.list_stages(pipeline_id)
        except UseCaseError:
            raise
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="STAGES_LOAD_FAILED",
                default_message="Failed to load stages.",
            ) from exc
        return sorted(stages, key=lambda stage: stage.order)


__all__ = ["LoadStages"]
