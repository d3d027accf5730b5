"""Immutable panel session state.

Every ``with_*``/``select_*`` method returns a new :class:`SessionState`;
the panel controller swaps its reference after each completed step.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional, Sequence, Tuple

from .entities import Activity, Box, EmailDescriptor, Pipeline, Stage


@dataclass(frozen=True)
class SessionState:
    email: Optional[EmailDescriptor] = None
    pipelines: Tuple[Pipeline, ...] = ()
    pipeline_id: Optional[int] = None
    boxes: Tuple[Box, ...] = ()
    stages_by_pipeline: Mapping[int, Tuple[Stage, ...]] = field(default_factory=dict)
    linked_boxes: Tuple[Box, ...] = ()
    activities: Tuple[Activity, ...] = ()

    def with_email(self, email: Optional[EmailDescriptor]) -> "SessionState":
        return replace(self, email=email, linked_boxes=())

    def with_pipelines(self, pipelines: Sequence[Pipeline]) -> "SessionState":
        """Store the listing and select its first pipeline (or none)."""
        ordered = tuple(pipelines)
        first = ordered[0].id if ordered else None
        return replace(self, pipelines=ordered, pipeline_id=first)

    def select_pipeline(self, pipeline_id: int) -> "SessionState":
        if self.pipeline_id == pipeline_id:
            return self
        return replace(self, pipeline_id=pipeline_id, boxes=())

    def with_boxes(self, boxes: Sequence[Box]) -> "SessionState":
        return replace(self, boxes=tuple(boxes))

    def with_stages(self, pipeline_id: int, stages: Sequence[Stage]) -> "SessionState":
        updated: Dict[int, Tuple[Stage, ...]] = dict(self.stages_by_pipeline)
        updated[pipeline_id] = tuple(stages)
        return replace(self, stages_by_pipeline=updated)

    def with_linked_boxes(self, boxes: Sequence[Box]) -> "SessionState":
        return replace(self, linked_boxes=tuple(boxes))

    def with_activities(self, activities: Sequence[Activity]) -> "SessionState":
        return replace(self, activities=tuple(activities))

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def stages_for(self, pipeline_id: Optional[int]) -> Tuple[Stage, ...]:
        if pipeline_id is None:
            return ()
        return tuple(self.stages_by_pipeline.get(pipeline_id, ()))

    def stage_titles(self, pipeline_id: Optional[int]) -> Dict[int, str]:
        return {stage.id: stage.title for stage in self.stages_for(pipeline_id)}

    def known_stage_titles(self) -> Dict[int, str]:
        """Stage titles of every pipeline whose stages were loaded."""
        return {
            stage.id: stage.title
            for stages in self.stages_by_pipeline.values()
            for stage in stages
        }


__all__ = ["SessionState"]
