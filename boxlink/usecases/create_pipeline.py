"""Use case creating a pipeline together with its ordered stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from boxlink.domain.errors import ValidationError
from boxlink.domain.ports import ListStorePort
from boxlink.domain.workflow import WorkflowResult
from boxlink.usecases.workflow_steps import run_step

STEP_PIPELINE = "create_pipeline"


def stage_step_name(order: int) -> str:
    return f"create_stage[{order}]"


@dataclass
class CreatePipeline:
    store: ListStorePort

    def __call__(
        self,
        *,
        title: str,
        description: str = "",
        stage_titles: Sequence[str] = (),
    ) -> WorkflowResult:
        name = str(title or "").strip()
        stages = [str(item).strip() for item in stage_titles if str(item).strip()]
        if not name:
            raise ValidationError("Pipeline title is required.", fields=["title"])
        if not stages:
            raise ValidationError("Add at least one stage.", fields=["stages"])

        result = WorkflowResult(name="create_pipeline")
        ok, pipeline = run_step(
            result,
            STEP_PIPELINE,
            lambda: self.store.create_pipeline(name, description),
            default_code="PIPELINE_CREATE_FAILED",
            default_message="Failed to create pipeline",
        )
        if not ok:
            return result
        for order, stage_title in enumerate(stages, start=1):
            ok, _ = run_step(
                result,
                stage_step_name(order),
                lambda t=stage_title, o=order: self.store.create_stage(pipeline.id, t, o),
                default_code="STAGE_CREATE_FAILED",
                default_message=f"Failed to create stage '{stage_title}'",
            )
            if not ok:
                break
        return result


__all__ = ["CreatePipeline", "STEP_PIPELINE", "stage_step_name"]
