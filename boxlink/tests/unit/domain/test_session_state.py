from __future__ import annotations

from boxlink.domain.entities import Box, EmailDescriptor, Pipeline, Stage
from boxlink.domain.session import SessionState


def _box(box_id: int, pipeline_id: int = 1) -> Box:
    return Box(id=box_id, title=f"Box {box_id}", pipeline_id=pipeline_id, stage_id=1)


def test_with_pipelines_selects_first() -> None:
    state = SessionState().with_pipelines([Pipeline(1, "Sales"), Pipeline(2, "Support")])

    assert state.pipeline_id == 1
    assert [p.title for p in state.pipelines] == ["Sales", "Support"]
    assert SessionState().with_pipelines([]).pipeline_id is None


def test_select_pipeline_clears_boxes_only_on_change() -> None:
    state = SessionState().with_pipelines([Pipeline(1, "Sales")]).with_boxes([_box(1)])

    assert state.select_pipeline(1) is state
    switched = state.select_pipeline(2)
    assert switched.pipeline_id == 2
    assert switched.boxes == ()


def test_with_email_clears_linked_boxes() -> None:
    state = SessionState().with_linked_boxes([_box(3)])

    updated = state.with_email(EmailDescriptor(subject="s", message_id="<m>"))

    assert updated.linked_boxes == ()
    assert state.linked_boxes == (_box(3),)


def test_stage_lookups() -> None:
    state = SessionState().with_stages(1, [Stage(5, "Lead", 1, 1), Stage(6, "Won", 2, 1)])

    assert state.stage_titles(1) == {5: "Lead", 6: "Won"}
    assert state.stages_for(None) == ()
    assert state.stages_for(9) == ()


def test_known_stage_titles_span_loaded_pipelines() -> None:
    state = (
        SessionState()
        .with_stages(1, [Stage(5, "Lead", 1, 1)])
        .with_stages(2, [Stage(8, "Triage", 1, 2)])
    )

    assert state.known_stage_titles() == {5: "Lead", 8: "Triage"}
