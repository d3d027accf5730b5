from __future__ import annotations

import pytest

from boxlink.adapters.api_errors import ApiServerError
from boxlink.adapters.list_store_memory import InMemoryListStore
from boxlink.domain.entities import ActivityType, BoxChanges, BoxDraft
from boxlink.domain.errors import ValidationError
from boxlink.usecases.create_pipeline import CreatePipeline, stage_step_name
from boxlink.usecases.update_box_details import UpdateBoxDetails, changed_field_names


def _store_with_box() -> tuple:
    store = InMemoryListStore()
    box = store.create_box(BoxDraft(title="Deal", pipeline_id=1, stage_id=1))
    store.calls.clear()
    return store, box


def test_stage_move_is_rejected_before_any_call() -> None:
    store, box = _store_with_box()

    with pytest.raises(ValidationError) as info:
        UpdateBoxDetails(store)(box_id=box.id, changes=BoxChanges(stage_id=2, notes="x"))

    assert info.value.fields == ["stage"]
    assert store.calls == []
    assert store.get_box(box.id).stage_id == 1


def test_field_update_logs_updated_activity() -> None:
    store, box = _store_with_box()

    UpdateBoxDetails(store)(box_id=box.id, changes=BoxChanges(notes="call back", value=10))

    activity = store.recent_activities()[0]
    assert activity.type is ActivityType.UPDATED
    assert activity.text == "Box updated: value, notes"


@pytest.mark.parametrize(
    "box_id, changes",
    [
        (0, BoxChanges(notes="x")),
        (1, BoxChanges()),
        (1, BoxChanges(title="  ")),
        (1, BoxChanges(value=-5)),
    ],
)
def test_update_validation_makes_no_calls(box_id, changes) -> None:
    store, _ = _store_with_box()

    with pytest.raises(ValidationError):
        UpdateBoxDetails(store)(box_id=box_id, changes=changes)
    assert store.calls == []


def test_changed_field_names() -> None:
    assert changed_field_names(BoxChanges(title="a", contact_email="b")) == ["title", "contact_email"]


def test_create_pipeline_with_ordered_stages() -> None:
    store = InMemoryListStore()

    result = CreatePipeline(store)(title="Hiring", description="", stage_titles=["Applied", " ", "Offer"])

    assert result.ok
    pipeline = result.value_of("create_pipeline")
    assert [s.title for s in store.list_stages(pipeline.id)] == ["Applied", "Offer"]
    assert [s.order for s in store.list_stages(pipeline.id)] == [1, 2]


def test_create_pipeline_stops_at_failed_stage() -> None:
    store = InMemoryListStore()
    store.fail_next("create_stage", ApiServerError("down", status=500))

    result = CreatePipeline(store)(title="Hiring", stage_titles=["Applied", "Offer"])

    assert result.completed == ["create_pipeline"]
    assert result.failed_step.name == stage_step_name(1)
    assert len(store.pipelines) == 1
    assert store.stages == {}


def test_create_pipeline_requires_title_and_stages() -> None:
    store = InMemoryListStore()

    with pytest.raises(ValidationError):
        CreatePipeline(store)(title=" ", stage_titles=["a"])
    with pytest.raises(ValidationError):
        CreatePipeline(store)(title="x", stage_titles=[])
    assert store.calls == []
