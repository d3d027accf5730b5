from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from boxlink.adapters.api_errors import ApiNotFoundError, ApiServerError
from boxlink.adapters.list_store_memory import InMemoryListStore, seed_demo
from boxlink.domain.entities import ActivityType, BoxChanges, BoxDraft, EmailDescriptor


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(minutes=1)
        return self.now


def _store() -> InMemoryListStore:
    return InMemoryListStore(clock=_Clock())


def test_seed_demo_builds_sales_pipeline_and_clears_calls() -> None:
    store = seed_demo(_store())

    pipelines = store.list_pipelines()
    assert [p.title for p in pipelines] == ["Partnerships", "Sales"]
    sales = next(p for p in pipelines if p.title == "Sales")
    assert [s.title for s in store.list_stages(sales.id)] == ["Lead", "Qualified", "Proposal", "Won"]
    assert [b.title for b in store.list_boxes(sales.id)] == ["Acme renewal", "Globex pilot"]
    assert len(store.recent_activities()) == 2
    assert [op for op, _ in store.calls] == ["list_pipelines", "list_stages", "list_boxes", "recent_activities"]


def test_recent_activities_newest_first_and_limited() -> None:
    store = _store()
    for index in range(4):
        store.create_activity(1, ActivityType.NOTE, f"note {index}")

    recent = store.recent_activities(limit=2)

    assert [a.text for a in recent] == ["note 3", "note 2"]
    assert recent[0].author == "Demo User"


def test_find_boxes_by_message_id_dedups() -> None:
    store = _store()
    box = store.create_box(BoxDraft(title="Deal", pipeline_id=1, stage_id=2))
    email = EmailDescriptor(subject="Hi", message_id="<a@b>")
    store.link_email(email, box.id)
    store.link_email(email, box.id)

    assert [b.id for b in store.find_boxes_by_message_id("<a@b>")] == [box.id]
    assert store.find_boxes_by_message_id("") == []


def test_update_box_changes_only_supplied_fields() -> None:
    store = _store()
    box = store.create_box(BoxDraft(title="Deal", pipeline_id=1, stage_id=2, value=50, notes="keep"))

    store.update_box(box.id, BoxChanges(stage_id=3))

    updated = store.get_box(box.id)
    assert updated.stage_id == 3
    assert updated.notes == "keep"
    assert updated.value == 50
    assert updated.modified_at > box.modified_at


def test_missing_box_raises_not_found() -> None:
    store = _store()

    with pytest.raises(ApiNotFoundError):
        store.get_box(404)
    with pytest.raises(ApiNotFoundError):
        store.update_box(404, BoxChanges(title="x"))


def test_fail_next_raises_once() -> None:
    store = _store()
    store.fail_next("list_pipelines", ApiServerError("down", status=503))

    with pytest.raises(ApiServerError):
        store.list_pipelines()
    assert store.list_pipelines() == []
