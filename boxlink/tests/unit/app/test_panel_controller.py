from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from boxlink.adapters.api_errors import ApiServerError, ApiTransportError
from boxlink.adapters.list_store_memory import InMemoryListStore
from boxlink.adapters.mailbox import StaticMailbox
from boxlink.app.controller import AppController
from boxlink.app.panel_controller import (
    MSG_BOXES_FAILED,
    MSG_CREATED,
    MSG_LINKED,
    MSG_PIPELINES_FAILED,
    PanelController,
)
from boxlink.domain.entities import ActivityType, BoxChanges, BoxDraft, EmailDescriptor
from boxlink.domain.notices import NoticeKind, NoticeQueue
from boxlink.viewmodels.box_list_vm import BoxListState
from boxlink.viewmodels.forms_vm import CreateBoxFormVM
from boxlink.viewmodels.settings_vm import SettingsVM

EMAIL = EmailDescriptor(
    subject="Quote for Q3",
    message_id="<q3@contoso.example>",
    sender="lee@contoso.example",
    sender_name="Lee",
)


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def _sales_store() -> InMemoryListStore:
    """Sales pipeline (id 1) with stages Lead (2) and Won (3) and box Acme (4)."""
    store = InMemoryListStore(clock=_Clock())
    sales = store.create_pipeline("Sales")
    lead = store.create_stage(sales.id, "Lead", 1)
    store.create_stage(sales.id, "Won", 2)
    store.create_box(BoxDraft(title="Acme", pipeline_id=sales.id, stage_id=lead.id))
    store.calls.clear()
    return store


def _panel(store: Optional[InMemoryListStore] = None, email: Optional[EmailDescriptor] = EMAIL):
    store = store or _sales_store()
    app = AppController(SettingsVM(), store_factory=lambda _settings: store)
    panel = PanelController(app, StaticMailbox(email), notices=NoticeQueue())
    return panel, store


def _ops(store: InMemoryListStore):
    return [op for op, _ in store.calls]


def _messages(panel: PanelController, kind: NoticeKind):
    return [n.message for n in panel.notices.drain() if n.kind is kind]


def test_load_selects_first_pipeline_and_loads_boxes_and_stages() -> None:
    panel, store = _panel()

    panel.load()

    assert panel.state.pipeline_id == 1
    assert panel.box_list.state is BoxListState.POPULATED
    assert [b.title for b in panel.box_list.boxes] == ["Acme"]
    assert panel.stage_titles() == {2: "Lead", 3: "Won"}
    assert panel.state.email == EMAIL
    assert _ops(store) == [
        "find_boxes_by_message_id",
        "list_pipelines",
        "list_boxes",
        "list_stages",
        "recent_activities",
    ]


def test_load_without_pipelines_shows_empty_list() -> None:
    panel, store = _panel(store=InMemoryListStore())

    panel.load()

    assert panel.state.pipeline_id is None
    assert panel.box_list.state is BoxListState.EMPTY
    assert "list_boxes" not in _ops(store)


def test_pipeline_load_failure_emits_error_notice() -> None:
    panel, store = _panel()
    store.fail_next("list_pipelines", ApiTransportError("offline"))

    panel.load_pipelines()

    assert _messages(panel, NoticeKind.ERROR) == [MSG_PIPELINES_FAILED]
    assert panel.state.pipelines == ()


def test_box_load_failure_marks_list_errored() -> None:
    panel, store = _panel()
    panel.load()
    store.fail_next("list_boxes", ApiServerError("down", status=500))

    panel.select_pipeline(1)

    assert panel.box_list.state is BoxListState.ERRORED
    assert MSG_BOXES_FAILED in _messages(panel, NoticeKind.ERROR)


def test_select_pipeline_switches_and_reloads() -> None:
    panel, store = _panel()
    panel.load()
    other = store.create_pipeline("Support")
    store.calls.clear()

    panel.select_pipeline(str(other.id))

    assert panel.state.pipeline_id == other.id
    assert panel.box_list.state is BoxListState.EMPTY
    assert _ops(store) == ["list_boxes", "list_stages"]


def test_create_box_validation_emits_notice_without_calls() -> None:
    panel, store = _panel()
    panel.load()
    store.calls.clear()

    result = panel.confirm_create()

    assert result is None
    assert _ops(store) == []
    assert "Please fill in all required fields" in _messages(panel, NoticeKind.ERROR)


def test_link_requires_box_selection() -> None:
    panel, store = _panel()
    panel.load()
    panel.open_link_modal()
    store.calls.clear()

    assert panel.confirm_link() is None

    assert _ops(store) == []
    assert _messages(panel, NoticeKind.ERROR) == ["Please select a box"]
    assert panel.link_form.is_open


def test_link_success_refreshes_linked_boxes_and_activity() -> None:
    panel, store = _panel()
    panel.load()
    panel.open_link_modal()
    panel.select_link_box("4")

    result = panel.confirm_link()

    assert result is not None and result.ok
    assert not panel.link_form.is_open
    assert [b.id for b in panel.state.linked_boxes] == [4]
    assert panel.state.activities[0].text == "Email linked: Quote for Q3"
    assert _messages(panel, NoticeKind.SUCCESS) == [MSG_LINKED]


def test_link_partial_failure_reports_and_still_refreshes() -> None:
    panel, store = _panel()
    panel.load()
    panel.open_link_modal()
    panel.select_link_box(4)
    store.fail_next("create_activity", ApiServerError("down", status=500))

    result = panel.confirm_link()

    assert result is not None and not result.ok
    assert result.completed == ["link_email"]
    assert panel.link_form.is_open
    assert [b.id for b in panel.state.linked_boxes] == [4]
    assert _messages(panel, NoticeKind.ERROR) == ["List store error, try again."]


def test_open_create_modal_prefills_subject_pipeline_and_stages() -> None:
    panel, _ = _panel()
    panel.load()

    panel.open_create_modal()

    form = panel.create_form
    assert form.is_open
    assert form.title == "Quote for Q3"
    assert form.pipeline_id == 1
    assert form.stage_options == [(2, "Lead"), (3, "Won")]
    assert form.stage_id == 2


def test_change_create_pipeline_rebuilds_stage_options() -> None:
    panel, store = _panel()
    panel.load()
    support = store.create_pipeline("Support")
    store.create_stage(support.id, "Triage", 1)
    panel.open_create_modal()

    panel.change_create_pipeline(support.id)

    assert [title for _, title in panel.create_form.stage_options] == ["Triage"]

    panel.change_create_pipeline("")
    assert panel.create_form.stage_options == []
    assert panel.create_form.stage_id is None


def test_create_box_success_reloads_views_and_clears_form() -> None:
    panel, store = _panel()
    panel.load()
    panel.open_create_modal()
    panel.create_form.value_text = "5,000"

    result = panel.confirm_create()

    assert result is not None and result.ok
    assert panel.create_form == CreateBoxFormVM()
    assert {b.title for b in panel.box_list.boxes} == {"Acme", "Quote for Q3"}
    assert [b.title for b in panel.state.linked_boxes] == ["Quote for Q3"]
    assert panel.state.activities[0].type is ActivityType.CREATED
    created = result.value_of("create_box")
    assert created.value == 5000.0
    assert created.contact_email == "lee@contoso.example"
    assert _messages(panel, NoticeKind.SUCCESS) == [MSG_CREATED]


def test_create_box_invalid_value_is_validation_notice() -> None:
    panel, store = _panel()
    panel.load()
    panel.open_create_modal()
    panel.create_form.value_text = "lots"
    store.calls.clear()

    assert panel.confirm_create() is None
    assert _ops(store) == []
    assert _messages(panel, NoticeKind.ERROR) == ["Value must be a number."]


def test_recent_activity_is_newest_first() -> None:
    store = _sales_store()
    for text in ("first", "second", "third"):
        store.create_activity(4, ActivityType.NOTE, text)
    store.calls.clear()
    panel, _ = _panel(store=store)

    panel.load_recent_activity()

    assert [a.text for a in panel.state.activities] == ["third", "second", "first"]
    assert store.calls[-1] == ("recent_activities", (20,))


def test_no_email_means_no_linked_boxes_and_no_lookup() -> None:
    panel, store = _panel(email=None)

    panel.load()

    assert panel.state.linked_boxes == ()
    assert "find_boxes_by_message_id" not in _ops(store)


def test_poll_email_detects_message_change() -> None:
    panel, store = _panel()
    panel.load()

    assert panel.poll_email() is False
    panel.mailbox = StaticMailbox(EmailDescriptor(subject="Next", message_id="<next@x>"))
    assert panel.poll_email() is True
    assert panel.state.email.subject == "Next"


def test_update_box_reloads_boxes() -> None:
    panel, _ = _panel()
    panel.load()

    result = panel.update_box(4, BoxChanges(notes="Call Friday", value=750))

    assert result is not None and result.ok
    assert panel.box_list.boxes[0].notes == "Call Friday"
    assert panel.box_list.boxes[0].stage_id == 2
    assert panel.state.activities[0].text == "Box updated: value, notes"


def test_update_box_rejects_stage_move() -> None:
    panel, store = _panel()
    panel.load()
    store.calls.clear()

    assert panel.update_box(4, BoxChanges(stage_id=3)) is None
    assert _ops(store) == []
    assert _messages(panel, NoticeKind.ERROR) == ["Moving a box to another stage is not supported."]


def test_created_box_is_selected_in_list() -> None:
    panel, _ = _panel()
    panel.load()
    panel.open_create_modal()

    result = panel.confirm_create()

    assert result is not None and result.ok
    assert panel.box_list.selected_box_id == result.value_of("create_box").id


def test_linked_boxes_load_stage_titles_of_other_pipelines() -> None:
    store = _sales_store()
    support = store.create_pipeline("Support")
    triage = store.create_stage(support.id, "Triage", 1)
    ticket = store.create_box(BoxDraft(title="Ticket", pipeline_id=support.id, stage_id=triage.id))
    store.link_email(EMAIL, ticket.id)
    store.calls.clear()
    panel, _ = _panel(store=store)

    panel.load()

    assert [b.id for b in panel.state.linked_boxes] == [ticket.id]
    assert panel.state.known_stage_titles()[triage.id] == "Triage"
    assert ("list_stages", (support.id,)) in store.calls
    assert panel.state.pipeline_id == 1


def test_show_box_details_and_validation() -> None:
    panel, _ = _panel()
    panel.load()

    details = panel.show_box_details("4")

    assert details is not None and details.box.title == "Acme"
    assert panel.box_details is details
    assert panel.show_box_details("") is None
    assert _messages(panel, NoticeKind.ERROR) == ["Please select a box"]
    panel.close_box_details()
    assert panel.box_details is None


def test_create_pipeline_reloads_pipelines() -> None:
    panel, _ = _panel()
    panel.load()

    result = panel.create_pipeline("Hiring", "", ["Applied", "Offer"])

    assert result is not None and result.ok
    assert [p.title for p in panel.state.pipelines] == ["Hiring", "Sales"]


def test_change_link_pipeline_reloads_box_options() -> None:
    panel, store = _panel()
    panel.load()
    support = store.create_pipeline("Support")
    panel.open_link_modal()
    assert panel.link_form.box_options == [(4, "Acme")]

    panel.change_link_pipeline(support.id)

    assert panel.link_form.box_options == []
    assert panel.state.pipeline_id == 1


def test_invalid_settings_surface_as_notice() -> None:
    panel, store = _panel()
    panel.app.settings_vm.site_url = "not-a-url"

    assert panel.confirm_link() is None
    assert _messages(panel, NoticeKind.ERROR) == ["Settings are invalid. Check the site URL."]
    assert store.calls == []


def test_select_tab() -> None:
    panel, _ = _panel()

    panel.select_tab("activity")
    assert panel.active_tab == "activity"
    with pytest.raises(ValueError):
        panel.select_tab("reports")
