from __future__ import annotations

from datetime import datetime, timezone

import pytest

from boxlink.domain.entities import (
    Activity,
    ActivityType,
    Box,
    BoxChanges,
    BoxDraft,
    EmailDescriptor,
    EmailLink,
    Pipeline,
    Stage,
    truncate_title,
)
from boxlink.domain.time_utils import parse_store_datetime, to_store_datetime


def test_box_from_row_normalizes_types() -> None:
    box = Box.from_row(
        {
            "ID": "7",
            "Title": "Acme",
            "PipelineId": 1,
            "StageId": "3",
            "BoxValue": None,
            "Modified": "2024-03-01T10:00:00Z",
        }
    )

    assert box.id == 7
    assert box.stage_id == 3
    assert box.value == 0.0
    assert box.contact_name == ""
    assert box.modified_at == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)


def test_row_without_id_is_rejected() -> None:
    with pytest.raises(ValueError):
        Pipeline.from_row({"Title": "Sales"})


def test_stage_and_email_link_from_row() -> None:
    stage = Stage.from_row({"Id": 4, "Title": "Won", "StageOrder": 4, "PipelineId": 1})
    link = EmailLink.from_row(
        {"ID": 9, "EmailSubject": "Hi", "EmailMessageId": "<m>", "BoxId": "2", "EmailDate": ""}
    )

    assert (stage.id, stage.order) == (4, 4)
    assert link.box_id == 2
    assert link.date is None


def test_activity_author_and_unknown_type() -> None:
    with_author = Activity.from_row(
        {"ID": 1, "ActivityType": "Stage Change", "Author": {"Title": "Ana"}, "BoxId": 2}
    )
    without_author = Activity.from_row({"ID": 2, "ActivityType": "Call", "BoxId": 2})

    assert with_author.type is ActivityType.STAGE_CHANGE
    assert with_author.author == "Ana"
    assert without_author.type is ActivityType.NOTE
    assert without_author.author == "Unknown"


def test_activity_type_parse() -> None:
    assert ActivityType.parse("stagechange") is ActivityType.STAGE_CHANGE
    assert ActivityType.parse(ActivityType.EMAIL) is ActivityType.EMAIL
    with pytest.raises(ValueError):
        ActivityType.parse("Meeting")


def test_email_descriptor_defaults_without_sender() -> None:
    email = EmailDescriptor.from_host_item({"subject": "Hi", "internetMessageId": "<m1>", "itemId": "X"})

    assert email.message_id == "<m1>"
    assert email.sender == "Unknown"
    assert email.sender_label == "Unknown <Unknown>"


def test_box_draft_missing_fields_and_value() -> None:
    draft = BoxDraft(title="  ", pipeline_id=None, stage_id=0)

    assert draft.missing_fields() == ["title", "pipeline", "stage"]
    assert draft.effective_value == 0.0
    assert BoxDraft(title="x", pipeline_id=1, stage_id=1, value=12).effective_value == 12.0


def test_box_changes_is_empty() -> None:
    assert BoxChanges().is_empty()
    assert not BoxChanges(notes="").is_empty()


def test_truncate_title() -> None:
    assert truncate_title("a" * 300) == "a" * 255
    assert truncate_title(None) == ""  # type: ignore[arg-type]


def test_store_datetime_helpers() -> None:
    assert to_store_datetime(None) == ""
    assert to_store_datetime(datetime(2024, 1, 1, 12, 30)) == "2024-01-01T12:30:00Z"
    assert parse_store_datetime("2024-01-01 08:00:00").tzinfo is not None
    assert parse_store_datetime("not a date") is None
    assert parse_store_datetime("") is None


def test_domain_modules_keep_their_docstrings() -> None:
    from boxlink.domain import entities, session, time_utils

    for module in (entities, session, time_utils):
        assert module.__doc__ and module.__doc__.strip()
