from __future__ import annotations

import pytest

from boxlink.domain.entities import Box, Stage
from boxlink.domain.errors import ValidationError
from boxlink.viewmodels.forms_vm import CreateBoxFormVM, LinkBoxFormVM, parse_id, parse_value


@pytest.mark.parametrize(
    "text, expected",
    [(None, None), ("", None), ("  ", None), ("12000", 12000.0), ("$1,250.50", 1250.5), (7, 7.0), ("0", 0.0)],
)
def test_parse_value(text, expected) -> None:
    assert parse_value(text) == expected


@pytest.mark.parametrize("text", ["abc", "-5", -1])
def test_parse_value_rejects(text) -> None:
    with pytest.raises(ValidationError):
        parse_value(text)


@pytest.mark.parametrize("raw, expected", [(None, None), ("", None), ("0", None), (" 12 ", 12), (3, 3), (True, None), ("x", None)])
def test_parse_id(raw, expected) -> None:
    assert parse_id(raw) == expected


def test_create_form_close_clears_every_field() -> None:
    form = CreateBoxFormVM()
    form.open(subject="Quote", pipeline_id=1)
    form.set_stages([Stage(5, "Lead", 1, 1)])
    form.value_text = "100"
    form.notes = "n"

    form.close()

    assert form == CreateBoxFormVM()


def test_set_stages_rebuilds_and_selects_first() -> None:
    form = CreateBoxFormVM()
    form.set_stages([Stage(5, "Lead", 1, 1), Stage(6, "Won", 2, 1)])
    form.stage_id = 6

    form.set_stages([Stage(9, "Applied", 1, 2)])

    assert form.stage_options == [(9, "Applied")]
    assert form.stage_id == 9
    form.set_stages([])
    assert form.stage_id is None


def test_to_draft_trims_and_parses() -> None:
    form = CreateBoxFormVM()
    form.open(subject="  Quote  ", pipeline_id=1)
    form.set_stages([Stage(5, "Lead", 1, 1)])
    form.value_text = "$2,000"

    draft = form.to_draft()

    assert (draft.title, draft.pipeline_id, draft.stage_id, draft.value) == ("Quote", 1, 5, 2000.0)


def test_link_form_keeps_selection_only_when_present() -> None:
    form = LinkBoxFormVM()
    boxes = [Box(1, "A", 1, 1), Box(2, "B", 1, 1)]
    form.open(1, boxes)
    form.box_id = 2

    form.set_boxes(boxes[:1])

    assert form.box_options == [(1, "A")]
    assert form.box_id is None
    form.close()
    assert not form.is_open
