"""Form state for the link-box and create-box dialogs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..domain.entities import Box, BoxDraft, Stage
from ..domain.errors import ValidationError

Option = Tuple[int, str]


def parse_value(text: object) -> Optional[float]:
    """Parse the optional currency input; blank means "not supplied"."""
    if text is None:
        return None
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        value = float(text)
    else:
        cleaned = str(text).strip().replace(",", "").lstrip("$")
        if not cleaned:
            return None
        try:
            value = float(cleaned)
        except ValueError as exc:
            raise ValidationError("Value must be a number.", fields=["value"]) from exc
    if value < 0:
        raise ValidationError("Value must be zero or positive.", fields=["value"])
    return value


def parse_id(raw: object) -> Optional[int]:
    """Selector values arrive as ints, numeric strings or blanks."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value or None


@dataclass
class LinkBoxFormVM:
    is_open: bool = False
    pipeline_id: Optional[int] = None
    box_id: Optional[int] = None
    box_options: List[Option] = field(default_factory=list)

    def open(self, pipeline_id: Optional[int], boxes: Sequence[Box]) -> None:
        self.is_open = True
        self.pipeline_id = pipeline_id
        self.set_boxes(boxes)

    def close(self) -> None:
        self.is_open = False

    def set_boxes(self, boxes: Sequence[Box]) -> None:
        self.box_options = [(box.id, box.title) for box in boxes]
        if self.box_id not in {box.id for box in boxes}:
            self.box_id = None


@dataclass
class CreateBoxFormVM:
    is_open: bool = False
    title: str = ""
    pipeline_id: Optional[int] = None
    stage_id: Optional[int] = None
    value_text: str = ""
    notes: str = ""
    stage_options: List[Option] = field(default_factory=list)

    def open(self, *, subject: str, pipeline_id: Optional[int]) -> None:
        self.is_open = True
        self.title = subject or ""
        self.pipeline_id = pipeline_id

    def close(self) -> None:
        """Hide the dialog and clear every input."""
        self.is_open = False
        self.title = ""
        self.value_text = ""
        self.notes = ""
        self.pipeline_id = None
        self.stage_id = None
        self.stage_options = []

    def set_stages(self, stages: Sequence[Stage]) -> None:
        """Rebuild the stage selector from scratch."""
        self.stage_options = [(stage.id, stage.title) for stage in stages]
        self.stage_id = self.stage_options[0][0] if self.stage_options else None

    def to_draft(self) -> BoxDraft:
        return BoxDraft(
            title=self.title.strip(),
            pipeline_id=self.pipeline_id,
            stage_id=self.stage_id,
            value=parse_value(self.value_text),
            notes=self.notes.strip(),
        )


__all__ = ["CreateBoxFormVM", "LinkBoxFormVM", "parse_id", "parse_value"]
