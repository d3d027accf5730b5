from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..domain.entities import Box


class BoxListState(str, Enum):
    LOADING = "loading"
    POPULATED = "populated"
    EMPTY = "empty"
    ERRORED = "errored"


@dataclass
class BoxListVM:
    """View state of the pipeline box list.

    ``Loading`` moves to ``Populated``/``Empty`` on a successful fetch and to
    ``Errored`` on a failed one. A hung fetch stays in ``Loading``.
    """

    state: BoxListState = BoxListState.EMPTY
    pipeline_id: Optional[int] = None
    boxes: List[Box] = field(default_factory=list)
    error_message: str = ""
    selected_box_id: Optional[int] = None

    def start_loading(self, pipeline_id: int) -> None:
        self.state = BoxListState.LOADING
        self.pipeline_id = pipeline_id
        self.error_message = ""

    def apply_boxes(self, boxes: Sequence[Box]) -> None:
        self.boxes = list(boxes)
        self.state = BoxListState.POPULATED if self.boxes else BoxListState.EMPTY
        if self.selected_box_id not in {box.id for box in self.boxes}:
            self.selected_box_id = None

    def apply_error(self, message: str) -> None:
        self.state = BoxListState.ERRORED
        self.error_message = message
        self.boxes = []
        self.selected_box_id = None

    def select(self, box_id: Optional[int]) -> None:
        self.selected_box_id = box_id

    def stage_labels(self, stage_titles: Dict[int, str]) -> Dict[int, str]:
        """Map each loaded box id to its stage title."""
        return {box.id: stage_titles.get(box.stage_id, "Unknown Stage") for box in self.boxes}


__all__ = ["BoxListState", "BoxListVM"]
