from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

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
from boxlink.domain.ports import BoxId, ListStorePort, PipelineId
from boxlink.domain.time_utils import utc_now

from .api_errors import ApiNotFoundError

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class InMemoryListStore(ListStorePort):
    """Offline substitute for ``ListStoreRestAdapter`` with the same ordering rules.

    ``calls`` records every port operation so tests can assert that
    validation failures never reach the store. ``fail_next`` queues an
    exception for the next call of one operation.
    """

    author: str = "Demo User"
    clock: Callable[[], datetime] = utc_now

    def __post_init__(self) -> None:
        self.calls: List[Tuple[str, tuple]] = []
        self._failures: Dict[str, List[Exception]] = {}
        self._next_id = 1
        self.pipelines: Dict[int, Pipeline] = {}
        self.stages: Dict[int, Stage] = {}
        self.boxes: Dict[int, Box] = {}
        self.emails: Dict[int, EmailLink] = {}
        self.activities: Dict[int, Activity] = {}

    def fail_next(self, operation: str, exc: Exception) -> None:
        self._failures.setdefault(operation, []).append(exc)

    # ---------- ListStorePort ----------

    def list_pipelines(self) -> List[Pipeline]:
        self._enter("list_pipelines")
        return sorted(self.pipelines.values(), key=lambda item: (item.title.lower(), item.id))

    def create_pipeline(self, title: str, description: str = "") -> Pipeline:
        self._enter("create_pipeline", title)
        if not str(title or "").strip():
            raise ValueError("Pipeline title must be non-empty.")
        now = self.clock()
        pipeline = Pipeline(
            id=self._allocate(),
            title=title.strip(),
            description=description or "",
            created=now,
            modified=now,
        )
        self.pipelines[pipeline.id] = pipeline
        return pipeline

    def list_stages(self, pipeline_id: PipelineId) -> List[Stage]:
        self._enter("list_stages", pipeline_id)
        matching = [stage for stage in self.stages.values() if stage.pipeline_id == pipeline_id]
        return sorted(matching, key=lambda item: (item.order, item.id))

    def create_stage(self, pipeline_id: PipelineId, title: str, order: int) -> Stage:
        self._enter("create_stage", pipeline_id, title, order)
        if not str(title or "").strip():
            raise ValueError("Stage title must be non-empty.")
        stage = Stage(id=self._allocate(), title=title.strip(), order=int(order), pipeline_id=int(pipeline_id))
        self.stages[stage.id] = stage
        return stage

    def list_boxes(self, pipeline_id: PipelineId) -> List[Box]:
        self._enter("list_boxes", pipeline_id)
        matching = [box for box in self.boxes.values() if box.pipeline_id == pipeline_id]
        return sorted(matching, key=lambda item: (item.modified_at or _EPOCH, item.id), reverse=True)

    def get_box(self, box_id: BoxId) -> Box:
        self._enter("get_box", box_id)
        try:
            return self.boxes[int(box_id)]
        except KeyError as exc:
            raise ApiNotFoundError(f"box[{box_id}]: item does not exist", context=f"box[{box_id}]") from exc

    def create_box(self, draft: BoxDraft) -> Box:
        self._enter("create_box", draft)
        missing = draft.missing_fields()
        if missing:
            raise ValueError(f"Box requires {', '.join(missing)}.")
        if draft.value is not None and draft.value < 0:
            raise ValueError("Box value must be zero or positive.")
        now = self.clock()
        box = Box(
            id=self._allocate(),
            title=draft.title.strip(),
            pipeline_id=int(draft.pipeline_id),
            stage_id=int(draft.stage_id),
            value=draft.effective_value,
            contact_email=draft.contact_email or "",
            contact_name=draft.contact_name or "",
            notes=draft.notes or "",
            created_at=now,
            modified_at=now,
        )
        self.boxes[box.id] = box
        return box

    def update_box(self, box_id: BoxId, changes: BoxChanges) -> bool:
        self._enter("update_box", box_id, changes)
        current = self.boxes.get(int(box_id))
        if current is None:
            raise ApiNotFoundError(f"box[{box_id}]: item does not exist", context=f"update_box[{box_id}]")
        updates = {
            name: getattr(changes, name)
            for name in ("title", "stage_id", "value", "contact_email", "contact_name", "notes")
            if getattr(changes, name) is not None
        }
        if updates.get("value") is not None and updates["value"] < 0:
            raise ValueError("Box value must be zero or positive.")
        if updates:
            self.boxes[current.id] = replace(current, modified_at=self.clock(), **updates)
        return True

    def list_emails_for_box(self, box_id: BoxId) -> List[EmailLink]:
        self._enter("list_emails_for_box", box_id)
        matching = [link for link in self.emails.values() if link.box_id == box_id]
        return sorted(matching, key=lambda item: (item.date or _EPOCH, item.id), reverse=True)

    def find_boxes_by_message_id(self, message_id: str) -> List[Box]:
        self._enter("find_boxes_by_message_id", message_id)
        if not message_id:
            return []
        box_ids: List[int] = []
        for link in sorted(self.emails.values(), key=lambda item: item.id):
            if link.message_id == message_id and link.box_id not in box_ids:
                box_ids.append(link.box_id)
        return [self.boxes[box_id] for box_id in box_ids if box_id in self.boxes]

    def link_email(self, email: EmailDescriptor, box_id: BoxId) -> EmailLink:
        self._enter("link_email", email, box_id)
        link = EmailLink(
            id=self._allocate(),
            title=truncate_title(email.subject or ""),
            subject=email.subject or "",
            sender=email.sender,
            recipients=email.recipients,
            date=email.date,
            message_id=email.message_id,
            box_id=int(box_id),
        )
        self.emails[link.id] = link
        return link

    def list_activities_for_box(self, box_id: BoxId) -> List[Activity]:
        self._enter("list_activities_for_box", box_id)
        return self._newest_first(a for a in self.activities.values() if a.box_id == box_id)

    def recent_activities(self, limit: int = 20) -> List[Activity]:
        self._enter("recent_activities", limit)
        if limit < 0:
            raise ValueError("limit must be zero or positive.")
        return self._newest_first(self.activities.values())[:limit]

    def create_activity(self, box_id: BoxId, activity_type: ActivityType, text: str) -> Activity:
        self._enter("create_activity", box_id, activity_type, text)
        activity = Activity(
            id=self._allocate(),
            type=ActivityType.parse(activity_type),
            text=str(text or ""),
            box_id=int(box_id),
            author=self.author,
            created_at=self.clock(),
        )
        self.activities[activity.id] = activity
        return activity

    # ---------- helpers ----------

    def _enter(self, operation: str, *args: object) -> None:
        self.calls.append((operation, args))
        queued = self._failures.get(operation)
        if queued:
            raise queued.pop(0)

    def _allocate(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    @staticmethod
    def _newest_first(items) -> List[Activity]:
        return sorted(items, key=lambda item: (item.created_at or _EPOCH, item.id), reverse=True)


def seed_demo(store: InMemoryListStore, *, now: Optional[datetime] = None) -> InMemoryListStore:
    """Populate a store with one sales pipeline for offline demos."""
    sales = store.create_pipeline("Sales", "Inbound and outbound deals")
    stages = [
        store.create_stage(sales.id, title, order)
        for order, title in enumerate(("Lead", "Qualified", "Proposal", "Won"), start=1)
    ]
    store.create_pipeline("Partnerships", "Channel and reseller agreements")
    base = now or store.clock()
    for offset, (title, stage, value) in enumerate(
        (("Acme renewal", stages[2], 12000.0), ("Globex pilot", stages[0], 0.0))
    ):
        box = store.create_box(
            BoxDraft(title=title, pipeline_id=sales.id, stage_id=stage.id, value=value)
        )
        store.boxes[box.id] = replace(box, modified_at=base - timedelta(days=offset))
        store.create_activity(box.id, ActivityType.CREATED, f"Box created: {title}")
    store.calls.clear()
    return store


__all__ = ["InMemoryListStore", "seed_demo"]
