"""REST adapter for the pipeline/box/email/activity lists.

The adapter translates :class:`boxlink.domain.ports.ListStorePort` calls into
list item requests (``/_api/web/lists/getByTitle('<list>')/items``), acquires
a fresh request digest before each write and unwraps the ``{"d": ...}``
response envelope into domain entities.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

import requests

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
from boxlink.domain.filters import Filter, QueryOptions
from boxlink.domain.ports import BoxId, ListStorePort, PipelineId
from boxlink.domain.time_utils import to_store_datetime

from .api_errors import ApiEnvelopeError, ApiError, error_for_status, parse_error_payload
from .http_client import HttpConfig, ListStoreSession

log = logging.getLogger(__name__)

_PIPELINE_FIELDS = ("ID", "Title", "Description", "Created", "Modified")
_STAGE_FIELDS = ("ID", "Title", "StageOrder", "PipelineId")
_BOX_FIELDS = (
    "ID",
    "Title",
    "PipelineId",
    "StageId",
    "BoxValue",
    "ContactEmail",
    "ContactName",
    "Notes",
    "Created",
    "Modified",
)
_EMAIL_FIELDS = (
    "ID",
    "Title",
    "EmailSubject",
    "EmailFrom",
    "EmailTo",
    "EmailDate",
    "EmailMessageId",
    "BoxId",
    "Created",
)
_ACTIVITY_FIELDS = (
    "ID",
    "Title",
    "ActivityType",
    "ActivityText",
    "BoxId",
    "Created",
    "Author/Title",
)


@dataclass(frozen=True)
class ListTitles:
    """Titles of the five lists backing the panel."""

    pipelines: str = "CRM_Pipelines"
    boxes: str = "CRM_Boxes"
    emails: str = "CRM_Emails"
    activities: str = "CRM_Activities"
    stages: str = "CRM_Stages"

    @classmethod
    def from_mapping(cls, payload: Optional[Mapping[str, Any]]) -> "ListTitles":
        defaults = asdict(cls())
        merged = dict(defaults)
        for key, value in (payload or {}).items():
            if key not in defaults:
                raise ValueError(f"Unknown list key '{key}'.")
            text = str(value or "").strip()
            if text:
                merged[key] = text
        return cls(**merged)

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def item_type_name(list_title: str) -> str:
    """Return the ``__metadata.type`` entity name for items of a list."""
    return f"SP.Data.{list_title.replace(' ', '_x0020_')}ListItem"


def describe_schema(titles: Optional[ListTitles] = None) -> Dict[str, List[Tuple[str, str]]]:
    """Return the column layout each list must provide, keyed by list title."""
    titles = titles or ListTitles()
    return {
        titles.pipelines: [
            ("Title", "Single line text"),
            ("Description", "Multiple lines text"),
        ],
        titles.stages: [
            ("Title", "Single line text"),
            ("PipelineId", "Number"),
            ("StageOrder", "Number"),
        ],
        titles.boxes: [
            ("Title", "Single line text"),
            ("PipelineId", "Number"),
            ("StageId", "Number"),
            ("BoxValue", "Currency"),
            ("ContactEmail", "Single line text"),
            ("ContactName", "Single line text"),
            ("Notes", "Multiple lines text"),
        ],
        titles.emails: [
            ("Title", "Single line text"),
            ("EmailSubject", "Multiple lines text"),
            ("EmailFrom", "Single line text"),
            ("EmailTo", "Multiple lines text"),
            ("EmailDate", "Date and Time"),
            ("EmailMessageId", "Single line text"),
            ("BoxId", "Number"),
        ],
        titles.activities: [
            ("Title", "Single line text"),
            (
                "ActivityType",
                "Choice: " + ", ".join(member.value for member in ActivityType),
            ),
            ("ActivityText", "Multiple lines text"),
            ("BoxId", "Number"),
        ],
    }


def format_schema(titles: Optional[ListTitles] = None) -> str:
    lines: List[str] = []
    for index, (title, columns) in enumerate(describe_schema(titles).items(), start=1):
        lines.append(f"{index}. {title}")
        for name, kind in columns:
            lines.append(f"   - {name} ({kind})")
    return "\n".join(lines)


class ListStoreRestAdapter(ListStorePort):
    """REST adapter exposing typed pipeline/box/email/activity operations."""

    def __init__(
        self,
        site_url: str,
        *,
        titles: Optional[ListTitles] = None,
        access_token: Optional[str] = None,
        request_timeout_s: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        site = str(site_url or "").strip()
        if not site:
            raise ValueError("ListStoreRestAdapter requires a site URL")

        self.site_url = site.rstrip("/")
        self.titles = titles or ListTitles()
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, access_token=access_token)
        self.http = ListStoreSession(self.cfg, session=session)

    # ------------------------------------------------------------------
    # Pipelines and stages
    # ------------------------------------------------------------------
    def list_pipelines(self) -> List[Pipeline]:
        rows = self._get_rows(
            self.titles.pipelines,
            QueryOptions(select=_PIPELINE_FIELDS, orderby=("Title",)),
            ctx="pipelines",
        )
        return [Pipeline.from_row(row) for row in rows]

    def create_pipeline(self, title: str, description: str = "") -> Pipeline:
        name = str(title or "").strip()
        if not name:
            raise ValueError("Pipeline title must be non-empty.")
        row = self._create_item(
            self.titles.pipelines,
            {"Title": name, "Description": description or ""},
            ctx="create_pipeline",
        )
        return Pipeline.from_row(row)

    def list_stages(self, pipeline_id: PipelineId) -> List[Stage]:
        rows = self._get_rows(
            self.titles.stages,
            QueryOptions(
                select=_STAGE_FIELDS,
                where=Filter.equals("PipelineId", int(pipeline_id)),
                orderby=("StageOrder",),
            ),
            ctx=f"stages[{pipeline_id}]",
        )
        return [Stage.from_row(row) for row in rows]

    def create_stage(self, pipeline_id: PipelineId, title: str, order: int) -> Stage:
        name = str(title or "").strip()
        if not name:
            raise ValueError("Stage title must be non-empty.")
        row = self._create_item(
            self.titles.stages,
            {"Title": name, "PipelineId": int(pipeline_id), "StageOrder": int(order)},
            ctx="create_stage",
        )
        return Stage.from_row(row)

    # ------------------------------------------------------------------
    # Boxes
    # ------------------------------------------------------------------
    def list_boxes(self, pipeline_id: PipelineId) -> List[Box]:
        rows = self._get_rows(
            self.titles.boxes,
            QueryOptions(
                select=_BOX_FIELDS,
                where=Filter.equals("PipelineId", int(pipeline_id)),
                orderby=("Modified desc",),
            ),
            ctx=f"boxes[{pipeline_id}]",
        )
        return [Box.from_row(row) for row in rows]

    def get_box(self, box_id: BoxId) -> Box:
        ctx = f"box[{box_id}]"
        url = self._items_url(self.titles.boxes, item_id=box_id)
        resp = self.http.get(url, params=QueryOptions(select=_BOX_FIELDS).to_params())
        self._ensure_ok(resp, ctx)
        return Box.from_row(self._unwrap_row(self._json_any(resp, ctx), ctx))

    def create_box(self, draft: BoxDraft) -> Box:
        missing = draft.missing_fields()
        if missing:
            raise ValueError(f"Box requires {', '.join(missing)}.")
        if draft.value is not None and draft.value < 0:
            raise ValueError("Box value must be zero or positive.")
        row = self._create_item(
            self.titles.boxes,
            {
                "Title": draft.title.strip(),
                "PipelineId": int(draft.pipeline_id),
                "StageId": int(draft.stage_id),
                "BoxValue": draft.effective_value,
                "ContactEmail": draft.contact_email or "",
                "ContactName": draft.contact_name or "",
                "Notes": draft.notes or "",
            },
            ctx="create_box",
        )
        return Box.from_row(row)

    def update_box(self, box_id: BoxId, changes: BoxChanges) -> bool:
        fields: Dict[str, Any] = {}
        if changes.title is not None:
            fields["Title"] = changes.title
        if changes.stage_id is not None:
            fields["StageId"] = int(changes.stage_id)
        if changes.value is not None:
            if changes.value < 0:
                raise ValueError("Box value must be zero or positive.")
            fields["BoxValue"] = float(changes.value)
        if changes.contact_email is not None:
            fields["ContactEmail"] = changes.contact_email
        if changes.contact_name is not None:
            fields["ContactName"] = changes.contact_name
        if changes.notes is not None:
            fields["Notes"] = changes.notes
        if not fields:
            log.debug("update_box[%s]: nothing to update", box_id)
            return True

        ctx = f"update_box[{box_id}]"
        digest = self._request_digest()
        resp = self.http.post(
            self._items_url(self.titles.boxes, item_id=box_id),
            json_body=self._envelope(self.titles.boxes, fields),
            headers={
                "X-RequestDigest": digest,
                "IF-MATCH": "*",
                "X-HTTP-Method": "MERGE",
            },
        )
        self._ensure_ok(resp, ctx)
        return True

    # ------------------------------------------------------------------
    # Emails
    # ------------------------------------------------------------------
    def list_emails_for_box(self, box_id: BoxId) -> List[EmailLink]:
        rows = self._get_rows(
            self.titles.emails,
            QueryOptions(
                select=_EMAIL_FIELDS,
                where=Filter.equals("BoxId", int(box_id)),
                orderby=("EmailDate desc",),
            ),
            ctx=f"emails[{box_id}]",
        )
        return [EmailLink.from_row(row) for row in rows]

    def find_boxes_by_message_id(self, message_id: str) -> List[Box]:
        if not message_id:
            return []
        rows = self._get_rows(
            self.titles.emails,
            QueryOptions(select=("ID", "BoxId"), where=Filter.equals("EmailMessageId", message_id)),
            ctx="emails_by_message",
        )
        box_ids: List[int] = []
        for row in rows:
            try:
                box_id = int(row.get("BoxId"))
            except (TypeError, ValueError):
                continue
            if box_id and box_id not in box_ids:
                box_ids.append(box_id)

        boxes: List[Box] = []
        for box_id in box_ids:
            try:
                boxes.append(self.get_box(box_id))
            except (ApiError, ValueError) as exc:
                log.warning("Skipping linked box %s: %s", box_id, exc)
        return boxes

    def link_email(self, email: EmailDescriptor, box_id: BoxId) -> EmailLink:
        subject = email.subject or ""
        row = self._create_item(
            self.titles.emails,
            {
                "Title": truncate_title(subject),
                "EmailSubject": subject,
                "EmailFrom": email.sender,
                "EmailTo": email.recipients,
                "EmailDate": to_store_datetime(email.date) or None,
                "EmailMessageId": email.message_id,
                "BoxId": int(box_id),
            },
            ctx="link_email",
        )
        return EmailLink.from_row(row)

    # ------------------------------------------------------------------
    # Activities
    # ------------------------------------------------------------------
    def list_activities_for_box(self, box_id: BoxId) -> List[Activity]:
        rows = self._get_rows(
            self.titles.activities,
            QueryOptions(
                select=_ACTIVITY_FIELDS,
                where=Filter.equals("BoxId", int(box_id)),
                expand=("Author",),
                orderby=("Created desc",),
            ),
            ctx=f"activities[{box_id}]",
        )
        return [Activity.from_row(row) for row in rows]

    def recent_activities(self, limit: int = 20) -> List[Activity]:
        if limit < 0:
            raise ValueError("limit must be zero or positive.")
        rows = self._get_rows(
            self.titles.activities,
            QueryOptions(select=_ACTIVITY_FIELDS, expand=("Author",), orderby=("Created desc",)),
            ctx="recent_activities",
        )
        return [Activity.from_row(row) for row in rows[:limit]]

    def create_activity(self, box_id: BoxId, activity_type: ActivityType, text: str) -> Activity:
        kind = ActivityType.parse(activity_type)
        body = str(text or "")
        row = self._create_item(
            self.titles.activities,
            {
                "Title": truncate_title(body),
                "ActivityType": kind.value,
                "ActivityText": body,
                "BoxId": int(box_id),
            },
            ctx="create_activity",
        )
        return Activity.from_row(row)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _items_url(self, list_title: str, *, item_id: Optional[int] = None) -> str:
        quoted = list_title.replace("'", "''")
        url = f"{self.site_url}/_api/web/lists/getByTitle('{quoted}')/items"
        if item_id is not None:
            url += f"({int(item_id)})"
        return url

    def _get_rows(self, list_title: str, query: QueryOptions, *, ctx: str) -> List[Dict[str, Any]]:
        resp = self.http.get(self._items_url(list_title), params=query.to_params())
        self._ensure_ok(resp, ctx)
        return self._unwrap_rows(self._json_any(resp, ctx), ctx)

    def _create_item(self, list_title: str, fields: Dict[str, Any], *, ctx: str) -> Dict[str, Any]:
        digest = self._request_digest()
        resp = self.http.post(
            self._items_url(list_title),
            json_body=self._envelope(list_title, fields),
            headers={"X-RequestDigest": digest},
        )
        self._ensure_ok(resp, ctx)
        return self._unwrap_row(self._json_any(resp, ctx), ctx)

    def _request_digest(self) -> str:
        """Fetch a single-use form digest for the next write."""
        ctx = "contextinfo"
        resp = self.http.post(f"{self.site_url}/_api/contextinfo")
        self._ensure_ok(resp, ctx)
        payload = self._json_any(resp, ctx)
        try:
            digest = payload["d"]["GetContextWebInformation"]["FormDigestValue"]
        except (KeyError, TypeError) as exc:
            raise ApiEnvelopeError(
                f"{ctx}: response has no FormDigestValue", payload=payload, context=ctx
            ) from exc
        if not isinstance(digest, str) or not digest:
            raise ApiEnvelopeError(f"{ctx}: empty FormDigestValue", payload=payload, context=ctx)
        return digest

    @staticmethod
    def _envelope(list_title: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        body: Dict[str, Any] = {"__metadata": {"type": item_type_name(list_title)}}
        body.update(fields)
        return body

    @staticmethod
    def _unwrap_rows(payload: Any, ctx: str) -> List[Dict[str, Any]]:
        inner = payload.get("d") if isinstance(payload, dict) else None
        results = inner.get("results") if isinstance(inner, dict) else None
        if not isinstance(results, list):
            raise ApiEnvelopeError(f"{ctx}: expected d.results list", payload=payload, context=ctx)
        return [row for row in results if isinstance(row, dict)]

    @staticmethod
    def _unwrap_row(payload: Any, ctx: str) -> Dict[str, Any]:
        inner = payload.get("d") if isinstance(payload, dict) else None
        if not isinstance(inner, dict) or isinstance(inner.get("results"), list):
            raise ApiEnvelopeError(f"{ctx}: expected d object", payload=payload, context=ctx)
        return inner

    @staticmethod
    def _ensure_ok(resp: requests.Response, ctx: str) -> None:
        if 200 <= resp.status_code < 300:
            return
        raise error_for_status(resp.status_code, context=ctx, payload=parse_error_payload(resp))

    @staticmethod
    def _json_any(resp: requests.Response, ctx: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            snippet = (getattr(resp, "text", "") or "")[:400]
            raise ApiEnvelopeError(
                f"{ctx}: invalid JSON response: {snippet}", payload=snippet, context=ctx
            ) from exc


__all__ = [
    "ListStoreRestAdapter",
    "ListTitles",
    "describe_schema",
    "format_schema",
    "item_type_name",
]
