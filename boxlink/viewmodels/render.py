"""HTML fragments for the panel regions.

Every value that originates from list data or the mailbox (titles, subjects,
notes, contact and author names) passes through :func:`esc` before it is
interpolated. Views insert the returned markup with ``ui.html``.
"""

from __future__ import annotations

from datetime import datetime
from html import escape
from typing import Dict, Iterable, Optional, Sequence

from ..domain.entities import Activity, Box, BoxDetails, EmailDescriptor
from .box_list_vm import BoxListState, BoxListVM

BOX_ICON = "\U0001F4E6"
CHART_ICON = "\U0001F4CA"


def esc(value: object) -> str:
    if value is None:
        return ""
    return escape(str(value), quote=True)


def format_value(value: float) -> str:
    if value and value > 0:
        return f"${value:,.2f}".replace(".00", "")
    return "No value"


def format_date(value: Optional[datetime]) -> str:
    return value.astimezone().strftime("%Y-%m-%d") if value else ""


def format_datetime(value: Optional[datetime]) -> str:
    return value.astimezone().strftime("%Y-%m-%d %H:%M") if value else ""


def empty_state(message: str, icon: str = BOX_ICON) -> str:
    return (
        '<div class="empty-state">'
        f'<div class="empty-state-icon">{icon}</div>'
        f"<p>{esc(message)}</p>"
        "</div>"
    )


def render_email_header(email: Optional[EmailDescriptor]) -> str:
    if email is None:
        return empty_state("No email selected", icon="✉")
    return (
        '<div class="email-info">'
        f'<div class="email-subject">{esc(email.subject or "No Subject")}</div>'
        f'<div class="email-from">{esc(email.sender_label)}</div>'
        f'<div class="email-date">{esc(format_datetime(email.date))}</div>'
        "</div>"
    )


def render_linked_boxes(
    boxes: Sequence[Box],
    pipeline_titles: Optional[Dict[int, str]] = None,
    stage_titles: Optional[Dict[int, str]] = None,
) -> str:
    if not boxes:
        return empty_state("No boxes linked to this email")
    titles = pipeline_titles or {}
    stages = stage_titles or {}
    items = []
    for box in boxes:
        pipeline = titles.get(box.pipeline_id) or str(box.pipeline_id)
        stage = stages.get(box.stage_id, "Unknown Stage")
        meta = f"Pipeline: {esc(pipeline)} | Stage: {esc(stage)}"
        if box.value > 0:
            meta += f" | Value: {esc(format_value(box.value))}"
        items.append(
            f'<li class="box-item" data-box-id="{box.id}">'
            f'<div class="box-name">{esc(box.title)}</div>'
            f'<div class="box-meta">{meta}</div>'
            "</li>"
        )
    return '<ul class="box-list">' + "".join(items) + "</ul>"


def render_box_list(vm: BoxListVM, stage_titles: Dict[int, str]) -> str:
    if vm.state is BoxListState.LOADING:
        return '<ul class="box-list"><li class="loading">Loading boxes...</li></ul>'
    if vm.state is BoxListState.ERRORED:
        return f'<div class="error">{esc(vm.error_message or "Failed to load boxes.")}</div>'
    if vm.state is BoxListState.EMPTY or not vm.boxes:
        return empty_state("No boxes in this pipeline")

    labels = vm.stage_labels(stage_titles)
    items = []
    for box in vm.boxes:
        selected = " selected" if box.id == vm.selected_box_id else ""
        contact = f"{esc(box.contact_name)} | " if box.contact_name else ""
        items.append(
            f'<li class="box-item{selected}" data-box-id="{box.id}">'
            f'<div class="box-name">{esc(box.title)}'
            f'<span class="stage-badge">{esc(labels.get(box.id, "Unknown Stage"))}</span></div>'
            f'<div class="box-meta">{contact}{esc(format_value(box.value))}'
            f" | Updated: {esc(format_date(box.modified_at))}</div>"
            "</li>"
        )
    return '<ul class="box-list">' + "".join(items) + "</ul>"


def render_activity_feed(activities: Iterable[Activity]) -> str:
    entries = list(activities)
    if not entries:
        return empty_state("No recent activity", icon=CHART_ICON)
    parts = []
    for activity in entries:
        parts.append(
            '<div class="activity-item">'
            f'<div class="activity-date">{esc(format_datetime(activity.created_at))}</div>'
            '<div class="activity-text">'
            f"<strong>{esc(activity.author)}</strong> {esc(activity.type.value)}: "
            f"{esc(activity.text)}"
            "</div></div>"
        )
    return "".join(parts)


def render_box_details(details: BoxDetails, stage_title: str = "") -> str:
    box = details.box
    header = (
        '<div class="box-details">'
        f'<h3 class="box-name">{esc(box.title)}</h3>'
        f'<div class="box-meta">Stage: {esc(stage_title or "Unknown Stage")}'
        f" | {esc(format_value(box.value))}</div>"
    )
    if box.contact_name or box.contact_email:
        header += f'<div class="box-contact">{esc(box.contact_name)} &lt;{esc(box.contact_email)}&gt;</div>'
    if box.notes:
        header += f'<div class="box-notes">{esc(box.notes)}</div>'
    emails = "".join(
        f'<li class="email-item">{esc(link.subject)}'
        f' <span class="email-date">{esc(format_datetime(link.date))}</span></li>'
        for link in details.emails
    ) or "<li>No linked emails</li>"
    return (
        header
        + f'<h4>Emails</h4><ul class="email-list">{emails}</ul>'
        + f"<h4>Activity</h4>{render_activity_feed(details.activities)}"
        + "</div>"
    )


__all__ = [
    "esc",
    "format_date",
    "format_datetime",
    "format_value",
    "render_activity_feed",
    "render_box_details",
    "render_box_list",
    "render_email_header",
    "render_linked_boxes",
]
