"""NiceGUI entrypoint for the mail panel web runtime."""

from __future__ import annotations

import argparse
import logging
import os
from typing import Any, Callable, Dict, Optional

from nicegui import run, ui

from boxlink.adapters.list_store_rest import format_schema
from boxlink.domain.entities import BoxChanges
from boxlink.domain.errors import ValidationError
from boxlink.domain.notices import NoticeKind
from boxlink.utils.logging import configure_root
from boxlink.viewmodels.forms_vm import parse_id, parse_value
from boxlink.viewmodels.render import (
    render_activity_feed,
    render_box_details,
    render_box_list,
    render_email_header,
    render_linked_boxes,
)
from boxlink.web_ui.runtime import WebRuntime
from boxlink.web_ui.viewmodels import WebPipelineFormVM, WebSettingsVM

LOGGER = logging.getLogger(__name__)

_NOTICE_STYLE = {
    NoticeKind.ERROR: "negative",
    NoticeKind.SUCCESS: "positive",
}


def _install_theme() -> None:
    """Install global CSS for the panel regions rendered as HTML fragments."""
    ui.add_head_html(
        """
<style>
:root {
  --bx-border: #d6dde8;
  --bx-accent: #0f6cbd;
  --bx-muted: #5b6b80;
  --bx-danger: #b42318;
}
body { font-family: 'Segoe UI', sans-serif; background: #f5f7fa; }
.bx-page { max-width: 720px; margin: 0 auto; padding: 12px; }
.email-info { padding: 8px 0; }
.email-subject { font-weight: 600; font-size: 15px; }
.email-from, .email-date { color: var(--bx-muted); font-size: 12px; }
.box-list { list-style: none; margin: 0; padding: 0; }
.box-item { border: 1px solid var(--bx-border); border-radius: 6px; padding: 8px; margin-bottom: 6px; background: #fff; }
.box-item.selected { border-color: var(--bx-accent); }
.box-name { font-weight: 600; }
.box-meta { color: var(--bx-muted); font-size: 12px; }
.stage-badge { margin-left: 8px; padding: 1px 6px; border-radius: 8px; background: #e5f0fb; color: var(--bx-accent); font-size: 11px; }
.activity-item { border-bottom: 1px solid var(--bx-border); padding: 6px 0; }
.activity-date { color: var(--bx-muted); font-size: 11px; }
.empty-state { text-align: center; color: var(--bx-muted); padding: 16px; }
.empty-state-icon { font-size: 28px; }
.loading { color: var(--bx-muted); padding: 8px; }
.error { color: var(--bx-danger); padding: 8px; }
</style>
        """
    )


def _html(markup: str) -> None:
    # Fragments are escaped by boxlink.viewmodels.render.
    ui.html(markup, sanitize=False).classes("w-full")


def _notify_error(exc: Exception) -> None:
    """Render exceptions as concise NiceGUI toasts."""
    ui.notify(str(exc), color="negative", close_button="OK")


def _build_ui(runtime: WebRuntime) -> None:
    """Register the NiceGUI pages for the runtime."""
    panel = runtime.panel

    @ui.page("/")
    async def index() -> None:
        settings_vm = WebSettingsVM.from_settings_vm(runtime.settings_vm)
        pipeline_form = WebPipelineFormVM()
        details_box: Dict[str, Optional[int]] = {"id": None}
        box_edit: Dict[str, str] = {"notes": "", "value": ""}

        def flush_notices() -> None:
            for notice in panel.notices.drain():
                ui.notify(
                    notice.message,
                    color=_NOTICE_STYLE.get(notice.kind, "info"),
                    timeout=int(notice.ttl_s * 1000),
                )

        @ui.refreshable
        def render_status() -> None:
            with ui.row().classes("w-full justify-between items-center q-mb-sm"):
                ui.label("Box Link").classes("text-h6")
                ui.label(runtime.store_label()).classes("text-caption")

        @ui.refreshable
        def render_email_tab() -> None:
            state = panel.state
            _html(render_email_header(state.email))
            with ui.row().classes("q-gutter-sm"):
                ui.button("Link to Box", on_click=open_link).props("dense")
                ui.button("Create Box", on_click=open_create).props("dense outline")
                ui.button("Refresh", on_click=refresh_all).props("dense flat")
            ui.label("Linked boxes").classes("text-subtitle2 q-mt-md")
            titles = {pipeline.id: pipeline.title for pipeline in state.pipelines}
            _html(render_linked_boxes(state.linked_boxes, titles, state.known_stage_titles()))

        @ui.refreshable
        def render_boxes_tab() -> None:
            state = panel.state
            ui.select(
                panel.pipeline_options(),
                value=state.pipeline_id,
                label="Pipeline",
                on_change=lambda e: on_pipeline_change(e.value),
            ).classes("w-full")
            _html(render_box_list(panel.box_list, panel.stage_titles()))
            if panel.box_list.boxes:
                with ui.row().classes("w-full items-end q-gutter-sm"):
                    ui.select(
                        {box.id: box.title for box in panel.box_list.boxes},
                        value=panel.box_list.selected_box_id,
                        label="Box",
                        on_change=lambda e: on_box_select(e.value),
                    ).classes("col")
                    ui.button("Details", on_click=show_details).props("dense")
            if panel.box_details is not None:
                box = panel.box_details.box
                with ui.card().classes("w-full q-mt-sm"):
                    _html(render_box_details(panel.box_details, panel.stage_titles().get(box.stage_id, "")))
                    box_edit.update(notes=box.notes, value=f"{box.value:g}")
                    ui.textarea(
                        "Notes",
                        value=box.notes,
                        on_change=lambda e: box_edit.update(notes=str(e.value or "")),
                    ).classes("w-full")
                    with ui.row().classes("w-full items-end q-gutter-sm"):
                        ui.input(
                            "Value",
                            value=box_edit["value"],
                            on_change=lambda e: box_edit.update(value=str(e.value or "")),
                        ).classes("col")
                        ui.button("Save", on_click=save_box).props("dense")
                        ui.button("Close", on_click=close_details).props("dense flat")

        @ui.refreshable
        def render_activity_tab() -> None:
            ui.button("Refresh", on_click=refresh_activity).props("dense flat")
            _html(render_activity_feed(panel.state.activities))

        @ui.refreshable
        def render_link_form() -> None:
            form = panel.link_form
            ui.label("Link email to box").classes("text-h6")
            ui.select(
                panel.pipeline_options(),
                value=form.pipeline_id,
                label="Pipeline",
                on_change=lambda e: on_link_pipeline(e.value),
            ).classes("w-full")
            ui.select(
                dict(form.box_options),
                value=form.box_id,
                label="Box",
                on_change=lambda e: panel.select_link_box(e.value),
            ).classes("w-full")
            with ui.row().classes("q-gutter-sm"):
                ui.button("Link", on_click=confirm_link)
                ui.button("Cancel", on_click=close_link).props("flat")

        @ui.refreshable
        def render_create_form() -> None:
            form = panel.create_form
            ui.label("Create box from email").classes("text-h6")
            ui.input("Title", value=form.title, on_change=lambda e: setattr(form, "title", str(e.value or ""))).classes("w-full")
            ui.select(
                panel.pipeline_options(),
                value=form.pipeline_id,
                label="Pipeline",
                on_change=lambda e: on_create_pipeline(e.value),
            ).classes("w-full")
            ui.select(
                dict(form.stage_options),
                value=form.stage_id,
                label="Stage",
                on_change=lambda e: setattr(form, "stage_id", parse_id(e.value)),
            ).classes("w-full")
            ui.input("Value", value=form.value_text, on_change=lambda e: setattr(form, "value_text", str(e.value or ""))).classes("w-full")
            ui.textarea("Notes", value=form.notes, on_change=lambda e: setattr(form, "notes", str(e.value or ""))).classes("w-full")
            with ui.row().classes("q-gutter-sm"):
                ui.button("Create", on_click=confirm_create)
                ui.button("Cancel", on_click=close_create).props("flat")

        def refresh_views() -> None:
            render_status.refresh()
            render_email_tab.refresh()
            render_boxes_tab.refresh()
            render_activity_tab.refresh()
            render_link_form.refresh()
            render_create_form.refresh()
            if panel.link_form.is_open:
                link_dialog.open()
            else:
                link_dialog.close()
            if panel.create_form.is_open:
                create_dialog.open()
            else:
                create_dialog.close()
            flush_notices()

        async def _invoke(action: Callable[..., Any], *args: Any) -> Any:
            try:
                return await run.io_bound(action, *args)
            except Exception as exc:
                LOGGER.exception("Panel action failed")
                _notify_error(exc)
                return None
            finally:
                refresh_views()

        async def refresh_all() -> None:
            await _invoke(panel.refresh)

        async def refresh_activity() -> None:
            await _invoke(panel.load_recent_activity)

        async def on_pipeline_change(value: Any) -> None:
            await _invoke(panel.select_pipeline, value)

        def on_box_select(value: Any) -> None:
            panel.select_box(value)
            details_box["id"] = parse_id(value)

        async def show_details() -> None:
            await _invoke(panel.show_box_details, details_box["id"])

        def close_details() -> None:
            panel.close_box_details()
            refresh_views()

        async def save_box() -> None:
            if panel.box_details is None:
                return
            try:
                value = parse_value(box_edit["value"])
            except ValidationError as err:
                ui.notify(err.message, color="negative")
                return
            box_id = panel.box_details.box.id
            await _invoke(panel.update_box, box_id, BoxChanges(notes=box_edit["notes"], value=value))
            await _invoke(panel.show_box_details, box_id)

        async def open_link() -> None:
            await _invoke(panel.open_link_modal)

        def close_link() -> None:
            panel.close_link_modal()
            refresh_views()

        async def on_link_pipeline(value: Any) -> None:
            await _invoke(panel.change_link_pipeline, value)

        async def confirm_link() -> None:
            await _invoke(panel.confirm_link)

        async def open_create() -> None:
            await _invoke(panel.open_create_modal)

        def close_create() -> None:
            panel.close_create_modal()
            refresh_views()

        async def on_create_pipeline(value: Any) -> None:
            await _invoke(panel.change_create_pipeline, value)

        async def confirm_create() -> None:
            await _invoke(panel.confirm_create)

        async def save_settings() -> None:
            try:
                runtime.save_settings(settings_vm.to_payload())
                ui.notify(runtime.status_message, color="positive")
            except (OSError, ValueError) as exc:
                _notify_error(exc)
                return
            await _invoke(panel.load)

        async def create_pipeline() -> None:
            result = await _invoke(
                panel.create_pipeline,
                pipeline_form.title,
                pipeline_form.description,
                pipeline_form.stage_titles(),
            )
            if result is not None and result.ok:
                pipeline_form.reset()
                pipeline_title.value = ""
                pipeline_description.value = ""

        async def poll_mailbox() -> None:
            changed = await run.io_bound(panel.poll_email)
            if changed:
                refresh_views()

        with ui.dialog() as link_dialog, ui.card().classes("w-96"):
            render_link_form()
        link_dialog.on("hide", lambda: panel.close_link_modal())
        with ui.dialog() as create_dialog, ui.card().classes("w-96"):
            render_create_form()
        create_dialog.on("hide", lambda: panel.close_create_modal())

        with ui.column().classes("bx-page w-full"):
            render_status()
            with ui.tabs(on_change=lambda e: panel.select_tab(str(e.value))).classes("w-full") as tabs:
                tab_email = ui.tab("email", label="Email")
                ui.tab("boxes", label="Boxes")
                ui.tab("activity", label="Activity")
                ui.tab("settings", label="Settings")

            with ui.tab_panels(tabs, value=tab_email).classes("w-full"):
                with ui.tab_panel("email"):
                    render_email_tab()
                with ui.tab_panel("boxes"):
                    render_boxes_tab()
                with ui.tab_panel("activity"):
                    render_activity_tab()
                with ui.tab_panel("settings"):
                    with ui.column().classes("w-full q-gutter-sm"):
                        ui.input("Site URL", value=settings_vm.site_url, placeholder="Empty uses the demo store", on_change=lambda e: setattr(settings_vm, "site_url", str(e.value or ""))).classes("w-full")
                        ui.input("Access token", value=settings_vm.access_token, password=True, on_change=lambda e: setattr(settings_vm, "access_token", str(e.value or ""))).classes("w-full")
                        ui.number("Request timeout (s)", value=settings_vm.request_timeout_s, on_change=lambda e: setattr(settings_vm, "request_timeout_s", int(e.value or 30)))
                        ui.number("Recent activity items", value=settings_vm.recent_activity_limit, on_change=lambda e: setattr(settings_vm, "recent_activity_limit", int(e.value or 20)))
                        for key in sorted(settings_vm.list_titles):
                            ui.input(
                                f"List: {key}",
                                value=settings_vm.list_titles[key],
                                on_change=lambda e, k=key: settings_vm.list_titles.__setitem__(k, str(e.value or "")),
                            ).classes("w-full")
                        ui.switch("Debug logging", value=settings_vm.debug_logging, on_change=lambda e: setattr(settings_vm, "debug_logging", bool(e.value)))
                        ui.button("Save Settings", on_click=save_settings)

                        ui.label("New pipeline").classes("text-subtitle2 q-mt-md")
                        pipeline_title = ui.input("Title", on_change=lambda e: setattr(pipeline_form, "title", str(e.value or ""))).classes("w-full")
                        pipeline_description = ui.input("Description", on_change=lambda e: setattr(pipeline_form, "description", str(e.value or ""))).classes("w-full")
                        ui.input("Stages (comma separated)", value=pipeline_form.stages_text, on_change=lambda e: setattr(pipeline_form, "stages_text", str(e.value or ""))).classes("w-full")
                        ui.button("Create Pipeline", on_click=create_pipeline)

            await _invoke(panel.load)
            ui.timer(3.0, poll_mailbox)


def _parse_args() -> argparse.Namespace:
    """Parse CLI args for web runtime startup."""
    parser = argparse.ArgumentParser(description="Run the Box Link NiceGUI mail panel.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--reload", action="store_true")
    parser.add_argument("--smoke-test", action="store_true")
    parser.add_argument("--print-schema", action="store_true", help="Print the list schema and exit.")
    parser.add_argument("--email-json", default=None, help="Host item JSON file for the open message.")
    return parser.parse_args()


def main() -> None:
    """CLI entrypoint for the NiceGUI runtime."""
    args = _parse_args()
    configure_root()
    runtime = WebRuntime(email_json=args.email_json)
    if args.print_schema:
        print(format_schema(runtime.settings_vm.titles()))
        return
    if args.smoke_test:
        payload = runtime.settings_payload()
        print("web-smoke-ok", sorted(payload.get("list_titles", {}).keys()))
        return
    _install_theme()
    _build_ui(runtime)
    ui.run(
        host=args.host,
        port=args.port,
        title="Box Link",
        reload=args.reload,
        show=False,
        storage_secret=os.environ.get("BOXLINK_WEB_STORAGE_SECRET", "boxlink-web-ui-secret"),
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
