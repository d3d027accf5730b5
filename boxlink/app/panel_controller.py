"""View controller for the mail panel.

``PanelController`` owns the session state, the box-list view state, both
dialog forms and the notice queue. Each public method is one user action or
load sequence; it runs to completion before the page dispatches the next one.
Use-case failures are caught here, at the workflow boundary, and turned into
notices so the panel stays interactive.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..domain.entities import Box, BoxChanges, BoxDetails, EmailDescriptor, Stage
from ..domain.notices import NoticeQueue
from ..domain.ports import MailboxPort, UseCaseError
from ..domain.session import SessionState
from ..domain.workflow import WorkflowResult
from ..usecases.create_box_from_email import STEP_CREATE
from ..viewmodels.box_list_vm import BoxListVM
from ..viewmodels.forms_vm import CreateBoxFormVM, LinkBoxFormVM, parse_id
from .controller import AppController

log = logging.getLogger(__name__)

TABS = ("email", "boxes", "activity", "settings")

MSG_PIPELINES_FAILED = "Failed to load pipelines. Please check your list store connection."
MSG_BOXES_FAILED = "Failed to load boxes."
MSG_LINKED = "Email linked to box successfully!"
MSG_CREATED = "Box created successfully!"
MSG_UPDATED = "Box updated successfully!"
MSG_PIPELINE_CREATED = "Pipeline created successfully!"


class PanelController:
    """Keeps the panel regions consistent with the session state."""

    def __init__(
        self,
        app: AppController,
        mailbox: MailboxPort,
        *,
        notices: Optional[NoticeQueue] = None,
    ) -> None:
        self.app = app
        self.mailbox = mailbox
        self.notices = notices or NoticeQueue()
        self.state = SessionState()
        self.box_list = BoxListVM()
        self.link_form = LinkBoxFormVM()
        self.create_form = CreateBoxFormVM()
        self.active_tab = TABS[0]
        self.box_details: Optional[BoxDetails] = None
        self.last_result: Optional[WorkflowResult] = None

    # ------------------------------------------------------------------
    # Load sequences
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Initial load: email, pipelines (first one selected), activity feed."""
        self.load_email()
        self.load_pipelines()
        self.load_recent_activity()

    def refresh(self) -> None:
        self.load_pipelines()
        self.load_recent_activity()
        self.refresh_linked_boxes()

    def load_email(self) -> Optional[EmailDescriptor]:
        try:
            email = self.mailbox.current_email()
        except (OSError, ValueError) as exc:
            log.error("Failed to read mailbox item: %s", exc)
            self.notices.error("Failed to read the current email.")
            email = None
        self.set_email(email)
        return email

    def poll_email(self) -> bool:
        """Re-read the mailbox; returns True when the open message changed."""
        try:
            email = self.mailbox.current_email()
        except (OSError, ValueError) as exc:
            log.warning("Mailbox poll failed: %s", exc)
            return False
        current = self.state.email
        if (email.message_id if email else None) == (current.message_id if current else None):
            return False
        self.set_email(email)
        return True

    def set_email(self, email: Optional[EmailDescriptor]) -> None:
        """Switch the active email and refresh the linked-boxes panel."""
        self.state = self.state.with_email(email)
        self.refresh_linked_boxes()

    def refresh_linked_boxes(self) -> List[Box]:
        email = self.state.email
        if email is None:
            self.state = self.state.with_linked_boxes(())
            return []
        try:
            services = self._services()
            boxes = services.uc_find_linked(email=email)
        except UseCaseError as err:
            log.error("Error checking email links: %s", err.message)
            return list(self.state.linked_boxes)
        # Drop the result if the email changed while the lookup ran.
        if self.state.email is email:
            self.state = self.state.with_linked_boxes(boxes)
            # Stage titles for boxes outside the loaded pipelines.
            for pipeline_id in dict.fromkeys(box.pipeline_id for box in boxes):
                if pipeline_id not in self.state.stages_by_pipeline:
                    self.load_stages(pipeline_id)
        return boxes

    def load_pipelines(self) -> None:
        try:
            pipelines = self._services().uc_load_pipelines()
        except UseCaseError as err:
            log.error("Error loading pipelines: %s", err.message)
            self.notices.error(MSG_PIPELINES_FAILED)
            return
        self.state = self.state.with_pipelines(pipelines)
        if self.state.pipeline_id is not None:
            self.load_boxes(self.state.pipeline_id)
            self.load_stages(self.state.pipeline_id)
        else:
            self.box_list.apply_boxes([])

    def select_pipeline(self, pipeline_id: Any) -> None:
        """Main selector change: reload boxes and stages of the pipeline."""
        pid = parse_id(pipeline_id)
        if pid is None:
            return
        self.state = self.state.select_pipeline(pid)
        self.load_boxes(pid)
        self.load_stages(pid)

    def load_boxes(self, pipeline_id: int) -> List[Box]:
        self.box_list.start_loading(pipeline_id)
        try:
            boxes = self._services().uc_load_boxes(pipeline_id=pipeline_id)
        except UseCaseError as err:
            log.error("Error loading boxes: %s", err.message)
            self.box_list.apply_error(MSG_BOXES_FAILED)
            self.notices.error(MSG_BOXES_FAILED)
            return []
        if self.state.pipeline_id == pipeline_id:
            self.state = self.state.with_boxes(boxes)
            self.box_list.apply_boxes(boxes)
            if self.link_form.pipeline_id in (None, pipeline_id):
                self.link_form.set_boxes(boxes)
        return boxes

    def load_stages(self, pipeline_id: int) -> List[Stage]:
        try:
            stages = self._services().uc_load_stages(pipeline_id=pipeline_id)
        except UseCaseError as err:
            log.error("Error loading stages: %s", err.message)
            self.notices.error(err.message)
            return []
        self.state = self.state.with_stages(pipeline_id, stages)
        if self.create_form.pipeline_id == pipeline_id:
            self.create_form.set_stages(stages)
        return stages

    def load_recent_activity(self) -> None:
        try:
            activities = self._services().uc_recent_activity(
                limit=self.app.settings_vm.recent_activity_limit
            )
        except UseCaseError as err:
            log.error("Error loading activity: %s", err.message)
            return
        self.state = self.state.with_activities(activities)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def select_tab(self, name: str) -> None:
        if name not in TABS:
            raise ValueError(f"Unknown tab '{name}'")
        self.active_tab = name

    def select_box(self, box_id: Any) -> None:
        self.box_list.select(parse_id(box_id))

    def show_box_details(self, box_id: Any) -> Optional[BoxDetails]:
        try:
            details = self._services().uc_box_details(box_id=parse_id(box_id))
        except UseCaseError as err:
            self.notices.error(err.message)
            return None
        self.box_details = details
        return details

    def close_box_details(self) -> None:
        self.box_details = None

    # ------------------------------------------------------------------
    # Link dialog
    # ------------------------------------------------------------------
    def open_link_modal(self) -> None:
        self.link_form.open(self.state.pipeline_id, self.state.boxes)

    def close_link_modal(self) -> None:
        self.link_form.close()

    def change_link_pipeline(self, pipeline_id: Any) -> None:
        pid = parse_id(pipeline_id)
        if pid is None:
            return
        self.link_form.pipeline_id = pid
        try:
            boxes = self._services().uc_load_boxes(pipeline_id=pid)
        except UseCaseError as err:
            self.notices.error(err.message)
            return
        if self.link_form.pipeline_id == pid:
            self.link_form.set_boxes(boxes)

    def select_link_box(self, box_id: Any) -> None:
        self.link_form.box_id = parse_id(box_id)

    def confirm_link(self) -> Optional[WorkflowResult]:
        try:
            result = self._services().uc_link_email(
                email=self.state.email, box_id=self.link_form.box_id
            )
        except UseCaseError as err:
            self.notices.error(err.message)
            return None
        self.last_result = result
        if result.ok:
            self.notices.success(MSG_LINKED)
            self.close_link_modal()
        else:
            self._report_failure(result)
        if result.completed:
            self.refresh_linked_boxes()
            self.load_recent_activity()
        return result

    # ------------------------------------------------------------------
    # Create dialog
    # ------------------------------------------------------------------
    def open_create_modal(self) -> None:
        subject = self.state.email.subject if self.state.email else ""
        self.create_form.open(subject=subject, pipeline_id=self.state.pipeline_id)
        if self.state.pipeline_id is not None:
            self.load_stages(self.state.pipeline_id)

    def close_create_modal(self) -> None:
        self.create_form.close()

    def change_create_pipeline(self, pipeline_id: Any) -> None:
        pid = parse_id(pipeline_id)
        self.create_form.pipeline_id = pid
        self.create_form.set_stages([])
        if pid is not None:
            self.load_stages(pid)

    def confirm_create(self) -> Optional[WorkflowResult]:
        try:
            draft = self.create_form.to_draft()
            result = self._services().uc_create_box(email=self.state.email, draft=draft)
        except UseCaseError as err:
            self.notices.error(err.message)
            return None
        self.last_result = result
        if result.ok:
            self.notices.success(MSG_CREATED)
            self.close_create_modal()
        else:
            self._report_failure(result)
        if result.completed:
            if self.state.pipeline_id is not None:
                self.load_boxes(self.state.pipeline_id)
            created = result.value_of(STEP_CREATE)
            if created is not None and created.pipeline_id == self.state.pipeline_id:
                self.box_list.select(created.id)
            self.refresh_linked_boxes()
            self.load_recent_activity()
        return result

    # ------------------------------------------------------------------
    # Box and pipeline maintenance
    # ------------------------------------------------------------------
    def update_box(self, box_id: Any, changes: BoxChanges) -> Optional[WorkflowResult]:
        try:
            result = self._services().uc_update_box(box_id=parse_id(box_id), changes=changes)
        except UseCaseError as err:
            self.notices.error(err.message)
            return None
        self.last_result = result
        if result.ok:
            self.notices.success(MSG_UPDATED)
        else:
            self._report_failure(result)
        if result.completed:
            if self.state.pipeline_id is not None:
                self.load_boxes(self.state.pipeline_id)
            self.load_recent_activity()
        return result

    def create_pipeline(
        self, title: str, description: str, stage_titles: Sequence[str]
    ) -> Optional[WorkflowResult]:
        try:
            result = self._services().uc_create_pipeline(
                title=title, description=description, stage_titles=stage_titles
            )
        except UseCaseError as err:
            self.notices.error(err.message)
            return None
        self.last_result = result
        if result.ok:
            self.notices.success(MSG_PIPELINE_CREATED)
        else:
            self._report_failure(result)
        if result.completed:
            self.load_pipelines()
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def pipeline_options(self) -> Dict[int, str]:
        return {pipeline.id: pipeline.title for pipeline in self.state.pipelines}

    def stage_titles(self) -> Dict[int, str]:
        return self.state.stage_titles(self.state.pipeline_id)

    def _services(self) -> AppController:
        if not self.app.ensure_ready():
            raise UseCaseError("SETTINGS_INVALID", "Settings are invalid. Check the site URL.")
        return self.app

    def _report_failure(self, result: WorkflowResult) -> None:
        failed = result.failed_step
        message = failed.error if failed and failed.error else "Request failed."
        log.error("%s stopped at %s: %s", result.name, failed.name if failed else "?", message)
        self.notices.error(message)


__all__ = ["PanelController", "TABS"]
