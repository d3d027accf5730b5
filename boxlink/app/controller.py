"""Adapter and use-case wiring for the panel runtime.

This module owns lazy construction of the list-store adapter and the use-case
objects that depend on values in :class:`boxlink.viewmodels.settings_vm.SettingsVM`.
The panel controller calls ``ensure_ready`` before each workflow.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..adapters.list_store_memory import InMemoryListStore, seed_demo
from ..adapters.list_store_rest import ListStoreRestAdapter
from ..domain.ports import ListStorePort
from ..usecases.create_box_from_email import CreateBoxFromEmail
from ..usecases.create_pipeline import CreatePipeline
from ..usecases.find_linked_boxes import FindLinkedBoxes
from ..usecases.link_email_to_box import LinkEmailToBox
from ..usecases.load_box_details import LoadBoxDetails
from ..usecases.load_boxes import LoadBoxes
from ..usecases.load_pipelines import LoadPipelines
from ..usecases.load_recent_activity import LoadRecentActivity
from ..usecases.load_stages import LoadStages
from ..usecases.update_box_details import UpdateBoxDetails
from ..viewmodels.settings_vm import SettingsVM

log = logging.getLogger(__name__)

StoreFactory = Callable[[SettingsVM], ListStorePort]


def default_store_factory(settings_vm: SettingsVM) -> ListStorePort:
    """Build the REST adapter, or a seeded in-memory store without a site URL."""
    if settings_vm.uses_demo_store:
        log.info("No site URL configured; using the in-memory demo list store")
        return seed_demo(InMemoryListStore())
    return ListStoreRestAdapter(
        settings_vm.site_url,
        titles=settings_vm.titles(),
        access_token=settings_vm.access_token or None,
        request_timeout_s=settings_vm.request_timeout_s,
    )


class AppController:
    """Create and cache the list-store adapter and use-cases from settings state.

    Call chain:
        ``boxlink.web_ui.runtime.WebRuntime`` creates one instance and hands it
        to :class:`boxlink.app.panel_controller.PanelController`, which calls
        ``ensure_ready`` before each load or workflow.
    """

    def __init__(
        self,
        settings_vm: SettingsVM,
        *,
        store_factory: StoreFactory = default_store_factory,
    ) -> None:
        self.settings_vm = settings_vm
        self.store_factory = store_factory
        self._store: Optional[ListStorePort] = None
        self.uc_load_pipelines: Optional[LoadPipelines] = None
        self.uc_load_stages: Optional[LoadStages] = None
        self.uc_load_boxes: Optional[LoadBoxes] = None
        self.uc_find_linked: Optional[FindLinkedBoxes] = None
        self.uc_recent_activity: Optional[LoadRecentActivity] = None
        self.uc_box_details: Optional[LoadBoxDetails] = None
        self.uc_link_email: Optional[LinkEmailToBox] = None
        self.uc_create_box: Optional[CreateBoxFromEmail] = None
        self.uc_update_box: Optional[UpdateBoxDetails] = None
        self.uc_create_pipeline: Optional[CreatePipeline] = None

    @property
    def store(self) -> Optional[ListStorePort]:
        """Return the cached list-store adapter."""
        return self._store

    def reset(self) -> None:
        """Drop the cached adapter and use-cases.

        The next ``ensure_ready`` call rebuilds everything from current
        settings values.
        """
        self._store = None
        self.uc_load_pipelines = None
        self.uc_load_stages = None
        self.uc_load_boxes = None
        self.uc_find_linked = None
        self.uc_recent_activity = None
        self.uc_box_details = None
        self.uc_link_email = None
        self.uc_create_box = None
        self.uc_update_box = None
        self.uc_create_pipeline = None

    def ensure_ready(self) -> bool:
        """Ensure the adapter and use-cases exist.

        Returns:
            ``True`` when dependencies are available, ``False`` when the
            settings are invalid.
        """
        if self._store is not None:
            return True
        if not self.settings_vm.is_valid():
            return False

        store = self.store_factory(self.settings_vm)
        self._store = store
        self.uc_load_pipelines = LoadPipelines(store)
        self.uc_load_stages = LoadStages(store)
        self.uc_load_boxes = LoadBoxes(store)
        self.uc_find_linked = FindLinkedBoxes(store)
        self.uc_recent_activity = LoadRecentActivity(store)
        self.uc_box_details = LoadBoxDetails(store)
        self.uc_link_email = LinkEmailToBox(store)
        self.uc_create_box = CreateBoxFromEmail(store)
        self.uc_update_box = UpdateBoxDetails(store)
        self.uc_create_pipeline = CreatePipeline(store)
        return True


__all__ = ["AppController", "StoreFactory", "default_store_factory"]
