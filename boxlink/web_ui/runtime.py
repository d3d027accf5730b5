"""NiceGUI runtime orchestration for the mail panel.

This module composes settings, storage, the mailbox source and the panel
controller for the web page. It holds no widget code.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping, Optional

from boxlink.adapters.mailbox import JsonMailbox, StaticMailbox
from boxlink.adapters.storage_local import StorageLocal
from boxlink.app.controller import AppController, StoreFactory, default_store_factory
from boxlink.app.panel_controller import PanelController
from boxlink.domain.entities import EmailDescriptor
from boxlink.domain.ports import MailboxPort
from boxlink.utils.logging import apply_gui_preferences
from boxlink.viewmodels.settings_vm import SettingsVM


LOGGER = logging.getLogger(__name__)

STORAGE_ROOT_ENV = "BOXLINK_STORAGE_ROOT"
SITE_URL_ENV = "BOXLINK_SITE_URL"
ACCESS_TOKEN_ENV = "BOXLINK_ACCESS_TOKEN"

SAMPLE_ITEM: Dict[str, Any] = {
    "subject": "Re: Q3 proposal for Contoso",
    "internetMessageId": "<sample-0001@mail.example.com>",
    "from": {"emailAddress": "jordan.lee@contoso.example", "displayName": "Jordan Lee"},
    "to": [{"emailAddress": "sales@example.com"}],
    "dateTimeCreated": "2024-05-14T09:30:00Z",
}


def _env_seed() -> Dict[str, Any]:
    seed: Dict[str, Any] = {}
    site_url = os.environ.get(SITE_URL_ENV)
    if site_url:
        seed["site_url"] = site_url
    token = os.environ.get(ACCESS_TOKEN_ENV)
    if token:
        seed["access_token"] = token
    return seed


class WebRuntime:
    """Orchestration state used by NiceGUI views."""

    def __init__(
        self,
        *,
        email_json: Optional[str] = None,
        storage_root: Optional[str] = None,
        mailbox: Optional[MailboxPort] = None,
        store_factory: StoreFactory = default_store_factory,
    ) -> None:
        self.status_message = "Ready."
        self.storage = StorageLocal(
            root_dir=storage_root or os.environ.get(STORAGE_ROOT_ENV) or "."
        )
        self.settings_vm = SettingsVM(on_save=self.storage.save_user_prefs)
        self._load_settings_defaults()

        if mailbox is None:
            mailbox = (
                JsonMailbox(email_json)
                if email_json
                else StaticMailbox(EmailDescriptor.from_host_item(SAMPLE_ITEM))
            )
        self.mailbox = mailbox
        self.controller = AppController(self.settings_vm, store_factory=store_factory)
        self.panel = PanelController(self.controller, self.mailbox)

    # ------------------------------------------------------------------
    # Basic projections
    # ------------------------------------------------------------------
    def settings_payload(self) -> Dict[str, Any]:
        return self.settings_vm.to_dict()

    def store_label(self) -> str:
        if self.settings_vm.uses_demo_store:
            return "Demo store (in memory)"
        return self.settings_vm.site_url

    # ------------------------------------------------------------------
    # Settings workflows
    # ------------------------------------------------------------------
    def apply_settings_payload(self, payload: Mapping[str, Any]) -> None:
        """Apply settings, rebuild the adapter and reload the panel."""
        self.settings_vm.apply_dict(payload)
        apply_gui_preferences(self.settings_vm.debug_logging)
        self.controller.reset()
        self.status_message = "Settings applied."

    def save_settings(self, payload: Mapping[str, Any]) -> None:
        self.apply_settings_payload(payload)
        self.settings_vm.cmd_save()
        self.status_message = f"Settings saved to {self.storage.prefs_path}."

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _load_settings_defaults(self) -> None:
        payload: Dict[str, Any] = _env_seed()
        try:
            payload.update(self.storage.load_user_prefs())
        except (OSError, ValueError) as exc:
            LOGGER.warning("Could not load local settings defaults: %s", exc)
        if not payload:
            return
        try:
            self.settings_vm.apply_dict(payload)
        except ValueError as exc:
            LOGGER.warning("Could not apply local settings defaults: %s", exc)
        apply_gui_preferences(self.settings_vm.debug_logging)


__all__ = ["WebRuntime", "SAMPLE_ITEM"]
