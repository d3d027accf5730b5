"""Thin web-facing viewmodels for NiceGUI bindings.

These viewmodels hold browser form state and translate to/from the core
settings viewmodel without adding I/O or orchestration logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from boxlink.adapters.list_store_rest import ListTitles
from boxlink.viewmodels.settings_vm import SettingsVM


def _as_int(value: Any, default: int) -> int:
    """Convert mixed values to int with deterministic fallback."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return int(default)


@dataclass
class WebSettingsVM:
    """Browser-editable settings projection for NiceGUI forms."""

    site_url: str = ""
    access_token: str = ""
    request_timeout_s: int = 30
    recent_activity_limit: int = 20
    list_titles: Dict[str, str] = field(default_factory=lambda: ListTitles().to_dict())
    debug_logging: bool = False

    @classmethod
    def from_settings_vm(cls, settings_vm: SettingsVM) -> "WebSettingsVM":
        return cls.from_payload(settings_vm.to_dict())

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "WebSettingsVM":
        """Build form state from a payload shaped like ``SettingsVM.to_dict``."""
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping.")
        titles = ListTitles().to_dict()
        titles.update(
            {key: str(value or "") for key, value in (payload.get("list_titles") or {}).items()}
        )
        return cls(
            site_url=str(payload.get("site_url") or ""),
            access_token=str(payload.get("access_token") or ""),
            request_timeout_s=_as_int(payload.get("request_timeout_s"), 30),
            recent_activity_limit=_as_int(payload.get("recent_activity_limit"), 20),
            list_titles=titles,
            debug_logging=bool(payload.get("debug_logging")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "site_url": str(self.site_url or "").strip(),
            "access_token": str(self.access_token or "").strip(),
            "request_timeout_s": _as_int(self.request_timeout_s, 30),
            "recent_activity_limit": _as_int(self.recent_activity_limit, 20),
            "list_titles": {key: str(value or "").strip() for key, value in self.list_titles.items()},
            "debug_logging": bool(self.debug_logging),
        }

    def apply_to_settings_vm(self, settings_vm: SettingsVM) -> None:
        """Push form values into the core settings viewmodel."""
        settings_vm.apply_dict(self.to_payload())


@dataclass
class WebPipelineFormVM:
    """Form state for the new-pipeline panel on the settings tab."""

    title: str = ""
    description: str = ""
    stages_text: str = "Lead, Qualified, Proposal, Won"

    def stage_titles(self) -> List[str]:
        return [part.strip() for part in self.stages_text.split(",") if part.strip()]

    def reset(self) -> None:
        self.title = ""
        self.description = ""


__all__ = ["WebPipelineFormVM", "WebSettingsVM"]
