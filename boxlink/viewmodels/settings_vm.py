"""Panel settings view model.

``SettingsConfig`` holds the values that select and reach the list store.
``SettingsVM`` validates flat payloads (settings form, ``user_prefs.json``)
field by field and hands snapshots to ``on_save``; it performs no I/O itself.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Dict, Mapping, Optional

from ..adapters.list_store_rest import ListTitles
from ..utils.logging import env_debug_forced

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class SettingsConfig:
    """List-store connection settings persisted in user prefs."""

    site_url: str = ""
    request_timeout_s: int = 30
    recent_activity_limit: int = 20
    list_titles: Dict[str, str] = field(default_factory=lambda: ListTitles().to_dict())


def _site_url(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError("site_url must be a string.")
    return value.strip().rstrip("/")


def _positive_int(name: str) -> Callable[[Any], int]:
    def coerce(value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValueError(f"{name} must be an integer.")
        try:
            number = int(value.strip()) if isinstance(value, str) else int(value)
        except ValueError as exc:
            raise ValueError(f"{name} must be an integer.") from exc
        if number < 1:
            raise ValueError(f"{name} must be at least 1.")
        return number

    return coerce


def _list_titles(value: Any) -> Dict[str, str]:
    if value is None:
        return ListTitles().to_dict()
    if not isinstance(value, Mapping):
        raise ValueError("list_titles must be a mapping.")
    return ListTitles.from_mapping(value).to_dict()


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


_CONFIG_COERCERS: Dict[str, Callable[[Any], Any]] = {
    "site_url": _site_url,
    "request_timeout_s": _positive_int("request_timeout_s"),
    "recent_activity_limit": _positive_int("recent_activity_limit"),
    "list_titles": _list_titles,
}


class SettingsVM:
    """Settings form state and validation for the panel."""

    def __init__(
        self,
        *,
        config: Optional[SettingsConfig] = None,
        on_save: Optional[Callable[[dict], None]] = None,
    ) -> None:
        self.config = config or SettingsConfig()
        self.on_save = on_save
        # Kept outside the config dataclass; neither selects the store.
        self.access_token: str = ""
        self.debug_logging: bool = env_debug_forced()

    @property
    def site_url(self) -> str:
        return self.config.site_url

    @site_url.setter
    def site_url(self, value: str) -> None:
        self._update(site_url=value)

    @property
    def request_timeout_s(self) -> int:
        return self.config.request_timeout_s

    @request_timeout_s.setter
    def request_timeout_s(self, value: int) -> None:
        self._update(request_timeout_s=value)

    @property
    def recent_activity_limit(self) -> int:
        return self.config.recent_activity_limit

    @recent_activity_limit.setter
    def recent_activity_limit(self, value: int) -> None:
        self._update(recent_activity_limit=value)

    @property
    def list_titles(self) -> Dict[str, str]:
        return self.config.list_titles

    @list_titles.setter
    def list_titles(self, value: Mapping[str, Any]) -> None:
        self._update(list_titles=value)

    @property
    def uses_demo_store(self) -> bool:
        """True when no site is configured and the in-memory store is used."""
        return not self.site_url

    def titles(self) -> ListTitles:
        return ListTitles.from_mapping(self.list_titles)

    def is_valid(self) -> bool:
        url = self.site_url
        if url and not url.startswith(("http://", "https://")):
            return False
        return self.request_timeout_s > 0 and self.recent_activity_limit > 0

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply a flat settings payload; unknown keys or bad values raise ValueError."""
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")
        unknown = set(payload) - set(_CONFIG_COERCERS) - {"access_token", "debug_logging"}
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(map(str, unknown)))}")

        self._update(**{key: payload[key] for key in _CONFIG_COERCERS if key in payload})
        if "access_token" in payload:
            token = payload["access_token"]
            self.access_token = "" if token is None else str(token).strip()
        if "debug_logging" in payload:
            self.debug_logging = _flag(payload["debug_logging"])

    def to_dict(self) -> dict:
        snapshot = asdict(self.config)
        snapshot["access_token"] = self.access_token
        snapshot["debug_logging"] = bool(self.debug_logging)
        return snapshot

    def cmd_save(self) -> None:
        if not self.is_valid():
            raise ValueError("Settings invalid")
        if self.on_save:
            self.on_save(self.to_dict())

    def _update(self, **raw: Any) -> None:
        # Coerce everything first so a bad value leaves the config untouched.
        coerced = {key: _CONFIG_COERCERS[key](value) for key, value in raw.items()}
        if coerced:
            self.config = replace(self.config, **coerced)


def default_settings_payload() -> dict:
    """Return a fresh snapshot containing the default settings payload."""
    return SettingsVM().to_dict()
