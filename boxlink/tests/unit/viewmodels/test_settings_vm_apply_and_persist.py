from __future__ import annotations

from pathlib import Path

import pytest

from boxlink.adapters.storage_local import StorageLocal
from boxlink.viewmodels.settings_vm import SettingsVM, default_settings_payload


def test_defaults_use_demo_store() -> None:
    vm = SettingsVM()

    assert vm.uses_demo_store
    assert vm.is_valid()
    assert vm.request_timeout_s == 30
    assert vm.recent_activity_limit == 20
    assert vm.titles().boxes == "CRM_Boxes"


def test_apply_dict_updates_flat_keys() -> None:
    vm = SettingsVM()
    vm.apply_dict(
        {
            "site_url": " https://tenant.example.com/sites/crm/ ",
            "access_token": " abc ",
            "request_timeout_s": "12",
            "recent_activity_limit": 5,
            "list_titles": {"boxes": "Deals"},
            "debug_logging": "yes",
        }
    )

    assert vm.site_url == "https://tenant.example.com/sites/crm"
    assert vm.access_token == "abc"
    assert vm.request_timeout_s == 12
    assert vm.recent_activity_limit == 5
    assert vm.titles().boxes == "Deals"
    assert vm.titles().emails == "CRM_Emails"
    assert vm.debug_logging is True
    assert not vm.uses_demo_store


@pytest.mark.parametrize(
    "payload",
    [
        {"unknown": 1},
        {"request_timeout_s": 0},
        {"recent_activity_limit": "many"},
        {"list_titles": {"deals": "x"}},
        {"site_url": 42},
    ],
)
def test_apply_dict_rejects_bad_values(payload) -> None:
    with pytest.raises(ValueError):
        SettingsVM().apply_dict(payload)


def test_non_http_url_is_invalid() -> None:
    vm = SettingsVM()
    vm.site_url = "ftp://tenant"

    assert not vm.is_valid()
    with pytest.raises(ValueError):
        vm.cmd_save()


def test_cmd_save_persists_through_storage(tmp_path: Path) -> None:
    storage = StorageLocal(root_dir=str(tmp_path))
    vm = SettingsVM(on_save=storage.save_user_prefs)
    vm.apply_dict({"site_url": "https://tenant.example.com", "recent_activity_limit": 7})

    vm.cmd_save()

    restored = SettingsVM()
    restored.apply_dict(storage.load_user_prefs())
    assert restored.to_dict() == vm.to_dict()


def test_default_payload_keys() -> None:
    assert set(default_settings_payload()) == {
        "site_url",
        "request_timeout_s",
        "recent_activity_limit",
        "list_titles",
        "access_token",
        "debug_logging",
    }
